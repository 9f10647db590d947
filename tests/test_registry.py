import json

import pytest

from dolly_deployment.constants import DOLLY, STAKE_CONSTANT_TIME
from dolly_deployment.registry import (
    RegistryEntry,
    read_registry,
    registry_address,
    registry_entries_for,
    write_registry,
)
from tests.conftest import DOLLY_ABI, STAKE_CONSTANT_TIME_ABI


def _entry(network, name, address, chain_id=42, abi=None):
    return RegistryEntry(
        network=network,
        chain_id=chain_id,
        name=name,
        address=address,
        abi=abi or DOLLY_ABI,
        tx_hash=f"0x{'ab' * 32}",
        block_number=100,
        deployer="0x000000000000000000000000000000000000dEaD",
    )


@pytest.fixture
def kovan_entries():
    return [
        _entry("kovan", STAKE_CONSTANT_TIME, f"0x{'22' * 20}", abi=STAKE_CONSTANT_TIME_ABI),
        _entry("kovan", DOLLY, f"0x{'11' * 20}"),
    ]


def test_write_and_read_registry(tmp_path, kovan_entries):
    filepath = tmp_path / "dolly.json"
    assert write_registry(kovan_entries, filepath) == filepath

    data = json.loads(filepath.read_text())
    assert list(data) == ["kovan"]
    assert list(data["kovan"]) == [DOLLY, STAKE_CONSTANT_TIME]
    assert data["kovan"][DOLLY]["chain_id"] == 42

    entries = read_registry(filepath)
    assert {entry.name for entry in entries} == {DOLLY, STAKE_CONSTANT_TIME}
    assert all(entry.network == "kovan" for entry in entries)


def test_abi_entries_are_sorted(tmp_path, kovan_entries):
    filepath = write_registry(kovan_entries, tmp_path / "dolly.json")
    abi = json.loads(filepath.read_text())["kovan"][STAKE_CONSTANT_TIME]["abi"]
    assert [item["name"] for item in abi] == ["Deposit", "Withdraw"]


def test_no_entries(tmp_path):
    filepath = tmp_path / "dolly.json"
    assert write_registry([], filepath) == filepath
    assert not filepath.exists()


def test_other_networks_are_merged(tmp_path, kovan_entries):
    filepath = tmp_path / "dolly.json"
    write_registry(kovan_entries, filepath)
    write_registry([_entry("bsc", DOLLY, f"0x{'33' * 20}", chain_id=56)], filepath)

    data = json.loads(filepath.read_text())
    assert set(data) == {"kovan", "bsc"}


def test_overlapping_networks_are_not_merged(tmp_path, kovan_entries):
    filepath = tmp_path / "dolly.json"
    write_registry(kovan_entries, filepath)
    redeployment = [_entry("kovan", DOLLY, f"0x{'44' * 20}")]

    output_filepath = write_registry(redeployment, filepath)

    assert output_filepath == tmp_path / "dolly.unmerged.json"
    assert registry_address(filepath, "kovan", DOLLY) == f"0x{'11' * 20}"
    assert registry_address(output_filepath, "kovan", DOLLY) == f"0x{'44' * 20}"


def test_overlapping_networks_are_replaced(tmp_path, kovan_entries):
    filepath = tmp_path / "dolly.json"
    write_registry(kovan_entries, filepath)
    redeployment = [_entry("kovan", DOLLY, f"0x{'44' * 20}")]

    assert write_registry(redeployment, filepath, replace=True) == filepath
    assert registry_address(filepath, "kovan", DOLLY) == f"0x{'44' * 20}"
    # a network is replaced as a whole
    assert list(registry_entries_for(filepath, "kovan")) == [DOLLY]


def test_registry_address_for_missing_contract(tmp_path, kovan_entries):
    filepath = write_registry(kovan_entries, tmp_path / "dolly.json")
    with pytest.raises(ValueError, match="not found in registry"):
        registry_address(filepath, "bsc", DOLLY)
