import json

import pytest
from eth_utils import is_checksum_address

from dolly_deployment.constants import DOLLY, SENTINEL_ADDRESS, STAKE_CONSTANT_TIME
from dolly_deployment.networks import resolve
from dolly_deployment.params import Deployer, DeploymentStatus, ExitCode, exit_code
from dolly_deployment.registry import (
    contracts_from_registry,
    read_registry,
    registry_address,
)


@pytest.fixture
def deploy(deployment_config, contract_containers, deployer_account):
    def _deploy(autosign=True):
        deployer = Deployer(
            config=deployment_config,
            profile=resolve("development"),
            account=deployer_account,
            autosign=autosign,
            contract_containers=contract_containers,
        )
        results = deployer.migrate()
        return results, deployer.finalize()

    return _deploy


def test_local_deployment(deploy, deployer_account, chain, tmp_path):
    results, registry_filepath = deploy()

    assert exit_code(results) == ExitCode.SUCCESS
    assert [r.status for r in results] == [DeploymentStatus.DEPLOYED] * 2
    dolly, stake = results
    assert dolly.address != stake.address
    assert is_checksum_address(dolly.address)
    assert is_checksum_address(stake.address)
    assert SENTINEL_ADDRESS not in (dolly.address, stake.address)
    assert chain.provider.get_code(dolly.address)

    assert registry_filepath == tmp_path / "dolly.json"
    entries = {entry.name: entry for entry in read_registry(registry_filepath)}
    assert entries[DOLLY].address == dolly.address
    assert entries[DOLLY].network == "development"
    assert entries[DOLLY].chain_id == chain.chain_id
    assert entries[STAKE_CONSTANT_TIME].deployer == deployer_account.address
    assert registry_address(registry_filepath, "development", STAKE_CONSTANT_TIME) == stake.address


def test_registry_contracts_are_usable(deploy):
    _, registry_filepath = deploy()
    contracts = contracts_from_registry(registry_filepath, "development")
    assert set(contracts) == {DOLLY, STAKE_CONSTANT_TIME}
    # every call to the stand-in runtime returns 42
    assert contracts[DOLLY].currentExchangeRateinETH() == 42


def test_local_redeployment_replaces_registry_entries(deploy, tmp_path):
    first_results, _ = deploy()
    second_results, registry_filepath = deploy()

    assert registry_filepath == tmp_path / "dolly.json"
    assert not (tmp_path / "dolly.unmerged.json").exists()
    assert first_results[0].address != second_results[0].address

    data = json.loads(registry_filepath.read_text())
    assert data["development"][DOLLY]["address"] == second_results[0].address


def test_declined_deployment_still_records_earlier_contracts(deploy, monkeypatch):
    # continue, deploy Dolly, accept its zero addresses, decline StakeConstantTime
    answers = iter(["y", "y", "y", "n"])
    monkeypatch.setattr("builtins.input", lambda *args: next(answers))
    results, registry_filepath = deploy(autosign=False)

    assert [r.status for r in results] == [DeploymentStatus.DEPLOYED, DeploymentStatus.SKIPPED]
    data = json.loads(registry_filepath.read_text())
    assert list(data["development"]) == [DOLLY]
    assert data["development"][DOLLY]["address"] == results[0].address
