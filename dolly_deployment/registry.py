import json
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, NamedTuple

from ape.contracts import ContractInstance
from eth_typing import ABI, ChecksumAddress
from eth_utils import to_checksum_address

from dolly_deployment.artifacts import interface_container
from dolly_deployment.utils import _load_json

NetworkName = str
ContractName = str


STANDARD_REGISTRY_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}


class RegistryEntry(NamedTuple):
    """Represents a single deployed contract in a registry."""

    network: NetworkName
    chain_id: int
    name: ContractName
    address: ChecksumAddress
    abi: ABI
    tx_hash: str
    block_number: int
    deployer: str


def _get_abi(contract_instance: ContractInstance) -> ABI:
    """Returns the ABI of a contract instance."""
    contract_abi = list()
    for entry in contract_instance.contract_type.abi:
        contract_abi.append(entry.model_dump(mode="json", by_alias=True, exclude_none=True))
    return contract_abi


def _get_entry(contract_instance: ContractInstance, network: NetworkName) -> RegistryEntry:
    receipt = contract_instance.chain_manager.get_receipt(contract_instance.txn_hash)
    entry = RegistryEntry(
        network=network,
        chain_id=receipt.chain_id,
        name=contract_instance.contract_type.name,
        address=to_checksum_address(contract_instance.address),
        abi=_get_abi(contract_instance),
        tx_hash=str(receipt.txn_hash),
        block_number=receipt.block_number,
        deployer=receipt.transaction.sender,
    )
    return entry


def read_registry(filepath: Path) -> List[RegistryEntry]:
    data = _load_json(filepath)
    registry_entries = list()
    for network, entries in data.items():
        for contract_name, artifacts in entries.items():
            registry_entry = RegistryEntry(
                network=network,
                chain_id=int(artifacts["chain_id"]),
                name=contract_name,
                address=artifacts["address"],
                abi=artifacts["abi"],
                tx_hash=artifacts["tx_hash"],
                block_number=artifacts["block_number"],
                deployer=artifacts["deployer"],
            )
            registry_entries.append(registry_entry)
    return registry_entries


def write_registry(
    entries: List[RegistryEntry], filepath: Path, replace: bool = False, silent: bool = False
) -> Path:
    """
    Writes a registry file. Entries for networks already present in an existing
    file are only overwritten when replace is set; otherwise they are written
    next to it in an .unmerged.json file.
    """
    if not entries:
        if not silent:
            print("No entries provided.")
        return filepath

    entries = sorted(entries, key=lambda e: (e.network, e.name))

    data = defaultdict(dict)
    for entry in entries:
        entry_abi = sorted(entry.abi, key=lambda d: (d["type"], d.get("name", "")))
        data[entry.network][entry.name] = {
            "chain_id": int(entry.chain_id),
            "address": entry.address,
            "abi": entry_abi,
            "tx_hash": entry.tx_hash,
            "block_number": int(entry.block_number),
            "deployer": entry.deployer,
        }

    filepath.parent.mkdir(parents=True, exist_ok=True)

    if filepath.exists():
        if not silent:
            print(f"Updating existing registry at {filepath}.")
        existing_data = _load_json(filepath)

        overlap = any(network in existing_data for network in data)
        if overlap and not replace:
            filepath = filepath.with_suffix(".unmerged.json")
            if not silent:
                print(
                    "Cannot merge registries with overlapping networks.\n"
                    f"Writing to {filepath} to avoid overwriting existing data."
                )
        else:
            existing_data.update(data)
            data = existing_data
    elif not silent:
        print(f"Creating new registry at {filepath}.")

    with open(filepath, "w") as file:
        json.dump(data, file, **STANDARD_REGISTRY_JSON_FORMAT)

    return filepath


def registry_from_ape_deployments(
    deployments: List[ContractInstance],
    network: NetworkName,
    output_filepath: Path,
    replace: bool = False,
) -> Path:
    """Creates (or extends) a registry from ape deployments."""
    entries = [_get_entry(instance, network=network) for instance in deployments]
    output_filepath = write_registry(entries=entries, filepath=output_filepath, replace=replace)
    print(f"(i) Registry written to {output_filepath}!")
    return output_filepath


def registry_entries_for(filepath: Path, network: NetworkName) -> Dict[ContractName, RegistryEntry]:
    entries = dict()
    for entry in read_registry(filepath=filepath):
        if entry.network == network:
            entries[entry.name] = entry
    return entries


def registry_address(filepath: Path, network: NetworkName, contract_name: ContractName) -> str:
    """Returns the address a contract was deployed to on a network."""
    entries = registry_entries_for(filepath=filepath, network=network)
    try:
        return entries[contract_name].address
    except KeyError:
        raise ValueError(
            f"Contract '{contract_name}' not found in registry, '{filepath}', "
            f"for network {network}"
        )


def contracts_from_registry(
    filepath: Path, network: NetworkName
) -> Dict[ContractName, ContractInstance]:
    """Returns contract instances for every contract a network has in the registry."""
    deployments = dict()
    for name, entry in registry_entries_for(filepath=filepath, network=network).items():
        contract_container = interface_container(name, entry.abi)
        deployments[name] = contract_container.at(entry.address)
    return deployments
