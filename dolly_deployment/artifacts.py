from pathlib import Path
from typing import Dict, List, Optional

from ape import project
from ape.contracts import ContractContainer
from ethpm_types import ContractType

from dolly_deployment.constants import AGGREGATOR_V3_INTERFACE_ABI, BUILD_DIR
from dolly_deployment.networks import ConfigurationError
from dolly_deployment.utils import _load_json


def contract_type_from_artifact(data: Dict, name: Optional[str] = None) -> ContractType:
    """
    Builds a contract type from a compiled artifact. Truffle style artifacts
    (contractName/abi/bytecode/deployedBytecode) and raw solc output
    (abi/evm.bytecode.object) are both understood.
    """
    contract_name = name or data.get("contractName")
    if not contract_name:
        raise ConfigurationError("Artifact does not declare a contract name.")

    abi = data.get("abi")
    if abi is None:
        raise ConfigurationError(f"Artifact for {contract_name} has no ABI.")

    bytecode = data.get("bytecode")
    runtime_bytecode = data.get("deployedBytecode")
    evm = data.get("evm")
    if evm:
        bytecode = bytecode or evm.get("bytecode", {}).get("object")
        runtime_bytecode = runtime_bytecode or evm.get("deployedBytecode", {}).get("object")

    contract_type_data = {"contractName": contract_name, "abi": abi}
    if bytecode:
        contract_type_data["deploymentBytecode"] = {"bytecode": _with_hex_prefix(bytecode)}
    if runtime_bytecode:
        contract_type_data["runtimeBytecode"] = {"bytecode": _with_hex_prefix(runtime_bytecode)}

    return ContractType.model_validate(contract_type_data)


def _with_hex_prefix(bytecode: str) -> str:
    return bytecode if bytecode.startswith("0x") else f"0x{bytecode}"


def load_artifact(filepath: Path) -> ContractContainer:
    """Loads a compiled artifact file as a deployable contract container."""
    data = _load_json(filepath)
    contract_type = contract_type_from_artifact(data, name=data.get("contractName", filepath.stem))
    return ContractContainer(contract_type)


def interface_container(name: str, abi: List[Dict]) -> ContractContainer:
    """Returns a container for an interface; it can only be attached to, not deployed."""
    contract_type = ContractType.model_validate({"contractName": name, "abi": abi})
    return ContractContainer(contract_type)


def price_feed_container() -> ContractContainer:
    return interface_container("AggregatorV3Interface", AGGREGATOR_V3_INTERFACE_ABI)


def get_contract_container(contract: str, artifacts_dir: Path = BUILD_DIR) -> ContractContainer:
    """
    Returns the container for a contract, preferring a compiled artifact
    in artifacts_dir over the contracts compiled by the ape project.
    """
    artifact_filepath = Path(artifacts_dir) / f"{contract}.json"
    if artifact_filepath.exists():
        return load_artifact(artifact_filepath)

    try:
        contract_container = getattr(project, contract)
    except AttributeError:
        raise ConfigurationError(
            f"No contract found with name '{contract}' "
            f"(no artifact at {artifact_filepath} and not part of the project)."
        )
    return contract_container
