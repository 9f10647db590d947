import json
import os
from pathlib import Path
from typing import Dict, List

import yaml
from ape import networks
from ape.contracts import ContractInstance

from dolly_deployment.constants import BUILD_DIR, ETHERSCAN_API_KEY_ENVVAR, REGISTRY_DIR
from dolly_deployment.networks import ConfigurationError, is_local_network


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def _load_json(filepath: Path) -> dict:
    """Loads a JSON file."""
    with open(filepath, "r") as file:
        return json.load(file)


def get_registry_filepath(config: Dict) -> Path:
    """Returns the filepath of the registry file."""
    registry_config = config.get("registry", {})
    registry_dir = Path(registry_config.get("dir", REGISTRY_DIR))
    filename = registry_config.get("filename")
    if not filename:
        raise ConfigurationError("registry filename is not set in params file.")
    return registry_dir / filename


def get_artifacts_dir(config: Dict) -> Path:
    """Returns the directory holding compiled contract artifacts."""
    artifacts_config = config.get("artifacts", {})
    return Path(artifacts_config.get("dir", BUILD_DIR))


def validate_config(config: Dict) -> Path:
    """
    Checks that the deployment params file is well formed and
    returns the filepath of the registry the deployment is published to.
    """
    print("Validating parameters YAML...")

    if not isinstance(config, dict):
        raise ConfigurationError("Malformed deployment params YAML.")

    deployment = config.get("deployment")
    if not deployment:
        raise ConfigurationError("deployment is not set in params file.")

    contracts = config.get("contracts")
    if not contracts:
        raise ConfigurationError("Deployment params file missing 'contracts' field.")

    return get_registry_filepath(config=config)


def check_etherscan_plugin() -> None:
    """
    Checks that the ape-etherscan plugin is installed and that
    the appropriate API key environment variable is set.
    """
    if is_local_network():
        # unnecessary for local deployment
        return
    try:
        from ape_etherscan.utils import API_KEY_ENV_KEY_MAP
    except ImportError:
        raise ImportError("Please install the ape-etherscan plugin to use this script.")
    ecosystem_name = networks.provider.network.ecosystem.name
    explorer_envvar = API_KEY_ENV_KEY_MAP.get(ecosystem_name, ETHERSCAN_API_KEY_ENVVAR)
    api_key = os.environ.get(explorer_envvar)
    if not api_key:
        raise ConfigurationError(f"{explorer_envvar} is not set.")


def check_infura_plugin() -> None:
    """Checks that the ape-infura plugin is installed."""
    if is_local_network():
        return  # unnecessary for local deployment
    if networks.provider.name != "infura":
        return  # unnecessary when using a provider different than infura
    try:
        from ape_infura.provider import _ENVIRONMENT_VARIABLE_NAMES
    except ImportError:
        raise ImportError("Please install the ape-infura plugin to use this script.")
    for envvar in _ENVIRONMENT_VARIABLE_NAMES:
        api_key = os.environ.get(envvar)
        if api_key:
            break
    else:
        raise ConfigurationError(
            f"No Infura API key found in "
            f"environment variables: {', '.join(_ENVIRONMENT_VARIABLE_NAMES)}"
        )


def check_plugins(verify: bool) -> None:
    print("Checking plugins...")
    if verify:
        check_etherscan_plugin()
    check_infura_plugin()


def verify_contracts(contracts: List[ContractInstance]) -> None:
    explorer = networks.provider.network.explorer
    for instance in contracts:
        print(f"(i) Verifying {instance.contract_type.name}...")
        explorer.publish_contract(instance.address)
