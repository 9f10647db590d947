import typing
from abc import ABC, abstractmethod
from collections import OrderedDict
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, List, NamedTuple, Optional

import click
from ape.api import AccountAPI
from ape.cli.choices import select_account
from ape.contracts.base import ContractContainer, ContractInstance
from ape.exceptions import ApeException
from ape_accounts import KeyfileAccount
from eth_typing import ChecksumAddress
from web3.auto import w3

from dolly_deployment.artifacts import get_contract_container
from dolly_deployment.confirm import _confirm_resolution, _continue
from dolly_deployment.constants import REDEPLOYABLE_NETWORKS, SENTINEL_ADDRESS
from dolly_deployment.networks import (
    ConfigurationError,
    NetworkProfile,
    active_network_name,
    check_chain_id,
    print_profile,
    resolve,
)
from dolly_deployment.registry import registry_from_ape_deployments
from dolly_deployment.utils import (
    _load_yaml,
    check_plugins,
    get_artifacts_dir,
    validate_config,
    verify_contracts,
)

CONTRACT_CONSTRUCTOR_PARAMETER_KEY = "constructor"

Deployments = typing.Mapping[str, ContractInstance]


class TransactionError(Exception):
    """Raised when a deployment transaction fails (revert, gas, funds or RPC failure)."""


class DeploymentStatus(Enum):
    DEPLOYED = "deployed"
    SKIPPED = "skipped"
    FAILED = "failed"


class DeploymentResult(NamedTuple):
    """Outcome of deploying a single contract."""

    contract_name: str
    status: DeploymentStatus
    address: Optional[ChecksumAddress] = None
    tx_hash: Optional[str] = None
    reason: str = ""


class ExitCode(IntEnum):
    SUCCESS = 0
    FAILED = 1
    CONFIGURATION_ERROR = 2
    SKIPPED = 3


def exit_code(results: List[DeploymentResult]) -> ExitCode:
    """Summarizes a migration into a process exit code."""
    statuses = {result.status for result in results}
    if DeploymentStatus.FAILED in statuses:
        return ExitCode.FAILED
    if DeploymentStatus.SKIPPED in statuses:
        return ExitCode.SKIPPED
    return ExitCode.SUCCESS


class VariableContext:
    def __init__(
        self,
        contract_names: List[str],
        contract_name: str,
        constants: typing.Dict[str, Any] = None,
    ):
        # only contracts deployed before this one can be referenced
        self.contract_names = contract_names or list()
        self.contract_name = contract_name
        self.constants = constants or dict()


# Variables


class Variable(ABC):
    VARIABLE_PREFIX = "$"

    @abstractmethod
    def resolve(self, deployments: Deployments, deployer: Optional[AccountAPI]) -> Any:
        raise NotImplementedError

    @classmethod
    def is_variable(cls, param: Any) -> bool:
        """Returns True if the param is a variable."""
        return isinstance(param, str) and param.startswith(cls.VARIABLE_PREFIX)


class DeployerAccount(Variable):
    DEPLOYER_INDICATOR = "deployer"

    @classmethod
    def is_deployer(cls, value: str) -> bool:
        """Returns True if the variable is a special deployer variable."""
        return value == cls.DEPLOYER_INDICATOR

    def resolve(self, deployments: Deployments, deployer: Optional[AccountAPI]) -> Any:
        if deployer is None:
            return SENTINEL_ADDRESS
        return deployer.address


class Constant(Variable):
    def __init__(self, constant_name: str, context: VariableContext):
        try:
            self.constant_value = context.constants[constant_name]
        except KeyError:
            raise ConstructorParameters.Invalid(
                f"Constant '{constant_name}' used by {context.contract_name} is not defined."
            )

    @classmethod
    def is_constant(cls, value: str) -> bool:
        """Returns True if the variable is a deployment constant."""
        return value.isupper()

    def resolve(self, deployments: Deployments, deployer: Optional[AccountAPI]) -> Any:
        return self.constant_value


class ContractName(Variable):
    def __init__(self, contract_name: str, context: VariableContext):
        if contract_name not in context.contract_names:
            raise ConstructorParameters.Invalid(
                f"{context.contract_name} references contract {contract_name}, "
                "which is not deployed before it."
            )
        self.contract_name = contract_name

    def resolve(self, deployments: Deployments, deployer: Optional[AccountAPI]) -> Any:
        """Resolves the address of a contract deployed earlier in the same run."""
        contract_instance = deployments.get(self.contract_name)
        if contract_instance is None:
            # eager validation
            return SENTINEL_ADDRESS
        return contract_instance.address


def _resolve_param(value: Any, deployments: Deployments, deployer: Optional[AccountAPI]) -> Any:
    """Resolves a single parameter value or a list of parameter values."""
    if isinstance(value, list):
        return [_resolve_param(v, deployments, deployer) for v in value]

    if isinstance(value, Variable):
        return value.resolve(deployments, deployer)

    return value  # literally a value


def _resolve_params(
    parameters: OrderedDict, deployments: Deployments, deployer: Optional[AccountAPI]
) -> OrderedDict:
    resolved_parameters = OrderedDict()
    for name, value in parameters.items():
        resolved_parameters[name] = _resolve_param(value, deployments, deployer)
    return resolved_parameters


def _variable_from_value(variable: str, context: VariableContext) -> Variable:
    variable = variable[len(Variable.VARIABLE_PREFIX) :]
    if DeployerAccount.is_deployer(variable):
        return DeployerAccount()
    elif Constant.is_constant(variable):
        return Constant(variable, context)
    else:
        return ContractName(variable, context)


def _process_raw_value(value: Any, variable_context: VariableContext) -> Any:
    if isinstance(value, list):
        return [_process_raw_value(v, variable_context) for v in value]

    if Variable.is_variable(value):
        value = _variable_from_value(value, variable_context)

    return value


def _process_raw_values(values: typing.Dict, variable_context: VariableContext) -> OrderedDict:
    processed_parameters = OrderedDict()
    for name, value in values.items():
        processed_parameters[name] = _process_raw_value(value, variable_context)
    return processed_parameters


def _get_contract_names(config: typing.Dict) -> List[str]:
    contract_names = list()
    for contract_info in config["contracts"]:
        if isinstance(contract_info, str):
            contract_names.append(contract_info)
        elif isinstance(contract_info, dict) and len(contract_info) == 1:
            contract_names.extend(list(contract_info.keys()))
        else:
            raise ConstructorParameters.Invalid("Malformed deployment params YAML.")

    duplicates = {name for name in contract_names if contract_names.count(name) > 1}
    if duplicates:
        raise ConstructorParameters.Invalid(
            f"Contracts listed more than once: {', '.join(sorted(duplicates))}"
        )
    return contract_names


def _get_constants(config: typing.Dict, profile: NetworkProfile) -> typing.Dict[str, Any]:
    """Merges the constants of the params file with the constants of the network profile."""
    constants = dict(config.get("constants") or {})
    profile_constants = profile.constants()
    clashes = set(constants) & set(profile_constants)
    if clashes:
        raise ConstructorParameters.Invalid(
            f"Constants {', '.join(sorted(clashes))} are defined by the network profile "
            "and cannot be redefined in the params file."
        )
    constants.update(profile_constants)
    return constants


def _validate_constructor_abi_inputs(
    contract_name: str,
    abi_inputs: List[Any],
    resolved_parameters: OrderedDict,
) -> None:
    """Validates the constructor parameters against the constructor ABI."""
    if len(resolved_parameters) != len(abi_inputs):
        raise ConstructorParameters.Invalid(
            f"Constructor parameters length mismatch - "
            f"{contract_name} ABI requires {len(abi_inputs)}, Got {len(resolved_parameters)}."
        )

    codex = enumerate(zip(abi_inputs, resolved_parameters.items()), start=0)
    for position, (abi_input, resolved_input) in codex:
        name, value = resolved_input
        if not w3.is_encodable(abi_input.type, value):
            raise ConstructorParameters.Invalid(
                f"Constructor param name '{name}' at position {position} has a value '{value}' "
                f"whose type does not match expected ABI type '{abi_input.type}'"
            )


class ConstructorParameters:
    """Represents the constructor parameters for an ordered set of contracts."""

    class Invalid(ConfigurationError):
        """Raised when the constructor parameters are invalid"""

    def __init__(self, parameters: OrderedDict):
        self.parameters = parameters

    @classmethod
    def from_config(cls, config: typing.Dict, profile: NetworkProfile) -> "ConstructorParameters":
        """Processes the constructor parameters of a params file for a network profile."""
        print("Processing contract constructor parameters...")
        contract_names = _get_contract_names(config)
        constants = _get_constants(config, profile)

        contracts_config = OrderedDict()
        for position, contract_info in enumerate(config["contracts"]):
            if isinstance(contract_info, str):
                contracts_config[contract_info] = OrderedDict()
                continue

            contract_name = contract_names[position]
            contract_data = contract_info[contract_name] or dict()
            if not isinstance(contract_data, dict):
                raise cls.Invalid(f"Malformed deployment params for {contract_name}.")
            raw_values = contract_data.get(CONTRACT_CONSTRUCTOR_PARAMETER_KEY) or dict()
            if not isinstance(raw_values, dict):
                raise cls.Invalid(f"Malformed constructor parameter config for {contract_name}.")
            contracts_config[contract_name] = _process_raw_values(
                raw_values,
                VariableContext(
                    contract_names=contract_names[:position],
                    contract_name=contract_name,
                    constants=constants,
                ),
            )

        return cls(parameters=contracts_config)

    @property
    def contract_names(self) -> List[str]:
        return list(self.parameters)

    def resolve(
        self,
        contract_name: str,
        deployments: Optional[Deployments] = None,
        deployer: Optional[AccountAPI] = None,
    ) -> OrderedDict:
        """Resolves the constructor parameters for a single contract."""
        return _resolve_params(self.parameters[contract_name], deployments or dict(), deployer)

    def validate(self, containers: typing.Dict[str, ContractContainer]) -> None:
        """Validates the parameters of every contract against its constructor ABI."""
        for contract_name in self.parameters:
            _validate_constructor_abi_inputs(
                contract_name=contract_name,
                abi_inputs=containers[contract_name].constructor.abi.inputs,
                resolved_parameters=self.resolve(contract_name),
            )


class Transactor:
    """
    Represents an ape account plus error-annotated contract deployment.
    """

    def __init__(self, account: Optional[AccountAPI] = None, autosign: bool = False):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
            if isinstance(self._account, KeyfileAccount):
                self._account.set_autosign(True)
        self._autosign = autosign

    def get_account(self) -> AccountAPI:
        """Returns the transactor account."""
        return self._account

    def _deploy_contract(
        self, container: ContractContainer, resolved_params: OrderedDict
    ) -> ContractInstance:
        contract_name = container.contract_type.name
        try:
            # explorer verification happens once, in Deployer.finalize
            return self._account.deploy(container, *resolved_params.values(), publish=False)
        except ApeException as e:
            raise TransactionError(f"{contract_name} deployment failed: {e}") from e


class Deployer(Transactor):
    """
    Deploys the contracts of a params file, in order, to the network of a profile.
    A failed deployment ends the run; nothing is retried.
    """

    def __init__(
        self,
        config: typing.Dict,
        profile: NetworkProfile,
        path: Optional[Path] = None,
        verify: bool = False,
        account: Optional[AccountAPI] = None,
        autosign: bool = False,
        contract_containers: Optional[typing.Dict[str, ContractContainer]] = None,
    ):
        super().__init__(account, autosign)
        self.path = path
        self.config = config
        self.profile = profile
        self.verify = verify
        self.registry_filepath = validate_config(config=config)
        self.artifacts_dir = get_artifacts_dir(config=config)
        self.constructor_parameters = ConstructorParameters.from_config(config, profile)
        self.deployments: typing.Dict[str, ContractInstance] = OrderedDict()
        self._contract_containers = dict(contract_containers or {})

    @classmethod
    def from_yaml(cls, filepath: Path, profile: NetworkProfile, *args, **kwargs) -> "Deployer":
        config = _load_yaml(filepath)
        return cls(config, profile, filepath, *args, **kwargs)

    @property
    def contract_names(self) -> List[str]:
        return self.constructor_parameters.contract_names

    def get_contract_container(self, contract_name: str) -> ContractContainer:
        if contract_name not in self._contract_containers:
            self._contract_containers[contract_name] = get_contract_container(
                contract_name, artifacts_dir=self.artifacts_dir
            )
        return self._contract_containers[contract_name]

    def migrate(self) -> List[DeploymentResult]:
        """
        Runs the deployment sequence. Networks that cannot host the contracts
        produce a single skipped result for the primary contract and no chain
        interaction at all. Declining a contract ends the run with a skipped result.
        """
        self._print_deployment_info()
        print_profile(self.profile)

        primary_contract = self.contract_names[0]
        if not self.profile.deployable:
            print(
                f"{primary_contract} cannot be deployed on {self.profile.name}: "
                f"{self.profile.reason}"
            )
            return [
                DeploymentResult(
                    contract_name=primary_contract,
                    status=DeploymentStatus.SKIPPED,
                    reason=self.profile.reason,
                )
            ]

        containers = {name: self.get_contract_container(name) for name in self.contract_names}
        self.constructor_parameters.validate(containers)
        if not self._autosign:
            # Confirms the start of the deployment.
            _continue()

        results = list()
        for contract_name in self.contract_names:
            try:
                result = self.deploy(contract_name)
            except click.Abort:
                # earlier deployments are on-chain and still need to be reported
                results.append(
                    DeploymentResult(
                        contract_name=contract_name,
                        status=DeploymentStatus.SKIPPED,
                        reason="deployment declined",
                    )
                )
                break
            results.append(result)
            if result.status == DeploymentStatus.FAILED:
                break
        return results

    def deploy(self, contract_name: str) -> DeploymentResult:
        container = self.get_contract_container(contract_name)
        resolved_params = self.constructor_parameters.resolve(
            contract_name, deployments=self.deployments, deployer=self.get_account()
        )
        if not self._autosign:
            _confirm_resolution(resolved_params, contract_name)

        try:
            instance = self._deploy_contract(container, resolved_params)
        except TransactionError as e:
            print(f"Error in migration: {e}")
            return DeploymentResult(
                contract_name=contract_name, status=DeploymentStatus.FAILED, reason=str(e)
            )

        self.deployments[contract_name] = instance
        print(f"{contract_name} deployed at {instance.address}")
        return DeploymentResult(
            contract_name=contract_name,
            status=DeploymentStatus.DEPLOYED,
            address=instance.address,
            tx_hash=instance.txn_hash,
        )

    @property
    def replaces_registry_entries(self) -> bool:
        return self.profile.name in REDEPLOYABLE_NETWORKS

    def finalize(self) -> Optional[Path]:
        """
        Publishes the deployments to the registry and optionally to block explorers.
        """
        deployments = list(self.deployments.values())
        if not deployments:
            print("(i) No contracts were deployed; registry left untouched.")
            return None

        output_filepath = registry_from_ape_deployments(
            deployments=deployments,
            network=self.profile.name,
            output_filepath=self.registry_filepath,
            replace=self.replaces_registry_entries,
        )
        if self.verify:
            verify_contracts(contracts=deployments)
        return output_filepath

    def _print_deployment_info(self):
        print(
            f"Account: {self.get_account().address}",
            f"Config: {self.path}",
            f"Artifacts: {self.artifacts_dir}",
            f"Registry: {self.registry_filepath}",
            f"Verify: {self.verify}",
            sep="\n",
        )


def prepare_deployment(
    params_filepath: Path,
    network_name: Optional[str] = None,
    verify: bool = False,
    autosign: bool = False,
    account: Optional[AccountAPI] = None,
) -> Deployer:
    """
    Resolves the network profile and runs the pre-deployment checks
    against the connected provider before building the deployer.
    """
    network_name = network_name or active_network_name()
    profile = resolve(network_name)
    check_chain_id(profile)
    if profile.deployable:
        check_plugins(verify=verify)

    # do this last so that the user can see any failed
    # pre-deployment checks or validation errors.
    return Deployer.from_yaml(
        filepath=params_filepath,
        profile=profile,
        verify=verify,
        account=account,
        autosign=autosign,
    )
