import click
from ape.cli import ConnectedProviderCommand, network_option

from dolly_deployment.constants import DOLLY, STAKE_CONSTANT_TIME
from dolly_deployment.networks import active_network_name, resolve
from dolly_deployment.options import network_name_option, registry_filepath_option
from dolly_deployment.registry import contracts_from_registry
from dolly_deployment.utils import check_etherscan_plugin, verify_contracts


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@network_name_option
@registry_filepath_option
@click.option(
    "--contract-name",
    "-c",
    "contract_names",
    help="Contract to verify",
    type=click.Choice([DOLLY, STAKE_CONSTANT_TIME]),
    required=True,
    multiple=True,
)
def cli(network, network_name, registry_filepath, contract_names):
    """Verify deployed contracts on the block explorer."""
    profile = resolve(network_name or active_network_name())
    check_etherscan_plugin()
    contracts = contracts_from_registry(registry_filepath, profile.name)

    contract_instances = []
    for contract_name in contract_names:
        try:
            contract_instances.append(contracts[contract_name])
        except KeyError:
            raise ValueError(
                f"Contract '{contract_name}' not found in registry, '{registry_filepath}', "
                f"for network {profile.name}"
            )

    verify_contracts(contract_instances)


if __name__ == "__main__":
    cli()
