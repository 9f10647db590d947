from pathlib import Path

import click
from eth_utils import to_checksum_address

from dolly_deployment.constants import (
    DEFAULT_CONFIG_FILEPATH,
    DEFAULT_REGISTRY_FILENAME,
    REGISTRY_DIR,
    SENTINEL_ADDRESS,
    SUPPORTED_NETWORKS,
)


class ContractAddress(click.ParamType):
    """A checksummed address of a real contract; the placeholder address is rejected."""

    name = "contract_address"

    def convert(self, value, param, ctx):
        try:
            address = to_checksum_address(value)
        except (TypeError, ValueError):
            self.fail(f"{value} is not a valid ethereum address", param, ctx)
        if address == SENTINEL_ADDRESS:
            self.fail("the zero address is a placeholder, not a contract", param, ctx)
        return address


network_name_option = click.option(
    "--network-name",
    "-n",
    help=(
        "Deployment network; inferred from the connected ape network when omitted. "
        f"One of: {', '.join(SUPPORTED_NETWORKS)}"
    ),
    type=click.STRING,
    required=False,
)

params_filepath_option = click.option(
    "--params-filepath",
    "-p",
    help="Deployment params YAML",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    default=DEFAULT_CONFIG_FILEPATH,
    show_default=True,
)

registry_filepath_option = click.option(
    "--registry-filepath",
    "-f",
    help="Registry written by a previous deployment",
    type=click.Path(dir_okay=False, path_type=Path),
    default=REGISTRY_DIR / DEFAULT_REGISTRY_FILENAME,
    show_default=True,
)

address_option = click.option(
    "--address",
    "-a",
    help="Contract address; looked up in the registry when omitted",
    type=ContractAddress(),
    required=False,
)

verify_option = click.option(
    "--verify/--no-verify",
    help="Publish contract sources to the block explorer",
    default=False,
)

autosign_option = click.option(
    "--autosign",
    help="Sign transactions and accept resolved parameters without prompting",
    is_flag=True,
    default=False,
)

strict_option = click.option(
    "--strict",
    help="Exit with a non-zero status when the migration does not fully succeed",
    is_flag=True,
    default=False,
)

polls_option = click.option(
    "--polls",
    help="Number of times to read the contract state",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
)

interval_option = click.option(
    "--interval",
    help="Seconds between reads",
    type=click.IntRange(min=0),
    default=15,
    show_default=True,
)
