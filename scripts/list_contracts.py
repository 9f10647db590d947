#!/usr/bin/python3


from itertools import groupby
from typing import List, Optional

import click

from dolly_deployment.constants import SUPPORTED_NETWORKS
from dolly_deployment.options import registry_filepath_option
from dolly_deployment.registry import RegistryEntry, read_registry


def _get_registry_entries(registry_filepath, network_name: Optional[str]) -> List[RegistryEntry]:
    entries = read_registry(filepath=registry_filepath)
    if network_name:
        entries = [entry for entry in entries if entry.network == network_name]
    return sorted(entries, key=lambda e: (e.network, e.name))


def _display_registry_entries(entries: List[RegistryEntry]) -> None:
    """Display registry entries grouped by network."""
    for network_name, network_entries in groupby(entries, key=lambda e: e.network):
        network_entries = list(network_entries)
        chain_id = network_entries[0].chain_id
        click.secho(f"\n{network_name} (chain id {chain_id})", fg="green")
        for index, entry in enumerate(network_entries, start=1):
            click.secho(f"    {index}. {entry.name} {entry.address}", fg="cyan")
            click.secho(f"       block {entry.block_number}, tx {entry.tx_hash}", fg="yellow")


@click.command(name="list-contracts")
@registry_filepath_option
@click.option(
    "--network-name",
    "-n",
    help="Only list the contracts of this network",
    type=click.Choice(SUPPORTED_NETWORKS),
)
def cli(registry_filepath, network_name):
    """List all contracts in the registry. Optionally filter by network."""
    if not registry_filepath.exists():
        raise click.BadParameter(
            f"No registry at {registry_filepath}", param_hint="--registry-filepath"
        )
    _display_registry_entries(_get_registry_entries(registry_filepath, network_name))


if __name__ == "__main__":
    cli()
