#!/usr/bin/python3

import time

import click
from ape.cli import ConnectedProviderCommand, network_option

from dolly_deployment.artifacts import get_contract_container
from dolly_deployment.constants import DOLLY
from dolly_deployment.networks import active_network_name, resolve
from dolly_deployment.options import (
    address_option,
    interval_option,
    network_name_option,
    polls_option,
    registry_filepath_option,
)
from dolly_deployment.probes import print_dolly, read_dolly
from dolly_deployment.registry import contracts_from_registry, registry_address


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@network_name_option
@registry_filepath_option
@address_option
@polls_option
@interval_option
def cli(network, network_name, registry_filepath, address, polls, interval):
    """
    Reads the exchange state of a deployed Dolly contract.
    The address is taken from the deployment registry unless given.
    """
    profile = resolve(network_name or active_network_name())
    if address:
        dolly = get_contract_container(DOLLY).at(address)
    else:
        address = registry_address(registry_filepath, profile.name, DOLLY)
        dolly = contracts_from_registry(registry_filepath, profile.name)[DOLLY]

    click.secho(f"{DOLLY} on {profile.name} at {address}", fg="green")
    for poll in range(polls):
        if poll:
            print(f"---- Waiting {interval}s -----")
            time.sleep(interval)
        print_dolly(read_dolly(dolly))


if __name__ == "__main__":
    cli()
