#!/usr/bin/python3

import time

import click
from ape.cli import ConnectedProviderCommand, network_option

from dolly_deployment.artifacts import price_feed_container
from dolly_deployment.constants import SENTINEL_ADDRESS
from dolly_deployment.networks import NetworkProfile, active_network_name, resolve
from dolly_deployment.options import (
    address_option,
    interval_option,
    network_name_option,
    polls_option,
)
from dolly_deployment.probes import print_price_feed, read_price_feed


def _get_price_feed_address(profile: NetworkProfile, address=None) -> str:
    address = address or profile.price_oracle_address
    if address == SENTINEL_ADDRESS:
        raise click.BadParameter(
            f"no ETH/USD price feed is known for {profile.name}; pass one explicitly",
            param_hint="--address",
        )
    return address


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@network_name_option
@address_option
@polls_option
@interval_option
def cli(network, network_name, address, polls, interval):
    """
    Reads the Chainlink ETH/USD price feed Dolly is configured with.

    ape run check_price_feed --network ethereum:kovan:infura --polls 3
    """
    profile = resolve(network_name or active_network_name())
    address = _get_price_feed_address(profile, address)
    price_feed = price_feed_container().at(address)
    click.secho(f"ETH/USD price feed on {profile.name} at {address}", fg="green")
    for poll in range(polls):
        if poll:
            print(f"---- Waiting {interval}s -----")
            time.sleep(interval)
        print_price_feed(read_price_feed(price_feed))


if __name__ == "__main__":
    cli()
