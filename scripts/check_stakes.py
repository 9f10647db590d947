#!/usr/bin/python3

import click
from ape import accounts
from ape.cli import ConnectedProviderCommand, network_option

from dolly_deployment.constants import STAKE_CONSTANT_TIME
from dolly_deployment.networks import active_network_name, is_local_network, resolve
from dolly_deployment.options import network_name_option, registry_filepath_option
from dolly_deployment.params import TransactionError
from dolly_deployment.probes import exercise_stakes
from dolly_deployment.registry import contracts_from_registry


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@network_name_option
@registry_filepath_option
@click.option(
    "--amount",
    help="Amount each account deposits, in wei",
    type=click.IntRange(min=1),
    default=10**18,
    show_default=True,
)
@click.option(
    "--num-accounts",
    help="Number of test accounts that deposit",
    type=click.IntRange(min=1),
    default=3,
    show_default=True,
)
@click.option(
    "--dry-run/--transact",
    help="Simulate the deposits and withdrawals instead of sending transactions",
    default=None,
)
def cli(network, network_name, registry_filepath, amount, num_accounts, dry_run):
    """
    Deposits into the staking contract from several test accounts and
    withdraws again. Transactions are only sent by default on local chains.
    """
    profile = resolve(network_name or active_network_name())
    if dry_run is None:
        dry_run = not is_local_network()

    stake = contracts_from_registry(registry_filepath, profile.name)[STAKE_CONSTANT_TIME]
    deposits = [(accounts.test_accounts[i], amount) for i in range(num_accounts)]

    click.secho(
        f"{STAKE_CONSTANT_TIME} on {profile.name} at {stake.address} "
        f"({'dry run' if dry_run else 'transactions'})",
        fg="green",
    )
    try:
        activity = exercise_stakes(stake, deposits, dry_run=dry_run)
    except TransactionError as e:
        click.secho(f"Error in staking check: {e}", fg="red")
        raise click.Abort()

    click.secho(f"{len(activity)} staking calls succeeded", fg="green")


if __name__ == "__main__":
    cli()
