#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option
from ape.exceptions import ApeException

from dolly_deployment.networks import ConfigurationError
from dolly_deployment.options import (
    autosign_option,
    network_name_option,
    params_filepath_option,
    strict_option,
    verify_option,
)
from dolly_deployment.params import ExitCode, TransactionError, exit_code, prepare_deployment


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@network_name_option
@params_filepath_option
@verify_option
@autosign_option
@strict_option
def cli(network, account, network_name, params_filepath, verify, autosign, strict):
    """
    Deploys Dolly and StakeConstantTime.

    ape run deploy --network ethereum:mainnet-fork:foundry -n mainnet_fork
    ape run deploy --network bsc:testnet:node --verify
    """
    deployer = None
    try:
        deployer = prepare_deployment(
            params_filepath=params_filepath,
            network_name=network_name,
            verify=verify,
            autosign=autosign,
            account=account,
        )
        results = deployer.migrate()
    except ConfigurationError as e:
        click.secho(f"Error in migration: {e}", fg="red")
        code = ExitCode.CONFIGURATION_ERROR
    except (ApeException, TransactionError) as e:
        click.secho(f"Error in migration: {e}", fg="red")
        code = ExitCode.FAILED
    else:
        code = exit_code(results)
        for result in results:
            color = "green" if code == ExitCode.SUCCESS else "yellow"
            click.secho(f"{result.contract_name}: {result.status.value}", fg=color)
    finally:
        # whatever reached the chain is recorded
        if deployer is not None and deployer.deployments:
            deployer.finalize()

    if strict and code != ExitCode.SUCCESS:
        raise SystemExit(int(code))


if __name__ == "__main__":
    cli()
