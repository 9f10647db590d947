from collections import OrderedDict

import click

from dolly_deployment.constants import SENTINEL_ADDRESS


def _confirm_deployment(contract_name: str) -> None:
    """Asks the user to confirm the deployment of a single contract."""
    answer = input(f"Deploy {contract_name} Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting deployment!")
        raise click.Abort()


def _continue() -> None:
    """Asks the user to continue."""
    answer = input("Continue Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting deployment!")
        raise click.Abort()


def _confirm_sentinel_address() -> None:
    answer = input(
        "Placeholder (zero) address detected for deployment parameter; "
        "the deployed contract will not be functional. Continue? Y/N? "
    )
    if answer.lower().strip() == "n":
        print("Aborting deployment!")
        raise click.Abort()


def _confirm_resolution(resolved_params: OrderedDict, contract_name: str) -> None:
    """Asks the user to confirm the resolved constructor parameters for a single contract."""
    if len(resolved_params) == 0:
        print(f"\n(i) No constructor parameters for {contract_name}")
        _confirm_deployment(contract_name)
        return

    print(f"\nConstructor parameters for {contract_name}")
    contains_sentinel = False
    for name, resolved_value in resolved_params.items():
        print(f"\t{name}={resolved_value}")
        if not contains_sentinel:
            contains_sentinel = resolved_value == SENTINEL_ADDRESS
    _confirm_deployment(contract_name)
    if contains_sentinel:
        _confirm_sentinel_address()
