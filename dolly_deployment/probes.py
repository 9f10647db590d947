"""
Read-only smoke checks run against deployed contracts, plus the staking
deposit/withdraw exercise. Contracts are passed in as ape contract
instances so the same checks work on forks, testnets and mainnet.
"""

from decimal import Decimal
from typing import List, NamedTuple, Sequence, Tuple

from ape.api import AccountAPI
from ape.contracts import ContractInstance
from ape.exceptions import ApeException

from dolly_deployment.params import TransactionError


class PriceFeedReading(NamedTuple):
    description: str
    version: int
    decimals: int
    answer: int
    price: Decimal


class DollyState(NamedTuple):
    exchange_rate_in_eth: int
    exchange_rate_in_usd: int
    exchange_is_active: bool
    exchange_is_dynamic: bool
    eth_usd_price: Decimal
    eth_usd_decimals: int


class StakeActivity(NamedTuple):
    action: str
    account: str
    amount: int
    result: object


def _scale(value: int, decimals: int) -> Decimal:
    return Decimal(value) / (Decimal(10) ** decimals)


def read_price_feed(price_feed: ContractInstance) -> PriceFeedReading:
    """Reads the latest answer of a Chainlink AggregatorV3Interface feed."""
    decimals = int(price_feed.decimals())
    round_data = price_feed.latestRoundData()
    # (roundId, answer, startedAt, updatedAt, answeredInRound)
    answer = int(round_data[1])
    return PriceFeedReading(
        description=price_feed.description(),
        version=int(price_feed.version()),
        decimals=decimals,
        answer=answer,
        price=_scale(answer, decimals),
    )


def read_dolly(dolly: ContractInstance) -> DollyState:
    """Reads the exchange state of a deployed Dolly contract."""
    price, decimals = dolly.ETHUSDPrice()
    return DollyState(
        exchange_rate_in_eth=int(dolly.currentExchangeRateinETH()),
        exchange_rate_in_usd=int(dolly.currentExchangeRateinUSD()),
        exchange_is_active=bool(dolly.currentExchangeIsActive()),
        exchange_is_dynamic=bool(dolly.currentExchangeIsDynamic()),
        eth_usd_price=_scale(int(price), int(decimals)),
        eth_usd_decimals=int(decimals),
    )


def print_price_feed(reading: PriceFeedReading) -> None:
    print(
        f"description = {reading.description}",
        f"version = {reading.version}",
        f"decimals = {reading.decimals}",
        f"price = {reading.price}",
        sep="\n",
    )


def print_dolly(state: DollyState) -> None:
    print(
        f"currentExchangeRateinETH = {state.exchange_rate_in_eth}",
        f"currentExchangeRateinUSD = {state.exchange_rate_in_usd}",
        f"currentExchangeIsActive = {state.exchange_is_active}",
        f"currentExchangeIsDynamic = {state.exchange_is_dynamic}",
        f"Price = {state.eth_usd_price}",
        f"Decimals = {state.eth_usd_decimals}",
        sep="\n",
    )


def exercise_stakes(
    stake: ContractInstance,
    deposits: Sequence[Tuple[AccountAPI, int]],
    dry_run: bool = True,
) -> List[StakeActivity]:
    """
    Deposits from every account in order, then withdraws in reverse order.
    A dry run only simulates the calls (eth_call); otherwise each call is a
    transaction and the run stops at the first failure.
    """
    activity = list()
    for account, amount in deposits:
        result = _stake_call(stake.Deposit, account, dry_run, amount)
        print(f"{account.address} deposited {amount} wei")
        activity.append(StakeActivity("deposit", account.address, amount, result))

    for account, amount in reversed(deposits):
        result = _stake_call(stake.Withdraw, account, dry_run)
        print(f"{account.address} withdrew")
        activity.append(StakeActivity("withdraw", account.address, amount, result))

    return activity


def _stake_call(method, account: AccountAPI, dry_run: bool, *args):
    try:
        if dry_run:
            return method.call(*args, sender=account)
        return method(*args, sender=account)
    except ApeException as e:
        raise TransactionError(f"{method} from {account.address} failed: {e}") from e
