from typing import Dict, NamedTuple

from ape import networks
from eth_typing import ChecksumAddress

from dolly_deployment.constants import (
    BSC,
    BSC_TESTNET,
    CHAINLINK_ETH_USD,
    DEVELOP,
    DEVELOPMENT,
    FORK_NETWORKS,
    FORK_SUFFIX,
    KOVAN,
    KOVAN_FORK,
    LOCAL_BLOCKCHAIN_ENVIRONMENTS,
    MAINNET,
    MAINNET_FORK,
    PANCAKESWAP_ROUTER_V2,
    POLYGON,
    POLYGON_TEST,
    ROPSTEN,
    ROPSTEN_FORK,
    SANDBOX_NETWORKS,
    SENTINEL_ADDRESS,
    SUPPORTED_NETWORKS,
    SUSHISWAP_ROUTER_V2,
    UNISWAP_FACTORY_V1,
    UNISWAP_FACTORY_V2,
    UNISWAP_V2_ROUTER_01,
    UNISWAP_V2_ROUTER_02,
    WILDCARD_CHAIN_ID,
)


class ConfigurationError(ValueError):
    """Raised when a deployment cannot be configured for the requested network."""


class NetworkProfile(NamedTuple):
    """Chain specific parameters needed to deploy Dolly on a single network."""

    name: str
    chain_id: int
    price_oracle_address: ChecksumAddress
    router_address: ChecksumAddress
    deployable: bool
    uniswap_factory_v1: ChecksumAddress = SENTINEL_ADDRESS
    uniswap_factory_v2: ChecksumAddress = SENTINEL_ADDRESS
    uniswap_router_v1: ChecksumAddress = SENTINEL_ADDRESS
    sushiswap_router: ChecksumAddress = SENTINEL_ADDRESS
    reason: str = ""

    def constants(self) -> Dict[str, object]:
        """Returns the profile as deployment constants usable in constructor parameters."""
        return {
            "CHAIN_ID": self.chain_id,
            "PRICE_ORACLE": self.price_oracle_address,
            "ROUTER": self.router_address,
            "UNISWAP_FACTORY_V1": self.uniswap_factory_v1,
            "UNISWAP_FACTORY_V2": self.uniswap_factory_v2,
            "UNISWAP_ROUTER_V1": self.uniswap_router_v1,
            "SUSHISWAP_ROUTER": self.sushiswap_router,
        }


def _ethereum_profile(name: str, network: str, chain_id: int, **overrides) -> NetworkProfile:
    params = dict(
        name=name,
        chain_id=chain_id,
        price_oracle_address=CHAINLINK_ETH_USD.get(network, SENTINEL_ADDRESS),
        router_address=UNISWAP_V2_ROUTER_02,
        deployable=True,
        uniswap_factory_v1=UNISWAP_FACTORY_V1[network],
        uniswap_factory_v2=UNISWAP_FACTORY_V2,
        uniswap_router_v1=UNISWAP_V2_ROUTER_01,
        sushiswap_router=SUSHISWAP_ROUTER_V2[network],
    )
    params.update(overrides)
    return NetworkProfile(**params)


def _binance_profile(name: str, chain_id: int) -> NetworkProfile:
    # PancakeSwap V2 is a Uniswap V2 fork
    return NetworkProfile(
        name=name,
        chain_id=chain_id,
        price_oracle_address=CHAINLINK_ETH_USD[name],
        router_address=PANCAKESWAP_ROUTER_V2[name],
        deployable=True,
    )


def _unsupported_profile(name: str, chain_id: int, reason: str) -> NetworkProfile:
    return NetworkProfile(
        name=name,
        chain_id=chain_id,
        price_oracle_address=SENTINEL_ADDRESS,
        router_address=SENTINEL_ADDRESS,
        deployable=False,
        reason=reason,
    )


def _sandbox_profile(name: str) -> NetworkProfile:
    # deployable only to exercise the pipeline; external calls will not work
    return NetworkProfile(
        name=name,
        chain_id=WILDCARD_CHAIN_ID,
        price_oracle_address=SENTINEL_ADDRESS,
        router_address=SENTINEL_ADDRESS,
        deployable=True,
    )


def _build_profiles() -> Dict[str, NetworkProfile]:
    no_price_feed = "no Chainlink ETH/USD price feed available"
    no_integration = "no supported router/price oracle integration"
    return {
        MAINNET: _ethereum_profile(MAINNET, network=MAINNET, chain_id=1),
        MAINNET_FORK: _ethereum_profile(MAINNET_FORK, network=MAINNET, chain_id=1),
        ROPSTEN: _ethereum_profile(
            ROPSTEN, network=ROPSTEN, chain_id=3, deployable=False, reason=no_price_feed
        ),
        ROPSTEN_FORK: _ethereum_profile(
            ROPSTEN_FORK, network=ROPSTEN, chain_id=3, deployable=False, reason=no_price_feed
        ),
        KOVAN: _ethereum_profile(KOVAN, network=KOVAN, chain_id=42),
        KOVAN_FORK: _ethereum_profile(KOVAN_FORK, network=KOVAN, chain_id=42),
        BSC: _binance_profile(BSC, chain_id=56),
        BSC_TESTNET: _binance_profile(BSC_TESTNET, chain_id=97),
        POLYGON: _unsupported_profile(POLYGON, chain_id=137, reason=no_integration),
        POLYGON_TEST: _unsupported_profile(POLYGON_TEST, chain_id=80001, reason=no_integration),
        DEVELOPMENT: _sandbox_profile(DEVELOPMENT),
        DEVELOP: _sandbox_profile(DEVELOP),
    }


NETWORK_PROFILES = _build_profiles()


def resolve(network_name: str) -> NetworkProfile:
    """Returns the deployment profile for a network name."""
    try:
        return NETWORK_PROFILES[network_name]
    except (KeyError, TypeError):
        raise ConfigurationError(
            f"Are you deploying to the correct network? (network selected: {network_name})"
        )


# (ape ecosystem, ape network) -> supported network name
APE_NETWORKS = {
    ("ethereum", "mainnet"): MAINNET,
    ("ethereum", "mainnet-fork"): MAINNET_FORK,
    ("ethereum", "ropsten"): ROPSTEN,
    ("ethereum", "ropsten-fork"): ROPSTEN_FORK,
    ("ethereum", "kovan"): KOVAN,
    ("ethereum", "kovan-fork"): KOVAN_FORK,
    ("ethereum", "local"): DEVELOPMENT,
    ("bsc", "mainnet"): BSC,
    ("bsc", "testnet"): BSC_TESTNET,
    ("polygon", "mainnet"): POLYGON,
    ("polygon", "mumbai"): POLYGON_TEST,
}


def network_name_for(ecosystem: str, network: str) -> str:
    """Returns the supported network name matching an ape network choice."""
    try:
        return APE_NETWORKS[(ecosystem, network)]
    except KeyError:
        raise ConfigurationError(
            f"No deployment network is configured for {ecosystem}:{network}; "
            f"use one of {', '.join(SUPPORTED_NETWORKS)}"
        )


def active_network_name() -> str:
    network = networks.provider.network
    return network_name_for(network.ecosystem.name, network.name)


def is_local_network() -> bool:
    network_name = networks.provider.network.name
    return network_name in LOCAL_BLOCKCHAIN_ENVIRONMENTS or network_name.endswith(FORK_SUFFIX)


def check_chain_id(profile: NetworkProfile) -> None:
    """
    Checks that the connected chain can hold the deployments of the profile.
    Local and forked chains only take the sandbox profiles or the fork profile
    of the connected network; fork profiles need a forked chain.
    """
    if is_local_network():
        if profile.name in SANDBOX_NETWORKS:
            return
        connected_network_name = active_network_name()
        if profile.name not in FORK_NETWORKS or profile.name != connected_network_name:
            raise ConfigurationError(
                f"Network '{profile.name}' cannot be deployed on the local chain "
                f"({connected_network_name})."
            )
        return

    if profile.name in FORK_NETWORKS:
        raise ConfigurationError(f"Network '{profile.name}' requires a forked chain.")
    if profile.chain_id == WILDCARD_CHAIN_ID:
        return
    provider_chain_id = networks.provider.chain_id
    if profile.chain_id != provider_chain_id:
        raise ConfigurationError(
            f"chain_id of network '{profile.name}' ({profile.chain_id}) does not match "
            f"chain_id of current network ({provider_chain_id})."
        )


def print_profile(profile: NetworkProfile) -> None:
    print(
        f"           Deployed Network: {profile.name}",
        f"          Deployed Chain ID: {profile.chain_id}",
        f"Uniswap Address Provider V1: {profile.uniswap_factory_v1}",
        f"Uniswap Address Provider V2: {profile.uniswap_factory_v2}",
        f"  UniswapV2Router01 Address: {profile.uniswap_router_v1}",
        f"  UniswapV2Router02 Address: {profile.router_address}",
        f"Sushiswap Router Address V2: {profile.sushiswap_router}",
        f"          Chainlink ETH/USD: {profile.price_oracle_address}",
        sep="\n",
    )
