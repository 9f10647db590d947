from pathlib import Path

from ape.utils import ZERO_ADDRESS

import dolly_deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(dolly_deployment.__file__).parent
PROJECT_ROOT = DEPLOYMENT_DIR.parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
REGISTRY_DIR = DEPLOYMENT_DIR / "registries"
BUILD_DIR = PROJECT_ROOT / "build" / "contracts"

DEFAULT_CONFIG_FILEPATH = CONSTRUCTOR_PARAMS_DIR / "dolly.yml"

#
# Networks
#

MAINNET = "mainnet"
MAINNET_FORK = "mainnet_fork"
ROPSTEN = "ropsten"
ROPSTEN_FORK = "ropsten_fork"
KOVAN = "kovan"
KOVAN_FORK = "kovan_fork"
BSC = "bsc"
BSC_TESTNET = "bsc_testnet"
POLYGON = "polygon"
POLYGON_TEST = "polygon_test"
DEVELOPMENT = "development"
DEVELOP = "develop"

SUPPORTED_NETWORKS = [
    MAINNET,
    MAINNET_FORK,
    ROPSTEN,
    ROPSTEN_FORK,
    KOVAN,
    KOVAN_FORK,
    BSC,
    BSC_TESTNET,
    POLYGON,
    POLYGON_TEST,
    DEVELOPMENT,
    DEVELOP,
]

SANDBOX_NETWORKS = [DEVELOPMENT, DEVELOP]
FORK_NETWORKS = [MAINNET_FORK, ROPSTEN_FORK, KOVAN_FORK]

# registry entries of these networks are replaced on redeployment
REDEPLOYABLE_NETWORKS = SANDBOX_NETWORKS + FORK_NETWORKS

# interpreted as "any chain"
WILDCARD_CHAIN_ID = 0

LOCAL_BLOCKCHAIN_ENVIRONMENTS = ["local"]
FORK_SUFFIX = "-fork"

# placeholder for external contracts that do not exist on a network
SENTINEL_ADDRESS = ZERO_ADDRESS

#
# External contracts
#

# https://uniswap.org/docs/v1/frontend-integration/connect-to-uniswap/
UNISWAP_FACTORY_V1 = {
    MAINNET: "0xc0a47dFe034B400B47bDaD5FecDa2621de6c4d95",
    ROPSTEN: "0x9c83dCE8CA20E9aAF9D3efc003b2ea62aBC08351",
    KOVAN: "0xD3E51Ef092B2845f10401a0159B2B96e8B6c3D30",
}

# Same address on mainnet, Ropsten, Rinkeby, Goerli and Kovan
UNISWAP_FACTORY_V2 = "0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f"
UNISWAP_V2_ROUTER_01 = "0xf164fC0Ec4E93095b804a4795bBe1e041497b92a"
UNISWAP_V2_ROUTER_02 = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"

SUSHISWAP_ROUTER_V2 = {
    MAINNET: "0xd9e1cE17f2641f24aE83637ab66a2cca9C378B9F",
    ROPSTEN: "0x1b02dA8Cb0d097eB8D57A175b88c7D8b47997506",
    KOVAN: "0x1b02dA8Cb0d097eB8D57A175b88c7D8b47997506",
}

# https://docs.pancakeswap.finance/code/smart-contracts/pancakeswap-exchange/router-v2
PANCAKESWAP_ROUTER_V2 = {
    BSC: "0x10ED43C718714eb63d5aA57B78B54704E256024E",
    BSC_TESTNET: "0x9Ac64Cc6e4415144C455BD8E4837Fea55603e5c3",
}

# https://docs.chain.link/docs/ethereum-addresses/
CHAINLINK_ETH_USD = {
    MAINNET: "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419",
    KOVAN: "0x9326BFA02ADD2366b30bacB125260Af641031331",
    BSC: "0x9ef1B8c0E4F7dc8bF5719Ea496883DC6401d5b2e",
    BSC_TESTNET: "0x143db3CEEfbdfe5631aDD3E50f7614B6ba708BA7",
}

#
# Contracts
#

DOLLY = "Dolly"
STAKE_CONSTANT_TIME = "StakeConstantTime"

AGGREGATOR_V3_INTERFACE_ABI = [
    {
        "type": "function",
        "name": "decimals",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8", "internalType": "uint8"}],
    },
    {
        "type": "function",
        "name": "description",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string", "internalType": "string"}],
    },
    {
        "type": "function",
        "name": "version",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256", "internalType": "uint256"}],
    },
    {
        "type": "function",
        "name": "latestRoundData",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "roundId", "type": "uint80", "internalType": "uint80"},
            {"name": "answer", "type": "int256", "internalType": "int256"},
            {"name": "startedAt", "type": "uint256", "internalType": "uint256"},
            {"name": "updatedAt", "type": "uint256", "internalType": "uint256"},
            {"name": "answeredInRound", "type": "uint80", "internalType": "uint80"},
        ],
    },
]

#
# Registry
#

DEFAULT_REGISTRY_FILENAME = "dolly.json"

#
# Explorers
#

ETHERSCAN_API_KEY_ENVVAR = "ETHERSCAN_API_KEY"
