from types import SimpleNamespace

import pytest
from ape.contracts import ContractContainer
from ape.exceptions import ProviderError
from ethpm_types import ContractType

from dolly_deployment.constants import DOLLY, STAKE_CONSTANT_TIME

# init code that deploys a runtime returning 42 for every call;
# constructor arguments appended to it are ignored
RETURNS_42_BYTECODE = "0x600a600c600039600a6000f3602a60005260206000f3"

DOLLY_ABI = [
    {
        "type": "constructor",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "_chainId", "type": "uint256", "internalType": "uint256"},
            {"name": "_priceFeed", "type": "address", "internalType": "address"},
            {"name": "_router", "type": "address", "internalType": "address"},
        ],
    },
    {
        "type": "function",
        "name": "currentExchangeRateinETH",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256", "internalType": "uint256"}],
    },
]

STAKE_CONSTANT_TIME_ABI = [
    {
        "type": "function",
        "name": "Deposit",
        "stateMutability": "payable",
        "inputs": [{"name": "amount", "type": "uint256", "internalType": "uint256"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "Withdraw",
        "stateMutability": "nonpayable",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256", "internalType": "uint256"}],
    },
]


def make_container(name, abi, bytecode=RETURNS_42_BYTECODE):
    contract_type = ContractType.model_validate(
        {
            "contractName": name,
            "abi": abi,
            "deploymentBytecode": {"bytecode": bytecode},
        }
    )
    return ContractContainer(contract_type)


class FakeAccount:
    """Records deployments instead of sending them; fails for the contracts in fail_on."""

    def __init__(self, address, fail_on=()):
        self.address = address
        self.fail_on = set(fail_on)
        self.deploy_calls = list()

    def deploy(self, container, *args, **kwargs):
        name = container.contract_type.name
        self.deploy_calls.append((name, args, kwargs))
        if name in self.fail_on:
            raise ProviderError("execution reverted")
        position = len(self.deploy_calls)
        return SimpleNamespace(
            address=f"0x{position:040x}",
            txn_hash=f"0x{position:064x}",
            contract_type=container.contract_type,
        )


@pytest.fixture
def contract_containers():
    return {
        DOLLY: make_container(DOLLY, DOLLY_ABI),
        STAKE_CONSTANT_TIME: make_container(STAKE_CONSTANT_TIME, STAKE_CONSTANT_TIME_ABI),
    }


@pytest.fixture
def fake_account():
    return FakeAccount(address="0x000000000000000000000000000000000000dEaD")


@pytest.fixture
def deployment_config(tmp_path):
    return {
        "deployment": {"name": "dolly-test"},
        "registry": {"dir": str(tmp_path), "filename": "dolly.json"},
        "contracts": [
            {
                DOLLY: {
                    "constructor": {
                        "_chainId": "$CHAIN_ID",
                        "_priceFeed": "$PRICE_ORACLE",
                        "_router": "$ROUTER",
                    }
                }
            },
            STAKE_CONSTANT_TIME,
        ],
    }


@pytest.fixture
def deployer_account(accounts):
    return accounts[0]
