import click
import pytest

from dolly_deployment.constants import CHAINLINK_ETH_USD, DOLLY, STAKE_CONSTANT_TIME
from dolly_deployment.networks import resolve
from dolly_deployment.params import Deployer, DeploymentStatus, ExitCode, exit_code
from tests.conftest import FakeAccount


@pytest.fixture
def make_deployer(deployment_config, contract_containers, fake_account):
    def _make_deployer(network_name, account=fake_account, autosign=True):
        return Deployer(
            config=deployment_config,
            profile=resolve(network_name),
            account=account,
            autosign=autosign,
            contract_containers=contract_containers,
        )

    return _make_deployer


def test_deploys_both_contracts_in_order(make_deployer, fake_account):
    deployer = make_deployer("kovan")
    results = deployer.migrate()

    assert [r.contract_name for r in results] == [DOLLY, STAKE_CONSTANT_TIME]
    assert all(r.status == DeploymentStatus.DEPLOYED for r in results)
    assert results[0].address != results[1].address
    assert all(r.tx_hash for r in results)
    assert exit_code(results) == ExitCode.SUCCESS

    (dolly_name, dolly_args, dolly_kwargs), (stake_name, stake_args, _) = fake_account.deploy_calls
    assert dolly_name == DOLLY
    assert dolly_args[0] == 42
    assert dolly_args[1] == CHAINLINK_ETH_USD["kovan"]
    assert dolly_kwargs == {"publish": False}
    assert stake_name == STAKE_CONSTANT_TIME
    assert stake_args == ()


def test_deployments_are_tracked(make_deployer):
    deployer = make_deployer("bsc_testnet")
    results = deployer.migrate()
    assert list(deployer.deployments) == [DOLLY, STAKE_CONSTANT_TIME]
    assert deployer.deployments[DOLLY].address == results[0].address


@pytest.mark.parametrize("network_name", ["ropsten", "ropsten_fork", "polygon", "polygon_test"])
def test_undeployable_network_is_skipped(make_deployer, fake_account, network_name, capsys):
    deployer = make_deployer(network_name)
    results = deployer.migrate()

    assert len(results) == 1
    assert results[0].contract_name == DOLLY
    assert results[0].status == DeploymentStatus.SKIPPED
    assert results[0].address is None
    assert results[0].reason == resolve(network_name).reason
    assert fake_account.deploy_calls == []
    assert exit_code(results) == ExitCode.SKIPPED
    assert f"Dolly cannot be deployed on {network_name}" in capsys.readouterr().out


def test_skipped_network_does_not_need_artifacts(deployment_config, fake_account):
    deployer = Deployer(
        config=deployment_config, profile=resolve("polygon"), account=fake_account, autosign=True
    )
    results = deployer.migrate()
    assert results[0].status == DeploymentStatus.SKIPPED


def test_skipped_network_leaves_registry_untouched(make_deployer, tmp_path):
    deployer = make_deployer("ropsten")
    deployer.migrate()
    assert deployer.finalize() is None
    assert not (tmp_path / "dolly.json").exists()


def test_failure_stops_the_sequence(make_deployer, capsys):
    account = FakeAccount(address="0x000000000000000000000000000000000000bEEF", fail_on=[DOLLY])
    deployer = make_deployer("mainnet", account=account)
    results = deployer.migrate()

    assert len(results) == 1
    assert results[0].status == DeploymentStatus.FAILED
    assert "execution reverted" in results[0].reason
    assert [name for name, _, _ in account.deploy_calls] == [DOLLY]
    assert exit_code(results) == ExitCode.FAILED
    assert "Error in migration:" in capsys.readouterr().out


def test_failure_of_the_second_contract(make_deployer):
    account = FakeAccount(
        address="0x000000000000000000000000000000000000bEEF", fail_on=[STAKE_CONSTANT_TIME]
    )
    deployer = make_deployer("bsc", account=account)
    results = deployer.migrate()

    assert [r.status for r in results] == [DeploymentStatus.DEPLOYED, DeploymentStatus.FAILED]
    assert exit_code(results) == ExitCode.FAILED
    assert list(deployer.deployments) == [DOLLY]


def test_deployed_line_is_printed(make_deployer, capsys):
    results = make_deployer("kovan").migrate()
    output = capsys.readouterr().out
    assert f"Dolly deployed at {results[0].address}" in output
    assert f"StakeConstantTime deployed at {results[1].address}" in output


def test_redeployable_networks(make_deployer):
    assert make_deployer("development").replaces_registry_entries
    assert make_deployer("mainnet_fork").replaces_registry_entries
    assert not make_deployer("mainnet").replaces_registry_entries


def test_declining_confirmation_aborts(make_deployer, fake_account, monkeypatch):
    monkeypatch.setattr("builtins.input", lambda *args: "n")
    deployer = make_deployer("kovan", autosign=False)
    with pytest.raises(click.Abort):
        deployer.migrate()
    assert fake_account.deploy_calls == []


def test_confirmations_with_placeholder_addresses(make_deployer, fake_account, monkeypatch):
    prompts = list()

    def _answer(prompt):
        prompts.append(prompt)
        return "y"

    monkeypatch.setattr("builtins.input", _answer)
    results = make_deployer("development", autosign=False).migrate()

    assert all(r.status == DeploymentStatus.DEPLOYED for r in results)
    assert any("Placeholder (zero) address" in prompt for prompt in prompts)
    assert len(fake_account.deploy_calls) == 2


def test_declining_a_later_contract_keeps_earlier_results(
    make_deployer, fake_account, monkeypatch
):
    answers = iter(["y", "y", "n"])
    monkeypatch.setattr("builtins.input", lambda *args: next(answers))
    deployer = make_deployer("kovan", autosign=False)
    results = deployer.migrate()

    assert [(r.contract_name, r.status) for r in results] == [
        (DOLLY, DeploymentStatus.DEPLOYED),
        (STAKE_CONSTANT_TIME, DeploymentStatus.SKIPPED),
    ]
    assert results[1].reason == "deployment declined"
    assert list(deployer.deployments) == [DOLLY]
    assert [name for name, _, _ in fake_account.deploy_calls] == [DOLLY]
    assert exit_code(results) == ExitCode.SKIPPED
