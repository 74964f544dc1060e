import logging
from unittest import mock

import pytest
import yaml
from click.testing import CliRunner
from d2sd.CLI.main import cli
from d2sd.errors import DiscoveryError
from d2sd.MODELS.resolved_target import ResolvedTarget
from d2sd.RESOLVERS.batch_extractor import ExtractionCounters, ExtractionResult

RESULT = ExtractionResult(
    targets=[
        ResolvedTarget(name="/db"),
        ResolvedTarget(
            name="/web", address="ip1:8080", labels={"job": "web"},
            has_job=True, is_in_target_network=True, has_tcp_ports=True, has_explicit_port=True,
        ),
    ],
    counters=ExtractionCounters(total=2, no_job=1),
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def runtime():
    with mock.patch("d2sd.CLI.main.DockerRuntimeClient") as factory:
        instance = factory.return_value
        instance.refresh.return_value = RESULT
        yield factory


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['--help'])
    assert result.exit_code == 0
    assert '--instance-prefix' in result.output
    assert 'PROMETHEUS_DOCKER_SD_' in result.output


def test_cli_run_help_without_config():
    runner = CliRunner()
    result = runner.invoke(cli, ['run', '--help'])
    assert result.exit_code == 0
    assert 'Discover continuously' in result.output


def test_cli_missing_instance_prefix():
    runner = CliRunner()
    result = runner.invoke(cli, ['once'], obj={}, env={'PROMETHEUS_DOCKER_SD_INSTANCE_PREFIX': ''})
    assert result.exit_code == 2
    assert 'instance_prefix' in result.output


def test_cli_once(tmp_path, runtime):
    output = tmp_path / "docker_sd.yml"
    runner = CliRunner()
    result = runner.invoke(cli, ['--instance-prefix', 'host1', '--output-file', str(output), 'once'], obj={})

    assert result.exit_code == 0, result.output
    runtime.assert_called_once_with('unix:///var/run/docker.sock', timeout=60.0)
    assert '/web' in result.output
    assert yaml.safe_load(output.read_text()) == [{'targets': ['ip1:8080'], 'labels': {'job': 'web'}}]


def test_cli_once_from_environment(tmp_path, runtime):
    output = tmp_path / "docker_sd.json"
    runner = CliRunner()
    env = {
        'PROMETHEUS_DOCKER_SD_INSTANCE_PREFIX': 'host1',
        'PROMETHEUS_DOCKER_SD_OUTPUT_FILE': str(output),
        'PROMETHEUS_DOCKER_SD_REFRESH_INTERVAL': '5s',
    }
    result = runner.invoke(cli, ['once'], obj={}, env=env)

    assert result.exit_code == 0, result.output
    runtime.assert_called_once_with('unix:///var/run/docker.sock', timeout=5.0)
    assert output.exists()


def test_cli_once_docker_unavailable(tmp_path, runtime):
    runtime.return_value.connect.side_effect = DiscoveryError("daemon down")
    runner = CliRunner()
    result = runner.invoke(cli, ['--instance-prefix', 'host1', '--output-file', str(tmp_path / "sd.yml"), 'once'], obj={})
    assert result.exit_code == 4


def test_cli_once_refresh_failure(tmp_path, runtime):
    runtime.return_value.refresh.side_effect = DiscoveryError("boom")
    runner = CliRunner()
    result = runner.invoke(cli, ['--instance-prefix', 'host1', '--output-file', str(tmp_path / "sd.yml"), 'once'], obj={})
    assert result.exit_code == 1
    assert 'Error: discovery failed' in result.output
