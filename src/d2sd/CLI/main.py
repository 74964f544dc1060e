"""
Command Line Interface for D2SD.
"""
import logging
import signal
import threading

import click
from dotenv import find_dotenv, load_dotenv
from prometheus_client import CollectorRegistry

from ..errors import ConfigurationError, DiscoveryError
from ..MODELS.discovery_config import ENV_PREFIX, DiscoveryConfig
from ..MANAGERS.discovery_poller import DiscoveryPoller
from ..MANAGERS.docker_client import DockerRuntimeClient
from ..MANAGERS.metrics_sink import MetricsSink
from ..MANAGERS.snapshot_store import SnapshotStore
from ..UTILS.logging_setup import configure_logging, log_build_info
from ..WEB.status_server import StatusServer, create_app

logger = logging.getLogger(__name__)

EXIT_DOCKER_SETUP = 4


@click.group(context_settings={'auto_envvar_prefix': ENV_PREFIX})
@click.option('--output-file', default='docker_sd.yml', show_default=True,
              help='Output .json, .yml or .yaml file in the Prometheus file_sd_config format')
@click.option('--docker-host', default='unix:///var/run/docker.sock', show_default=True,
              help='Docker host URL')
@click.option('--target-network-name', default='metrics-net', show_default=True,
              help='Network that the containers must be a member of to be considered')
@click.option('--instance-prefix', default='',
              help="Prefix added to the container name to form the 'instance' label. Required")
@click.option('--external-host', default='',
              help='External host of this service, used for external scrape targets. Defaults to the instance prefix')
@click.option('--refresh-interval', default='60s', show_default=True,
              help='Interval between queries to the Docker host, e.g. 30s or 5m')
@click.option('--http-address', default=':9200', show_default=True,
              help='HTTP address to serve the status page and metrics on')
@click.option('--external-url', default='',
              help='External URL of this service, added as metric label. Defaults to http://<instance-prefix>:9200')
@click.option('--log-level', default='INFO', show_default=True,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False))
@click.option('--log-json', is_flag=True, help='Log in JSON format')
@click.pass_context
def cli(ctx, output_file, docker_host, target_network_name, instance_prefix, external_host,
        refresh_interval, http_address, external_url, log_level, log_json):
    """
    D2SD - Docker to Prometheus service discovery.

    Writes one scrape target per labelled container to a file_sd_config file.
    Options may also be set from the environment: prefix with
    PROMETHEUS_DOCKER_SD_, use all caps and replace any - with _.
    """
    ctx.ensure_object(dict)
    ctx.obj['options'] = dict(
        output_file=output_file,
        docker_host=docker_host,
        target_network=target_network_name,
        instance_prefix=instance_prefix,
        external_host=external_host,
        refresh_interval=refresh_interval,
        http_address=http_address,
        external_url=external_url,
        log_level=log_level.upper(),
        log_json=log_json,
    )


def _load_config(ctx) -> DiscoveryConfig:
    """
    Validates the group options and sets up logging.
    """
    try:
        config = DiscoveryConfig.build(**ctx.obj['options'])
    except ConfigurationError as e:
        raise click.UsageError(str(e), ctx=ctx)

    configure_logging(config.log_level, config.log_json)
    log_build_info(logger)
    return config


def _connect(ctx, config: DiscoveryConfig) -> DockerRuntimeClient:
    runtime = DockerRuntimeClient(config.docker_host, timeout=config.refresh_interval)
    try:
        runtime.connect()
    except DiscoveryError as e:
        logger.error(f"Failed to configure discovery: {e}")
        ctx.exit(EXIT_DOCKER_SETUP)
    return runtime


@cli.command()
@click.pass_context
def run(ctx):
    """Discover continuously and serve the status page."""
    config = _load_config(ctx)
    logger.info(f"Target network {config.target_network}, instance prefix {config.instance_prefix}")

    runtime = _connect(ctx, config)

    store = SnapshotStore()
    server = StatusServer(create_app(store), config.http_address)
    server.start()

    poller = DiscoveryPoller(config, runtime, MetricsSink(config.external_url, config.target_network), store)

    stop = threading.Event()

    def _handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        stop.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    poller.start()
    try:
        while not stop.is_set():
            stop.wait(1)
    finally:
        poller.stop()
        server.stop()
        runtime.close()


@cli.command()
@click.pass_context
def once(ctx):
    """Run a single discovery cycle and print the containers found."""
    config = _load_config(ctx)
    runtime = _connect(ctx, config)

    store = SnapshotStore()
    metrics = MetricsSink(config.external_url, config.target_network, registry=CollectorRegistry())
    poller = DiscoveryPoller(config, runtime, metrics, store)
    try:
        ok = poller.run_once()
    finally:
        runtime.close()

    if not ok:
        click.echo("Error: discovery failed, see log for details.")
        ctx.exit(1)

    click.echo(f"{'NAME':30} {'EXPORTED':9} {'ADDRESS':25}")
    click.echo("-" * 66)
    for t in store.latest():
        click.echo(f"{t.name:30} {'yes' if t.is_exported else 'no':9} {t.address:25}")


def main():
    """
    Main entry point for the CLI.
    """
    load_dotenv(find_dotenv(usecwd=True))
    cli(obj={})


if __name__ == '__main__':
    main()
