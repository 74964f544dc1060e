"""
Prometheus metrics describing discovery attempts and the containers found.
"""
from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge

from ..RESOLVERS.batch_extractor import ExtractionCounters

NAMESPACE = "prometheus_docker_sd"
LABEL_KEYS = ["external_url", "target_network"]


class MetricsSink:
    """
    Owns the discovery metrics and forwards extraction counters into them.
    """

    def __init__(self, external_url: str, target_network: str, registry: Optional[CollectorRegistry] = None):
        """
        Registers the metrics.

        :param external_url: URL of this service, added as label so alerts can link to /containers.
        :param target_network: The configured target network.
        :param registry: Registry to use, the default global one if None.
        """
        registry = registry if registry is not None else REGISTRY

        self.attempts = Counter(
            "discovery_attempts_total",
            "Number of attempts to discover containers and write result",
            LABEL_KEYS, namespace=NAMESPACE, registry=registry,
        )
        self.errors = Counter(
            "discovery_attempts_errors_total",
            "Number of attempts to discover containers and write result, that resulted in some error",
            LABEL_KEYS, namespace=NAMESPACE, registry=registry,
        )
        self.count = Gauge(
            "containers_count",
            "Number of containers discovered",
            LABEL_KEYS, namespace=NAMESPACE, registry=registry,
        )
        self.ignored = Gauge(
            "containers_ignored_count",
            "Number of containers discovered that were ignored",
            LABEL_KEYS, namespace=NAMESPACE, registry=registry,
        )
        self.not_in_network = Gauge(
            "containers_not_in_target_network_count",
            "Number of containers discovered with the 'prometheus_job' label set, but not in the target network",
            LABEL_KEYS, namespace=NAMESPACE, registry=registry,
        )
        self.no_ports = Gauge(
            "containers_no_exposed_ports_count",
            "Number of containers discovered with the 'prometheus_job' label set, but with no exposed TCP ports",
            LABEL_KEYS, namespace=NAMESPACE, registry=registry,
        )
        self.multiple_ports = Gauge(
            "containers_multiple_ports_not_explicit_count",
            "Number of containers discovered with the 'prometheus_job' label set, with multiple exposed TCP ports, "
            "but the prometheus_scrape_port is not defined",
            LABEL_KEYS, namespace=NAMESPACE, registry=registry,
        )

        self._labels = {"external_url": external_url, "target_network": target_network}
        # initialise the counters so they are exported as 0
        self.attempts.labels(**self._labels)
        self.errors.labels(**self._labels)

    def record_attempt(self) -> None:
        """Counts one discovery attempt."""
        self.attempts.labels(**self._labels).inc()

    def record_error(self) -> None:
        """Counts one failed discovery attempt."""
        self.errors.labels(**self._labels).inc()

    def update(self, counters: ExtractionCounters) -> None:
        """
        Sets the container gauges from the counters of the latest extraction.

        :param counters: Counters of the latest extraction pass.
        """
        self.count.labels(**self._labels).set(counters.total)
        self.ignored.labels(**self._labels).set(counters.no_job)
        self.not_in_network.labels(**self._labels).set(counters.not_in_target_network)
        self.no_ports.labels(**self._labels).set(counters.no_tcp_ports)
        self.multiple_ports.labels(**self._labels).set(counters.ambiguous_ports)
