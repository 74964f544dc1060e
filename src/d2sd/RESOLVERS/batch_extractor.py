"""
Resolution of a whole container snapshot, with diagnostic counts and ordering.
"""
import logging
from typing import Iterable, List, Optional
from pydantic import BaseModel, ConfigDict

from ..MODELS.container_snapshot import ContainerSnapshot
from ..MODELS.resolved_target import ResolvedTarget
from .label_resolver import NetworkLabelMap, resolve

logger = logging.getLogger(__name__)


class ExtractionCounters(BaseModel):
    """
    Diagnostic counts of one extraction pass.
    Each container is counted under the first check it fails.
    """
    model_config = ConfigDict(frozen=True)

    total: int = 0
    no_job: int = 0
    not_in_target_network: int = 0
    no_tcp_ports: int = 0
    ambiguous_ports: int = 0  # exported, several ports and no explicit port


class ExtractionResult(BaseModel):
    """
    Ordered records and counters of one extraction pass.
    """
    model_config = ConfigDict(frozen=True)

    targets: List[ResolvedTarget] = []
    counters: ExtractionCounters = ExtractionCounters()

    @property
    def exported(self) -> List[ResolvedTarget]:
        """The records that end up in the service discovery output."""
        return [t for t in self.targets if t.is_exported]


def count_diagnostics(targets: Iterable[ResolvedTarget]) -> ExtractionCounters:
    """
    Tallies the diagnostic flags of resolved targets.

    :param targets: Resolved records.
    :return: The aggregated counters.
    """
    total = no_job = not_in_network = no_ports = ambiguous = 0

    for t in targets:
        total += 1
        if not t.has_job:
            no_job += 1
        elif not t.is_in_target_network:
            not_in_network += 1
        elif not t.has_tcp_ports:
            no_ports += 1
        elif not t.has_explicit_port:
            ambiguous += 1

    return ExtractionCounters(
        total=total,
        no_job=no_job,
        not_in_target_network=not_in_network,
        no_tcp_ports=no_ports,
        ambiguous_ports=ambiguous,
    )


def order_targets(targets: Iterable[ResolvedTarget]) -> List[ResolvedTarget]:
    """
    Orders records with the not-exported ones first, each group by name,
    so problem containers come first on the status page.
    """
    return sorted(targets, key=lambda t: (t.is_exported, t.name))


def extract_all(
    containers: Iterable[ContainerSnapshot],
    target_network_name: str,
    external_host: str,
    instance_prefix: str,
    network_labels: Optional[NetworkLabelMap] = None,
) -> ExtractionResult:
    """
    Resolves every named container of a snapshot.

    :param containers: The container snapshot.
    :param target_network_name: Network the containers must be attached to.
    :param external_host: Host used for externally scraped containers.
    :param instance_prefix: Prefix of the 'instance' label.
    :param network_labels: Derived labels per network ID.
    :return: Ordered records and their diagnostic counters.
    """
    targets = []
    for container in containers:
        if not container.names:
            logger.debug(f"Skipping container {container.id} without a name")
            continue
        targets.append(resolve(container, target_network_name, external_host, instance_prefix, network_labels))

    counters = count_diagnostics(targets)
    logger.debug(
        f"Resolved {counters.total} containers: {counters.no_job} without job, "
        f"{counters.not_in_target_network} outside {target_network_name}, "
        f"{counters.no_tcp_ports} without TCP ports, {counters.ambiguous_ports} with ambiguous ports"
    )
    return ExtractionResult(targets=order_targets(targets), counters=counters)
