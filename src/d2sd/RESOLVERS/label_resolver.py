# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Resolution of a single container into a Prometheus scrape target.

Decides whether the container qualifies, which network interface and port
are scraped, and how the container labels are rewritten into target labels.
Every anomaly is reported through the flags of the returned record; nothing
here raises on odd input.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, NamedTuple, Optional

from ..MODELS.container_snapshot import ContainerSnapshot, ExposedPort, NetworkInterface
from ..MODELS.resolved_target import PortSelection, ResolvedTarget
from ..UTILS.host_port import join_host_port
from ..UTILS.label_sanitizer import sanitize_label_name

logger = logging.getLogger(__name__)

NetworkLabelMap = Mapping[str, Mapping[str, str]]

# Prometheus reserved labels
META_LABEL_PREFIX = "__meta_"
ADDRESS_LABEL = "__address__"
SCHEME_LABEL = "__scheme__"
METRICS_PATH_LABEL = "__metrics_path__"
SCRAPE_INTERVAL_LABEL = "__scrape_interval__"
SCRAPE_TIMEOUT_LABEL = "__scrape_timeout__"
INSTANCE_LABEL = "instance"

# Docker meta labels
DOCKER_LABEL = META_LABEL_PREFIX + "docker_"
CONTAINER_LABEL_PREFIX = DOCKER_LABEL + "container_"
CONTAINER_ID_LABEL = CONTAINER_LABEL_PREFIX + "id"
CONTAINER_NAME_LABEL = CONTAINER_LABEL_PREFIX + "name"
CONTAINER_STATE_LABEL = CONTAINER_LABEL_PREFIX + "state"
CONTAINER_NETWORK_MODE_LABEL = CONTAINER_LABEL_PREFIX + "network_mode"
CONTAINER_USER_LABEL_PREFIX = CONTAINER_LABEL_PREFIX + "label_"
NETWORK_LABEL_PREFIX = DOCKER_LABEL + "network_"
NETWORK_IP_LABEL = NETWORK_LABEL_PREFIX + "ip"
PORT_LABEL_PREFIX = DOCKER_LABEL + "port_"
PORT_PRIVATE_LABEL = PORT_LABEL_PREFIX + "private"
PORT_PUBLIC_LABEL = PORT_LABEL_PREFIX + "public"
PORT_PUBLIC_IP_LABEL = PORT_LABEL_PREFIX + "public_ip"

# Container label vocabulary
EXTRACT_LABEL_PREFIX = "prometheus_"
JOB_LABEL = EXTRACT_LABEL_PREFIX + "job"
SCRAPE_LABEL_PREFIX = EXTRACT_LABEL_PREFIX + "scrape_"
SCRAPE_PORT = SCRAPE_LABEL_PREFIX + "port"
SCRAPE_INTERVAL = SCRAPE_LABEL_PREFIX + "interval"
SCRAPE_TIMEOUT = SCRAPE_LABEL_PREFIX + "timeout"
SCRAPE_PATH = SCRAPE_LABEL_PREFIX + "path"
SCRAPE_SCHEME = SCRAPE_LABEL_PREFIX + "scheme"
SCRAPE_EXTERNAL = SCRAPE_LABEL_PREFIX + "external"

SCRAPE_CONTROL_LABELS = {
    SCRAPE_INTERVAL: SCRAPE_INTERVAL_LABEL,
    SCRAPE_TIMEOUT: SCRAPE_TIMEOUT_LABEL,
    SCRAPE_PATH: METRICS_PATH_LABEL,
    SCRAPE_SCHEME: SCHEME_LABEL,
}

# Non-routable address used when a restarting container has an explicit
# port but no IP yet, so the target still passes Prometheus validation.
PLACEHOLDER_IP = "1.1.1.1"


@dataclass
class ScrapeControls:
    """
    Values taken from the 'prometheus_scrape_*' labels that steer resolution
    rather than ending up as target labels.
    """
    port: str = ""
    external: bool = False


class PortChoice(NamedTuple):
    """Result of port selection for one container."""
    selection: PortSelection
    port: Optional[ExposedPort]
    explicit: bool
    candidates: int


def rewrite_labels(container_labels: Mapping[str, str], labels: Dict[str, str]) -> ScrapeControls:
    """
    Rewrites container labels into target labels, in place.

    Keys are visited in sorted order, so when two raw keys sanitize to the
    same target key the lexicographically last one wins.

    :param container_labels: Raw container labels.
    :param labels: Target label set to add to.
    :return: The scrape controls found among the labels.
    """
    controls = ScrapeControls()

    for key in sorted(container_labels):
        value = container_labels[key]
        name = sanitize_label_name(key)

        if name.startswith(SCRAPE_LABEL_PREFIX):
            # the whole scrape namespace is reserved, unknown keys are dropped
            if key == SCRAPE_PORT:
                controls.port = value
            elif key == SCRAPE_EXTERNAL:
                controls.external = value.lower() == "true"
            elif key in SCRAPE_CONTROL_LABELS:
                labels[SCRAPE_CONTROL_LABELS[key]] = value
        elif name.startswith(EXTRACT_LABEL_PREFIX):
            target_key = name[len(EXTRACT_LABEL_PREFIX):]
            # prometheus_prometheus_job would reintroduce the raw qualification key
            if target_key and target_key != JOB_LABEL:
                labels[target_key] = value
        else:
            labels[CONTAINER_USER_LABEL_PREFIX + name] = value

    return controls


def select_port(ports: List[ExposedPort], explicit_port: str = "", synthetic: bool = False) -> PortChoice:
    """
    Picks the port to scrape.

    An explicit port matching a TCP private port wins. Otherwise the lowest
    TCP private port is used. The same private port bound on several host
    interfaces counts as a single candidate.

    :param ports: Exposed ports of the container.
    :param explicit_port: Value of the 'prometheus_scrape_port' label, if any.
    :param synthetic: Whether ports was synthesized from the explicit port.
    :return: The selection outcome.
    """
    tcp_ports = [p for p in ports if p.type == "tcp"]
    candidates = len({p.private_port for p in tcp_ports})

    if explicit_port:
        for p in tcp_ports:
            if str(p.private_port) == explicit_port:
                selection = PortSelection.SYNTHETIC_EXPLICIT if synthetic else PortSelection.SELECTED_EXPLICIT_MATCH
                return PortChoice(selection, p, True, candidates)

    if not tcp_ports:
        return PortChoice(PortSelection.NO_PORTS, None, False, 0)

    lowest = min(tcp_ports, key=lambda p: p.private_port)
    if synthetic:
        return PortChoice(PortSelection.SYNTHETIC_EXPLICIT, lowest, True, candidates)

    # a stated port counts as explicit even when it is not exposed
    explicit = candidates == 1 or bool(explicit_port)
    return PortChoice(PortSelection.SELECTED_LOWEST, lowest, explicit, candidates)


def _port_number(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def resolve(
    container: ContainerSnapshot,
    target_network_name: str,
    external_host: str,
    instance_prefix: str,
    network_labels: Optional[NetworkLabelMap] = None,
) -> ResolvedTarget:
    """
    Resolves one container into a scrape target record.

    :param container: The container snapshot.
    :param target_network_name: Network the container must be attached to.
    :param external_host: Host used for containers labelled for external scraping.
    :param instance_prefix: Prefix of the 'instance' label.
    :param network_labels: Derived labels per network ID.
    :return: The resolved record, exported or not.
    """
    name = container.name or ""
    labels = {
        CONTAINER_ID_LABEL: container.id,
        CONTAINER_NAME_LABEL: name,
        CONTAINER_STATE_LABEL: container.state,
        CONTAINER_NETWORK_MODE_LABEL: container.network_mode,
    }

    if JOB_LABEL not in container.labels:
        logger.debug(f"Container {name} ({container.id}) has no '{JOB_LABEL}' label")
        return ResolvedTarget(name=name, labels=labels)

    controls = rewrite_labels(container.labels, labels)

    interface = container.networks.get(target_network_name)
    if interface is None:
        if not controls.external:
            logger.debug(
                f"Container {name} not in target network {target_network_name}, "
                f"networks: {sorted(container.networks)}"
            )
            return ResolvedTarget(name=name, labels=labels, has_job=True)
        interface = NetworkInterface()

    ip_address = interface.ip_address
    ports = container.ports
    synthetic = False

    if not ports and controls.port:
        ports = [ExposedPort(type="tcp", private_port=_port_number(controls.port))]
        synthetic = True
        if not ip_address:
            ip_address = PLACEHOLDER_IP
            logger.info(
                f"Container {name} has no ports or IP address, using explicit port "
                f"{controls.port} and placeholder IP {ip_address}"
            )

    labels[NETWORK_IP_LABEL] = ip_address

    choice = select_port(ports, controls.port, synthetic)
    if choice.port is None:
        logger.debug(f"Container {name} has no TCP ports: {ports}")
        return ResolvedTarget(
            name=name,
            labels=labels,
            has_job=True,
            is_in_target_network=True,
            scrape_external=controls.external,
            port_selection=choice.selection,
        )

    selected = choice.port
    labels[PORT_PRIVATE_LABEL] = str(selected.private_port)
    if selected.public_port:
        labels[PORT_PUBLIC_LABEL] = str(selected.public_port)
        labels[PORT_PUBLIC_IP_LABEL] = selected.ip or ""

    labels.update((network_labels or {}).get(interface.network_id, {}))

    port = controls.port or str(selected.private_port)
    address = join_host_port(external_host if controls.external else ip_address, port)
    labels[ADDRESS_LABEL] = address
    labels[INSTANCE_LABEL] = f"{instance_prefix}{name}:{port}"

    if not choice.explicit:
        logger.debug(f"Container {name} has {choice.candidates} TCP ports and no '{SCRAPE_PORT}' label")

    return ResolvedTarget(
        name=name,
        address=address,
        labels=labels,
        has_job=True,
        is_in_target_network=True,
        has_tcp_ports=True,
        has_explicit_port=choice.explicit,
        scrape_external=controls.external,
        port_selection=choice.selection,
    )
