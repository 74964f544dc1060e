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
Docker Engine API access for discovery: container listing and network labels.
"""
import logging
from typing import Dict, List, Optional

import docker
from docker.errors import DockerException
from tenacity import Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..errors import DiscoveryError
from ..MODELS.container_snapshot import ContainerSnapshot
from ..MODELS.discovery_config import DiscoveryConfig
from ..PARSERS.container_parser import ContainerParser
from ..PARSERS.network_parser import NetworkParser
from ..RESOLVERS.batch_extractor import ExtractionResult, extract_all

logger = logging.getLogger(__name__)

USER_AGENT = "d2sd"


class DockerRuntimeClient:
    """
    Thin wrapper around the Docker SDK that returns discovery models.
    """

    def __init__(
        self,
        docker_host: str = "unix:///var/run/docker.sock",
        timeout: float = 60.0,
        connect_attempts: int = 3,
        client: Optional[docker.DockerClient] = None,
    ):
        """
        Initializes the runtime client. No connection is made until connect().

        Args:
            docker_host: Docker daemon URL, e.g. unix:///var/run/docker.sock.
            timeout: API request timeout in seconds.
            connect_attempts: Attempts made by connect() before giving up.
            client: Pre-built Docker client, mostly for tests.
        """
        self.docker_host = docker_host
        self.timeout = timeout
        self.connect_attempts = connect_attempts
        self.client = client
        self.container_parser = ContainerParser()

    def connect(self) -> None:
        """
        Creates the Docker client and pings the daemon, retrying with backoff.

        Raises:
            DiscoveryError: If the daemon is still unreachable after all attempts.
        """
        retrying = Retrying(
            retry=retry_if_exception_type((DockerException, OSError)),
            stop=stop_after_attempt(self.connect_attempts),
            wait=wait_exponential(multiplier=0.5, max=10),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    if self.client is None:
                        self.client = docker.DockerClient(
                            base_url=self.docker_host,
                            timeout=max(1, int(self.timeout)),
                            user_agent=USER_AGENT,
                        )
                    self.client.ping()
        except (DockerException, OSError) as e:
            self.client = None
            raise DiscoveryError(f"Failed to connect to Docker daemon at {self.docker_host}: {e}") from e

        logger.info(f"Connected to Docker daemon at {self.docker_host}")

    def _require_client(self) -> docker.DockerClient:
        if self.client is None:
            self.connect()
        return self.client

    def list_containers(self) -> List[ContainerSnapshot]:
        """
        Lists all containers, including stopped ones.

        Returns:
            List of container snapshots.

        Raises:
            DiscoveryError: If the listing fails.
        """
        client = self._require_client()
        try:
            entries = client.api.containers(all=True)
        except (DockerException, OSError) as e:
            raise DiscoveryError(f"Error while listing containers: {e}") from e

        logger.debug(f"Found {len(entries)} containers")
        return self.container_parser.parse_all(entries)

    def network_labels(self) -> Dict[str, Dict[str, str]]:
        """
        Derives labels for every network on the host.

        Returns:
            Labels keyed by network ID.

        Raises:
            DiscoveryError: If the listing fails.
        """
        client = self._require_client()
        try:
            entries = client.api.networks()
        except (DockerException, OSError) as e:
            raise DiscoveryError(f"Error while computing network labels: {e}") from e

        return NetworkParser.parse_all(entries)

    def refresh(self, config: DiscoveryConfig) -> ExtractionResult:
        """
        Takes a fresh snapshot of the host and resolves it into targets.

        Args:
            config: Discovery settings.

        Returns:
            The ordered targets and diagnostic counters.
        """
        containers = self.list_containers()
        network_labels = self.network_labels()
        return extract_all(
            containers,
            config.target_network,
            config.external_host,
            config.instance_prefix,
            network_labels,
        )

    def close(self) -> None:
        """Closes the underlying client, if any."""
        if self.client is not None:
            self.client.close()
            self.client = None
