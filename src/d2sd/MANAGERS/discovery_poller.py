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
Periodic discovery: refresh the Docker snapshot, write the target file,
update metrics and publish the targets to the status page.
"""
import logging
import threading
from typing import Optional

from ..errors import DiscoveryError
from ..CONVERTERS.to_file_sd import FileSDConverter
from ..MODELS.discovery_config import DiscoveryConfig
from .docker_client import DockerRuntimeClient
from .metrics_sink import MetricsSink
from .snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


class DiscoveryPoller:
    """
    Runs discovery cycles on a fixed interval, one at a time.
    A failed cycle is logged and counted; the next tick simply tries again.
    """

    def __init__(
        self,
        config: DiscoveryConfig,
        runtime: DockerRuntimeClient,
        metrics: MetricsSink,
        store: SnapshotStore,
        writer: Optional[FileSDConverter] = None,
    ):
        """
        Initializes the poller.

        :param config: Discovery settings.
        :param runtime: Docker API access.
        :param metrics: Metrics to update after each cycle.
        :param store: Where the latest targets are published.
        :param writer: File writer, a FileSDConverter by default.
        """
        self.config = config
        self.runtime = runtime
        self.metrics = metrics
        self.store = store
        self.writer = writer or FileSDConverter()
        self.thread = None
        self._stop = threading.Event()

    def start(self):
        """
        Starts the polling thread. The first cycle runs immediately.
        """
        self._stop.clear()
        self.thread = threading.Thread(target=self._poll_loop, name="d2sd-poller", daemon=True)
        self.thread.start()

    def stop(self, timeout: float = 5.0):
        """
        Stops the polling thread, waiting for a running cycle to finish.
        """
        self._stop.set()
        if self.thread:
            self.thread.join(timeout=timeout)
            self.thread = None

    @property
    def running(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    def _poll_loop(self):
        """
        Internal loop, one cycle per refresh interval until stopped.
        """
        while not self._stop.is_set():
            try:
                self.run_once()
            except Exception:
                self.metrics.record_error()
                logger.exception("Unexpected error during refresh")
            self._stop.wait(self.config.refresh_interval)

    def run_once(self) -> bool:
        """
        Runs a single discovery cycle.

        :return: True if the targets were refreshed and written.
        """
        self.metrics.record_attempt()
        logger.info("Begin refresh")

        try:
            result = self.runtime.refresh(self.config)
        except DiscoveryError as e:
            self.metrics.record_error()
            logger.error(f"Failed to refresh containers: {e}")
            return False

        try:
            written = self.writer.write(result.targets, self.config.output_file)
        except (OSError, ValueError) as e:
            self.metrics.record_error()
            logger.error(f"Failed to write results to {self.config.output_file}: {e}")
            return False

        self.metrics.update(result.counters)
        self.store.publish(result.targets)
        logger.debug(f"Done refresh, {written} of {result.counters.total} containers exported")
        return True
