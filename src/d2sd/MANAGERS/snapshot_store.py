"""
Latest-value hand-off of resolved targets from the poller to the status page.
"""
import threading
from typing import Iterable, Optional, Tuple

from ..MODELS.resolved_target import ResolvedTarget


class SnapshotStore:
    """
    Holds the most recent complete target list.

    A single writer publishes a new immutable tuple by swapping the reference;
    readers always get either the previous or the new tuple, never a mix.
    """
    def __init__(self):
        """
        Initializes an empty store.
        """
        self._targets: Tuple[ResolvedTarget, ...] = ()
        self._published = threading.Event()

    def publish(self, targets: Iterable[ResolvedTarget]) -> None:
        """
        Replaces the current snapshot.

        :param targets: The new ordered target list.
        """
        self._targets = tuple(targets)
        self._published.set()

    def latest(self) -> Tuple[ResolvedTarget, ...]:
        """
        Returns the most recently published snapshot, empty before the first publish.
        """
        return self._targets

    def wait_for_first(self, timeout: Optional[float] = None) -> bool:
        """
        Blocks until something has been published.

        :param timeout: Seconds to wait, None waits forever.
        :return: True if a snapshot is available.
        """
        return self._published.wait(timeout)
