import logging
import random
import threading
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from cratedb.sql.backend.types import EndpointType

logger = logging.getLogger(__name__)


class EndpointSelector(ABC):
    """
    Chooses the cluster node that serves a request.

    Implementations get the full node list on every call and return the URL of
    the endpoint to use, i.e. the node's base URL followed by the endpoint path
    suffix ("_sql" or "_blobs").
    """

    @abstractmethod
    def choose(self, count: int) -> int:
        """Return the position of the node to use out of `count` nodes (count > 0)."""
        pass

    def select(self, nodes: Sequence[str], kind: EndpointType) -> Optional[str]:
        """
        Returns the endpoint URL for `kind` on one of `nodes`.

        Returns None for an empty node list; a cluster never has one, and the
        backend rejects a missing URL with "No URL specified".
        """
        if not nodes:
            return None
        node = nodes[self.choose(len(nodes))]
        return f"{node}{kind.path_suffix}"


class RandomEndpointSelector(EndpointSelector):
    """Picks a node uniformly at random. Keeps no state between calls."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def choose(self, count: int) -> int:
        return self._rng.randrange(count)


class RoundRobinEndpointSelector(EndpointSelector):
    """
    Cycles through the nodes in order.

    The position counter is shared mutable state and is guarded by a lock so
    one selector can serve concurrent callers.
    """

    def __init__(self):
        self._counter = 0
        self._lock = threading.Lock()

    def choose(self, count: int) -> int:
        with self._lock:
            position = self._counter % count
            self._counter += 1
        return position


_SELECTORS = {
    "random": RandomEndpointSelector,
    "round_robin": RoundRobinEndpointSelector,
}


def get_endpoint_selector(strategy: str = "random") -> EndpointSelector:
    try:
        return _SELECTORS[strategy]()
    except KeyError:
        raise ValueError(
            f"Unsupported load_balancing strategy: {strategy}. "
            f"Supported strategies are: {sorted(_SELECTORS)}"
        ) from None
