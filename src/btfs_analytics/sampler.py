"""Per-tick sampling and delta computation."""

import logging
import time
from collections.abc import Callable, Iterator, Mapping
from dataclasses import replace

from btfs_analytics import sysinfo
from btfs_analytics.errors import CapabilityAbsent
from btfs_analytics.host import ExchangeStats, HostNode
from btfs_analytics.models import IdentitySnapshot, TickSnapshot

logger = logging.getLogger(__name__)

KILOBYTE = 1024


def clamp_delta(current: int, previous: int) -> int:
    """Difference between two cumulative readings, never below zero."""
    return max(0, current - previous)


class ExchangeLedger:
    """
    Last observed cumulative exchange count per peer.

    Entries are never evicted: a peer that disconnects keeps its last
    count so a later reconnect is measured against it.
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, peer: object) -> bool:
        return peer in self._counts

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def get(self, peer: str) -> int:
        """Return the last count seen for a peer, 0 if never seen."""
        return self._counts.get(peer, 0)

    def record(self, peer: str, count: int) -> int:
        """Store a peer's current count and return its delta since the last one."""
        delta = clamp_delta(count, self.get(peer))
        self._counts[peer] = count
        return delta

    def observe(self, counts: Mapping[str, int]) -> int:
        """
        Record the current count of each connected peer.

        Peers missing from `counts` are left untouched.

        Returns:
            Sum of the per-peer deltas.
        """
        return sum(self.record(peer, count) for peer, count in counts.items())


class Sampler:
    """
    Turns live readings from the host and the OS into tick snapshots.

    All collaborators are injectable; the defaults read the current
    process and machine through psutil.
    """

    def __init__(
        self,
        node: HostNode,
        *,
        cpu_percent: Callable[[], float] = sysinfo.cpu_percent,
        memory_used: Callable[[], int] = sysinfo.memory_used,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._node = node
        self._cpu_percent = cpu_percent
        self._memory_used = memory_used
        self._clock = clock
        # Initialize CPU percent (first call returns 0.0)
        self._cpu_percent()

    def sample(
        self,
        identity: IdentitySnapshot,
        previous: TickSnapshot,
        ledger: ExchangeLedger,
    ) -> TickSnapshot:
        """
        Sample the node and compute deltas against the previous tick.

        The ledger is updated in place. If exchange statistics or any
        connected peer's count cannot be read, the network fields are
        carried over from `previous`, the ledger is not touched, and the
        tick is marked incomplete.
        """
        tick = replace(
            previous,
            up_time=int(self._clock() - identity.start_time),
            memory_used=self._memory_used() // KILOBYTE,
            cpu_used=self._cpu_percent(),
            storage_used=self._node.storage_usage() // KILOBYTE,
            complete=True,
        )

        try:
            stats, counts = self._exchange_stats()
        except CapabilityAbsent as e:
            logger.debug("Exchange stats unavailable, keeping previous values: %s", e)
            tick.complete = False
            return tick

        sent = stats.data_sent // KILOBYTE
        received = stats.data_received // KILOBYTE
        tick.upload = clamp_delta(sent, previous.total_upload)
        tick.download = clamp_delta(received, previous.total_download)
        tick.total_upload = sent
        tick.total_download = received
        tick.blocks_up = stats.blocks_sent
        tick.blocks_down = stats.blocks_received

        tick.exchanges = ledger.observe(counts)
        tick.peers_connected = len(stats.peers)
        return tick

    def _exchange_stats(self) -> tuple[ExchangeStats, dict[str, int]]:
        """Read the exchange counters and every connected peer's count, all or nothing."""
        source = self._node.exchange()
        if source is None:
            raise CapabilityAbsent("host exchange does not expose statistics")
        try:
            stats = source.stat()
            # Walks every connected peer; cost grows with the peer count
            counts = {peer: source.exchanged_with(peer) for peer in stats.peers}
        except Exception as e:
            raise CapabilityAbsent(f"exchange stat failed: {e}") from e
        return stats, counts
