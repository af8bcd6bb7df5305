"""Interfaces the analytics agent consumes from the host storage node."""

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(slots=True, frozen=True)
class ExchangeStats:
    """Cumulative counters reported by the host's block exchange."""

    data_sent: int  # Bytes
    data_received: int  # Bytes
    blocks_sent: int
    blocks_received: int
    peers: tuple[str, ...] = field(default_factory=tuple)


class ExchangeSource(Protocol):
    """Exchange statistics capability of a host node."""

    def stat(self) -> ExchangeStats:
        """Return the current cumulative exchange counters."""
        ...

    def exchanged_with(self, peer: str) -> int:
        """Return the cumulative exchanged block count for a peer."""
        ...


class HostNode(Protocol):
    """The storage node the agent reports on."""

    def node_id(self) -> str:
        """Return the node's peer identifier."""
        ...

    def storage_usage(self) -> int:
        """Return repository storage used, in bytes."""
        ...

    def exchange(self) -> ExchangeSource | None:
        """Return the exchange statistics capability, or None if unsupported."""
        ...
