"""Shared fakes for the host node and the HTTP session."""

import pytest
import requests

from btfs_analytics.host import ExchangeStats
from btfs_analytics.models import IdentitySnapshot


class FakeExchange:
    """In-memory exchange statistics source."""

    def __init__(self) -> None:
        self.stats = ExchangeStats(0, 0, 0, 0, ())
        self.counts: dict[str, int] = {}
        self.queried: list[str] = []
        self.fail = False
        self.failing_peers: set[str] = set()

    def set(self, sent: int = 0, received: int = 0, blocks_sent: int = 0,
            blocks_received: int = 0, **counts: int) -> None:
        """Set the cumulative counters; keyword counts are the connected peers."""
        self.counts.update(counts)
        self.stats = ExchangeStats(sent, received, blocks_sent, blocks_received, tuple(counts))

    def stat(self) -> ExchangeStats:
        if self.fail:
            raise RuntimeError("exchange offline")
        return self.stats

    def exchanged_with(self, peer: str) -> int:
        self.queried.append(peer)
        if peer in self.failing_peers:
            raise KeyError(peer)
        return self.counts[peer]


class FakeNode:
    """In-memory host node."""

    def __init__(self, node_id: str = "QmTestNode") -> None:
        self.id = node_id
        self.storage = 0
        self.source: FakeExchange | None = FakeExchange()

    def node_id(self) -> str:
        return self.id

    def storage_usage(self) -> int:
        return self.storage

    def exchange(self) -> FakeExchange | None:
        return self.source


class FakeResponse:
    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.closed = False

    @property
    def content(self) -> bytes:
        return b""

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Records POST calls instead of sending them."""

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.error: Exception | None = None
        self.status_code = 200
        self.responses: list[FakeResponse] = []
        self.closed = False

    def post(self, url, data=None, headers=None, timeout=None):
        self.calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        if self.closed:
            raise RuntimeError("session used after close")
        if self.error is not None:
            raise self.error
        response = FakeResponse(self.status_code)
        self.responses.append(response)
        return response

    def close(self) -> None:
        self.closed = True


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def identity(clock) -> IdentitySnapshot:
    return IdentitySnapshot(
        node_id="QmTestNode",
        cpu_info="Intel(R) Xeon(R) CPU E5-2686 v4 @ 2.30GHz",
        btfs_version="0.1.0",
        os_type="linux",
        arch_type="amd64",
        start_time=clock.now,
        started_at=1_700_000_000.0,
    )


@pytest.fixture
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")
