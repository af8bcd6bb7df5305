"""Background analytics agent for a BTFS node."""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import replace

from btfs_analytics.config import AgentConfig
from btfs_analytics.host import HostNode
from btfs_analytics.identity import build_identity
from btfs_analytics.models import AgentHealth, IdentitySnapshot, TickSnapshot
from btfs_analytics.sampler import ExchangeLedger, Sampler
from btfs_analytics.transmit import Transmitter

logger = logging.getLogger(__name__)


def next_deadline(deadline: float, now: float, interval: float) -> float:
    """
    Return the deadline of the tick that follows `deadline`.

    Deadlines stay on the `deadline + k * interval` grid. When a cycle
    overruns, the most recent elapsed deadline is returned so exactly one
    pending tick fires right away; earlier elapsed ones are dropped.
    """
    following = deadline + interval
    if now > following:
        following += ((now - following) // interval) * interval
    return following


class AnalyticsAgent:
    """
    Periodically samples a host node and reports the result.

    Runs in a separate daemon thread. The first report is sent as soon as
    the agent starts, then one per configured interval. The ledger and the
    previous tick are owned by that thread; errors never leave it.
    """

    def __init__(
        self,
        identity: IdentitySnapshot,
        sampler: Sampler,
        transmitter: Transmitter,
        config: AgentConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the AnalyticsAgent.

        Args:
            identity: Static node information sent with every report.
            sampler: Produces a tick snapshot from live readings.
            transmitter: Delivers reports to the collection endpoint.
            config: Agent configuration. Defaults to AgentConfig().
            clock: Monotonic clock driving the schedule.
        """
        self._identity = identity
        self._sampler = sampler
        self._transmitter = transmitter
        self._config = config if config is not None else AgentConfig()
        self._clock = clock
        self._ledger = ExchangeLedger()
        self._previous = TickSnapshot()
        self._health = AgentHealth()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def identity(self) -> IdentitySnapshot:
        return self._identity

    @property
    def is_running(self) -> bool:
        """Check if the agent thread is running."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def health(self) -> AgentHealth:
        """Copy of the agent's internal health counters."""
        return replace(self._health)

    def start(self) -> None:
        """Start the reporting thread. Does nothing if disabled or running."""
        if not self._config.enabled:
            logger.info("Analytics disabled, agent not started")
            return
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="AnalyticsAgent",
        )
        self._thread.start()
        logger.info(
            "Analytics agent started (every %.0fs to %s)",
            self._config.interval,
            self._config.endpoint,
        )

    def stop(self, timeout: float | None = 5.0, flush: bool = False) -> None:
        """
        Stop the reporting thread and release the transmitter's connections.

        Args:
            timeout: How long to wait for the thread to stop (seconds).
            flush: Send one last report after the thread has stopped.
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Analytics agent did not stop within %ss", timeout)
                return
            self._thread = None
            logger.info("Analytics agent stopped")

        if flush:
            self._run_tick()
        self._transmitter.close()

    def run_once(self) -> bool:
        """
        Run one sample-and-report cycle in the calling thread.

        Returns:
            True if the report was delivered.
        """
        health = self._health
        health.ticks += 1
        tick = self._sampler.sample(self._identity, self._previous, self._ledger)
        self._previous = tick
        if not tick.complete:
            health.incomplete_ticks += 1

        if self._transmitter.send(self._identity, tick):
            health.reports_sent += 1
            health.last_report_at = time.time()
            return True

        health.reports_failed += 1
        health.last_error = str(self._transmitter.last_error)
        return False

    def _run_tick(self) -> None:
        try:
            self.run_once()
        except Exception as e:
            # A failed tick only skips its report
            logger.debug("Analytics tick failed: %s", e, exc_info=True)
            self._health.last_error = str(e)

    def _run_loop(self) -> None:
        """Main reporting loop running in the background thread."""
        interval = self._config.interval
        deadline = self._clock()
        while not self._stop_event.is_set():
            self._run_tick()
            deadline = next_deadline(deadline, self._clock(), interval)
            self._stop_event.wait(timeout=max(0.0, deadline - self._clock()))


def initialize(
    node: HostNode,
    version: str,
    config: AgentConfig | None = None,
) -> AnalyticsAgent | None:
    """
    Build an agent for a node and start it.

    Args:
        node: Host node to report on.
        version: Host software version string.
        config: Agent configuration. Defaults to AgentConfig.from_env().

    Returns:
        The running agent, or None if analytics are disabled. A disabled
        agent does not touch the node or the OS.

    Raises:
        SensorUnavailable: If the node identity cannot be captured.
    """
    config = config if config is not None else AgentConfig.from_env()
    if not config.enabled:
        logger.info("Analytics disabled, agent not started")
        return None

    identity = build_identity(node, version)
    agent = AnalyticsAgent(
        identity,
        Sampler(node),
        Transmitter(config.endpoint, config.request_timeout),
        config,
    )
    agent.start()
    return agent
