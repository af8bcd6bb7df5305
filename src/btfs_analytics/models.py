"""Data models for btfs_analytics."""

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class IdentitySnapshot:
    """Static node information captured once when the agent starts."""

    node_id: str
    cpu_info: str
    btfs_version: str
    os_type: str  # 'linux', 'darwin', 'windows', etc.
    arch_type: str  # 'amd64', 'arm64', etc.
    start_time: float  # Monotonic clock reading, base for up_time
    started_at: float  # Wall clock, epoch seconds


@dataclass(slots=True)
class TickSnapshot:
    """Dynamic node state sampled on one tick. All sizes are in KB."""

    up_time: int = 0  # Seconds
    storage_used: int = 0
    memory_used: int = 0
    cpu_used: float = 0.0  # Percent
    upload: int = 0  # Since previous tick
    download: int = 0  # Since previous tick
    total_upload: int = 0
    total_download: int = 0
    blocks_up: int = 0
    blocks_down: int = 0
    exchanges: int = 0
    peers_connected: int = 0
    complete: bool = True  # False when exchange stats were unavailable


@dataclass(slots=True)
class AgentHealth:
    """Internal health counters of the agent. Never reported to the host."""

    ticks: int = 0
    reports_sent: int = 0
    reports_failed: int = 0
    incomplete_ticks: int = 0
    last_error: str | None = None
    last_report_at: float | None = None  # Wall clock, epoch seconds
