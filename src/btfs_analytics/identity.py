"""One-time capture of the node's static identity."""

import logging
import time
from collections.abc import Callable

from btfs_analytics import sysinfo
from btfs_analytics.errors import SensorUnavailable
from btfs_analytics.host import HostNode
from btfs_analytics.models import IdentitySnapshot

logger = logging.getLogger(__name__)


def build_identity(
    node: HostNode,
    version: str,
    *,
    cpu_models: Callable[[], list[str]] = sysinfo.cpu_models,
    os_type: Callable[[], str] = sysinfo.os_type,
    arch_type: Callable[[], str] = sysinfo.arch_type,
    clock: Callable[[], float] = time.monotonic,
    wall_clock: Callable[[], float] = time.time,
) -> IdentitySnapshot:
    """
    Capture the identity snapshot for a node.

    Args:
        node: Host node to read the identifier from.
        version: Host software version string.
        cpu_models: Returns the model names of the host CPUs; the first is used.
        os_type: Returns the OS tag.
        arch_type: Returns the architecture tag.
        clock: Monotonic clock used as the uptime base.
        wall_clock: Wall clock recorded as the start timestamp.

    Raises:
        SensorUnavailable: If the node id or CPU information cannot be read.
    """
    node_id = node.node_id()
    if not node_id:
        raise SensorUnavailable("host node reported an empty identifier")

    models = cpu_models()
    if not models:
        raise SensorUnavailable("CPU introspection returned no entries")

    identity = IdentitySnapshot(
        node_id=node_id,
        cpu_info=models[0],
        btfs_version=version,
        os_type=os_type(),
        arch_type=arch_type(),
        start_time=clock(),
        started_at=wall_clock(),
    )
    logger.debug(
        "Captured identity for %s (%s/%s, %s)",
        identity.node_id,
        identity.os_type,
        identity.arch_type,
        identity.cpu_info,
    )
    return identity
