"""OS and CPU introspection backed by psutil."""

import platform
from pathlib import Path

import psutil

CPUINFO_PATH = Path("/proc/cpuinfo")

# Tags match the naming the collection server already stores
_OS_TAGS = {
    "linux": "linux",
    "darwin": "darwin",
    "windows": "windows",
    "freebsd": "freebsd",
    "openbsd": "openbsd",
}
_ARCH_TAGS = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv7l": "arm",
    "armv6l": "arm",
}


def cpu_models(cpuinfo_path: Path = CPUINFO_PATH) -> list[str]:
    """
    Return the model name of every CPU the OS reports.

    Reads /proc/cpuinfo where it exists, otherwise falls back to
    platform.processor(). The list may be empty.
    """
    try:
        text = cpuinfo_path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        text = ""

    models = []
    for line in text.splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip() == "model name":
            models.append(value.strip())
    if models:
        return models

    processor = platform.processor()
    return [processor] if processor else []


def os_type() -> str:
    system = platform.system().lower()
    return _OS_TAGS.get(system, system)


def arch_type() -> str:
    machine = platform.machine().lower()
    return _ARCH_TAGS.get(machine, machine)


def cpu_percent() -> float:
    """Overall CPU usage since the previous call (non-blocking)."""
    return psutil.cpu_percent(interval=None)


def memory_used() -> int:
    """Resident memory of the current process, in bytes."""
    return psutil.Process().memory_info().rss
