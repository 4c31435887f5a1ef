"""Host metadata data models."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class LoadAverage:
    """System load average over 1, 5 and 15 minutes."""

    one: float = 0.0
    five: float = 0.0
    fifteen: float = 0.0

    def to_dict(self) -> dict[str, float]:
        """Convert to the tool response shape."""
        return {"1min": self.one, "5min": self.five, "15min": self.fifteen}


@dataclass(frozen=True)
class MemoryInfo:
    """Total and free memory in bytes."""

    total: int = 0
    free: int = 0


@dataclass(frozen=True)
class HostMetadata:
    """Normalized host metadata.

    Every field degrades to its zero value when its query fails.
    """

    hostname: str = ""
    os_type: str = ""
    os_release: str = ""
    architecture: str = ""
    uptime_seconds: float = 0.0
    load_average: LoadAverage = field(default_factory=LoadAverage)
    memory_total: int = 0
    memory_free: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to the tool response shape."""
        return {
            "hostname": self.hostname,
            "osType": self.os_type,
            "osRelease": self.os_release,
            "architecture": self.architecture,
            "uptimeSeconds": self.uptime_seconds,
            "loadAverage": self.load_average.to_dict(),
            "memoryTotal": self.memory_total,
            "memoryFree": self.memory_free,
        }
