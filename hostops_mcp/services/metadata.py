"""Host metadata collection.

Metadata is gathered by a fixed pipeline of queries. Each query is a shell
command, a parser for its output, and a default used when the command or
the parser fails. One failing query never fails the whole collection.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import asyncssh

from hostops_mcp.models import HostMetadata, LoadAverage, MemoryInfo
from hostops_mcp.utils.shell import decode_output

if TYPE_CHECKING:
    from hostops_mcp.services.session import Session

logger = logging.getLogger(__name__)

PROC_UPTIME = re.compile(r"^\s*(\d+\.\d+)(?:\s|$)")
UPTIME_TEXT = re.compile(
    r"up\s+(?:(\d+)\s+days?,\s*)?(?:(\d+):(\d+)|(\d+)\s+min)?"
)
LOAD_TEXT = re.compile(
    r"load averages?:\s*([\d.]+),?\s+([\d.]+),?\s+([\d.]+)"
)
MEM_TOTAL = re.compile(r"MemTotal:\s+(\d+)\s+kB")
MEM_FREE = re.compile(r"MemFree:\s+(\d+)\s+kB")
MEM_AVAILABLE = re.compile(r"MemAvailable:\s+(\d+)\s+kB")


def parse_text(output: str) -> str:
    """Trimmed command output."""
    return output.strip()


def parse_os_type(output: str) -> str:
    """Kernel name in lower case (e.g. 'linux', 'darwin')."""
    return output.strip().lower()


def parse_uptime(output: str) -> float:
    """Parse uptime in seconds.

    Accepts /proc/uptime ("12345.67 54321.00") or the output of the uptime
    command ("10:15 up 3 days,  4:05, 2 users, ...").

    Raises:
        ValueError: If neither format is recognized
    """
    match = PROC_UPTIME.match(output)
    if match:
        return float(match.group(1))

    match = UPTIME_TEXT.search(output)
    if not match:
        raise ValueError(f"Unrecognized uptime output: {output!r}")

    days, hours, minutes, only_minutes = match.groups()
    return float(
        int(days or 0) * 86400
        + int(hours or 0) * 3600
        + int(minutes or only_minutes or 0) * 60
    )


def parse_load_average(output: str) -> LoadAverage:
    """Parse 1, 5 and 15 minute load averages.

    Accepts /proc/loadavg ("0.15 0.10 0.05 1/234 5678") or the
    "load average(s): ..." part of the uptime command output.

    Raises:
        ValueError: If neither format is recognized
    """
    fields = output.split()
    try:
        one, five, fifteen = (float(v) for v in fields[:3])
        return LoadAverage(one=one, five=five, fifteen=fifteen)
    except ValueError:
        pass

    match = LOAD_TEXT.search(output)
    if not match:
        raise ValueError(f"Unrecognized load average output: {output!r}")

    one, five, fifteen = (float(v) for v in match.groups())
    return LoadAverage(one=one, five=five, fifteen=fifteen)


def parse_meminfo(output: str) -> MemoryInfo:
    """Parse /proc/meminfo into bytes.

    MemAvailable is preferred over MemFree when the kernel reports both.

    Raises:
        ValueError: If no memory figure is present
    """
    total = MEM_TOTAL.search(output)
    free = MEM_AVAILABLE.search(output) or MEM_FREE.search(output)

    if not total and not free:
        raise ValueError("No MemTotal/MemFree/MemAvailable in output")

    return MemoryInfo(
        total=int(total.group(1)) * 1024 if total else 0,
        free=int(free.group(1)) * 1024 if free else 0,
    )


@dataclass(frozen=True)
class MetadataQuery:
    """One independently-failable introspection command."""

    name: str
    command: str
    parser: Callable[[str], Any]
    default: Any


METADATA_QUERIES: tuple[MetadataQuery, ...] = (
    MetadataQuery("hostname", "hostname", parse_text, ""),
    MetadataQuery("os_type", "uname -s", parse_os_type, ""),
    MetadataQuery("os_release", "uname -r", parse_text, ""),
    MetadataQuery("architecture", "uname -m", parse_text, ""),
    MetadataQuery(
        "uptime_seconds",
        "cat /proc/uptime 2>/dev/null || uptime",
        parse_uptime,
        0.0,
    ),
    MetadataQuery(
        "load_average",
        "cat /proc/loadavg 2>/dev/null || uptime",
        parse_load_average,
        LoadAverage(),
    ),
    MetadataQuery("memory", "cat /proc/meminfo 2>/dev/null", parse_meminfo, MemoryInfo()),
)


async def run_query(
    session: "Session",
    query: MetadataQuery,
    timeout: float | None = None,
) -> Any:
    """Run a single query, falling back to its default on any failure.

    Args:
        session: Open SSH session
        query: Query to run
        timeout: Optional seconds before the query command is abandoned

    Returns:
        Parsed value, or query.default
    """
    try:
        result = await session.run(query.command, timeout=timeout)
    except (OSError, asyncssh.Error) as e:
        logger.warning("Query %s on %s failed: %s", query.name, session.host, e)
        return query.default

    output = decode_output(result.stdout)
    if result.returncode or not output.strip():
        logger.debug(
            "Query %s on %s unavailable (exit=%s)",
            query.name,
            session.host,
            result.returncode,
        )
        return query.default

    try:
        return query.parser(output)
    except ValueError as e:
        logger.warning(
            "Query %s on %s returned unparseable output: %s",
            query.name,
            session.host,
            e,
        )
        return query.default


async def collect_host_metadata(
    session: "Session",
    timeout: float | None = None,
) -> HostMetadata:
    """Collect normalized metadata from a remote host.

    Args:
        session: Open SSH session
        timeout: Optional per-query command timeout in seconds

    Returns:
        HostMetadata, with zero/empty values for queries that failed
    """
    values: dict[str, Any] = {}
    for query in METADATA_QUERIES:
        values[query.name] = await run_query(session, query, timeout=timeout)

    memory: MemoryInfo = values.pop("memory")

    metadata = HostMetadata(
        **values,
        memory_total=memory.total,
        memory_free=memory.free,
    )
    logger.info(
        "Collected metadata from %s (hostname=%s, os=%s)",
        session.host,
        metadata.hostname or "?",
        metadata.os_type or "?",
    )
    return metadata
