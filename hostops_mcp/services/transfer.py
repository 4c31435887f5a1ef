"""SFTP file upload and download with local staging."""

import base64
import logging
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

import asyncssh

from hostops_mcp.models import ContentEncoding, DownloadResult, UploadResult
from hostops_mcp.services.failures import (
    ConfigurationFault,
    TransferFault,
    transfer_fault,
)
from hostops_mcp.utils.shell import decode_output, quote_path

if TYPE_CHECKING:
    from hostops_mcp.services.session import Session

logger = logging.getLogger(__name__)

UPLOAD_PREFIX = "hostops_upload_"
DOWNLOAD_PREFIX = "hostops_download_"


def parse_encoding(encoding: ContentEncoding | str) -> ContentEncoding:
    """Validate an encoding name.

    Raises:
        ConfigurationFault: If encoding is not "base64" or "text"
    """
    try:
        return ContentEncoding(encoding)
    except ValueError as e:
        raise ConfigurationFault(
            f"Encoding must be 'base64' or 'text', got {encoding!r}"
        ) from e


def decode_content(content: str, encoding: ContentEncoding | str) -> bytes:
    """Convert request content to the bytes that will be written.

    Args:
        content: base64 text or plain text
        encoding: How content is encoded

    Returns:
        Raw file bytes

    Raises:
        ValueError: If base64 content is malformed (binascii.Error, or
            non-ASCII input) or text content holds lone surrogates
            (UnicodeEncodeError)
    """
    if ContentEncoding(encoding) is ContentEncoding.BASE64:
        # Wrapped base64 (e.g. 76-column MIME) is common; drop the whitespace
        return base64.b64decode("".join(content.split()), validate=True)
    return content.encode("utf-8")


def encode_content(data: bytes, encoding: ContentEncoding | str) -> str:
    """Convert downloaded bytes to response content.

    Args:
        data: Raw file bytes
        encoding: Desired representation

    Returns:
        base64 text, or UTF-8 text with undecodable bytes replaced
    """
    if ContentEncoding(encoding) is ContentEncoding.BASE64:
        return base64.b64encode(data).decode("ascii")
    return data.decode("utf-8", errors="replace")


def format_mtime(epoch_seconds: int) -> str:
    """Format a Unix timestamp as ISO 8601 UTC, e.g. 2024-05-01T12:00:00.000Z."""
    dt = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _remove_local(path: Path | None) -> None:
    """Best-effort removal of a local staging file."""
    if path is None:
        return
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Failed to clean up staging file %s: %s", path, e)


async def upload_file(
    session: "Session",
    content: str,
    destination_path: str,
    encoding: ContentEncoding | str = ContentEncoding.TEXT,
    permissions: str | None = None,
) -> UploadResult:
    """Upload content to a remote file via SFTP.

    Content is decoded, staged in a local temp file, transferred, and the
    staging file is removed on every exit path.

    Args:
        session: Open SSH session
        content: File content, base64 or plain text per encoding
        destination_path: Full remote path to write
        encoding: "base64" or "text"
        permissions: Optional octal mode applied with chmod (e.g. "0644")

    Returns:
        UploadResult with the destination path and bytes written.

    Raises:
        ConfigurationFault: If encoding is not recognized.
        TransferFault: If decoding, staging, transfer or chmod fails.
    """
    encoding = parse_encoding(encoding)
    temp_file: Path | None = None

    try:
        try:
            data = decode_content(content, encoding)

            with tempfile.NamedTemporaryFile(delete=False, prefix=UPLOAD_PREFIX) as tf:
                temp_file = Path(tf.name)
                tf.write(data)

            sftp = await session.sftp()
            await sftp.put(str(temp_file), destination_path)
        except (ValueError, OSError, asyncssh.Error) as e:
            logger.error(
                "Upload to %s:%s failed: %s", session.host, destination_path, e
            )
            raise transfer_fault(destination_path, e) from e

        logger.info(
            "Uploaded %d byte(s) to %s:%s",
            len(data),
            session.host,
            destination_path,
        )

        if permissions:
            await _chmod(session, destination_path, permissions)

        return UploadResult(path=destination_path, size=len(data))
    finally:
        _remove_local(temp_file)


async def _chmod(session: "Session", path: str, permissions: str) -> None:
    """Apply an octal mode to a remote file."""
    try:
        result = await session.run(f"chmod {permissions} {quote_path(path)}")
    except (OSError, asyncssh.Error) as e:
        raise transfer_fault(path, e) from e

    if result.returncode:
        raise TransferFault(
            path,
            f"chmod {permissions} failed: {decode_output(result.stderr).strip()}",
        )


async def _remote_stat(session: "Session", path: str) -> tuple[str, str]:
    """Get permission bits and modification time of a remote file.

    Returns:
        Tuple of (octal permissions, ISO 8601 mtime), empty strings if
        the remote stat is unavailable.
    """
    try:
        result = await session.run(f"stat -c '%a %Y' {quote_path(path)}")
    except (OSError, asyncssh.Error) as e:
        logger.warning("stat of %s on %s failed: %s", path, session.host, e)
        return ("", "")

    stdout = decode_output(result.stdout).strip()
    parts = stdout.split()
    if result.returncode or len(parts) < 2:
        logger.warning(
            "stat of %s on %s returned no metadata: %s",
            path,
            session.host,
            decode_output(result.stderr).strip() or stdout,
        )
        return ("", "")

    permissions, mtime = parts[0], parts[1]
    try:
        return (permissions, format_mtime(int(mtime)))
    except (ValueError, OverflowError, OSError):
        logger.warning("Unparseable mtime %r for %s on %s", mtime, path, session.host)
        return (permissions, "")


async def download_file(
    session: "Session",
    source_path: str,
    encoding: ContentEncoding | str = ContentEncoding.BASE64,
) -> DownloadResult:
    """Download a remote file via SFTP.

    The file is staged in a local temp file, which is removed on every exit
    path. Permissions and mtime come from a separate remote stat.

    Args:
        session: Open SSH session
        source_path: Full remote path to read
        encoding: "base64" (default) or "text"

    Returns:
        DownloadResult with content, size, permissions and mtime.

    Raises:
        ConfigurationFault: If encoding is not recognized.
        TransferFault: If staging or the transfer fails.
    """
    encoding = parse_encoding(encoding)
    temp_file: Path | None = None

    try:
        try:
            with tempfile.NamedTemporaryFile(delete=False, prefix=DOWNLOAD_PREFIX) as tf:
                temp_file = Path(tf.name)

            sftp = await session.sftp()
            await sftp.get(source_path, str(temp_file))
            data = temp_file.read_bytes()
        except (OSError, asyncssh.Error) as e:
            logger.error("Download of %s:%s failed: %s", session.host, source_path, e)
            raise transfer_fault(source_path, e) from e

        logger.info(
            "Downloaded %d byte(s) from %s:%s",
            len(data),
            session.host,
            source_path,
        )

        permissions, modified_time = await _remote_stat(session, source_path)

        return DownloadResult(
            content=encode_content(data, encoding),
            path=source_path,
            size=len(data),
            permissions=permissions,
            modified_time=modified_time,
        )
    finally:
        _remove_local(temp_file)
