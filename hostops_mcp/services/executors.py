"""SSH command and script executors."""

import logging
import secrets
import time
from typing import TYPE_CHECKING

import asyncssh

from hostops_mcp.models import CommandResult
from hostops_mcp.services.failures import ExecutionFault
from hostops_mcp.utils.shell import decode_output, heredoc_write, in_directory, quote_path

if TYPE_CHECKING:
    from hostops_mcp.services.session import Session

logger = logging.getLogger(__name__)

SCRIPT_TEMP_DIR = "/tmp"
SCRIPT_PREFIX = "hostops_script"
DEFAULT_INTERPRETER = "sh"


def script_temp_path() -> str:
    """Generate a collision-resistant remote path for a staged script.

    Returns:
        Path like /tmp/hostops_script_<unix-ms>_<random>.sh
    """
    timestamp = int(time.time() * 1000)
    return f"{SCRIPT_TEMP_DIR}/{SCRIPT_PREFIX}_{timestamp}_{secrets.token_hex(3)}.sh"


async def _dispatch(
    session: "Session",
    command: str,
    timeout: float | None = None,
) -> asyncssh.SSHCompletedProcess:
    """Run a command, converting transport errors into ExecutionFault."""
    try:
        return await session.run(command, timeout=timeout)
    except asyncssh.TimeoutError as e:
        raise ExecutionFault(
            f"Command on {session.host} timed out after {timeout}s"
        ) from e
    except (OSError, asyncssh.Error) as e:
        raise ExecutionFault(f"Command on {session.host} failed: {e}") from e


def _to_result(result: asyncssh.SSHCompletedProcess, duration_ms: int) -> CommandResult:
    returncode = result.returncode if result.returncode is not None else 0
    return CommandResult(
        stdout=decode_output(result.stdout),
        stderr=decode_output(result.stderr),
        exit_code=returncode,
        duration_ms=duration_ms,
    )


async def run_command(
    session: "Session",
    command: str,
    working_directory: str | None = None,
    timeout: float | None = None,
) -> CommandResult:
    """Execute a command as-is in the remote shell.

    A non-zero exit code is returned in the result, not raised.

    Args:
        session: Open SSH session
        command: Command line to execute
        working_directory: Optional directory to cd into first
        timeout: Optional seconds before the command is abandoned

    Returns:
        CommandResult with stdout, stderr, exit code and duration.

    Raises:
        ExecutionFault: If the command could not be dispatched or timed out.
    """
    full_command = in_directory(command, working_directory)

    start = time.perf_counter()
    result = await _dispatch(session, full_command, timeout=timeout)
    duration_ms = round((time.perf_counter() - start) * 1000)

    logger.debug(
        "Command on %s exited %s in %dms",
        session.host,
        result.returncode,
        duration_ms,
    )
    return _to_result(result, duration_ms)


async def _remove_remote(session: "Session", path: str) -> None:
    """Best-effort removal of a remote temporary file."""
    try:
        result = await session.run(f"rm -f {quote_path(path)}")
    except (OSError, asyncssh.Error) as e:
        logger.warning(
            "Failed to clean up temporary script %s on %s: %s",
            path,
            session.host,
            e,
        )
        return

    if result.returncode:
        logger.warning(
            "Failed to clean up temporary script %s on %s: %s",
            path,
            session.host,
            decode_output(result.stderr).strip(),
        )


async def run_script(
    session: "Session",
    script: str,
    interpreter: str | None = DEFAULT_INTERPRETER,
    working_directory: str | None = None,
    timeout: float | None = None,
) -> CommandResult:
    """Stage a script in a remote temp file and execute it.

    The script is written through a quoted heredoc, marked executable, run
    with the interpreter, and removed afterwards whatever the outcome.
    Duration covers the execution step only, not staging or cleanup.

    Args:
        session: Open SSH session
        script: Script body, written verbatim
        interpreter: Program used to run the script (default: sh)
        working_directory: Optional directory to cd into before running
        timeout: Optional seconds before the execution is abandoned

    Returns:
        CommandResult with stdout, stderr, exit code and duration.

    Raises:
        ExecutionFault: If staging fails or the script cannot be dispatched.
    """
    interpreter = (interpreter or "").strip() or DEFAULT_INTERPRETER
    remote_path = script_temp_path()

    try:
        staged = await _dispatch(session, heredoc_write(remote_path, script))
        if staged.returncode:
            raise ExecutionFault(
                f"Failed to stage script at {remote_path} on {session.host}: "
                f"{decode_output(staged.stderr).strip()}"
            )

        chmod = await _dispatch(session, f"chmod +x {quote_path(remote_path)}")
        if chmod.returncode:
            raise ExecutionFault(
                f"Failed to mark {remote_path} executable on {session.host}: "
                f"{decode_output(chmod.stderr).strip()}"
            )

        command = in_directory(f"{interpreter} {quote_path(remote_path)}", working_directory)

        start = time.perf_counter()
        result = await _dispatch(session, command, timeout=timeout)
        duration_ms = round((time.perf_counter() - start) * 1000)

        logger.debug(
            "Script %s on %s exited %s in %dms",
            remote_path,
            session.host,
            result.returncode,
            duration_ms,
        )
        return _to_result(result, duration_ms)
    finally:
        await _remove_remote(session, remote_path)
