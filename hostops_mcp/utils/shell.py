"""Shell command construction utilities."""

import secrets
import shlex

HEREDOC_PREFIX = "HOSTOPS_SCRIPT_EOF"


def quote_path(path: str) -> str:
    """Safely quote a path for shell commands.

    Args:
        path: File system path to quote

    Returns:
        Shell-safe quoted path
    """
    return shlex.quote(path)


def in_directory(command: str, working_directory: str | None) -> str:
    """Run a command inside a directory.

    A failed cd exits the shell with its status, so no part of a compound
    command (`a; b`, `a || b`) runs outside the directory.

    Args:
        command: Command line to run
        working_directory: Directory to run it in, or None for the login dir

    Returns:
        Command line, unchanged when no directory is given
    """
    if not working_directory:
        return command
    return f"cd {quote_path(working_directory)} || exit $?\n{command}"


def heredoc_delimiter(body: str) -> str:
    """Pick a heredoc delimiter that no line of body equals.

    A heredoc ends at the first line equal to its delimiter, so the
    delimiter is regenerated until it is absent from the body.

    Args:
        body: Text that will be placed inside the heredoc

    Returns:
        Delimiter token safe for this body
    """
    lines = set(body.splitlines())
    while True:
        delimiter = f"{HEREDOC_PREFIX}_{secrets.token_hex(8)}"
        if delimiter not in lines:
            return delimiter


def heredoc_write(path: str, body: str) -> str:
    """Build a command that writes body verbatim to path.

    The delimiter is quoted so the remote shell performs no expansion
    inside the body.

    Args:
        path: Remote destination path
        body: Literal file content

    Returns:
        Shell command line
    """
    delimiter = heredoc_delimiter(body)
    return f"cat > {quote_path(path)} << '{delimiter}'\n{body}\n{delimiter}"


def decode_output(value: str | bytes | None) -> str:
    """Normalize process output to text.

    Args:
        value: stdout/stderr as returned by asyncssh

    Returns:
        Decoded text, empty string for None
    """
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
