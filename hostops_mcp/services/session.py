"""Connection-scoped SSH sessions.

Every operation opens its own session, does one unit of work, and closes it.
Nothing is cached between operations.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import asyncssh

from hostops_mcp.models import ConnectionParameters
from hostops_mcp.services.failures import ConfigurationFault, connection_fault

if TYPE_CHECKING:
    from hostops_mcp.config import Config

logger = logging.getLogger(__name__)

DEFAULT_PORT = 22


def resolve_connection_parameters(
    config: "Config",
    host: str,
    port: int | None = DEFAULT_PORT,
    username: str | None = None,
) -> ConnectionParameters:
    """Merge application-level credentials with per-call overrides.

    Per-call values take precedence over application defaults. Runs before
    any network I/O so configuration problems never reach the transport.

    Args:
        config: Application configuration
        host: Target hostname or IP address
        port: Target SSH port, 22 when omitted
        username: Optional username overriding the application default

    Returns:
        Fully-resolved connection parameters

    Raises:
        ConfigurationFault: If the key, username, host or port is unusable
    """
    if not config.private_key:
        raise ConfigurationFault("SSH private key not configured in the app.")

    host = (host or "").strip()
    if not host:
        raise ConfigurationFault("Host must not be empty.")

    if port is None:
        port = DEFAULT_PORT
    if not 1 <= port <= 65535:
        raise ConfigurationFault(f"Port must be between 1 and 65535, got {port}.")

    final_username = (username or "").strip() or (config.username or "").strip()
    if not final_username:
        raise ConfigurationFault(
            "Username must be specified either in app config or input config."
        )

    decision = config.host_keys.for_host(host)

    return ConnectionParameters(
        host=host,
        port=port,
        username=final_username,
        private_key=config.private_key,
        passphrase=config.private_key_passphrase,
        host_key=decision.expected_key,
    )


class Session:
    """One authenticated SSH connection plus a lazily-started SFTP client.

    Owned by a single operation. Use through open_session() so it is closed
    on every exit path.
    """

    def __init__(
        self,
        connection: asyncssh.SSHClientConnection,
        params: ConnectionParameters,
    ) -> None:
        """Initialize session.

        Args:
            connection: Authenticated asyncssh connection
            params: Parameters the connection was opened with
        """
        self.connection = connection
        self.params = params
        self._sftp: asyncssh.SFTPClient | None = None

    @property
    def host(self) -> str:
        """Host this session is connected to."""
        return self.params.host

    async def run(
        self,
        command: str,
        timeout: float | None = None,
    ) -> asyncssh.SSHCompletedProcess:
        """Run a command without raising on non-zero exit status.

        Args:
            command: Shell command line
            timeout: Optional seconds before the command is abandoned

        Returns:
            Completed process with stdout, stderr and exit status
        """
        return await self.connection.run(command, check=False, timeout=timeout)

    async def sftp(self) -> asyncssh.SFTPClient:
        """Get the SFTP client, starting it on first use."""
        if self._sftp is None:
            logger.debug("Starting SFTP client on %s", self.params.target)
            self._sftp = await self.connection.start_sftp_client()
        return self._sftp

    async def close(self) -> None:
        """Release the SFTP client and the connection.

        Errors while closing are logged; the session is unusable afterwards
        either way.
        """
        if self._sftp is not None:
            try:
                self._sftp.exit()
                await self._sftp.wait_closed()
            except (OSError, asyncssh.Error) as e:
                logger.warning("Error closing SFTP client on %s: %s", self.host, e)
            self._sftp = None

        try:
            self.connection.close()
            await self.connection.wait_closed()
        except (OSError, asyncssh.Error) as e:
            logger.warning("Error closing SSH connection to %s: %s", self.host, e)

        logger.debug("Closed SSH connection to %s", self.params.target)


def _import_client_key(params: ConnectionParameters) -> asyncssh.SSHKey:
    """Decode the private key.

    Raises:
        ConfigurationFault: If the key cannot be decoded
    """
    try:
        return asyncssh.import_private_key(params.private_key, params.passphrase)
    except (asyncssh.KeyImportError, asyncssh.KeyEncryptionError) as e:
        raise ConfigurationFault(f"SSH private key could not be loaded: {e}") from e


def _known_hosts_arg(params: ConnectionParameters) -> Any:
    """Build the asyncssh known_hosts argument.

    Returns:
        None to skip verification, or a trusted-keys tuple to enforce it

    Raises:
        ConfigurationFault: If the registered host key cannot be decoded
    """
    if params.host_key is None:
        logger.warning(
            "No known host key for %s - skipping host key verification",
            params.host,
        )
        return None

    try:
        expected = asyncssh.import_public_key(params.host_key)
    except asyncssh.KeyImportError as e:
        raise ConfigurationFault(
            f"Known host key for {params.host} could not be loaded: {e}"
        ) from e

    return ([expected], [], [])


@asynccontextmanager
async def open_session(
    params: ConnectionParameters,
    connect_timeout: float | None = None,
) -> AsyncIterator[Session]:
    """Open one authenticated session and close it when the block exits.

    Args:
        params: Resolved connection parameters
        connect_timeout: Optional seconds allowed for connect and auth

    Yields:
        Ready-to-use session

    Raises:
        ConfigurationFault: If the private key or host key cannot be decoded
        ConnectionFault: If connecting, authenticating or verifying fails
    """
    client_key = _import_client_key(params)
    known_hosts = _known_hosts_arg(params)

    logger.info("Opening SSH connection to %s", params.target)

    try:
        conn = await asyncssh.connect(
            params.host,
            port=params.port,
            username=params.username,
            client_keys=[client_key],
            known_hosts=known_hosts,
            agent_path=None,
            connect_timeout=connect_timeout,
        )
    except (OSError, asyncssh.Error, asyncio.TimeoutError) as e:
        fault = connection_fault(params.host, e, host_key_enforced=params.host_key is not None)
        logger.error(
            "SSH connection to %s failed (%s): %s",
            params.target,
            fault.reason,
            e,
        )
        raise fault from e

    logger.info("SSH connection established to %s", params.target)

    session = Session(conn, params)
    try:
        yield session
    finally:
        await session.close()
