"""Application configuration.

Delegates to specialized components:
- Settings: Environment variables
- HostKeyPolicy: Known hosts registry
"""

import logging
from dataclasses import dataclass

from hostops_mcp.config.host_keys import HostKeyPolicy
from hostops_mcp.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Application configuration.

    Holds the application-level credentials shared by every operation.
    Read-only once built; safe to share across concurrent operations.
    """

    settings: Settings
    host_keys: HostKeyPolicy

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment.

        Returns:
            Configured instance with all components initialized
        """
        settings = Settings.from_env()
        return cls.from_settings(settings)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Config":
        """Create config from an explicit Settings instance.

        Args:
            settings: Settings to wrap

        Returns:
            Configured instance
        """
        if not settings.private_key:
            logger.warning(
                "No SSH private key configured (HOSTOPS_PRIVATE_KEY or "
                "HOSTOPS_PRIVATE_KEY_FILE). Every operation will be rejected."
            )
        return cls(
            settings=settings,
            host_keys=HostKeyPolicy(settings.known_hosts),
        )

    @property
    def private_key(self) -> str | None:
        """Application-level private key text."""
        return self.settings.private_key

    @property
    def private_key_passphrase(self) -> str | None:
        """Passphrase for an encrypted private key."""
        return self.settings.private_key_passphrase

    @property
    def username(self) -> str | None:
        """Default username for operations that do not override it."""
        return self.settings.username

    @property
    def connect_timeout(self) -> int:
        """Get connect timeout in seconds."""
        return self.settings.connect_timeout

    @property
    def command_timeout(self) -> int | None:
        """Get command timeout in seconds, None when unbounded."""
        return self.settings.command_timeout or None

    @property
    def transport(self) -> str:
        """Get transport type."""
        return self.settings.transport

    @property
    def http_host(self) -> str:
        """Get HTTP host."""
        return self.settings.http_host

    @property
    def http_port(self) -> int:
        """Get HTTP port."""
        return self.settings.http_port
