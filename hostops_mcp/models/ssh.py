"""SSH-related data models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ConnectionParameters:
    """Fully-resolved parameters for one SSH connection."""

    host: str
    username: str
    private_key: str = field(repr=False)
    port: int = 22
    passphrase: str | None = field(default=None, repr=False)
    host_key: str | None = None

    @property
    def target(self) -> str:
        """Get user@host:port for log messages."""
        return f"{self.username}@{self.host}:{self.port}"
