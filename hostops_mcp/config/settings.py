"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Application settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Credentials
    private_key: str | None = field(default=None, repr=False)
    private_key_passphrase: str | None = field(default=None, repr=False)
    username: str | None = field(default=None)
    known_hosts: dict[str, str] = field(default_factory=dict)

    # Timeouts (seconds, 0 disables the command timeout)
    connect_timeout: int = field(default=30)
    command_timeout: int = field(default=0)

    # Transport
    transport: str = field(default="http")
    http_host: str = field(default="0.0.0.0")
    http_port: int = field(default=8000)

    # Logging
    log_level: str = field(default="INFO")
    log_colors: bool = field(default=True)
    log_tz: str = field(default="UTC")
    log_payloads: bool = field(default=False)
    slow_threshold_ms: int = field(default=1000)
    include_traceback: bool = field(default=False)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            private_key=cls._get_private_key(),
            private_key_passphrase=os.getenv("HOSTOPS_PRIVATE_KEY_PASSPHRASE") or None,
            username=os.getenv("HOSTOPS_USERNAME", "").strip() or None,
            known_hosts=cls._get_known_hosts(),
            connect_timeout=cls._get_int("HOSTOPS_CONNECT_TIMEOUT", 30),
            command_timeout=cls._get_int("HOSTOPS_COMMAND_TIMEOUT", 0),
            transport=cls._get_transport(),
            http_host=os.getenv("HOSTOPS_HTTP_HOST", "0.0.0.0"),
            http_port=cls._get_int("HOSTOPS_HTTP_PORT", 8000),
            log_level=os.getenv("HOSTOPS_LOG_LEVEL", "INFO").strip().upper() or "INFO",
            log_colors=cls._get_bool("HOSTOPS_LOG_COLORS", True),
            log_tz=os.getenv("HOSTOPS_LOG_TZ", "").strip() or "UTC",
            log_payloads=cls._get_bool("HOSTOPS_LOG_PAYLOADS", False),
            slow_threshold_ms=cls._get_int("HOSTOPS_SLOW_THRESHOLD_MS", 1000),
            include_traceback=cls._get_bool("HOSTOPS_INCLUDE_TRACEBACK", False),
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _get_transport() -> str:
        """Get transport from environment with validation.

        Returns:
            Transport type ("http" or "stdio")
        """
        transport = os.getenv("HOSTOPS_TRANSPORT", "").lower()
        if transport in ("http", "stdio"):
            return transport
        return "http"

    @staticmethod
    def _get_private_key() -> str | None:
        """Get the private key text, inline value first, then key file.

        Returns:
            Private key text or None if neither source is set
        """
        inline = os.getenv("HOSTOPS_PRIVATE_KEY", "")
        if inline.strip():
            # Env files often carry the PEM body with escaped newlines
            return inline.replace("\\n", "\n")

        key_file = os.getenv("HOSTOPS_PRIVATE_KEY_FILE", "").strip()
        if not key_file:
            return None

        path = Path(os.path.expanduser(key_file))
        try:
            return path.read_text()
        except OSError as e:
            logger.error("Cannot read private key file %s: %s", path, e)
            return None

    @staticmethod
    def _get_known_hosts() -> dict[str, str]:
        """Get the hostname to public key mapping.

        Reads HOSTOPS_KNOWN_HOSTS (inline JSON) or HOSTOPS_KNOWN_HOSTS_FILE
        (path to a JSON file). Malformed input yields an empty mapping.

        Returns:
            Mapping of hostname to OpenSSH public key line
        """
        raw = os.getenv("HOSTOPS_KNOWN_HOSTS", "").strip()
        source = "HOSTOPS_KNOWN_HOSTS"

        if not raw:
            known_hosts_file = os.getenv("HOSTOPS_KNOWN_HOSTS_FILE", "").strip()
            if not known_hosts_file:
                return {}
            path = Path(os.path.expanduser(known_hosts_file))
            source = str(path)
            try:
                raw = path.read_text()
            except OSError as e:
                logger.error("Cannot read known hosts file %s: %s", path, e)
                return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Invalid known hosts JSON in %s: %s", source, e)
            return {}

        if not isinstance(data, dict):
            logger.error(
                "Known hosts in %s must be a JSON object, got %s",
                source,
                type(data).__name__,
            )
            return {}

        return {
            str(host): str(key).strip()
            for host, key in data.items()
            if key and str(key).strip()
        }
