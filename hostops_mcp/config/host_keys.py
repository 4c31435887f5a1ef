"""SSH host key verification policy.

Decides per connection whether the server host key is checked against the
configured registry or not checked at all.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HostKeyDecision:
    """Verification decision for a single host."""

    host: str
    expected_key: str | None = None


class HostKeyPolicy:
    """Read-only registry of expected host keys.

    Hosts without an entry are connected without host key verification.
    An empty registry disables verification for every host.
    """

    def __init__(self, known_hosts: Mapping[str, str] | None = None) -> None:
        """Initialize host key policy.

        Args:
            known_hosts: Mapping of hostname to OpenSSH public key line
                (e.g. "ssh-ed25519 AAAA...")
        """
        self._registry: Mapping[str, str] = MappingProxyType(dict(known_hosts or {}))

        if self._registry:
            logger.info(
                "SSH host key verification enabled for %d host(s)",
                len(self._registry),
            )
        else:
            logger.warning(
                "No known hosts configured - SSH host key verification is "
                "skipped for all hosts. Set HOSTOPS_KNOWN_HOSTS to enable it."
            )

    def for_host(self, host: str) -> HostKeyDecision:
        """Decide how to verify the given host.

        Args:
            host: Hostname or IP address as given by the caller

        Returns:
            Decision carrying the expected key, or no key to skip
        """
        return HostKeyDecision(host=host, expected_key=self._registry.get(host))

    @property
    def hosts(self) -> list[str]:
        """Hostnames with a registered key."""
        return sorted(self._registry)
