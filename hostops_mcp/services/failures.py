"""Typed operation failures and low-level error classification."""

import asyncio
import binascii
import logging

import asyncssh

logger = logging.getLogger(__name__)


class OperationFailure(Exception):
    """Base class for failures surfaced to the caller."""

    def __init__(self, message: str):
        """Initialize operation failure.

        Args:
            message: Human-readable description
        """
        self.message = message
        super().__init__(message)


class ConfigurationFault(OperationFailure):
    """Request cannot be attempted with the current configuration."""


class ConnectionFault(OperationFailure):
    """Failed to establish or authenticate the SSH session."""

    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    AUTHENTICATION_FAILED = "authentication_failed"
    HOST_KEY_MISMATCH = "host_key_mismatch"
    PROTOCOL = "protocol"

    def __init__(self, host: str, reason: str, original_error: Exception):
        """Initialize connection fault.

        Args:
            host: Host the connection was attempted against
            reason: One of the reason constants on this class
            original_error: Exception raised by the transport
        """
        self.host = host
        self.reason = reason
        self.original_error = original_error
        super().__init__(f"Cannot connect to {host} ({reason}): {original_error}")


class ExecutionFault(OperationFailure):
    """A command could not be dispatched or its result not received."""


class TransferFault(OperationFailure):
    """Local staging or remote file transfer failed."""

    def __init__(self, path: str, message: str):
        """Initialize transfer fault.

        Args:
            path: Remote path the transfer targeted
            message: What went wrong
        """
        self.path = path
        super().__init__(f"Transfer of {path} failed: {message}")


def _is_host_key_negotiation_failure(error: Exception) -> bool:
    return isinstance(error, asyncssh.KeyExchangeFailed) and "host key" in str(error).lower()


def connection_fault(
    host: str,
    error: Exception,
    host_key_enforced: bool = False,
) -> ConnectionFault:
    """Classify a connect/authenticate error.

    With a registered host key, asyncssh only offers that key's algorithm;
    a server without a key of that type fails key exchange instead of
    verification, which is still a host key mismatch.

    Args:
        host: Target host
        error: Exception raised while connecting
        host_key_enforced: Whether a registered host key was required

    Returns:
        ConnectionFault with a distinct reason
    """
    if isinstance(error, asyncssh.HostKeyNotVerifiable):
        reason = ConnectionFault.HOST_KEY_MISMATCH
    elif host_key_enforced and _is_host_key_negotiation_failure(error):
        reason = ConnectionFault.HOST_KEY_MISMATCH
    elif isinstance(error, asyncssh.PermissionDenied):
        reason = ConnectionFault.AUTHENTICATION_FAILED
    elif isinstance(error, asyncio.TimeoutError):
        reason = ConnectionFault.TIMEOUT
    elif isinstance(error, OSError):
        reason = ConnectionFault.UNREACHABLE
    else:
        reason = ConnectionFault.PROTOCOL
    return ConnectionFault(host, reason, error)


def transfer_fault(path: str, error: Exception) -> TransferFault:
    """Classify a staging or SFTP error.

    Args:
        path: Remote path of the transfer
        error: Exception raised during the transfer

    Returns:
        TransferFault describing the error
    """
    if isinstance(error, binascii.Error):
        return TransferFault(path, f"content is not valid base64: {error}")
    if isinstance(error, UnicodeError):
        return TransferFault(path, f"content cannot be encoded as UTF-8 text: {error}")
    if isinstance(error, ValueError):
        return TransferFault(path, f"invalid content: {error}")
    if isinstance(error, asyncssh.SFTPError):
        return TransferFault(path, f"SFTP error: {error.reason}")
    if isinstance(error, OSError):
        return TransferFault(path, f"local staging error: {error}")
    return TransferFault(path, str(error))
