"""
Custom exceptions for Sentinel.

Every exception here signals a configuration mistake discovered at first
use: a sentinel type that was never registered, a capability the sentinel
does not define, a denial handler nobody declared. None of them represent
a permission denial. A denied request is a normal ``False`` decision routed
to a denial handler and never raises.
"""

from __future__ import annotations

from typing import Any


class SentinelError(Exception):
    """
    Base exception for all Sentinel errors.

    Attributes:
        message: Human-readable error description.
        details: Additional context about the error.

    Example:
        >>> try:
        ...     outcome = controller.check_access()
        ... except SentinelError as e:
        ...     logger.error(f"Access control misconfigured: {e}")
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class PolicyTypeNotFoundError(SentinelError):
    """
    Raised when a sentinel type cannot be resolved by name.

    Convention-based attachment looks the sentinel type up lazily, so this
    surfaces on the first guarded request rather than at declaration time.

    Attributes:
        type_name: The sentinel type name that was looked up.
        available: Registered sentinel type names (for debugging).

    Example:
        >>> raise PolicyTypeNotFoundError(
        ...     type_name="ArticleSentinel",
        ...     available=["UserSentinel"],
        ... )
    """

    def __init__(self, type_name: str, available: list[str] | None = None) -> None:
        self.type_name = type_name
        self.available = available or []

        message = f"No sentinel type registered as '{type_name}'"
        if self.available:
            message += f". Available sentinels: {', '.join(self.available)}"

        details = {
            "type_name": type_name,
            "available": self.available,
        }
        super().__init__(message, details)


class NoSuchCapabilityError(SentinelError):
    """
    Raised when a capability is queried that the sentinel does not define.

    Attributes:
        capability: The capability name that was queried.
        sentinel: Name of the sentinel class.
        available: Capabilities the sentinel does define.
    """

    def __init__(
        self,
        capability: str,
        sentinel: str,
        available: list[str] | None = None,
    ) -> None:
        self.capability = capability
        self.sentinel = sentinel
        self.available = available or []

        message = f"Sentinel '{sentinel}' has no capability '{capability}'"
        if self.available:
            message += f". Available capabilities: {', '.join(self.available)}"

        details = {
            "capability": capability,
            "sentinel": sentinel,
            "available": self.available,
        }
        super().__init__(message, details)


class UnknownDenialHandlerError(SentinelError):
    """
    Raised when a guard references a denial handler that was never declared.

    Attributes:
        handler: The handler name referenced by the guard.
        available: Declared denial handler names.
    """

    def __init__(self, handler: str, available: list[str] | None = None) -> None:
        self.handler = handler
        self.available = available or []

        message = f"No denial handler declared as '{handler}'"
        if self.available:
            message += f". Declared handlers: {', '.join(self.available)}"

        details = {
            "handler": handler,
            "available": self.available,
        }
        super().__init__(message, details)


class UnknownAttributeError(SentinelError):
    """
    Raised when a sentinel is given an attribute outside its declared schema.

    Attributes:
        attribute: The undeclared attribute name.
        sentinel: Name of the sentinel class.
        declared: Attribute names the sentinel declares.
    """

    def __init__(
        self,
        attribute: str,
        sentinel: str,
        declared: list[str] | None = None,
    ) -> None:
        self.attribute = attribute
        self.sentinel = sentinel
        self.declared = declared or []

        message = f"Sentinel '{sentinel}' does not declare attribute '{attribute}'"
        if self.declared:
            message += f". Declared attributes: {', '.join(self.declared)}"

        details = {
            "attribute": attribute,
            "sentinel": sentinel,
            "declared": self.declared,
        }
        super().__init__(message, details)


class ConfigurationError(SentinelError):
    """
    Raised when access control is configured inconsistently.

    Attributes:
        config_key: The configuration key that has an issue.
        expected: What was expected for this configuration.
        received: What was actually provided.

    Example:
        >>> raise ConfigurationError(
        ...     config_key="attachment_rule",
        ...     expected="an attachment rule for capability guards",
        ... )
    """

    def __init__(
        self,
        config_key: str,
        expected: str | None = None,
        received: Any = None,
    ) -> None:
        self.config_key = config_key
        self.expected = expected
        self.received = received

        message = f"Configuration error for '{config_key}'"
        if expected:
            message += f": expected {expected}"
        if received is not None:
            message += f", got {received!r}"

        details = {
            "config_key": config_key,
            "expected": expected,
            "received": str(received) if received is not None else None,
        }
        super().__init__(message, details)
