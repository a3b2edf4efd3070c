"""
Sentinel registry.

Convention-based attachment derives a sentinel type name from a controller
name. This registry is where that name is resolved: sentinel classes are
registered explicitly at startup, and a lookup for a name nobody
registered fails with PolicyTypeNotFoundError.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from sentinel.exceptions import PolicyTypeNotFoundError

if TYPE_CHECKING:
    from sentinel.policies.base import Sentinel

logger = logging.getLogger(__name__)


class SentinelRegistry:
    """
    Registry of sentinel classes keyed by type name.

    Example:
        >>> registry = SentinelRegistry()
        >>>
        >>> @registry.sentinel()
        ... class ArticleSentinel(Sentinel):
        ...     article: Article | None = None
        >>>
        >>> registry.get_sentinel("ArticleSentinel")
        <class 'ArticleSentinel'>

    Thread Safety:
        All operations are thread-safe via internal locking.
    """

    def __init__(self) -> None:
        self._sentinels: dict[str, type[Sentinel]] = {}
        self._lock = threading.RLock()

    def sentinel(self, name: str | None = None) -> Any:
        """
        Decorator for registering a sentinel class.

        Args:
            name: Name to register under. Defaults to the class name.
        """
        def decorator(sentinel_class: type[Sentinel]) -> type[Sentinel]:
            self.register(sentinel_class, name)
            return sentinel_class
        return decorator

    def register(self, sentinel_class: type[Sentinel], name: str | None = None) -> None:
        """
        Register a sentinel class.

        Registering a second class under an existing name replaces the first.

        Args:
            sentinel_class: The sentinel class to register.
            name: Name to register under. Defaults to the class name.
        """
        type_name = name or sentinel_class.__name__
        with self._lock:
            if type_name in self._sentinels:
                existing = self._sentinels[type_name].__name__
                logger.warning(
                    f"Overwriting sentinel '{type_name}': "
                    f"{existing} -> {sentinel_class.__name__}"
                )
            self._sentinels[type_name] = sentinel_class
            logger.debug(f"Registered sentinel '{sentinel_class.__name__}' as '{type_name}'")

    def get_sentinel(self, name: str) -> type[Sentinel]:
        """
        Get the sentinel class registered under ``name``.

        Raises:
            PolicyTypeNotFoundError: If nothing is registered under that name.
        """
        with self._lock:
            if name in self._sentinels:
                return self._sentinels[name]
            raise PolicyTypeNotFoundError(name, sorted(self._sentinels))

    def has_sentinel(self, name: str) -> bool:
        with self._lock:
            return name in self._sentinels

    def list_sentinels(self) -> dict[str, str]:
        """
        List all registered sentinels.

        Returns:
            Dictionary mapping registered names to class names.
        """
        with self._lock:
            return {name: cls.__name__ for name, cls in self._sentinels.items()}

    def unregister(self, name: str) -> bool:
        """
        Unregister a sentinel.

        Returns:
            True if a sentinel was unregistered, False if none was registered.
        """
        with self._lock:
            if name in self._sentinels:
                del self._sentinels[name]
                logger.debug(f"Unregistered sentinel '{name}'")
                return True
            return False

    def clear(self) -> None:
        """Clear all registered sentinels. Useful for testing."""
        with self._lock:
            self._sentinels.clear()
            logger.debug("Cleared all registered sentinels")


# Global registry instance for convenience
_global_registry: SentinelRegistry | None = None
_global_registry_lock = threading.Lock()


def get_global_registry() -> SentinelRegistry:
    """
    Get the process-wide sentinel registry, creating it on first use.

    Example:
        >>> from sentinel.policies.registry import get_global_registry
        >>> @get_global_registry().sentinel()
        ... class UserSentinel(Sentinel):
        ...     user: User | None = None
    """
    global _global_registry
    if _global_registry is not None:
        return _global_registry
    with _global_registry_lock:
        # Double-check after acquiring lock
        if _global_registry is None:
            _global_registry = SentinelRegistry()
        return _global_registry


def reset_global_registry() -> None:
    """Reset the global registry. Primarily useful for testing."""
    global _global_registry
    with _global_registry_lock:
        if _global_registry is not None:
            _global_registry.clear()
        _global_registry = None
