"""
Sentinel policy objects.

A sentinel answers boolean capability questions for a subject given an
actor. Subclass ``Sentinel``, declare the attributes it is built from,
and define ``can_<capability>`` methods.

Quick Start:
    >>> from sentinel.policies import Sentinel, SentinelRegistry
    >>>
    >>> registry = SentinelRegistry()
    >>>
    >>> @registry.sentinel()
    ... class DocumentSentinel(Sentinel):
    ...     document: Document | None = None
    ...
    ...     def can_read(self) -> bool:
    ...         return True
    ...
    ...     def can_update(self) -> bool:
    ...         return self.current_user.has_role("editor")
    >>>
    >>> sentinel = DocumentSentinel(current_user=user, document=document)
    >>> sentinel.capability("update")
"""

from sentinel.policies.base import (
    RESTFUL_CAPABILITIES,
    Sentinel,
)
from sentinel.policies.builtin import (
    AllowAllSentinel,
    RoleBasedSentinel,
)
from sentinel.policies.registry import (
    SentinelRegistry,
    get_global_registry,
    reset_global_registry,
)

__all__ = [
    "Sentinel",
    "RESTFUL_CAPABILITIES",
    "SentinelRegistry",
    "get_global_registry",
    "reset_global_registry",
    "AllowAllSentinel",
    "RoleBasedSentinel",
]
