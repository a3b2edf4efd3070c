"""
Built-in sentinels for Sentinel.

Ready-made sentinel types that can be used directly or extended.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from sentinel.policies.base import CAPABILITY_PREFIX, Sentinel

logger = logging.getLogger(__name__)


class AllowAllSentinel(Sentinel):
    """
    Sentinel that grants every RESTful capability.

    WARNING: This sentinel should ONLY be used for testing or in
    development environments. A warning is logged every time it is
    instantiated to help catch accidental production usage.
    """

    def __init__(self, **attributes: Any) -> None:
        """Initialize with a security warning."""
        super().__init__(**attributes)
        logger.warning(
            f"AllowAllSentinel instantiated for user "
            f"'{getattr(self.current_user, 'user_id', None)}'. "
            "This sentinel grants ALL capabilities and should NOT be used in production!"
        )

    def can_index(self) -> bool:
        return True

    def can_create(self) -> bool:
        return True

    def can_read(self) -> bool:
        return True

    def can_update(self) -> bool:
        return True

    def can_destroy(self) -> bool:
        return True


class RoleBasedSentinel(Sentinel):
    """
    Sentinel that grants capabilities by the actor's roles.

    Subclasses map each capability to the roles that hold it. Capabilities
    listed in ``allowed_roles`` but without a ``can_<name>`` method are
    still answerable through ``capability()``.

    Attributes:
        allowed_roles: Capability name -> roles granted that capability.

    Example:
        >>> class ReportSentinel(RoleBasedSentinel):
        ...     allowed_roles = {
        ...         "index": ["viewer", "admin"],
        ...         "read": ["viewer", "admin"],
        ...         "destroy": ["admin"],
        ...         "export": ["admin"],
        ...     }
        >>>
        >>> ReportSentinel(current_user=viewer).capability("read")    # True
        >>> ReportSentinel(current_user=viewer).capability("export")  # False
    """

    allowed_roles: ClassVar[dict[str, list[str]]] = {}

    def has_required_role(self, capability: str) -> bool:
        """Check whether the current user holds a role granting ``capability``."""
        required_roles = self.allowed_roles.get(capability)
        if not required_roles or self.current_user is None:
            return False

        matching = self.current_user.roles_among(required_roles)
        if matching:
            logger.debug(
                f"{type(self).__name__}: User '{self.current_user.user_id}' has "
                f"role(s) {matching} for capability '{capability}'"
            )
            return True

        logger.debug(
            f"{type(self).__name__}: User '{self.current_user.user_id}' lacks "
            f"required role(s) {required_roles} for capability '{capability}'"
        )
        return False

    def capability(self, name: str) -> bool:
        if name in self.allowed_roles and not hasattr(self, f"{CAPABILITY_PREFIX}{name}"):
            return self.has_required_role(name)
        return super().capability(name)

    @classmethod
    def get_available_capabilities(cls) -> list[str]:
        return sorted(set(super().get_available_capabilities()) | set(cls.allowed_roles))

    def can_index(self) -> bool:
        return self.has_required_role("index")

    def can_create(self) -> bool:
        return self.has_required_role("create")

    def can_read(self) -> bool:
        return self.has_required_role("read")

    def can_update(self) -> bool:
        return self.has_required_role("update")

    def can_destroy(self) -> bool:
        return self.has_required_role("destroy")

    @classmethod
    def with_roles(cls, roles: dict[str, list[str]],
                   name: str = "DynamicRoleSentinel") -> type[RoleBasedSentinel]:
        """
        Create a RoleBasedSentinel subclass with specific roles.

        Example:
            >>> ReportSentinel = RoleBasedSentinel.with_roles(
            ...     {"read": ["viewer"], "destroy": ["admin"]},
            ...     name="ReportSentinel",
            ... )
        """
        return type(name, (cls,), {"allowed_roles": dict(roles)})
