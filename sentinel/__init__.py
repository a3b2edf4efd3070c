"""
Sentinel: declarative access control for web-application controllers.

A controller declares which actions require which capabilities. Each
capability question is answered by a sentinel, a small policy object
built per request from the current user and the subject being acted on.
Granted requests proceed; denied requests are routed to a denial handler,
which by default answers 401.

Basic Usage:
    >>> from sentinel import AccessControl, AccessControlled, Sentinel
    >>>
    >>> class UserSentinel(Sentinel):
    ...     user: User | None = None
    ...
    ...     def can_index(self) -> bool:
    ...         return self.current_user is not None
    >>>
    >>> class UsersController(AccessControlled):
    ...     access_control = (
    ...         AccessControl.builder()
    ...         .controls_access_with(
    ...             lambda c: UserSentinel(current_user=c.current_user, user=c.user)
    ...         )
    ...         .grants_access_to("index", only="index")
    ...         .build()
    ...     )
    >>>
    >>> outcome = controller.check_access()
    >>> if outcome.halted:
    ...     return outcome.response
"""

__version__ = "0.1.0"

from sentinel.access import (
    DENIED_MESSAGE,
    RESTFUL_GUARDS,
    AccessControl,
    AccessControlBuilder,
    allow_action,
    render_unauthorized,
)
from sentinel.controller import AccessControlled
from sentinel.exceptions import (
    ConfigurationError,
    NoSuchCapabilityError,
    PolicyTypeNotFoundError,
    SentinelError,
    UnknownAttributeError,
    UnknownDenialHandlerError,
)
from sentinel.guards import (
    ActionFilter,
    CapabilityGuard,
    ContextPredicateGuard,
    GuardEntry,
    PolicyPredicateGuard,
)
from sentinel.inflection import derive_names
from sentinel.policies import (
    AllowAllSentinel,
    RoleBasedSentinel,
    Sentinel,
    SentinelRegistry,
    get_global_registry,
    reset_global_registry,
)
from sentinel.types import (
    AccessDecision,
    Controller,
    DispatchOutcome,
    Response,
    UserContext,
)
from sentinel.view_helper import permitted_to, view_helpers

__all__ = [
    # Version
    "__version__",
    # Access control
    "AccessControl",
    "AccessControlBuilder",
    "AccessControlled",
    "RESTFUL_GUARDS",
    "DENIED_MESSAGE",
    "allow_action",
    "render_unauthorized",
    # Guards
    "ActionFilter",
    "CapabilityGuard",
    "PolicyPredicateGuard",
    "ContextPredicateGuard",
    "GuardEntry",
    # Sentinels
    "Sentinel",
    "SentinelRegistry",
    "AllowAllSentinel",
    "RoleBasedSentinel",
    "get_global_registry",
    "reset_global_registry",
    "derive_names",
    # Types
    "UserContext",
    "Response",
    "Controller",
    "AccessDecision",
    "DispatchOutcome",
    # View helpers
    "permitted_to",
    "view_helpers",
    # Exceptions
    "SentinelError",
    "PolicyTypeNotFoundError",
    "NoSuchCapabilityError",
    "UnknownDenialHandlerError",
    "UnknownAttributeError",
    "ConfigurationError",
]
