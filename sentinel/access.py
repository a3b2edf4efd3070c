"""
Access control configuration and dispatch.

An ``AccessControl`` is the complete, immutable access configuration of
one controller class: how to attach a sentinel to a request, which guards
run before which actions, and what to do when a guard grants or denies.
It is assembled with ``AccessControlBuilder`` and shared by every request
the controller serves. A subclass controller inherits its parent's
configuration by extending a copy of it:

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
    >>> class AdminUsersController(UsersController):
    ...     access_control = (
    ...         UsersController.access_control.extend()
    ...         .grants_access_to("destroy", only="destroy", denies_with="admin_only")
    ...         .on_denied_with(render_admin_only, name="admin_only")
    ...         .build()
    ...     )
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from sentinel.exceptions import ConfigurationError, UnknownDenialHandlerError
from sentinel.guards import (
    DEFAULT_HANDLER,
    ActionFilter,
    GuardCheck,
    GuardEntry,
    as_guard_check,
)
from sentinel.inflection import derive_names
from sentinel.policies.registry import SentinelRegistry, get_global_registry
from sentinel.types import (
    UNAUTHORIZED,
    AccessDecision,
    Controller,
    DispatchOutcome,
    Response,
)

if TYPE_CHECKING:
    from sentinel.policies.base import Sentinel

logger = logging.getLogger(__name__)

AttachmentRule = Callable[[Controller], "Sentinel | None"]
Handler = Callable[[Controller], "Response | None"]

DENIED_MESSAGE = "You do not have the proper privileges to access this page."

GRANTED_HANDLER = "granted"

# Capability -> actions guarded by convention-based attachment
RESTFUL_GUARDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("index", ("index",)),
    ("create", ("new", "create")),
    ("read", ("show",)),
    ("update", ("edit", "update")),
    ("destroy", ("destroy",)),
)


def allow_action(controller: Any) -> Response | None:
    """Default granted handler: let the action run."""
    return None


def render_unauthorized(controller: Any) -> Response:
    """
    Default denied handler.

    HTML requests get a short explanation; every other format gets an
    empty body. Both carry status 401.
    """
    if getattr(controller, "request_format", "html") == "html":
        return Response.text(DENIED_MESSAGE, status=UNAUTHORIZED)
    return Response.head(UNAUTHORIZED)


def _default_denied() -> Mapping[str, Handler]:
    return MappingProxyType({DEFAULT_HANDLER: render_unauthorized})


@dataclass(frozen=True, eq=False)
class AccessControl:
    """
    Immutable access configuration for a controller class.

    Attributes:
        attachment_rule: Builds the sentinel for a request, given the
            controller. Runs fresh for every guard that needs a sentinel.
        guards: Guards in registration order.
        granted: Handler run when a guard grants access.
        denied: Denial handlers by name. ``"default"`` renders a 401.
        halt_on_response: Stop evaluating further guards once a handler
            produced a response. Off by default, so every matching guard
            runs and a denial only suppresses the action.
    """
    attachment_rule: AttachmentRule | None = None
    guards: tuple[GuardEntry, ...] = ()
    granted: Handler = allow_action
    denied: Mapping[str, Handler] = field(default_factory=_default_denied)
    halt_on_response: bool = False

    @classmethod
    def builder(cls) -> AccessControlBuilder:
        """Start a configuration from the defaults."""
        return AccessControlBuilder(cls())

    def extend(self) -> AccessControlBuilder:
        """Start a new configuration from a copy of this one."""
        return AccessControlBuilder(self)

    def validate(self) -> None:
        """
        Check the configuration is complete.

        Raises:
            UnknownDenialHandlerError: If a guard names an undeclared handler.
            ConfigurationError: If a guard needs a sentinel and there is
                no attachment rule.
        """
        for guard in self.guards:
            if guard.denial_handler not in self.denied:
                raise UnknownDenialHandlerError(guard.denial_handler, sorted(self.denied))
            if guard.check.needs_sentinel and self.attachment_rule is None:
                raise ConfigurationError(
                    config_key="attachment_rule",
                    expected=f"an attachment rule for guard {guard.describe()}",
                )

    def sentinel_for(self, controller: Controller) -> Sentinel | None:
        """Run the attachment rule for ``controller``."""
        if self.attachment_rule is None:
            return None
        return self.attachment_rule(controller)

    def denial_handler(self, name: str) -> Handler:
        """
        Look up a denial handler by name.

        Raises:
            UnknownDenialHandlerError: If no handler is declared under ``name``.
        """
        try:
            return self.denied[name]
        except KeyError:
            raise UnknownDenialHandlerError(name, sorted(self.denied)) from None

    def guards_for(self, action: str) -> list[GuardEntry]:
        return [guard for guard in self.guards if guard.applies_to(action)]

    def dispatch(self, controller: Controller) -> DispatchOutcome:
        """
        Run every guard matching the controller's current action.

        Guards run in registration order. A denial marks the outcome as
        denied but does not stop later guards unless ``halt_on_response``
        is set and the denial handler produced a response.

        Args:
            controller: The per-request controller instance.

        Returns:
            The outcome. The host runs the action only when
            ``outcome.halted`` is False, and otherwise sends
            ``outcome.response``.

        Raises:
            NoSuchCapabilityError: If a capability guard names a capability
                the sentinel does not define.
            PolicyTypeNotFoundError: If convention-based attachment cannot
                resolve its sentinel type.
            UnknownDenialHandlerError: If a denial handler is missing.
        """
        action = controller.action_name
        outcome = DispatchOutcome()

        for guard in self.guards_for(action):
            sentinel = self.sentinel_for(controller) if guard.check.needs_sentinel else None
            allowed = guard.check.evaluate(sentinel, controller)

            if allowed:
                handler_name = GRANTED_HANDLER
                response = self.granted(controller)
            else:
                handler_name = guard.denial_handler
                response = self.denial_handler(handler_name)(controller)
                outcome.allowed = False

            decision = AccessDecision(
                action=action,
                guard=guard.check.describe(),
                allowed=allowed,
                handler=handler_name,
                sentinel=type(sentinel).__name__ if sentinel is not None else None,
            )
            outcome.decisions.append(decision)

            if allowed:
                logger.debug(f"Access granted for '{action}' by {decision.guard}")
            else:
                user = getattr(controller, "current_user", None)
                logger.info(
                    f"Access denied for '{action}' by {decision.guard} "
                    f"(user: {getattr(user, 'user_id', None)}, handler: '{handler_name}')"
                )

            if response is not None:
                if outcome.response is None:
                    outcome.response = response
                if self.halt_on_response:
                    logger.debug(f"Halting guard chain for '{action}' after {decision.guard}")
                    break

        return outcome


class AccessControlBuilder:
    """
    Collects access declarations and produces an ``AccessControl``.

    Every declaration method returns the builder so calls can be chained.
    """

    def __init__(self, base: AccessControl | None = None) -> None:
        base = base or AccessControl()
        self._attachment_rule = base.attachment_rule
        self._guards: list[GuardEntry] = list(base.guards)
        self._granted = base.granted
        self._denied: dict[str, Handler] = dict(base.denied)
        self._halt_on_response = base.halt_on_response

    def controls_access_with(self, rule: AttachmentRule) -> AccessControlBuilder:
        """
        Declare how to build the sentinel for a request.

        Replaces any previously declared rule, including an inherited one.

        Args:
            rule: Callable taking the controller and returning a sentinel.
        """
        self._attachment_rule = rule
        return self

    def grants_access_to(
        self,
        check: str | GuardCheck | Callable[..., Any],
        only: str | Iterable[str] | None = None,
        except_: str | Iterable[str] | None = None,
        denies_with: str = DEFAULT_HANDLER,
    ) -> AccessControlBuilder:
        """
        Register a guard.

        Args:
            check: A capability name, a predicate taking the sentinel, or
                an explicit guard (use ``ContextPredicateGuard`` for a
                predicate taking the controller).
            only: Actions the guard applies to.
            except_: Actions the guard skips.
            denies_with: Name of the denial handler to run on failure.

        Example:
            >>> builder.grants_access_to("update", only=["edit", "update"])
            >>> builder.grants_access_to(
            ...     ContextPredicateGuard(lambda c: c.request_format == "html"),
            ...     only="export",
            ...     denies_with="not_acceptable",
            ... )
        """
        self._guards.append(
            GuardEntry(
                actions=ActionFilter.build(only=only, except_=except_),
                check=as_guard_check(check),
                denial_handler=denies_with,
            )
        )
        return self

    def on_denied_with(self, handler: Handler, name: str = DEFAULT_HANDLER) -> AccessControlBuilder:
        """Declare (or replace) a named denial handler."""
        self._denied[name] = handler
        return self

    def with_access(self, handler: Handler) -> AccessControlBuilder:
        """Replace the granted handler."""
        self._granted = handler
        return self

    def halt_on_response(self, enabled: bool = True) -> AccessControlBuilder:
        """Stop evaluating guards once a handler has produced a response."""
        self._halt_on_response = enabled
        return self

    def restful_access_control(
        self,
        controller_name: str,
        registry: SentinelRegistry | None = None,
    ) -> AccessControlBuilder:
        """
        Attach a sentinel by naming convention and guard the RESTful actions.

        For ``ArticlesController`` the rule reads the controller's
        ``article`` attribute and builds
        ``ArticleSentinel(current_user=..., article=...)``. The sentinel type
        is resolved through the registry on each request, so a missing
        registration surfaces as PolicyTypeNotFoundError on the first
        guarded request.

        Args:
            controller_name: Name of the controller class.
            registry: Registry to resolve the sentinel type from. Defaults
                to the global registry at request time.
        """
        attribute_name, type_name = derive_names(controller_name)

        def conventional_rule(controller: Any) -> Sentinel:
            sentinel_class = (registry or get_global_registry()).get_sentinel(type_name)
            return sentinel_class(**{
                "current_user": controller.current_user,
                attribute_name: getattr(controller, attribute_name, None),
            })

        logger.debug(
            f"Convention-based access control for '{controller_name}': "
            f"'{attribute_name}' guarded by '{type_name}'"
        )
        self.controls_access_with(conventional_rule)
        for capability, actions in RESTFUL_GUARDS:
            self.grants_access_to(capability, only=actions)
        return self

    def build(self) -> AccessControl:
        """
        Produce the validated, immutable configuration.

        Raises:
            UnknownDenialHandlerError: If a guard names an undeclared handler.
            ConfigurationError: If a guard needs a sentinel and no
                attachment rule was declared.
        """
        access_control = AccessControl(
            attachment_rule=self._attachment_rule,
            guards=tuple(self._guards),
            granted=self._granted,
            denied=MappingProxyType(dict(self._denied)),
            halt_on_response=self._halt_on_response,
        )
        access_control.validate()
        return access_control
