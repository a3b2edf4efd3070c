"""
Core type definitions for Sentinel.

This module defines the data structures that cross the boundary between
Sentinel and its host framework: the current actor, the response value a
handler produces, and the records of each access decision.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

UNAUTHORIZED = 401


@dataclass(frozen=True)
class UserContext:
    """
    The identified actor behind the current request.

    Attributes:
        user_id: Identifier from the host's authentication layer.
        roles: Role names held by the actor. Any iterable is accepted and
            stored as a frozenset.
        attributes: Extra facts sentinels may consult
            (e.g., {"department": "engineering"}).

    Example:
        >>> user = UserContext(user_id="user_123", roles=["editor"])
        >>> user.roles_among(["admin", "editor"])
        ['editor']
    """
    user_id: str
    roles: frozenset[str] = frozenset()
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", frozenset(self.roles))

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def roles_among(self, roles: Iterable[str]) -> list[str]:
        """Sorted subset of ``roles`` that this actor holds."""
        return sorted(self.roles.intersection(roles))


@dataclass(frozen=True)
class Response:
    """
    Framework-neutral response produced by a granted or denied handler.

    Host adapters convert this into their own response type.

    Attributes:
        status: HTTP status code.
        body: Response body; empty for head-only responses.
        content_type: Media type of the body, or None for an empty body.
        headers: Extra response headers.
    """
    status: int
    body: str = ""
    content_type: str | None = None
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def head(cls, status: int) -> Response:
        """Create a body-less response."""
        return cls(status=status)

    @classmethod
    def text(cls, body: str, status: int = 200,
             content_type: str = "text/html") -> Response:
        """Create a response with a text body."""
        return cls(status=status, body=body, content_type=content_type)


class Controller(Protocol):
    """
    What Sentinel needs from the host's per-request controller instance.

    Attributes:
        action_name: Name of the action being dispatched (e.g., "show").
        current_user: The identified actor, or None for anonymous requests.
        request_format: Negotiated format of the request ("html", "json", ...).
    """
    action_name: str
    current_user: Any
    request_format: str


@dataclass(frozen=True)
class AccessDecision:
    """
    Record of one guard evaluation.

    Attributes:
        action: The action the guard ran for.
        guard: Human-readable description of the guard's check.
        allowed: Whether the check passed.
        handler: Name of the handler that was invoked.
        sentinel: Class name of the sentinel consulted, if any.
    """
    action: str
    guard: str
    allowed: bool
    handler: str
    sentinel: str | None = None


@dataclass
class DispatchOutcome:
    """
    Result of running every matching guard for one request.

    Attributes:
        allowed: True when no matching guard denied.
        decisions: Decisions in guard registration order.
        response: The first response a handler produced, if any. The host
            should send it instead of running the action.
    """
    allowed: bool = True
    decisions: list[AccessDecision] = field(default_factory=list)
    response: Response | None = None

    @property
    def denied(self) -> bool:
        return not self.allowed

    @property
    def halted(self) -> bool:
        """True when the host must not run the underlying action."""
        return self.response is not None or not self.allowed
