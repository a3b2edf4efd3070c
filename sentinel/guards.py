"""
Guard entries.

A guard binds an action filter to a check and names the denial handler to
run when the check fails. There are three kinds of check, chosen
explicitly by the caller:

- ``CapabilityGuard``: ask the attached sentinel for a named capability.
- ``PolicyPredicateGuard``: call a predicate with the attached sentinel.
- ``ContextPredicateGuard``: call a predicate with the controller itself,
  for decisions that need the whole request context.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from sentinel.exceptions import ConfigurationError

if TYPE_CHECKING:
    from sentinel.policies.base import Sentinel

DEFAULT_HANDLER = "default"


def _action_set(actions: str | Iterable[str] | None) -> frozenset[str] | None:
    if actions is None:
        return None
    if isinstance(actions, str):
        return frozenset({actions})
    return frozenset(actions)


@dataclass(frozen=True)
class ActionFilter:
    """
    Which actions a guard applies to.

    With neither set, the guard applies to every action. ``only`` and
    ``except_`` are mutually exclusive.

    Attributes:
        only: Apply only to these actions.
        except_: Apply to every action except these.
    """
    only: frozenset[str] | None = None
    except_: frozenset[str] | None = None

    def __post_init__(self) -> None:
        if self.only is not None and self.except_ is not None:
            raise ConfigurationError(
                config_key="action_filter",
                expected="either 'only' or 'except_', not both",
            )

    @classmethod
    def build(
        cls,
        only: str | Iterable[str] | None = None,
        except_: str | Iterable[str] | None = None,
    ) -> ActionFilter:
        """Build a filter from a single action name or any iterable of names."""
        return cls(only=_action_set(only), except_=_action_set(except_))

    def matches(self, action: str) -> bool:
        if self.only is not None:
            return action in self.only
        if self.except_ is not None:
            return action not in self.except_
        return True

    def describe(self) -> str:
        if self.only is not None:
            return f"only {sorted(self.only)}"
        if self.except_ is not None:
            return f"except {sorted(self.except_)}"
        return "all actions"


@dataclass(frozen=True)
class CapabilityGuard:
    """Check a named capability on the attached sentinel."""
    capability: str

    needs_sentinel = True

    def evaluate(self, sentinel: Sentinel | None, controller: Any) -> bool:
        if sentinel is None:
            return False
        return sentinel.capability(self.capability)

    def describe(self) -> str:
        return f"capability '{self.capability}'"


@dataclass(frozen=True)
class PolicyPredicateGuard:
    """Call ``predicate(sentinel)``; a missing sentinel denies."""
    predicate: Callable[[Sentinel], Any]

    needs_sentinel = True

    def evaluate(self, sentinel: Sentinel | None, controller: Any) -> bool:
        if sentinel is None:
            return False
        return bool(self.predicate(sentinel))

    def describe(self) -> str:
        return f"sentinel predicate {getattr(self.predicate, '__name__', repr(self.predicate))}"


@dataclass(frozen=True)
class ContextPredicateGuard:
    """Call ``predicate(controller)`` without building a sentinel."""
    predicate: Callable[[Any], Any]

    needs_sentinel = False

    def evaluate(self, sentinel: Sentinel | None, controller: Any) -> bool:
        return bool(self.predicate(controller))

    def describe(self) -> str:
        return f"context predicate {getattr(self.predicate, '__name__', repr(self.predicate))}"


GuardCheck = Union[CapabilityGuard, PolicyPredicateGuard, ContextPredicateGuard]


def as_guard_check(check: str | GuardCheck | Callable[..., Any]) -> GuardCheck:
    """
    Normalize what a caller passed to ``grants_access_to``.

    A string is a capability name, a bare callable is a sentinel predicate,
    and guard instances pass through unchanged.

    Raises:
        ConfigurationError: For anything else.
    """
    if isinstance(check, (CapabilityGuard, PolicyPredicateGuard, ContextPredicateGuard)):
        return check
    if isinstance(check, str):
        return CapabilityGuard(check)
    if callable(check):
        return PolicyPredicateGuard(check)
    raise ConfigurationError(
        config_key="guard",
        expected="a capability name, a predicate, or a guard instance",
        received=check,
    )


@dataclass(frozen=True)
class GuardEntry:
    """
    One registered guard.

    Attributes:
        actions: Which actions the guard applies to.
        check: The check to evaluate.
        denial_handler: Name of the denial handler to run on failure.
    """
    actions: ActionFilter
    check: GuardCheck
    denial_handler: str = DEFAULT_HANDLER

    def applies_to(self, action: str) -> bool:
        return self.actions.matches(action)

    def describe(self) -> str:
        return f"{self.check.describe()} on {self.actions.describe()}"
