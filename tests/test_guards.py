"""
Tests for guard entries.

Tests cover:
- Action filters (only / except)
- Guard variants (capability, sentinel predicate, context predicate)
- Normalization of what callers pass to grants_access_to
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from sentinel.exceptions import ConfigurationError, NoSuchCapabilityError
from sentinel.guards import (
    ActionFilter,
    CapabilityGuard,
    ContextPredicateGuard,
    GuardEntry,
    PolicyPredicateGuard,
    as_guard_check,
)


class TestActionFilter:
    """Tests for ActionFilter."""

    def test_no_filter_matches_everything(self):
        action_filter = ActionFilter.build()
        assert action_filter.matches("index") is True
        assert action_filter.matches("anything") is True

    def test_only(self):
        action_filter = ActionFilter.build(only=["edit", "update"])
        assert action_filter.matches("edit") is True
        assert action_filter.matches("show") is False

    def test_only_accepts_single_name(self):
        action_filter = ActionFilter.build(only="show")
        assert action_filter.only == frozenset({"show"})
        assert action_filter.matches("show") is True
        assert action_filter.matches("s") is False

    def test_except(self):
        action_filter = ActionFilter.build(except_="index")
        assert action_filter.matches("index") is False
        assert action_filter.matches("show") is True

    def test_only_and_except_are_exclusive(self):
        with pytest.raises(ConfigurationError):
            ActionFilter.build(only="show", except_="index")

    def test_describe(self):
        assert ActionFilter.build(only=["b", "a"]).describe() == "only ['a', 'b']"
        assert ActionFilter.build().describe() == "all actions"


class TestGuardVariants:
    """Tests for the three guard variants."""

    def test_capability_guard(self, basic_user, draft_article, article_sentinel_class):
        sentinel = article_sentinel_class(current_user=basic_user, article=draft_article)

        assert CapabilityGuard("update").evaluate(sentinel, None) is True
        assert CapabilityGuard("destroy").evaluate(sentinel, None) is False

    def test_capability_guard_without_sentinel_denies(self):
        assert CapabilityGuard("read").evaluate(None, None) is False

    def test_capability_guard_unknown_capability_raises(self, article_sentinel_class):
        with pytest.raises(NoSuchCapabilityError):
            CapabilityGuard("archive").evaluate(article_sentinel_class(), None)

    def test_policy_predicate_receives_sentinel(self, basic_user, article_sentinel_class):
        sentinel = article_sentinel_class(current_user=basic_user)
        seen = []

        def predicate(received):
            seen.append(received)
            return received.current_user.has_role("user")

        assert PolicyPredicateGuard(predicate).evaluate(sentinel, object()) is True
        assert seen == [sentinel]

    def test_policy_predicate_without_sentinel_denies(self):
        guard = PolicyPredicateGuard(lambda sentinel: True)
        assert guard.evaluate(None, object()) is False

    def test_context_predicate_receives_controller(self):
        controller = SimpleNamespace(request_format="json")
        guard = ContextPredicateGuard(lambda c: c.request_format == "json")

        assert guard.needs_sentinel is False
        assert guard.evaluate(None, controller) is True

    def test_predicate_result_is_bool(self):
        guard = ContextPredicateGuard(lambda c: [])
        assert guard.evaluate(None, object()) is False


class TestAsGuardCheck:
    """Tests for normalizing guard checks."""

    def test_string_is_capability(self):
        assert as_guard_check("read") == CapabilityGuard("read")

    def test_callable_is_sentinel_predicate(self):
        def predicate(sentinel):
            return True

        check = as_guard_check(predicate)
        assert isinstance(check, PolicyPredicateGuard)
        assert check.predicate is predicate

    def test_guard_instance_passes_through(self):
        guard = ContextPredicateGuard(lambda c: True)
        assert as_guard_check(guard) is guard

    def test_invalid_check_raises(self):
        with pytest.raises(ConfigurationError):
            as_guard_check(42)


class TestGuardEntry:
    """Tests for GuardEntry."""

    def test_defaults_to_default_handler(self):
        entry = GuardEntry(actions=ActionFilter.build(only="show"), check=CapabilityGuard("read"))

        assert entry.denial_handler == "default"
        assert entry.applies_to("show") is True
        assert entry.applies_to("index") is False
        assert entry.describe() == "capability 'read' on only ['show']"

    def test_is_immutable(self):
        entry = GuardEntry(actions=ActionFilter.build(), check=CapabilityGuard("read"))
        with pytest.raises(AttributeError):
            entry.denial_handler = "other"
