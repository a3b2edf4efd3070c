"""
Pytest fixtures for Sentinel tests.

Provides common fixtures used across all test modules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generator

import pytest

from sentinel import AccessControlled, Sentinel, UserContext
from sentinel.policies.registry import SentinelRegistry, reset_global_registry


# ============================================================================
# Models
# ============================================================================


@dataclass
class Article:
    """Minimal subject model."""
    title: str
    author_id: str
    published: bool = False


@dataclass
class ArticleModel:
    """Stand-in for a model class whose query layer accepts named scopes."""
    scopes: dict[str, Any] = field(default_factory=dict)

    def register_scope(self, name: str, query_filter: Any) -> None:
        self.scopes[name] = query_filter


# ============================================================================
# User Context Fixtures
# ============================================================================


@pytest.fixture
def basic_user() -> UserContext:
    """Create a basic user context for testing."""
    return UserContext(
        user_id="user_123",
        roles=["user"],
        attributes={"department": "engineering"},
    )


@pytest.fixture
def admin_user() -> UserContext:
    """Create an admin user context for testing."""
    return UserContext(
        user_id="admin_456",
        roles=["admin", "user"],
    )


@pytest.fixture
def editor_user() -> UserContext:
    """Create an editor user context for testing."""
    return UserContext(
        user_id="editor_789",
        roles=["editor", "user"],
    )


# ============================================================================
# Subject Fixtures
# ============================================================================


@pytest.fixture
def draft_article() -> Article:
    """An unpublished article written by basic_user."""
    return Article(title="Draft", author_id="user_123", published=False)


@pytest.fixture
def published_article() -> Article:
    """A published article written by someone else."""
    return Article(title="Published", author_id="someone_else", published=True)


@pytest.fixture
def article_model() -> ArticleModel:
    """Create a model stand-in that records registered query scopes."""
    return ArticleModel()


# ============================================================================
# Sentinel Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_global_registry() -> Generator[None, None, None]:
    """Give every test a fresh global sentinel registry."""
    reset_global_registry()
    yield
    reset_global_registry()


@pytest.fixture
def sentinel_registry() -> SentinelRegistry:
    """Create a fresh sentinel registry."""
    return SentinelRegistry()


@pytest.fixture
def article_sentinel_class() -> type[Sentinel]:
    """Create an article sentinel class."""
    class ArticleSentinel(Sentinel):
        article: Any = None

        def can_index(self) -> bool:
            return True

        def can_read(self) -> bool:
            if self.article is None:
                return False
            return self.article.published or self._is_author()

        def can_update(self) -> bool:
            return self._is_author()

        def can_destroy(self) -> bool:
            return self.current_user is not None and self.current_user.has_role("admin")

        def can_publish(self) -> bool:
            return self.current_user is not None and self.current_user.has_role("editor")

        def _is_author(self) -> bool:
            return (
                self.article is not None
                and self.current_user is not None
                and self.article.author_id == self.current_user.user_id
            )

    return ArticleSentinel


# ============================================================================
# Controller Fixtures
# ============================================================================


@pytest.fixture
def controller_class() -> type[AccessControlled]:
    """Create a bare controller base class standing in for a host framework."""
    class RequestController(AccessControlled):
        def __init__(
            self,
            action_name: str,
            current_user: UserContext | None = None,
            request_format: str = "html",
            **attributes: Any,
        ) -> None:
            self.action_name = action_name
            self.current_user = current_user
            self.request_format = request_format
            for name, value in attributes.items():
                setattr(self, name, value)

    return RequestController

