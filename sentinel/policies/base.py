"""
Sentinel base class.

A sentinel is a small policy object that answers yes/no questions about
what the current actor may do with a subject. Each sentinel type declares
the attributes it is built from as class annotations, and each capability
as a ``can_<capability>`` method. The five RESTful capabilities (index,
create, read, update, destroy) exist on every sentinel and deny by default.

Capability methods must be pure functions of the sentinel's attributes.
Views and guards evaluate them repeatedly and rely on getting the same
answer every time.
"""

from __future__ import annotations

import copy
import inspect
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from sentinel.exceptions import (
    ConfigurationError,
    NoSuchCapabilityError,
    UnknownAttributeError,
)

if TYPE_CHECKING:
    from sentinel.types import UserContext

logger = logging.getLogger(__name__)

CAPABILITY_PREFIX = "can_"
RESTFUL_CAPABILITIES = ("index", "create", "read", "update", "destroy")

# Class defaults are shared by every instance, so these are rejected
_MUTABLE_DEFAULT_TYPES = (list, dict, set, bytearray)


def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return getattr(annotation, "__origin__", None) is ClassVar or annotation is ClassVar


def _collect_attribute_names(cls: type) -> tuple[str, ...]:
    names: list[str] = []
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, annotation in inspect.get_annotations(klass).items():
            if name.startswith("_") or _is_class_var(annotation):
                continue
            if name not in names:
                names.append(name)
    return tuple(names)


class Sentinel:
    """
    Base class for all sentinels.

    Subclasses declare their attribute schema with annotations. Every
    sentinel has ``current_user``; a subclass adds the subject it guards.

    Attributes:
        current_user: The actor whose permissions are being checked.
        model: Class-level reference to the subject model type, used by
            ``auth_scope`` to register query filters on it.

    Example:
        >>> class ArticleSentinel(Sentinel):
        ...     article: Article | None = None
        ...
        ...     def can_read(self) -> bool:
        ...         return self.article.published or self.can_update()
        ...
        ...     def can_update(self) -> bool:
        ...         return self.article.author_id == self.current_user.user_id
        >>>
        >>> sentinel = ArticleSentinel(current_user=user, article=article)
        >>> sentinel.capability("read")
        True
    """

    current_user: UserContext | None = None

    model: ClassVar[Any] = None

    _attribute_names: ClassVar[tuple[str, ...]] = ()
    _auth_scopes: ClassVar[dict[str, Callable[..., Any]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._attribute_names = _collect_attribute_names(cls)
        for name in cls._attribute_names:
            default = cls.__dict__.get(name)
            if isinstance(default, _MUTABLE_DEFAULT_TYPES):
                raise ConfigurationError(
                    config_key=f"{cls.__name__}.{name}",
                    expected="an immutable default such as None, a tuple or a frozenset",
                    received=type(default).__name__,
                )

    def __init__(self, **attributes: Any) -> None:
        """
        Initialize a sentinel from named attributes.

        Declared attributes that are not given take their class default,
        or None.

        Raises:
            UnknownAttributeError: If a name is not part of the schema.
        """
        cls = type(self)
        for name in cls._attribute_names:
            object.__setattr__(self, name, getattr(cls, name, None))
        for name, value in attributes.items():
            setattr(self, name, value)

    def __setattr__(self, name: str, value: Any) -> None:
        if not name.startswith("_") and name not in type(self)._attribute_names:
            raise UnknownAttributeError(
                name, type(self).__name__, list(type(self)._attribute_names)
            )
        object.__setattr__(self, name, value)

    def __repr__(self) -> str:
        attrs = ", ".join(f"{k}={v!r}" for k, v in self.to_dict().items())
        return f"{type(self).__name__}({attrs})"

    @classmethod
    def attribute_names(cls) -> tuple[str, ...]:
        """Return the declared attribute names, base class first."""
        return cls._attribute_names

    def to_dict(self) -> dict[str, Any]:
        """Snapshot of the sentinel's attributes."""
        return {name: getattr(self, name) for name in self._attribute_names}

    def with_overrides(
        self,
        overrides: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Sentinel:
        """
        Return a shallow copy with some attributes replaced.

        The receiver is left untouched. Values that are not overridden are
        shared with the copy.

        Args:
            overrides: Mapping of attribute name to replacement value.
            **kwargs: Additional overrides, applied after ``overrides``.

        Raises:
            UnknownAttributeError: If an override names an undeclared attribute.

        Example:
            >>> # Could this user edit some other article?
            >>> sentinel.with_overrides(article=other).capability("update")
        """
        merged = {**(overrides or {}), **kwargs}
        duplicate = copy.copy(self)
        for name, value in merged.items():
            setattr(duplicate, name, value)
        return duplicate

    def capability(self, name: str) -> bool:
        """
        Evaluate a named capability.

        Looks up the ``can_<name>`` method and returns its result as a bool.

        Raises:
            NoSuchCapabilityError: If the sentinel defines no such capability.
        """
        method = getattr(self, f"{CAPABILITY_PREFIX}{name}", None)
        if method is None or not callable(method):
            raise NoSuchCapabilityError(
                name, type(self).__name__, self.get_available_capabilities()
            )
        return bool(method())

    def can(self, name: str) -> bool:
        """Alias for capability() for a more fluent API."""
        return self.capability(name)

    @classmethod
    def get_available_capabilities(cls) -> list[str]:
        """
        Get all capabilities defined by this sentinel.

        Example:
            >>> Sentinel.get_available_capabilities()
            ['create', 'destroy', 'index', 'read', 'update']
        """
        capabilities = []
        for name in dir(cls):
            if name.startswith(CAPABILITY_PREFIX) and callable(getattr(cls, name)):
                capabilities.append(name[len(CAPABILITY_PREFIX):])
        return sorted(capabilities)

    # RESTful capabilities, denied unless a subclass says otherwise

    def can_index(self) -> bool:
        """Deny listing."""
        return False

    def can_create(self) -> bool:
        """Deny creation."""
        return False

    def can_read(self) -> bool:
        """Deny read access."""
        return False

    def can_update(self) -> bool:
        """Deny updates."""
        return False

    def can_destroy(self) -> bool:
        """Deny destruction."""
        return False

    # Authorization scopes

    @classmethod
    def auth_scope(cls, name: str, query_filter: Callable[..., Any]) -> None:
        """
        Associate a named authorization scope with the subject model.

        The filter is recorded on the sentinel class. When the model exposes
        ``register_scope(name, query_filter)`` it is registered there too, so
        the data layer can offer it as a named query.

        Args:
            name: Scope name (e.g., "visible_to").
            query_filter: Callable ``(item, *args) -> bool`` or whatever the
                model's query layer accepts.

        Raises:
            ConfigurationError: If the sentinel has no ``model``.

        Example:
            >>> class ArticleSentinel(Sentinel):
            ...     model = Article
            >>> ArticleSentinel.auth_scope(
            ...     "visible_to", lambda article, user: article.published
            ... )
        """
        if cls.model is None:
            raise ConfigurationError(
                config_key=f"{cls.__name__}.model",
                expected="a subject model to attach auth scopes to",
            )

        if "_auth_scopes" not in cls.__dict__:
            cls._auth_scopes = dict(cls._auth_scopes)
        cls._auth_scopes[name] = query_filter

        register = getattr(cls.model, "register_scope", None)
        if callable(register):
            register(name, query_filter)
            logger.debug(
                f"Registered auth scope '{name}' on model "
                f"'{getattr(cls.model, '__name__', cls.model)}'"
            )

    @classmethod
    def auth_scopes(cls) -> dict[str, Callable[..., Any]]:
        """Return the auth scopes declared on this sentinel and its bases."""
        return dict(cls._auth_scopes)

    @classmethod
    def apply_scope(cls, name: str, items: Iterable[Any], *args: Any) -> list[Any]:
        """
        Filter an in-memory collection through a declared auth scope.

        Raises:
            ConfigurationError: If no scope with that name is declared.
        """
        query_filter = cls._auth_scopes.get(name)
        if query_filter is None:
            raise ConfigurationError(
                config_key=f"{cls.__name__}.auth_scope",
                expected=f"one of: {', '.join(sorted(cls._auth_scopes)) or '(none)'}",
                received=name,
            )
        return [item for item in items if query_filter(item, *args)]


Sentinel._attribute_names = _collect_attribute_names(Sentinel)
