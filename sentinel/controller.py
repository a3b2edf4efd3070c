"""
Controller integration.

``AccessControlled`` is the mixin a host framework's controller (or
class-based view) inherits to gain access control. The host is expected
to call ``check_access()`` before running an action and to honour the
outcome. The controller instance must expose ``action_name``,
``current_user`` and ``request_format`` (see ``sentinel.types.Controller``).

Example:
    >>> class ArticlesController(BaseController, AccessControlled,
    ...                          restful_access_control=True):
    ...     def show(self):
    ...         self.article = Article.get(self.params["id"])
    ...         ...
    >>>
    >>> outcome = controller.check_access()
    >>> if outcome.halted:
    ...     return outcome.response
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from sentinel.access import AccessControl
from sentinel.view_helper import permitted_to

if TYPE_CHECKING:
    from sentinel.policies.base import Sentinel
    from sentinel.policies.registry import SentinelRegistry
    from sentinel.types import DispatchOutcome

logger = logging.getLogger(__name__)


class AccessControlled:
    """
    Mixin giving a controller class an access configuration.

    Class keywords:
        restful_access_control: Extend the inherited configuration with
            convention-based attachment and the five RESTful guards,
            derived from the class name.
        sentinel_registry: Registry to resolve the conventional sentinel
            type from. Defaults to the global registry.
    """

    access_control: ClassVar[AccessControl] = AccessControl()

    def __init_subclass__(
        cls,
        restful_access_control: bool = False,
        sentinel_registry: SentinelRegistry | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init_subclass__(**kwargs)
        if restful_access_control:
            cls.access_control = (
                cls.access_control.extend()
                .restful_access_control(cls.__name__, sentinel_registry)
                .build()
            )
            logger.debug(f"Configured RESTful access control for '{cls.__name__}'")

    @property
    def sentinel(self) -> Sentinel | None:
        """The sentinel for this request, built fresh on each access."""
        return type(self).access_control.sentinel_for(self)

    def check_access(self) -> DispatchOutcome:
        """Run the guards for the current action."""
        return type(self).access_control.dispatch(self)

    def permitted_to(
        self,
        capability: str,
        overrides: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> bool:
        """See ``sentinel.view_helper.permitted_to``."""
        return permitted_to(self, capability, overrides, **kwargs)
