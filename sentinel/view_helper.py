"""
Template helpers.

Lets view code ask whether the current actor may do something, possibly
about a different subject than the one the controller attached, without
repeating guard logic and without touching the controller's sentinel.
"""

from __future__ import annotations

import functools
from collections.abc import Mapping
from typing import Any


def permitted_to(
    controller: Any,
    capability: str,
    overrides: Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> bool:
    """
    Evaluate a capability on an overridden copy of the controller's sentinel.

    Returns False when the controller attaches no sentinel.

    Example:
        >>> permitted_to(controller, "destroy", comment=other_comment)
        False
    """
    sentinel = controller.sentinel
    if sentinel is None:
        return False
    return sentinel.with_overrides(overrides, **kwargs).capability(capability)


def view_helpers(controller: Any) -> dict[str, Any]:
    """Template context entries: the sentinel and a bound ``permitted_to``."""
    return {
        "sentinel": controller.sentinel,
        "permitted_to": functools.partial(permitted_to, controller),
    }
