"""
Starlette integration for Sentinel.

``AccessControlledEndpoint`` is an ``HTTPEndpoint`` that runs the access
check before its method handler. HTTP methods are mapped onto the RESTful
action names used by convention-based attachment, so a resource endpoint
can be guarded exactly like a controller.

Note:
    Starlette is an optional dependency. Install with:
    pip install sentinel-authz[starlette]

Example:
    >>> from starlette.applications import Starlette
    >>> from starlette.routing import Route
    >>> from sentinel.contrib.starlette import AccessControlledEndpoint
    >>>
    >>> class UsersController(AccessControlledEndpoint, restful_access_control=True):
    ...     async def load(self, request):
    ...         if "id" in request.path_params:
    ...             self.user = await users.get(request.path_params["id"])
    ...
    ...     async def get(self, request):
    ...         ...
    >>>
    >>> app = Starlette(routes=[
    ...     Route("/users", UsersController),
    ...     Route("/users/{id}", UsersController),
    ... ])
"""

from __future__ import annotations

import inspect
import logging
import re
from typing import Any, ClassVar

from starlette.concurrency import run_in_threadpool
from starlette.endpoints import HTTPEndpoint
from starlette.requests import Request
from starlette.responses import Response as StarletteResponse

from sentinel.access import render_unauthorized
from sentinel.controller import AccessControlled
from sentinel.types import Response

logger = logging.getLogger(__name__)

HTML_MEDIA_TYPES = frozenset({"text/html", "application/xhtml+xml", "text/*", "*/*"})

MEDIA_TYPE_FORMATS = {
    "application/json": "json",
    "application/xml": "xml",
    "text/xml": "xml",
    "text/plain": "text",
    "text/csv": "csv",
}

COLLECTION_ACTIONS = {
    "GET": "index",
    "HEAD": "index",
    "POST": "create",
}

MEMBER_ACTIONS = {
    "GET": "show",
    "HEAD": "show",
    "PUT": "update",
    "PATCH": "update",
    "DELETE": "destroy",
}

QUALITY_PARAM = re.compile(r"q=(0(?:\.\d{0,3})?|1(?:\.0{0,3})?)", re.IGNORECASE)


def _quality(params: list[str]) -> float:
    for param in params:
        match = QUALITY_PARAM.fullmatch(param.strip())
        if match:
            return float(match.group(1))
    return 1.0


def negotiate_format(accept: str | None) -> str:
    """
    Pick the request format from an Accept header.

    Media ranges are tried in order of their ``q`` value, ties keeping
    header order; ranges with ``q=0`` are skipped. The first recognised
    range wins. A missing header, a wildcard or an HTML type means "html";
    an unrecognised type means "any".

    Example:
        >>> negotiate_format("application/json, text/html;q=0.9")
        'json'
        >>> negotiate_format("text/html;q=0.1, application/json")
        'json'
    """
    if not accept:
        return "html"

    ranges = []
    for media_range in accept.split(","):
        media_type, *params = media_range.split(";")
        quality = _quality(params)
        if quality > 0:
            ranges.append((quality, media_type.strip().lower()))
    ranges.sort(key=lambda item: item[0], reverse=True)

    for _, media_type in ranges:
        if media_type in HTML_MEDIA_TYPES:
            return "html"
        if media_type in MEDIA_TYPE_FORMATS:
            return MEDIA_TYPE_FORMATS[media_type]
    return "any"


def to_starlette_response(response: Response) -> StarletteResponse:
    """Convert a handler's response into a Starlette response."""
    return StarletteResponse(
        content=response.body,
        status_code=response.status,
        media_type=response.content_type,
        headers=response.headers or None,
    )


class AccessControlledEndpoint(HTTPEndpoint, AccessControlled):
    """
    Starlette endpoint guarded by Sentinel.

    Attributes:
        action_map: Explicit HTTP method -> action name overrides.
        member_param: Path parameter whose presence marks a member route
            (``/users/{id}`` is "show", ``/users`` is "index").
    """

    action_map: ClassVar[dict[str, str]] = {}
    member_param: ClassVar[str] = "id"

    request: Request
    action_name: str
    request_format: str

    @property
    def current_user(self) -> Any:
        """The user set by authentication middleware, if any."""
        return self.scope.get("user")

    def resolve_action(self, request: Request) -> str:
        method = request.method.upper()
        if method in self.action_map:
            return self.action_map[method]
        if self.member_param in request.path_params:
            return MEMBER_ACTIONS.get(method, method.lower())
        return COLLECTION_ACTIONS.get(method, method.lower())

    async def load(self, request: Request) -> None:
        """Hook for loading the subject before access is checked."""

    async def dispatch(self) -> None:
        request = self.request = Request(self.scope, receive=self.receive)
        self.action_name = self.resolve_action(request)
        self.request_format = negotiate_format(request.headers.get("accept"))

        await self.load(request)
        outcome = self.check_access()

        if outcome.halted:
            logger.debug(
                f"{type(self).__name__}: '{self.action_name}' halted by access control"
            )
            response = outcome.response or render_unauthorized(self)
            await to_starlette_response(response)(self.scope, self.receive, self.send)
            return

        # load() and the handler share one Request; the body is received once
        handler_name = (
            "get"
            if request.method == "HEAD" and not hasattr(self, "head")
            else request.method.lower()
        )
        handler = getattr(self, handler_name, self.method_not_allowed)
        if inspect.iscoroutinefunction(handler):
            handler_response = await handler(request)
        else:
            handler_response = await run_in_threadpool(handler, request)
        await handler_response(self.scope, self.receive, self.send)
