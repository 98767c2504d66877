"""
Controller dispatch routes.

Routes ``/{controller}/{action}`` and ``/{controller}/{action}/{id}`` to
registered controllers. An action that redirects produces a
``RedirectResponse``; one that writes directly produces plain text;
otherwise its return value is rendered as JSON.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response

from action_redirect.adapters.web_request import WebRequestContext
from action_redirect.api.deps import get_redirect_service, get_rules
from action_redirect.components.redirect import RedirectError, RedirectService
from action_redirect.controller import Controller, is_action
from action_redirect.rules.models import Rules

logger = logging.getLogger(__name__)


# --- Registry ---


class ControllerRegistry:
    """Controllers reachable over HTTP, keyed by logical name."""

    def __init__(self) -> None:
        self._controllers: dict[str, type[Controller]] = {}

    def register(self, controller_cls: type[Controller]) -> type[Controller]:
        """Register a controller class. Usable as a class decorator."""
        self._controllers[controller_cls.logical_name()] = controller_cls
        return controller_cls

    def get(self, name: str) -> type[Controller] | None:
        return self._controllers.get(name)

    def names(self) -> list[str]:
        return sorted(self._controllers)

    def __contains__(self, name: object) -> bool:
        return name in self._controllers

    def __iter__(self) -> Iterator[type[Controller]]:
        return iter(list(self._controllers.values()))


def get_controller_registry(request: Request) -> ControllerRegistry:
    registry: ControllerRegistry = request.app.state.controllers
    return registry


# --- Helpers ---


def strip_path_parameters(segment: str) -> str:
    """Drop ``;name=value`` path parameters from a path segment."""
    return segment.split(";", 1)[0]


def render_result(context: WebRequestContext, result: Any) -> Response:
    """Turn the action outcome into an HTTP response."""
    response = context.response
    if response.is_redirect:
        return RedirectResponse(url=response.location or "/", status_code=response.status_code)
    if response.committed:
        return PlainTextResponse(response.content, status_code=response.status_code)
    if isinstance(result, Response):
        return result
    if result is None:
        return Response(status_code=204)
    return JSONResponse(jsonable_encoder(result))


# --- Routes ---

router = APIRouter()


@router.api_route("/{controller}/{action}", methods=["GET", "POST"])
@router.api_route("/{controller}/{action}/{id}", methods=["GET", "POST"])
def dispatch_action(
    controller: str,
    action: str,
    request: Request,
    id: str | None = None,
    registry: ControllerRegistry = Depends(get_controller_registry),
    service: RedirectService = Depends(get_redirect_service),
    rules: Rules = Depends(get_rules),
) -> Response:
    """Invoke a controller action for the current request."""
    action = strip_path_parameters(action)
    if id is not None:
        id = strip_path_parameters(id)

    controller_cls = registry.get(controller)
    if controller_cls is None:
        raise HTTPException(status_code=404, detail=f"Controller '{controller}' not found")

    if action.startswith("_") or not is_action(getattr(controller_cls, action, None)):
        raise HTTPException(
            status_code=404, detail=f"Action '{action}' not found on '{controller}'"
        )

    context = WebRequestContext.from_request(request, controller, action, rules)
    params: dict[str, Any] = dict(request.query_params)
    if id is not None:
        params["id"] = id

    instance = controller_cls(context=context, redirects=service, params=params)

    try:
        result = getattr(instance, action)()
    except RedirectError as e:
        logger.warning("Redirect failed in %s.%s: %s", controller, action, e)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return render_result(context, result)
