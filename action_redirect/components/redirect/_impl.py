"""
RedirectService - controller redirect resolution and dispatch.

Turns a redirect target (URI, URL, or controller/action/params) into a
concrete URL through reverse URL mapping, then sends the redirect.

Key behaviors:
- ``uri`` wins over ``url``, which wins over controller/action
- At most one redirect per request
- No redirect once the response is committed
- Caller-supplied params are never mutated
- Listeners see the final (session-encoded) URL, in registration order
"""

from __future__ import annotations

import inspect
import logging
from collections import UserString
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from action_redirect.domain.errors import Errors

from .models import (
    ARGUMENT_ID,
    ByControllerAction,
    ByURI,
    ByURL,
    CannotRedirectError,
    InvalidInvocationError,
    NoMappingFoundError,
    RedirectIOError,
    RedirectRequest,
)
from .ports import (
    ControllerPort,
    RedirectListenerPort,
    RequestContextPort,
    UrlMappingsPort,
)

logger = logging.getLogger(__name__)

CONTROLLER_SUFFIX = "Controller"


# --- Configuration ---


@dataclass(frozen=True)
class RedirectConfig:
    """Redirect configuration from rules."""

    enable_jsessionid: bool = False
    status_code: int = 302


DEFAULT_CONFIG = RedirectConfig()


# --- Naming ---


def logical_property_name(class_name: str, suffix: str = CONTROLLER_SUFFIX) -> str:
    """
    Convert a class name to its logical property name.

    ``BookStoreController`` becomes ``bookStore``. A leading acronym is kept
    as-is, so ``URLController`` becomes ``URL``.
    """
    name = class_name.rsplit(".", 1)[-1]
    if suffix and name.endswith(suffix) and name != suffix:
        name = name[: -len(suffix)]

    if not name:
        return name
    if len(name) > 1 and name[0].isupper() and name[1].isupper():
        return name
    return name[0].lower() + name[1:]


def _unwrap(candidate: Any) -> Any:
    # staticmethod/classmethod objects as stored in the class dict
    if isinstance(candidate, (staticmethod, classmethod)):
        return candidate.__func__
    return candidate


def find_property_name_for_value(target: Any, value: Any) -> str | None:
    """
    Find the public attribute name on ``target`` holding ``value``.

    Bound methods match the function they wrap, so ``controller.show`` and
    ``OrdersController.show`` both resolve to ``"show"``.
    """
    value_func = getattr(value, "__func__", None)

    for name, candidate in inspect.getmembers_static(target):
        if name.startswith("_"):
            continue
        candidate = _unwrap(candidate)
        if candidate is value:
            return name
        if value_func is not None and candidate is value_func:
            return name

    return None


def establish_action_name(action_ref: Any, target: Any) -> str | None:
    """Resolve an action reference (name or callable) to an action name."""
    if isinstance(action_ref, str):
        return action_ref
    if isinstance(action_ref, UserString):
        return str(action_ref)
    if callable(action_ref) and target is not None:
        return find_property_name_for_value(target, action_ref)
    return None


def _merge_errors(controller: ControllerPort | None, errors: Errors | None) -> None:
    if controller is None or errors is None:
        return
    if controller.errors is None:
        controller.errors = errors
    else:
        controller.errors.add_all(errors)


# --- Guard ---


class RedirectGuard:
    """Rejects a redirect once one was issued or the response is committed."""

    def check(self, context: RequestContextPort) -> None:
        """
        Raises:
            CannotRedirectError: If the redirect is not allowed.
        """
        if context.redirect_state.issued:
            raise CannotRedirectError(
                "Cannot redirect: a redirect was already issued for this request."
            )
        if context.is_committed():
            raise CannotRedirectError(
                "Cannot redirect: the response has already been committed."
            )


# --- Resolver ---


class RedirectResolver:
    """Resolves redirect targets into URLs."""

    def __init__(self, url_mappings: UrlMappingsPort) -> None:
        self._url_mappings = url_mappings

    def resolve(
        self,
        target: RedirectRequest | None,
        controller: ControllerPort | None,
        context: RequestContextPort,
    ) -> str:
        """
        Resolve ``target`` to the URL to redirect to.

        Merges ``target.errors`` into the controller errors as a side effect.

        Raises:
            InvalidInvocationError: If no target is given.
            NoMappingFoundError: If no reverse mapping matches.
        """
        if target is None:
            raise InvalidInvocationError()

        _merge_errors(controller, target.errors)

        if isinstance(target, ByURI):
            return context.application_uri + target.uri
        if isinstance(target, ByURL):
            return target.url
        return self._resolve_mapping(target, controller, context)

    def _resolve_mapping(
        self,
        target: ByControllerAction,
        controller: ControllerPort | None,
        context: RequestContextPort,
    ) -> str:
        action_name = establish_action_name(target.action, controller)

        controller_name = target.controller
        if controller_name is None and controller is not None:
            controller_name = controller.controller_name
        if controller_name is None:
            controller_name = context.controller_name

        params: dict[str, Any] = dict(target.params) if target.params else {}
        if target.id is not None:
            params[ARGUMENT_ID] = target.id

        logger.debug(
            "Reverse mapping lookup: controller=%s action=%s params=%s mappings=%r",
            controller_name,
            action_name,
            params,
            self._url_mappings,
        )

        url_creator = self._url_mappings.get_reverse_mapping(
            controller_name, action_name, params
        )
        if url_creator is None:
            logger.debug(
                "No reverse mapping for controller=%s action=%s params=%s",
                controller_name,
                action_name,
                params,
            )
            raise NoMappingFoundError(controller_name, action_name, params)

        url = url_creator.create_url(
            controller_name,
            action_name,
            params,
            context.character_encoding,
            target.fragment,
        )
        logger.debug("Redirect target mapped to %s", url)
        return url


# --- Dispatcher ---


class RedirectDispatcher:
    """Sends redirects and notifies listeners."""

    def __init__(
        self,
        listeners: Iterable[RedirectListenerPort] = (),
        config: RedirectConfig | None = None,
    ) -> None:
        self._listeners = tuple(listeners)
        self._config = config or DEFAULT_CONFIG

    @property
    def listeners(self) -> tuple[RedirectListenerPort, ...]:
        return self._listeners

    def dispatch(self, url: str, context: RequestContextPort) -> str:
        """
        Send a redirect to ``url`` and mark the request as redirected.

        Returns:
            The URL actually sent (session-encoded when enabled).

        Raises:
            RedirectIOError: If the transport fails; the request stays unmarked.
        """
        logger.debug("Redirecting to %s", url)

        redirect_url = (
            context.encode_redirect_url(url) if self._config.enable_jsessionid else url
        )

        try:
            context.send_redirect(redirect_url, self._config.status_code)
        except OSError as e:
            raise RedirectIOError(url, e) from e

        for listener in self._listeners:
            listener.response_redirected(redirect_url)

        context.redirect_state.issued = True
        return redirect_url


# --- Redirect Service ---


class RedirectService:
    """
    Redirect service.

    Guards, resolves and dispatches controller redirects.
    """

    def __init__(
        self,
        url_mappings: UrlMappingsPort,
        listeners: Iterable[RedirectListenerPort] = (),
        config: RedirectConfig | None = None,
    ) -> None:
        """Initialize service."""
        self._config = config or DEFAULT_CONFIG
        self._guard = RedirectGuard()
        self._resolver = RedirectResolver(url_mappings)
        self._dispatcher = RedirectDispatcher(listeners, self._config)

    @property
    def config(self) -> RedirectConfig:
        return self._config

    def resolve(
        self,
        target: RedirectRequest | None,
        controller: ControllerPort | None,
        context: RequestContextPort,
    ) -> str:
        """Resolve ``target`` without sending anything."""
        return self._resolver.resolve(target, controller, context)

    def redirect(
        self,
        target: RedirectRequest | None,
        controller: ControllerPort | None,
        context: RequestContextPort,
    ) -> str:
        """
        Issue a redirect for the current request.

        Returns:
            The URL sent to the client.
        """
        if target is None:
            raise InvalidInvocationError()

        self._guard.check(context)
        url = self._resolver.resolve(target, controller, context)
        return self._dispatcher.dispatch(url, context)


# --- Factory ---


def create_redirect_service(
    url_mappings: UrlMappingsPort,
    listeners: Iterable[RedirectListenerPort] = (),
    config: RedirectConfig | None = None,
) -> RedirectService:
    """Create a RedirectService."""
    return RedirectService(
        url_mappings=url_mappings,
        listeners=listeners,
        config=config,
    )

