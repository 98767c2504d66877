"""
Controller base class.

Controllers group actions under a logical name derived from the class name
(``OrdersController`` -> ``orders``) and issue redirects through an
injected RedirectService.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from action_redirect.components.redirect import (
    ByControllerAction,
    ByURI,
    ByURL,
    InvalidInvocationError,
    RedirectService,
    RequestContextPort,
    logical_property_name,
    parse_redirect_arguments,
)
from action_redirect.domain.errors import Errors

F = TypeVar("F", bound=Callable[..., Any])

ACTION_MARKER = "__controller_action__"


def action(func: F) -> F:
    """Mark a controller method as reachable through HTTP dispatch."""
    setattr(func, ACTION_MARKER, True)
    return func


def is_action(member: Any) -> bool:
    return callable(member) and getattr(member, ACTION_MARKER, False) is True


class Controller:
    """Base class for controllers."""

    def __init__(
        self,
        context: RequestContextPort,
        redirects: RedirectService,
        params: Mapping[str, Any] | None = None,
    ) -> None:
        self.context = context
        self.redirects = redirects
        self.params: dict[str, Any] = dict(params or {})
        self.errors: Errors | None = None

    @classmethod
    def logical_name(cls) -> str:
        return logical_property_name(cls.__name__)

    @property
    def controller_name(self) -> str:
        return self.logical_name()

    def redirect(
        self,
        target: ByURI | ByURL | ByControllerAction | Mapping[str, Any] | None = None,
        /,
        **arguments: Any,
    ) -> str:
        """
        Redirect the current request.

        Accepts a typed target, a mapping of redirect arguments, or the same
        arguments as keywords (``uri``, ``url``, ``controller``, ``action``,
        ``id``, ``params``, ``fragment``, ``errors``).

        Returns:
            The URL sent to the client.

        Raises:
            InvalidInvocationError: If called without arguments or with a
                positional argument that is neither a target nor a mapping.
            CannotRedirectError: If the request was already redirected or the
                response is committed.
            NoMappingFoundError: If no URL mapping matches.
        """
        if isinstance(target, (ByURI, ByURL, ByControllerAction)):
            if arguments:
                raise InvalidInvocationError(
                    "redirect() takes either a redirect target or keyword arguments"
                )
            request = target
        elif target is not None and not isinstance(target, Mapping):
            raise InvalidInvocationError(
                f"redirect() takes a redirect target or a mapping, not {type(target).__name__}"
            )
        else:
            merged: dict[str, Any] = dict(target or {})
            merged.update(arguments)
            request = parse_redirect_arguments(merged)

        return self.redirects.redirect(request, self, self.context)
