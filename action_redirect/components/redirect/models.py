"""
Redirect component input/output models.

A redirect target is one of three variants, tried in priority order when
parsed from keyword arguments: ``uri``, then ``url``, then the
controller/action form.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from action_redirect.domain.errors import Errors

# --- Argument Keys ---

ARGUMENT_URI = "uri"
ARGUMENT_URL = "url"
ARGUMENT_CONTROLLER = "controller"
ARGUMENT_ACTION = "action"
ARGUMENT_ID = "id"
ARGUMENT_PARAMS = "params"
ARGUMENT_FRAGMENT = "fragment"
ARGUMENT_ERRORS = "errors"


# --- Exceptions ---


class RedirectError(Exception):
    """Base class for redirect failures."""


class InvalidInvocationError(RedirectError, TypeError):
    """Raised when redirect() is called without arguments."""

    def __init__(self, message: str = "redirect() requires at least one argument") -> None:
        super().__init__(message)


class CannotRedirectError(RedirectError):
    """Raised when a redirect was already issued or the response is committed."""


class RedirectIOError(CannotRedirectError):
    """Raised when the transport fails while sending the redirect."""

    def __init__(self, url: str, cause: OSError) -> None:
        self.url = url
        super().__init__(f"Failed to send redirect to {url}: {cause}")


class NoMappingFoundError(RedirectError):
    """Raised when no reverse URL mapping matches the controller/action/params."""

    def __init__(
        self,
        controller_name: str | None,
        action_name: str | None,
        params: Mapping[str, Any],
    ) -> None:
        self.controller_name = controller_name
        self.action_name = action_name
        self.params = dict(params)
        super().__init__(
            f"No URL mapping found for controller [{controller_name}] "
            f"and action [{action_name}] with params [{self.params}]"
        )


# --- Redirect Targets ---


@dataclass(frozen=True)
class ByURI:
    """Redirect to a path relative to the application base URI."""

    uri: str
    errors: Errors | None = None


@dataclass(frozen=True)
class ByURL:
    """Redirect to a URL used verbatim."""

    url: str
    errors: Errors | None = None


@dataclass(frozen=True)
class ByControllerAction:
    """Redirect to a controller action via reverse URL mapping."""

    controller: str | None = None
    action: Any = None
    id: Any = None
    params: Mapping[str, Any] | None = None
    fragment: str | None = None
    errors: Errors | None = None


RedirectRequest: TypeAlias = ByURI | ByURL | ByControllerAction


def parse_redirect_arguments(arguments: Mapping[str, Any] | None) -> RedirectRequest:
    """
    Build a typed redirect target from keyword-style arguments.

    Raises:
        InvalidInvocationError: If no arguments were supplied.
    """
    if not arguments:
        raise InvalidInvocationError()

    errors = arguments.get(ARGUMENT_ERRORS)

    uri = arguments.get(ARGUMENT_URI)
    if uri is not None:
        return ByURI(uri=str(uri), errors=errors)

    if arguments.get(ARGUMENT_URL) is not None:
        return ByURL(url=str(arguments[ARGUMENT_URL]), errors=errors)

    controller = arguments.get(ARGUMENT_CONTROLLER)
    fragment = arguments.get(ARGUMENT_FRAGMENT)
    return ByControllerAction(
        controller=str(controller) if controller is not None else None,
        action=arguments.get(ARGUMENT_ACTION),
        id=arguments.get(ARGUMENT_ID),
        params=arguments.get(ARGUMENT_PARAMS),
        fragment=str(fragment) if fragment is not None else None,
        errors=errors,
    )


# --- Validation Error ---


@dataclass(frozen=True)
class RedirectValidationError:
    """Redirect failure reported by the component entry points."""

    code: str
    message: str
    field: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class RedirectInput:
    """Input for resolving and issuing a redirect."""

    target: RedirectRequest
    controller: Any = None


@dataclass(frozen=True)
class ResolveInput:
    """Input for resolving a redirect target without sending it."""

    target: RedirectRequest
    controller: Any = None


# --- Output Models ---


@dataclass(frozen=True)
class RedirectOutput:
    """Output of an issued redirect."""

    url: str | None
    errors: list[RedirectValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ResolveOutput:
    """Output of a resolved redirect target."""

    url: str | None
    errors: list[RedirectValidationError] = field(default_factory=list)
    success: bool = True
