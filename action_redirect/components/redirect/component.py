"""
Redirect component - controller redirect resolution and dispatch.

Invariants:
- I1: At most one redirect is issued per request
- I2: No redirect once the response is committed
- I3: uri takes priority over url, url over controller/action
- I4: Caller params never keep the injected id
- I5: Listeners only see redirects that were sent
"""

from __future__ import annotations

from collections.abc import Iterable

from ._impl import RedirectConfig, RedirectService
from .models import (
    CannotRedirectError,
    InvalidInvocationError,
    NoMappingFoundError,
    RedirectError,
    RedirectInput,
    RedirectIOError,
    RedirectOutput,
    RedirectValidationError,
    ResolveInput,
    ResolveOutput,
)
from .ports import (
    RedirectListenerPort,
    RequestContextPort,
    RulesPort,
    UrlMappingsPort,
)


def _build_config(rules: RulesPort | None) -> RedirectConfig:
    """Build redirect config from rules port."""
    if rules is None:
        return RedirectConfig()

    return RedirectConfig(
        enable_jsessionid=rules.enable_jsessionid(),
        status_code=rules.get_status_code(),
    )


def _create_service(
    url_mappings: UrlMappingsPort,
    listeners: Iterable[RedirectListenerPort],
    rules: RulesPort | None,
) -> RedirectService:
    """Create redirect service from ports."""
    return RedirectService(
        url_mappings=url_mappings,
        listeners=listeners,
        config=_build_config(rules),
    )


def _error_code(error: RedirectError) -> str:
    # RedirectIOError before CannotRedirectError (subclass)
    if isinstance(error, RedirectIOError):
        return "redirect_io_error"
    if isinstance(error, CannotRedirectError):
        return "cannot_redirect"
    if isinstance(error, NoMappingFoundError):
        return "no_mapping_found"
    if isinstance(error, InvalidInvocationError):
        return "invalid_invocation"
    return "redirect_error"


def _convert_error(error: RedirectError) -> RedirectValidationError:
    return RedirectValidationError(code=_error_code(error), message=str(error))


def _invalid_errors(error: ValueError) -> RedirectValidationError:
    return RedirectValidationError(code="invalid_errors", message=str(error), field="errors")


# --- Component Entry Points ---


def run_redirect(
    inp: RedirectInput,
    *,
    url_mappings: UrlMappingsPort,
    context: RequestContextPort,
    listeners: Iterable[RedirectListenerPort] = (),
    rules: RulesPort | None = None,
) -> RedirectOutput:
    """
    Resolve and send a redirect for the current request.

    Args:
        inp: Input containing the redirect target and issuing controller.
        url_mappings: Reverse URL mapping port.
        context: Current request/response.
        listeners: Listeners notified after the redirect is sent.
        rules: Optional rules port for configuration.

    Returns:
        RedirectOutput with the URL sent or errors.
        Errors carried by the target that cannot be merged into the
        controller (different object name) are reported as ``invalid_errors``.
    """
    service = _create_service(url_mappings, listeners, rules)

    try:
        url = service.redirect(inp.target, inp.controller, context)
    except RedirectError as e:
        return RedirectOutput(url=None, errors=[_convert_error(e)], success=False)
    except ValueError as e:
        return RedirectOutput(url=None, errors=[_invalid_errors(e)], success=False)

    return RedirectOutput(url=url, errors=[], success=True)


def run_resolve(
    inp: ResolveInput,
    *,
    url_mappings: UrlMappingsPort,
    context: RequestContextPort,
    listeners: Iterable[RedirectListenerPort] = (),
    rules: RulesPort | None = None,
) -> ResolveOutput:
    """
    Resolve a redirect target without sending it.

    Nothing is sent and the redirect marker is left alone, but errors carried
    by the target are still merged into the issuing controller.

    Args:
        inp: Input containing the redirect target and issuing controller.
        url_mappings: Reverse URL mapping port.
        context: Current request/response.
        listeners: Unused; accepted so every entry point shares one signature.
        rules: Optional rules port for configuration.

    Returns:
        ResolveOutput with the resolved URL or errors.
        Unmergeable target errors are reported as ``invalid_errors``.
    """
    service = _create_service(url_mappings, listeners, rules)

    try:
        url = service.resolve(inp.target, inp.controller, context)
    except RedirectError as e:
        return ResolveOutput(url=None, errors=[_convert_error(e)], success=False)
    except ValueError as e:
        return ResolveOutput(url=None, errors=[_invalid_errors(e)], success=False)

    return ResolveOutput(url=url, errors=[], success=True)


def run(
    inp: RedirectInput | ResolveInput,
    *,
    url_mappings: UrlMappingsPort,
    context: RequestContextPort,
    listeners: Iterable[RedirectListenerPort] = (),
    rules: RulesPort | None = None,
) -> RedirectOutput | ResolveOutput:
    """
    Main entry point for the redirect component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, RedirectInput):
        return run_redirect(
            inp, url_mappings=url_mappings, context=context, listeners=listeners, rules=rules
        )
    elif isinstance(inp, ResolveInput):
        return run_resolve(
            inp, url_mappings=url_mappings, context=context, listeners=listeners, rules=rules
        )
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
