"""
Redirect component - controller redirect resolution and dispatch.
"""

from ._impl import (
    DEFAULT_CONFIG,
    RedirectConfig,
    RedirectDispatcher,
    RedirectGuard,
    RedirectResolver,
    RedirectService,
    create_redirect_service,
    establish_action_name,
    find_property_name_for_value,
    logical_property_name,
)
from .component import run, run_redirect, run_resolve
from .models import (
    ByControllerAction,
    ByURI,
    ByURL,
    CannotRedirectError,
    InvalidInvocationError,
    NoMappingFoundError,
    RedirectError,
    RedirectInput,
    RedirectIOError,
    RedirectOutput,
    RedirectRequest,
    RedirectValidationError,
    ResolveInput,
    ResolveOutput,
    parse_redirect_arguments,
)
from .ports import (
    ControllerPort,
    RedirectListenerPort,
    RedirectState,
    RequestContextPort,
    RulesPort,
    UrlCreatorPort,
    UrlMappingsPort,
)

__all__ = [
    # Entry points
    "run",
    "run_redirect",
    "run_resolve",
    # Targets
    "ByControllerAction",
    "ByURI",
    "ByURL",
    "RedirectRequest",
    "parse_redirect_arguments",
    # Input/output models
    "RedirectInput",
    "RedirectOutput",
    "RedirectValidationError",
    "ResolveInput",
    "ResolveOutput",
    # Exceptions
    "CannotRedirectError",
    "InvalidInvocationError",
    "NoMappingFoundError",
    "RedirectError",
    "RedirectIOError",
    # Ports
    "ControllerPort",
    "RedirectListenerPort",
    "RedirectState",
    "RequestContextPort",
    "RulesPort",
    "UrlCreatorPort",
    "UrlMappingsPort",
    # _impl re-exports
    "DEFAULT_CONFIG",
    "RedirectConfig",
    "RedirectDispatcher",
    "RedirectGuard",
    "RedirectResolver",
    "RedirectService",
    "create_redirect_service",
    "establish_action_name",
    "find_property_name_for_value",
    "logical_property_name",
]
