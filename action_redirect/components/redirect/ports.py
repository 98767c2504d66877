"""
Redirect component port definitions.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from action_redirect.domain.errors import Errors


@dataclass
class RedirectState:
    """Per-request marker recording that a redirect was issued."""

    issued: bool = False


class UrlCreatorPort(Protocol):
    """Builds a concrete URL for a matched reverse mapping."""

    def create_url(
        self,
        controller_name: str | None,
        action_name: str | None,
        params: Mapping[str, Any],
        encoding: str,
        fragment: str | None = None,
    ) -> str:
        """Create the URL, including the fragment when given."""
        ...


class UrlMappingsPort(Protocol):
    """Reverse URL mapping lookup."""

    def get_reverse_mapping(
        self,
        controller_name: str | None,
        action_name: str | None,
        params: Mapping[str, Any],
    ) -> UrlCreatorPort | None:
        """Find the mapping for a controller/action/params tuple, or None."""
        ...


class RequestContextPort(Protocol):
    """Current request and response, as seen by the redirect subsystem."""

    redirect_state: RedirectState

    @property
    def controller_name(self) -> str | None:
        """Controller handling the current request."""
        ...

    @property
    def application_uri(self) -> str:
        """Base URI the application is mounted at."""
        ...

    @property
    def character_encoding(self) -> str:
        """Character encoding of the current request."""
        ...

    def is_committed(self) -> bool:
        """Check if response output has already started."""
        ...

    def encode_redirect_url(self, url: str) -> str:
        """Embed the session id in ``url`` when required."""
        ...

    def send_redirect(self, url: str, status_code: int = 302) -> None:
        """Send the redirect. May raise OSError."""
        ...


class RedirectListenerPort(Protocol):
    """Notified after each successful redirect."""

    def response_redirected(self, url: str) -> None:
        """Handle a redirect to ``url``."""
        ...


class ControllerPort(Protocol):
    """Controller issuing the redirect."""

    errors: Errors | None

    @property
    def controller_name(self) -> str | None:
        """Logical controller name."""
        ...


class RulesPort(Protocol):
    """Port for redirect configuration."""

    def enable_jsessionid(self) -> bool:
        """Check if redirect URLs get the session id embedded."""
        ...

    def get_status_code(self) -> int:
        """Get the HTTP status code used for redirects."""
        ...
