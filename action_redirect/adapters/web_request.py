"""
Request context backed by a Starlette/FastAPI request.

Holds the per-request redirect marker and an in-memory response that the
HTTP layer turns into a real response once the action returns.
"""

from __future__ import annotations

import codecs
import re
from dataclasses import dataclass, field
from urllib.parse import urlsplit, urlunsplit

from fastapi import Request

from action_redirect.components.redirect import RedirectState
from action_redirect.rules.models import Rules


@dataclass
class ResponseState:
    """Response being built for the current request."""

    status_code: int = 200
    location: str | None = None
    committed: bool = False
    body: list[str] = field(default_factory=list)

    def write(self, text: str) -> None:
        """Write directly to the response. Commits it."""
        self.body.append(text)
        self.committed = True

    @property
    def content(self) -> str:
        return "".join(self.body)

    @property
    def is_redirect(self) -> bool:
        return self.location is not None


def parse_charset(content_type: str | None) -> str | None:
    """Extract the charset parameter from a Content-Type header."""
    if not content_type:
        return None
    for part in content_type.split(";")[1:]:
        key, _, value = part.strip().partition("=")
        if key.strip().lower() == "charset" and value:
            return value.strip().strip('"')
    return None


def resolve_charset(content_type: str | None, default: str) -> str:
    """Charset from a Content-Type header, or default when missing or unknown."""
    charset = parse_charset(content_type)
    if charset is None:
        return default
    try:
        codecs.lookup(charset)
    except LookupError:
        return default
    return charset


class WebRequestContext:
    """Current request/response for controller actions."""

    def __init__(
        self,
        *,
        controller_name: str | None = None,
        action_name: str | None = None,
        application_uri: str = "",
        character_encoding: str = "utf-8",
        host: str | None = None,
        session_id: str | None = None,
        session_id_from_cookie: bool = False,
        session_url_parameter: str = "jsessionid",
    ) -> None:
        self.redirect_state = RedirectState()
        self.response = ResponseState()
        self._controller_name = controller_name
        self._action_name = action_name
        self._application_uri = application_uri
        self._character_encoding = character_encoding
        self._host = host
        self._session_id = session_id
        self._session_id_from_cookie = session_id_from_cookie
        self._session_url_parameter = session_url_parameter

    @classmethod
    def from_request(
        cls,
        request: Request,
        controller_name: str | None,
        action_name: str | None,
        rules: Rules,
    ) -> WebRequestContext:
        """Build the context for an incoming request."""
        cookie_name = rules.session.cookie_name
        url_parameter = rules.session.url_parameter

        session_id = request.cookies.get(cookie_name)
        from_cookie = session_id is not None
        if session_id is None:
            match = re.search(rf";{re.escape(url_parameter)}=([^;/?#]+)", request.url.path)
            if match:
                session_id = match.group(1)

        return cls(
            controller_name=controller_name,
            action_name=action_name,
            application_uri=request.scope.get("root_path", ""),
            character_encoding=resolve_charset(
                request.headers.get("content-type"), rules.encoding.default_charset
            ),
            host=request.url.hostname,
            session_id=session_id,
            session_id_from_cookie=from_cookie,
            session_url_parameter=url_parameter,
        )

    @property
    def controller_name(self) -> str | None:
        return self._controller_name

    @property
    def action_name(self) -> str | None:
        return self._action_name

    @property
    def application_uri(self) -> str:
        return self._application_uri

    @property
    def character_encoding(self) -> str:
        return self._character_encoding

    def is_committed(self) -> bool:
        return self.response.committed

    def encode_redirect_url(self, url: str) -> str:
        """
        Add ``;jsessionid=<id>`` to the URL path when the session is not
        tracked by cookie and the URL stays on this host.
        """
        if not self._session_id or self._session_id_from_cookie:
            return url

        parts = urlsplit(url)
        if parts.netloc and parts.hostname != self._host:
            return url

        marker = f";{self._session_url_parameter}="
        if marker in parts.path:
            return url

        path = parts.path or ("/" if parts.netloc else "")
        path += f"{marker}{self._session_id}"
        return urlunsplit((parts.scheme, parts.netloc, path, parts.query, parts.fragment))

    def send_redirect(self, url: str, status_code: int = 302) -> None:
        if self.response.committed:
            raise RuntimeError("Cannot send redirect after the response has been committed")
        self.response.status_code = status_code
        self.response.location = url
        self.response.committed = True
