"""
Conventional reverse URL mapping.

Maps controller/action/id tuples onto ``/{controller}/{action}/{id}``, with
any remaining params as the query string.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import quote, urlencode

RESERVED_PARAMS = frozenset({"controller", "action", "id"})

# RFC 3986 characters allowed unescaped in a fragment
FRAGMENT_SAFE = "/?:@!$&'()*+,;="


class ConventionalUrlCreator:
    """Builds ``/{controller}/{action}/{id}?query#fragment`` URLs."""

    def __init__(self, default_action: str = "index") -> None:
        self._default_action = default_action

    def create_url(
        self,
        controller_name: str | None,
        action_name: str | None,
        params: Mapping[str, Any],
        encoding: str,
        fragment: str | None = None,
    ) -> str:
        action = action_name or self._default_action
        id_value = params.get("id")

        segments: list[Any] = []
        if controller_name:
            segments.append(controller_name)
        if id_value is not None:
            segments.extend([action, id_value])
        elif action != self._default_action:
            segments.append(action)

        url = "/" + "/".join(quote(str(s), safe="", encoding=encoding) for s in segments)

        query = [
            (key, value)
            for key, value in params.items()
            if key not in RESERVED_PARAMS and value is not None
        ]
        if query:
            url += "?" + urlencode(query, doseq=True, encoding=encoding)

        if fragment:
            url += "#" + quote(fragment, safe=FRAGMENT_SAFE, encoding=encoding)

        return url


class ConventionalUrlMappings:
    """Reverse URL mappings for the conventional controller/action layout."""

    def __init__(
        self,
        controllers: Iterable[str] | None = None,
        default_action: str = "index",
    ) -> None:
        self._controllers = frozenset(controllers) if controllers is not None else None
        self._creator = ConventionalUrlCreator(default_action)

    def get_reverse_mapping(
        self,
        controller_name: str | None,
        action_name: str | None,
        params: Mapping[str, Any],
    ) -> ConventionalUrlCreator | None:
        if not controller_name:
            return None
        if self._controllers is not None and controller_name not in self._controllers:
            return None
        return self._creator

    def __repr__(self) -> str:
        controllers = sorted(self._controllers) if self._controllers is not None else "*"
        return f"ConventionalUrlMappings(controllers={controllers})"
