"""
Validation error accumulation for controllers.

A controller carries at most one ``Errors`` collection. ``redirect(errors=...)``
merges the supplied collection into it so validation failures survive the
redirect.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FieldError:
    """A single validation error, optionally bound to a field."""

    object_name: str
    code: str
    message: str
    field: str | None = None
    rejected_value: Any = None

    @property
    def is_global(self) -> bool:
        return self.field is None


class Errors:
    """Ordered collection of validation errors for one target object."""

    def __init__(self, object_name: str) -> None:
        self._object_name = object_name
        self._errors: list[FieldError] = []

    @property
    def object_name(self) -> str:
        return self._object_name

    def reject(self, code: str, message: str = "") -> None:
        """Register a global (object level) error."""
        self._errors.append(
            FieldError(object_name=self._object_name, code=code, message=message)
        )

    def reject_value(
        self,
        field: str,
        code: str,
        message: str = "",
        rejected_value: Any = None,
    ) -> None:
        """Register an error for a specific field."""
        self._errors.append(
            FieldError(
                object_name=self._object_name,
                code=code,
                message=message,
                field=field,
                rejected_value=rejected_value,
            )
        )

    def add_all(self, other: Errors) -> None:
        """
        Append every error of ``other`` to this collection.

        Raises:
            ValueError: If ``other`` was collected for a different object.
        """
        if other.object_name != self._object_name:
            raise ValueError(
                f"Errors object needs to have same object name: "
                f"'{other.object_name}' != '{self._object_name}'"
            )
        self._errors.extend(other.all_errors)

    @property
    def has_errors(self) -> bool:
        return bool(self._errors)

    @property
    def error_count(self) -> int:
        return len(self._errors)

    @property
    def all_errors(self) -> list[FieldError]:
        return list(self._errors)

    @property
    def global_errors(self) -> list[FieldError]:
        return [e for e in self._errors if e.is_global]

    def field_errors(self, field: str) -> list[FieldError]:
        return [e for e in self._errors if e.field == field]

    def __iter__(self) -> Iterator[FieldError]:
        return iter(list(self._errors))

    def __len__(self) -> int:
        return len(self._errors)

    def __repr__(self) -> str:
        return f"Errors(object_name={self._object_name!r}, count={len(self._errors)})"
