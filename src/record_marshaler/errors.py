from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from .diagnostics import Diagnostic


class MarshalError(Exception):
    """Base exception for record marshaling errors."""


class CoercionError(MarshalError, ValueError):
    """Raised when a raw value cannot be converted to an attribute's type."""

    def __init__(self, message: str, value: Any = None) -> None:
        super().__init__(message)
        self.value = value


class StrictCoercionError(MarshalError):
    """Raised after a strict population pass that recorded coercion failures."""

    def __init__(self, entity: str, diagnostics: Sequence["Diagnostic"]) -> None:
        fields = ", ".join(d.field for d in diagnostics)
        super().__init__(f"Coercion failed on {entity} for: {fields}")
        self.entity = entity
        self.diagnostics = list(diagnostics)


class PrimaryKeyRelationshipError(MarshalError):
    """Raised when a primary key relationship cannot be bound."""


class UnresolvedParentIdentityError(PrimaryKeyRelationshipError):
    """Raised when the parent of a primary key relationship has no identity yet."""


class SchemaError(MarshalError):
    """Raised for malformed or inconsistent schema definitions."""


class UnknownEntityError(SchemaError, KeyError):
    """Raised when a schema registry has no representation for an entity."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
