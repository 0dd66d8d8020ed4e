"""Non-fatal problems recorded while populating a record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

COERCION_FAILED = "coercion_failed"
UNRESOLVED_TARGET = "unresolved_target"
UNKNOWN_RELATIONSHIP = "unknown_relationship"
UNRESOLVED_INVERSE = "unresolved_inverse"


@dataclass(frozen=True)
class Diagnostic:
    kind: str
    entity: str
    field: str
    message: str
    value: Any = None

    def __str__(self) -> str:
        return f"{self.entity}.{self.field}: {self.message}"
