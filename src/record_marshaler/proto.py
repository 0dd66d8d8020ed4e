"""Staging structures pairing source documents with destination records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .diagnostics import Diagnostic
from .keypaths import MISSING, Document
from .schema import EntityRepresentation


@dataclass(eq=False)
class ProtoRecord:
    """One source sub-document, its representation and its destination record.

    ``targets`` holds the related proto records (or finished records) keyed by
    relationship name; the driver fills it in before relationships are
    established. ``primary_key`` stays ``MISSING`` until the driver has
    resolved this record's identity.
    """

    record: Any
    representation: EntityRepresentation
    document: Mapping[str, Any] = field(default_factory=dict)
    primary_key: Any = MISSING
    parent: Optional["ProtoRecord"] = None
    targets: Dict[str, List[Any]] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def __post_init__(self) -> None:
        if isinstance(self.document, Document):
            self.document = self.document.data

    @property
    def entity(self) -> str:
        return self.representation.entity

    @property
    def has_identity(self) -> bool:
        return self.primary_key is not MISSING and self.primary_key is not None

    def resolve_identity(self, primary_key: Any) -> None:
        self.primary_key = primary_key

    def add_target(self, relationship: str, target: Any) -> None:
        self.targets.setdefault(relationship, []).append(target)

    def add_targets(self, relationship: str, targets: Iterable[Any]) -> None:
        self.targets.setdefault(relationship, []).extend(targets)

    def targets_for(self, relationship: str) -> List[Any]:
        return list(self.targets.get(relationship, ()))

    def __repr__(self) -> str:
        identity = "unresolved" if not self.has_identity else repr(self.primary_key)
        return f"<ProtoRecord {self.entity} id={identity}>"
