"""Wiring of relationship edges between populated records."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Tuple

from .diagnostics import (UNKNOWN_RELATIONSHIP, UNRESOLVED_INVERSE,
                          UNRESOLVED_TARGET, Diagnostic)
from .errors import PrimaryKeyRelationshipError, UnresolvedParentIdentityError
from .proto import ProtoRecord
from .schema import (TO_MANY, TO_ONE, RelationshipDescription, SchemaRegistry)

LOGGER = logging.getLogger("record_marshaler.relationships")

EdgeEstablisher = Callable[[RelationshipDescription, Any, Any], None]


def establish_edge(relationship: RelationshipDescription, from_record: Any, to_record: Any) -> None:
    """Point ``relationship`` on ``from_record`` at ``to_record``.

    To-one edges are assigned. To-many edges are appended to the existing
    collection, which is created as a list when the record has none; a record
    instance already in the collection is not inserted again.
    """
    if not relationship.to_many:
        setattr(from_record, relationship.name, to_record)
        return

    collection = getattr(from_record, relationship.name, None)
    if collection is None:
        setattr(from_record, relationship.name, [to_record])
        return
    if any(item is to_record for item in collection):
        return
    if hasattr(collection, "append"):
        collection.append(to_record)
    elif hasattr(collection, "add"):
        collection.add(to_record)
    else:
        raise TypeError(
            f"{type(from_record).__name__}.{relationship.name} is not a mutable collection"
        )


class RelationshipEstablisher:
    """Establish every relationship declared for a proto record."""

    def __init__(
        self,
        edge_establisher: Optional[EdgeEstablisher] = None,
        registry: Optional[SchemaRegistry] = None,
    ) -> None:
        self.edge_establisher = edge_establisher or establish_edge
        self.registry = registry

    def establish(self, proto: ProtoRecord) -> List[Diagnostic]:
        diagnostics: List[Diagnostic] = []
        representation = proto.representation

        for name in proto.targets:
            if representation.relationship(name) is None:
                LOGGER.warning("%s has no relationship named %s", proto.entity, name)
                diagnostics.append(
                    Diagnostic(
                        kind=UNKNOWN_RELATIONSHIP,
                        entity=proto.entity,
                        field=name,
                        message="Targets supplied for an undeclared relationship",
                    )
                )

        binding = None
        for relationship in representation.relationships:
            if relationship.primary_key and proto.parent is not None:
                binding = relationship
                continue
            diagnostics.extend(self.establish_relationship(proto, relationship))

        # Recorded before binding, whose failures propagate.
        proto.diagnostics.extend(diagnostics)
        if binding is not None:
            diagnostics.extend(self.bind_primary_key(proto, proto.parent))
        return diagnostics

    def establish_relationship(
        self, proto: ProtoRecord, relationship: RelationshipDescription
    ) -> List[Diagnostic]:
        diagnostics: List[Diagnostic] = []
        resolved: List[Tuple[Any, Optional[ProtoRecord]]] = []
        seen: set[int] = set()

        for target in proto.targets_for(relationship.name):
            record, target_proto = _unwrap(target)
            if record is None:
                LOGGER.warning(
                    "%s.%s target %r has no record", proto.entity, relationship.name, target
                )
                diagnostics.append(
                    Diagnostic(
                        kind=UNRESOLVED_TARGET,
                        entity=proto.entity,
                        field=relationship.name,
                        message="Relationship target has not been materialized",
                        value=target,
                    )
                )
                continue
            if id(record) in seen:
                continue
            seen.add(id(record))
            resolved.append((record, target_proto))

        if not resolved:
            LOGGER.debug("%s.%s has no targets", proto.entity, relationship.name)
            return diagnostics

        if not relationship.to_many:
            if len(resolved) > 1:
                LOGGER.debug(
                    "%s.%s is to-one but got %s targets; keeping the last",
                    proto.entity,
                    relationship.name,
                    len(resolved),
                )
            resolved = resolved[-1:]

        for record, target_proto in resolved:
            diagnostic = self._connect(proto, relationship, record, target_proto)
            if diagnostic is not None:
                diagnostics.append(diagnostic)
        return diagnostics

    def bind_primary_key(
        self, proto: ProtoRecord, parent: Optional[ProtoRecord]
    ) -> List[Diagnostic]:
        relationship = proto.representation.primary_key_relationship
        if relationship is None:
            LOGGER.error("%s declares no primary key relationship", proto.entity)
            raise PrimaryKeyRelationshipError(
                f"{proto.entity} declares no primary key relationship"
            )
        if parent is None:
            LOGGER.error("%s.%s bound without a parent", proto.entity, relationship.name)
            raise PrimaryKeyRelationshipError(
                f"{proto.entity}.{relationship.name} requires a parent proto record"
            )
        if parent.entity != relationship.destination:
            LOGGER.error(
                "%s.%s expects %s, parent is %s",
                proto.entity,
                relationship.name,
                relationship.destination,
                parent.entity,
            )
            raise PrimaryKeyRelationshipError(
                f"{proto.entity}.{relationship.name} expects a {relationship.destination} "
                f"parent, got {parent.entity}"
            )
        if not parent.has_identity or parent.record is None:
            LOGGER.error(
                "Parent %s of %s.%s has no resolved identity",
                parent.entity,
                proto.entity,
                relationship.name,
            )
            raise UnresolvedParentIdentityError(
                f"Parent {parent.entity} must be identified before binding "
                f"{proto.entity}.{relationship.name}"
            )

        diagnostic = self._connect(proto, relationship, parent.record, parent)
        if diagnostic is None:
            return []
        proto.diagnostics.append(diagnostic)
        return [diagnostic]

    def _connect(
        self,
        proto: ProtoRecord,
        relationship: RelationshipDescription,
        record: Any,
        target_proto: Optional[ProtoRecord],
    ) -> Optional[Diagnostic]:
        self.edge_establisher(relationship, proto.record, record)
        if not relationship.inverse:
            return None
        inverse = self._inverse(proto, relationship, record, target_proto)
        if inverse is None:
            LOGGER.warning(
                "Cannot tell whether %s.%s is to-one or to-many; inverse of %s.%s not wired",
                relationship.destination,
                relationship.inverse,
                proto.entity,
                relationship.name,
            )
            return Diagnostic(
                kind=UNRESOLVED_INVERSE,
                entity=proto.entity,
                field=relationship.name,
                message=f"Cardinality of inverse {relationship.inverse!r} is unknown",
                value=record,
            )
        self.edge_establisher(inverse, record, proto.record)
        return None

    def _inverse(
        self,
        proto: ProtoRecord,
        relationship: RelationshipDescription,
        record: Any,
        target_proto: Optional[ProtoRecord],
    ) -> Optional[RelationshipDescription]:
        """Describe the inverse edge, or return ``None`` when its cardinality is unknown.

        The target's representation and then the registry are consulted first.
        Failing those, ``inverse_cardinality`` on ``relationship`` decides, and
        as a last resort the value the target already holds for the field.
        """
        name = relationship.inverse
        if target_proto is not None:
            found = target_proto.representation.relationship(name)
            if found is not None:
                return found
        if self.registry is not None and relationship.destination in self.registry:
            found = self.registry.representation_for(relationship.destination).relationship(name)
            if found is not None:
                return found

        cardinality = relationship.inverse_cardinality
        if cardinality is None:
            current = getattr(record, name, None)
            if current is None:
                return None
            cardinality = TO_MANY if isinstance(current, (list, set)) else TO_ONE
        return RelationshipDescription(
            name=name,
            destination=proto.entity,
            cardinality=cardinality,
            inverse=relationship.name,
        )


def _unwrap(target: Any) -> Tuple[Any, Optional[ProtoRecord]]:
    if isinstance(target, ProtoRecord):
        return target.record, target
    return target, None
