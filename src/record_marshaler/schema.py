from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .errors import SchemaError, UnknownEntityError
from .keypaths import MISSING, KeyPath

AttributeType = str  # see ATTRIBUTE_TYPES
Cardinality = str  # "one" | "many"

STRING = "string"
INTEGER = "integer"
NUMBER = "number"
DECIMAL = "decimal"
BOOLEAN = "boolean"
DATE = "date"
DATETIME = "datetime"
TRANSFORMABLE = "transformable"

ATTRIBUTE_TYPES: Tuple[AttributeType, ...] = (
    STRING,
    INTEGER,
    NUMBER,
    DECIMAL,
    BOOLEAN,
    DATE,
    DATETIME,
    TRANSFORMABLE,
)

TO_ONE = "one"
TO_MANY = "many"
CARDINALITIES: Tuple[Cardinality, ...] = (TO_ONE, TO_MANY)

NO_DEFAULT: Any = MISSING


def _key_paths(key_paths: Any, name: str) -> Tuple[KeyPath, ...]:
    if isinstance(key_paths, str):
        return (key_paths,)
    return tuple(key_paths) or (name,)


@dataclass(frozen=True)
class AttributeDescription:
    """A scalar field of an entity and where to find its source value."""

    name: str
    attribute_type: AttributeType = STRING
    key_paths: Tuple[KeyPath, ...] = ()
    default: Any = NO_DEFAULT
    transformer: Optional[str] = None
    date_format: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise SchemaError("Attribute name must not be empty")
        if self.attribute_type not in ATTRIBUTE_TYPES:
            raise SchemaError(
                f"Attribute {self.name!r} has unsupported type {self.attribute_type!r}"
            )
        if self.transformer and self.attribute_type != TRANSFORMABLE:
            raise SchemaError(
                f"Attribute {self.name!r} names a transformer but is not transformable"
            )
        # Frozen dataclass: normalise through object.__setattr__.
        object.__setattr__(self, "key_paths", _key_paths(self.key_paths, self.name))

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT


@dataclass(frozen=True)
class RelationshipDescription:
    """An edge from one entity to another."""

    name: str
    destination: str
    cardinality: Cardinality = TO_ONE
    key_paths: Tuple[KeyPath, ...] = ()
    primary_key: bool = False
    inverse: Optional[str] = None
    # Used for the inverse edge when no representation of the target describes it.
    inverse_cardinality: Optional[Cardinality] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise SchemaError("Relationship name must not be empty")
        if self.cardinality not in CARDINALITIES:
            raise SchemaError(
                f"Relationship {self.name!r} has unsupported cardinality {self.cardinality!r}"
            )
        if self.inverse_cardinality is not None and self.inverse_cardinality not in CARDINALITIES:
            raise SchemaError(
                f"Relationship {self.name!r} has unsupported inverse cardinality "
                f"{self.inverse_cardinality!r}"
            )
        object.__setattr__(self, "key_paths", _key_paths(self.key_paths, self.name))

    @property
    def to_many(self) -> bool:
        return self.cardinality == TO_MANY


@dataclass
class EntityRepresentation:
    """Attributes and relationships of one entity, in declaration order."""

    entity: str
    attributes: List[AttributeDescription] = field(default_factory=list)
    relationships: List[RelationshipDescription] = field(default_factory=list)
    primary_key: Optional[str] = None

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for item in [*self.attributes, *self.relationships]:
            if item.name in seen:
                raise SchemaError(f"Duplicate field {item.name!r} on {self.entity}")
            seen.add(item.name)
        pk_relationships = [rel.name for rel in self.relationships if rel.primary_key]
        if len(pk_relationships) > 1:
            raise SchemaError(
                f"{self.entity} declares more than one primary key relationship: "
                + ", ".join(pk_relationships)
            )
        if self.primary_key is not None and self.primary_key not in seen:
            raise SchemaError(
                f"Primary key {self.primary_key!r} is not a field of {self.entity}"
            )

    def attribute(self, name: str) -> Optional[AttributeDescription]:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def relationship(self, name: str) -> Optional[RelationshipDescription]:
        for relationship in self.relationships:
            if relationship.name == name:
                return relationship
        return None

    @property
    def primary_key_relationship(self) -> Optional[RelationshipDescription]:
        for relationship in self.relationships:
            if relationship.primary_key:
                return relationship
        return None


class SchemaRegistry:
    """Explicit mapping of entity names to their representations."""

    def __init__(self, representations: Optional[Mapping[str, EntityRepresentation]] = None) -> None:
        self._representations: Dict[str, EntityRepresentation] = {}
        for representation in (representations or {}).values():
            self.add(representation)

    def add(self, representation: EntityRepresentation) -> EntityRepresentation:
        if representation.entity in self._representations:
            raise SchemaError(f"Entity {representation.entity!r} is already registered")
        self._representations[representation.entity] = representation
        return representation

    def representation_for(self, entity: str) -> EntityRepresentation:
        try:
            return self._representations[entity]
        except KeyError:
            raise UnknownEntityError(f"No representation registered for {entity!r}") from None

    def validate(self) -> None:
        """Check that every relationship points at a registered entity."""
        for representation in self._representations.values():
            for relationship in representation.relationships:
                target = self._representations.get(relationship.destination)
                if target is None:
                    raise SchemaError(
                        f"{representation.entity}.{relationship.name} targets unknown "
                        f"entity {relationship.destination!r}"
                    )
                if relationship.inverse and target.relationship(relationship.inverse) is None:
                    raise SchemaError(
                        f"{representation.entity}.{relationship.name} names inverse "
                        f"{relationship.inverse!r} missing on {target.entity}"
                    )

    def __contains__(self, entity: object) -> bool:
        return entity in self._representations

    def __iter__(self) -> Iterator[EntityRepresentation]:
        return iter(self._representations.values())

    def __len__(self) -> int:
        return len(self._representations)
