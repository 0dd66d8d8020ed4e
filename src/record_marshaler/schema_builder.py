"""Build schema registries from declarative mapping documents.

The document layout, usually kept in YAML::

    entities:
      Article:
        primary_key: id
        attributes:
          - name: title
            type: string
            key_paths: [headline, name]
          - name: published
            type: date
            date_format: "%Y-%m-%d"
        relationships:
          - name: author
            entity: Person
            cardinality: one
            inverse: articles
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import SchemaError
from .schema import (ATTRIBUTE_TYPES, NO_DEFAULT, STRING, TO_ONE,
                     AttributeDescription, EntityRepresentation,
                     RelationshipDescription, SchemaRegistry)

KeyPathModel = Union[str, List[Union[str, int]]]


class AttributeModel(BaseModel):
    name: str = Field(min_length=1)
    type: str = STRING
    key_paths: List[KeyPathModel] = Field(default_factory=list)
    default: Any = None
    transformer: Optional[str] = None
    date_format: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class RelationshipModel(BaseModel):
    name: str = Field(min_length=1)
    entity: str = Field(min_length=1)
    cardinality: Literal["one", "many"] = TO_ONE
    key_paths: List[KeyPathModel] = Field(default_factory=list)
    primary_key: bool = False
    inverse: Optional[str] = None
    inverse_cardinality: Optional[Literal["one", "many"]] = None

    model_config = ConfigDict(extra="forbid")


class EntityModel(BaseModel):
    primary_key: Optional[str] = None
    attributes: List[AttributeModel] = Field(default_factory=list)
    relationships: List[RelationshipModel] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class SchemaDocument(BaseModel):
    entities: Dict[str, EntityModel]

    model_config = ConfigDict(extra="forbid")


def _key_paths(values: List[KeyPathModel]) -> tuple:
    return tuple(value if isinstance(value, str) else tuple(value) for value in values)


def _attribute(model: AttributeModel) -> AttributeDescription:
    if model.type not in ATTRIBUTE_TYPES:
        raise SchemaError(
            f"Attribute {model.name!r} has unsupported type {model.type!r}; "
            f"expected one of {', '.join(ATTRIBUTE_TYPES)}"
        )
    # An explicit ``default: null`` is a default; leaving the key out is not.
    default = model.default if "default" in model.model_fields_set else NO_DEFAULT
    return AttributeDescription(
        name=model.name,
        attribute_type=model.type,
        key_paths=_key_paths(model.key_paths),
        default=default,
        transformer=model.transformer,
        date_format=model.date_format,
    )


def _relationship(model: RelationshipModel) -> RelationshipDescription:
    return RelationshipDescription(
        name=model.name,
        destination=model.entity,
        cardinality=model.cardinality,
        key_paths=_key_paths(model.key_paths),
        primary_key=model.primary_key,
        inverse=model.inverse,
        inverse_cardinality=model.inverse_cardinality,
    )


def build_registry(document: Mapping[str, Any]) -> SchemaRegistry:
    """Validate ``document`` and turn it into a :class:`SchemaRegistry`."""
    try:
        parsed = SchemaDocument.model_validate(document)
    except ValidationError as exc:
        raise SchemaError(f"Invalid schema document: {exc}") from exc

    registry = SchemaRegistry()
    for entity, model in parsed.entities.items():
        registry.add(
            EntityRepresentation(
                entity=entity,
                attributes=[_attribute(item) for item in model.attributes],
                relationships=[_relationship(item) for item in model.relationships],
                primary_key=model.primary_key,
            )
        )
    registry.validate()
    return registry


def load_registry(path: Union[str, Path]) -> SchemaRegistry:
    """Read a YAML (or JSON) schema document from ``path``."""
    source = Path(path)
    try:
        with source.open("r", encoding="utf-8") as fh:
            document = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise SchemaError(f"Could not parse {source}: {exc}") from exc
    if not isinstance(document, Mapping):
        raise SchemaError(f"{source} does not contain a schema mapping")
    return build_registry(document)
