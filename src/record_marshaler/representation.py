"""Derive entity representations from SQLAlchemy declarative classes.

Mapping metadata rides on the ``info`` dictionaries SQLAlchemy already
carries for columns and relationships::

    class Article(Base):
        __tablename__ = "article"

        id: Mapped[int] = mapped_column(primary_key=True, info={"key_paths": ["article_id", "id"]})
        body: Mapped[dict] = mapped_column(JSON, info={"transformer": "markdown"})
        author: Mapped["Person"] = relationship(info={"key_paths": ["writer"]})

Instances of the mapped classes can then be used directly as records.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from sqlalchemy import (JSON, Boolean, Date, DateTime, Float, Integer,
                        Interval, LargeBinary, Numeric, PickleType, String)
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable

from .errors import SchemaError
from .schema import (BOOLEAN, DATE, DATETIME, DECIMAL, INTEGER, NUMBER, STRING,
                     TO_MANY, TO_ONE, TRANSFORMABLE, AttributeDescription,
                     AttributeType, EntityRepresentation,
                     RelationshipDescription, SchemaRegistry)


def map_column_type(column_type: Any) -> AttributeType:
    # Float and Integer are checked before Numeric, their common base.
    if isinstance(column_type, Boolean):
        return BOOLEAN
    if isinstance(column_type, Integer):
        return INTEGER
    if isinstance(column_type, Float):
        return NUMBER
    if isinstance(column_type, Numeric):
        return DECIMAL
    if isinstance(column_type, DateTime):
        return DATETIME
    if isinstance(column_type, Date):
        return DATE
    if isinstance(column_type, (JSON, PickleType, LargeBinary, Interval)):
        return TRANSFORMABLE
    if isinstance(column_type, String):
        return STRING
    return TRANSFORMABLE


def _info_key_paths(info: dict) -> tuple:
    key_paths = info.get("key_paths") or ()
    if isinstance(key_paths, str):
        return (key_paths,)
    return tuple(key_paths)


def representation_for_model(model: type, entity: Optional[str] = None) -> EntityRepresentation:
    """Build the representation of one mapped class."""
    try:
        mapper = sa_inspect(model)
    except NoInspectionAvailable as exc:
        raise SchemaError(f"{model!r} is not a SQLAlchemy mapped class") from exc

    attributes = []
    primary_key: Optional[str] = None
    for prop in mapper.column_attrs:
        column = prop.columns[0]
        info = {**column.info, **prop.info}
        if info.get("skip"):
            continue
        attribute_type = info.get("type") or map_column_type(column.type)
        attributes.append(
            AttributeDescription(
                name=prop.key,
                attribute_type=attribute_type,
                key_paths=_info_key_paths(info),
                transformer=info.get("transformer"),
                date_format=info.get("date_format"),
            )
        )
        if column.primary_key and primary_key is None:
            primary_key = prop.key

    relationships = []
    for prop in mapper.relationships:
        info = prop.info
        if info.get("skip"):
            continue
        relationships.append(
            RelationshipDescription(
                name=prop.key,
                destination=prop.mapper.class_.__name__,
                cardinality=TO_MANY if prop.uselist else TO_ONE,
                key_paths=_info_key_paths(info),
                primary_key=bool(info.get("primary_key")),
            )
        )
        if info.get("primary_key"):
            primary_key = prop.key

    return EntityRepresentation(
        entity=entity or model.__name__,
        attributes=attributes,
        relationships=relationships,
        primary_key=primary_key,
    )


def registry_for_models(models: Iterable[type]) -> SchemaRegistry:
    registry = SchemaRegistry()
    for model in models:
        registry.add(representation_for_model(model))
    return registry
