"""Shared fixtures for record_marshaler tests."""

import pytest

from record_marshaler.marshaler import Marshaler
from record_marshaler.models import MarshalOptions
from record_marshaler.proto import ProtoRecord
from record_marshaler.records import DynamicRecord
from record_marshaler.schema import (AttributeDescription, EntityRepresentation,
                                     RelationshipDescription, SchemaRegistry)


@pytest.fixture
def article_representation():
    """Article with a title fallback chain, a date and two relationships."""
    return EntityRepresentation(
        entity="Article",
        attributes=[
            AttributeDescription("id", "integer", key_paths=("article_id", "id")),
            AttributeDescription("title", "string", key_paths=("headline", "name")),
            AttributeDescription("published", "date", key_paths=("published_on",)),
            AttributeDescription("word_count", "number", key_paths=("stats.words",)),
            AttributeDescription("featured", "boolean", default=False),
        ],
        relationships=[
            RelationshipDescription("author", "Person", key_paths=("author",)),
            RelationshipDescription(
                "tags", "Tag", cardinality="many", key_paths=("tags",)
            ),
        ],
        primary_key="id",
    )


@pytest.fixture
def person_representation():
    return EntityRepresentation(
        entity="Person",
        attributes=[
            AttributeDescription("id", "integer"),
            AttributeDescription("name", "string", key_paths=("full_name", "name")),
        ],
        relationships=[
            RelationshipDescription("articles", "Article", cardinality="many"),
        ],
        primary_key="id",
    )


@pytest.fixture
def tag_representation():
    return EntityRepresentation(
        entity="Tag",
        attributes=[AttributeDescription("label", "string")],
    )


@pytest.fixture
def registry(article_representation, person_representation, tag_representation):
    return SchemaRegistry(
        {
            "Article": article_representation,
            "Person": person_representation,
            "Tag": tag_representation,
        }
    )


@pytest.fixture
def marshaler():
    return Marshaler(MarshalOptions(date_format="%Y-%m-%d"))


@pytest.fixture
def make_proto():
    """Build a proto record around a fresh DynamicRecord."""

    def _make(representation, document=None, **kwargs):
        record = kwargs.pop("record", None)
        if record is None:
            record = DynamicRecord(representation.entity)
        return ProtoRecord(
            record=record,
            representation=representation,
            document=document or {},
            **kwargs,
        )

    return _make
