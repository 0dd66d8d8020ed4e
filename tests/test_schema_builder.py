"""Tests for building registries from mapping documents."""

import pytest

from record_marshaler.errors import SchemaError, UnknownEntityError
from record_marshaler.schema import NO_DEFAULT, SchemaRegistry
from record_marshaler.schema_builder import build_registry, load_registry

SCHEMA_YAML = """
entities:
  Article:
    primary_key: id
    attributes:
      - name: id
        type: integer
        key_paths: [article_id, id]
      - name: title
        key_paths: [headline, name]
      - name: summary
        default: null
      - name: location
        type: transformable
        transformer: point
        key_paths: [[geo.data, point]]
    relationships:
      - name: author
        entity: Person
        inverse: articles
        inverse_cardinality: many
  Person:
    attributes:
      - name: name
    relationships:
      - name: articles
        entity: Article
        cardinality: many
"""


@pytest.fixture
def schema_file(tmp_path):
    path = tmp_path / "schema.yaml"
    path.write_text(SCHEMA_YAML, encoding="utf-8")
    return path


class TestLoadRegistry:
    def test_loads_entities_in_order(self, schema_file):
        registry = load_registry(schema_file)

        assert isinstance(registry, SchemaRegistry)
        assert len(registry) == 2
        article = registry.representation_for("Article")
        assert [a.name for a in article.attributes] == ["id", "title", "summary", "location"]
        assert article.primary_key == "id"

    def test_attribute_details(self, schema_file):
        article = load_registry(schema_file).representation_for("Article")

        assert article.attribute("id").key_paths == ("article_id", "id")
        title = article.attribute("title")
        assert title.attribute_type == "string"
        assert title.key_paths == ("headline", "name")
        assert not title.has_default
        assert title.default is NO_DEFAULT

        summary = article.attribute("summary")
        assert summary.has_default
        assert summary.default is None
        assert summary.key_paths == ("summary",)

        location = article.attribute("location")
        assert location.transformer == "point"
        assert location.key_paths == (("geo.data", "point"),)

    def test_relationship_details(self, schema_file):
        registry = load_registry(schema_file)
        author = registry.representation_for("Article").relationship("author")
        articles = registry.representation_for("Person").relationship("articles")

        assert author.destination == "Person"
        assert author.cardinality == "one"
        assert author.inverse == "articles"
        assert author.inverse_cardinality == "many"
        assert articles.inverse_cardinality is None
        assert articles.to_many

    def test_unknown_entity_lookup(self, schema_file):
        registry = load_registry(schema_file)
        with pytest.raises(UnknownEntityError):
            registry.representation_for("Missing")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("entities: [unclosed", encoding="utf-8")
        with pytest.raises(SchemaError):
            load_registry(path)


class TestBuildRegistry:
    def test_rejects_unknown_keys(self):
        with pytest.raises(SchemaError):
            build_registry({"entities": {"A": {"attributes": [{"name": "x", "colour": "red"}]}}})

    def test_rejects_unknown_type(self):
        with pytest.raises(SchemaError):
            build_registry({"entities": {"A": {"attributes": [{"name": "x", "type": "blob"}]}}})

    def test_rejects_unknown_destination(self):
        doc = {"entities": {"A": {"relationships": [{"name": "b", "entity": "B"}]}}}
        with pytest.raises(SchemaError):
            build_registry(doc)

    def test_rejects_missing_inverse(self):
        doc = {
            "entities": {
                "A": {"relationships": [{"name": "b", "entity": "B", "inverse": "a"}]},
                "B": {},
            }
        }
        with pytest.raises(SchemaError):
            build_registry(doc)

    def test_rejects_two_primary_key_relationships(self):
        doc = {
            "entities": {
                "A": {
                    "relationships": [
                        {"name": "b", "entity": "B", "primary_key": True},
                        {"name": "c", "entity": "B", "primary_key": True},
                    ]
                },
                "B": {},
            }
        }
        with pytest.raises(SchemaError):
            build_registry(doc)

    def test_rejects_duplicate_field_names(self):
        doc = {"entities": {"A": {"attributes": [{"name": "x"}, {"name": "x"}]}}}
        with pytest.raises(SchemaError):
            build_registry(doc)

    def test_rejects_unknown_inverse_cardinality(self):
        doc = {
            "entities": {
                "A": {
                    "relationships": [
                        {"name": "b", "entity": "B", "inverse_cardinality": "several"}
                    ]
                },
                "B": {},
            }
        }
        with pytest.raises(SchemaError):
            build_registry(doc)
