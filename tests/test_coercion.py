"""Tests for value coercion."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from record_marshaler.coercion import coerce_value
from record_marshaler.errors import CoercionError
from record_marshaler.models import MarshalOptions
from record_marshaler.schema import AttributeDescription
from record_marshaler.transformers import TransformerRegistry


def attr(attribute_type, **kwargs):
    return AttributeDescription("field", attribute_type, **kwargs)


class TestScalars:
    def test_null_stays_null(self):
        for attribute_type in ("string", "integer", "number", "boolean", "date"):
            assert coerce_value(None, attr(attribute_type)) is None

    def test_numeric_string_to_number(self):
        assert coerce_value("42", attr("number")) == 42
        assert isinstance(coerce_value("42", attr("number")), int)
        assert coerce_value("4.5", attr("number")) == 4.5
        assert coerce_value(7, attr("number")) == 7

    def test_integer(self):
        assert coerce_value(" 42 ", attr("integer")) == 42
        assert coerce_value("42.0", attr("integer")) == 42
        assert coerce_value(3.0, attr("integer")) == 3
        assert coerce_value(True, attr("integer")) == 1
        with pytest.raises(CoercionError):
            coerce_value("4.5", attr("integer"))
        with pytest.raises(CoercionError):
            coerce_value("forty", attr("integer"))

    def test_decimal(self):
        assert coerce_value("19.99", attr("decimal")) == Decimal("19.99")
        assert coerce_value(2, attr("decimal")) == Decimal(2)
        with pytest.raises(CoercionError):
            coerce_value("NaN", attr("decimal"))

    @pytest.mark.parametrize("raw", ["nan", "inf", "-Infinity", "1e400", float("inf")])
    def test_number_rejects_non_finite(self, raw):
        with pytest.raises(CoercionError):
            coerce_value(raw, attr("number"))

    def test_number_to_string(self):
        assert coerce_value(42, attr("string")) == "42"
        assert coerce_value(False, attr("string")) == "false"
        assert coerce_value("plain", attr("string")) == "plain"

    @pytest.mark.parametrize(
        "raw,expected",
        [("true", True), ("YES", True), ("1", True), ("off", False), (0, False), (2, True)],
    )
    def test_boolean(self, raw, expected):
        assert coerce_value(raw, attr("boolean")) is expected

    def test_boolean_rejects_other_strings(self):
        with pytest.raises(CoercionError):
            coerce_value("maybe", attr("boolean"))

    def test_containers_are_a_type_mismatch(self):
        with pytest.raises(CoercionError):
            coerce_value({"a": 1}, attr("string"))
        with pytest.raises(CoercionError):
            coerce_value([1, 2], attr("integer"))


class TestDates:
    def test_configured_format(self):
        options = MarshalOptions(date_format="%Y-%m-%d")
        assert coerce_value("2013-05-01", attr("date"), options) == date(2013, 5, 1)

    def test_malformed_date_raises_coercion_error(self):
        options = MarshalOptions(date_format="%Y-%m-%d")
        with pytest.raises(CoercionError):
            coerce_value("not-a-date", attr("date"), options)

    def test_format_mismatch(self):
        options = MarshalOptions(date_format="%d/%m/%Y")
        with pytest.raises(CoercionError):
            coerce_value("2013-05-01", attr("date"), options)

    def test_attribute_format_overrides_options(self):
        options = MarshalOptions(date_format="%Y-%m-%d")
        attribute = attr("date", date_format="%d.%m.%Y")
        assert coerce_value("01.05.2013", attribute, options) == date(2013, 5, 1)

    def test_dateutil_without_format(self):
        value = coerce_value("2013-05-01T10:30:00Z", attr("datetime"))
        assert value == datetime(2013, 5, 1, 10, 30)
        assert value.tzinfo is None

    def test_offsets_are_converted_to_naive_utc(self):
        value = coerce_value("2013-05-01T12:30:00+02:00", attr("datetime"))
        assert value == datetime(2013, 5, 1, 10, 30)
        aware = datetime(2013, 5, 1, 12, 30, tzinfo=timezone(timedelta(hours=2)))
        assert coerce_value(aware, attr("datetime")) == datetime(2013, 5, 1, 10, 30)

    def test_callable_strategy(self):
        options = MarshalOptions(date_format=lambda text: datetime(2000, 1, int(text)))
        assert coerce_value("15", attr("date"), options) == date(2000, 1, 15)

    def test_epoch_seconds(self):
        value = coerce_value(0, attr("datetime"))
        assert value == datetime(1970, 1, 1)
        assert value.tzinfo is None

    def test_epoch_and_formatted_values_compare(self):
        options = MarshalOptions(date_format="%Y-%m-%d %H:%M")
        formatted = coerce_value("1970-01-01 00:01", attr("datetime"), options)
        assert coerce_value(30, attr("datetime"), options) < formatted

    def test_callable_strategy_errors_are_coercion_errors(self):
        options = MarshalOptions(date_format=lambda text: {"jan": 1}[text])
        with pytest.raises(CoercionError):
            coerce_value("feb", attr("date"), options)

    def test_date_objects_pass_through(self):
        today = date(2020, 2, 29)
        assert coerce_value(today, attr("date")) == today


class TestTransformable:
    def test_raw_value_handed_to_registered_transform(self):
        seen = []
        registry = TransformerRegistry()

        @registry.transformer("point")
        def to_point(value):
            seen.append(value)
            return (value["x"], value["y"])

        options = MarshalOptions(transformers=registry)
        raw = {"x": 1, "y": 2}
        result = coerce_value(raw, attr("transformable", transformer="point"), options)
        assert result == (1, 2)
        assert seen == [raw]
        assert seen[0] is raw

    def test_without_transformer_name_value_passes_through(self):
        raw = [1, {"a": 2}]
        assert coerce_value(raw, attr("transformable")) is raw

    def test_unregistered_transformer(self):
        with pytest.raises(CoercionError):
            coerce_value("x", attr("transformable", transformer="missing"))

    def test_transform_failure_becomes_coercion_error(self):
        options = MarshalOptions(transformers=TransformerRegistry({"int": int}))
        with pytest.raises(CoercionError):
            coerce_value("abc", attr("transformable", transformer="int"), options)

    def test_any_transform_exception_becomes_coercion_error(self):
        options = MarshalOptions(
            transformers=TransformerRegistry({"lat": lambda raw: raw["lat"]})
        )
        with pytest.raises(CoercionError) as excinfo:
            coerce_value({"lng": 1}, attr("transformable", transformer="lat"), options)
        assert isinstance(excinfo.value.__cause__, KeyError)
        assert excinfo.value.value == {"lng": 1}
