"""Conversion of decoded JSON values into typed attribute values."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from dateutil import parser as dtparse

from .errors import CoercionError
from .models import DateFormat, MarshalOptions
from .schema import (BOOLEAN, DATE, DATETIME, DECIMAL, INTEGER, NUMBER, STRING,
                     TRANSFORMABLE, AttributeDescription)

TRUE_STRINGS = {"true", "yes", "1", "on"}
FALSE_STRINGS = {"false", "no", "0", "off"}
INTEGER_RE = re.compile(r"^[+-]?\d+$")


def _is_container(value: Any) -> bool:
    return isinstance(value, Mapping) or (
        isinstance(value, Sequence) and not isinstance(value, (str, bytes))
    )


def _type_name(value: Any) -> str:
    return type(value).__name__


def to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise CoercionError(f"Cannot convert {_type_name(value)} to string", value)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float, str)):
        text = str(value).strip()
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise CoercionError(f"{value!r} is not a number", value) from None
        if not result.is_finite():
            raise CoercionError(f"{value!r} is not a finite number", value)
        return result
    raise CoercionError(f"Cannot convert {_type_name(value)} to a number", value)


def to_integer(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    number = _to_decimal(value)
    if number != number.to_integral_value():
        raise CoercionError(f"{value!r} is not an integral number", value)
    return int(number)


def to_number(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if INTEGER_RE.fullmatch(text):
            return int(text)
        try:
            number = float(text)
        except ValueError:
            raise CoercionError(f"{value!r} is not a number", value) from None
    else:
        raise CoercionError(f"Cannot convert {_type_name(value)} to a number", value)
    if not math.isfinite(number):
        raise CoercionError(f"{value!r} is not a finite number", value)
    return number


def to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        raise CoercionError(f"{value!r} is not a boolean", value)
    raise CoercionError(f"Cannot convert {_type_name(value)} to boolean", value)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_datetime(value: Any, date_format: DateFormat = None) -> datetime:
    """Parse ``value`` into a naive datetime.

    Numbers are read as UNIX timestamps in UTC. Strings go through
    ``date_format``, which is either a ``strptime`` pattern or a callable
    returning a datetime; without one dateutil guesses the layout.
    Values carrying an offset are converted to UTC and the offset dropped.
    """
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return _naive_utc(datetime.fromtimestamp(value, tz=timezone.utc))
        except (OverflowError, OSError, ValueError):
            raise CoercionError(f"{value!r} is not a valid timestamp", value) from None
    if not isinstance(value, str):
        raise CoercionError(f"Cannot convert {_type_name(value)} to a date", value)

    text = value.strip()
    if not text:
        raise CoercionError("Empty date string", value)
    try:
        if date_format is None:
            parsed = dtparse.parse(text)
        elif callable(date_format):
            parsed = date_format(text)
        else:
            parsed = datetime.strptime(text, date_format)
    except Exception:
        raise CoercionError(f"{value!r} does not match the date format", value) from None

    if isinstance(parsed, datetime):
        return _naive_utc(parsed)
    if isinstance(parsed, date):
        return datetime(parsed.year, parsed.month, parsed.day)
    raise CoercionError(f"Date strategy returned {_type_name(parsed)} for {value!r}", value)


def transform(value: Any, attribute: AttributeDescription, options: MarshalOptions) -> Any:
    if attribute.transformer is None:
        return value
    func = options.transformers.get(attribute.transformer)
    if func is None:
        raise CoercionError(f"No transformer registered as {attribute.transformer!r}", value)
    try:
        return func(value)
    except CoercionError:
        raise
    except Exception as exc:
        raise CoercionError(
            f"Transformer {attribute.transformer!r} rejected value: {exc}", value
        ) from exc


def coerce_value(
    value: Any,
    attribute: AttributeDescription,
    options: Optional[MarshalOptions] = None,
) -> Any:
    """Convert a raw document value into the type declared for ``attribute``.

    ``None`` stays ``None``. Failures raise :class:`CoercionError` and concern
    only this one attribute.
    """
    options = options or MarshalOptions()
    if value is None:
        return None

    attribute_type = attribute.attribute_type
    if attribute_type == TRANSFORMABLE:
        return transform(value, attribute, options)

    if _is_container(value):
        raise CoercionError(
            f"Cannot convert {_type_name(value)} to {attribute_type}", value
        )

    if attribute_type == STRING:
        return to_string(value)
    if attribute_type == INTEGER:
        return to_integer(value)
    if attribute_type == NUMBER:
        return to_number(value)
    if attribute_type == DECIMAL:
        return _to_decimal(value)
    if attribute_type == BOOLEAN:
        return to_boolean(value)
    if attribute_type in (DATE, DATETIME):
        date_format = attribute.date_format or options.date_format
        parsed = to_datetime(value, date_format)
        return parsed.date() if attribute_type == DATE else parsed

    raise CoercionError(f"Unsupported attribute type {attribute_type!r}", value)
