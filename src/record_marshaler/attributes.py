from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Callable, List, Optional

from .coercion import coerce_value
from .diagnostics import COERCION_FAILED, Diagnostic
from .errors import CoercionError, StrictCoercionError
from .keypaths import MISSING, KeyPath, first_present
from .models import MarshalOptions
from .proto import ProtoRecord
from .schema import AttributeDescription

LOGGER = logging.getLogger("record_marshaler.attributes")

ValueSetter = Callable[[Any, AttributeDescription, Any], None]
ValueCoercer = Callable[[Any, AttributeDescription, MarshalOptions], Any]
KeyResolver = Callable[[Sequence[KeyPath], Mapping[str, Any]], Any]


def set_attribute_value(record: Any, attribute: AttributeDescription, value: Any) -> None:
    setattr(record, attribute.name, value)


class AttributePopulator:
    """Fill the scalar fields of a proto record's destination record."""

    def __init__(
        self,
        options: Optional[MarshalOptions] = None,
        value_setter: Optional[ValueSetter] = None,
        key_resolver: Optional[KeyResolver] = None,
        value_coercer: Optional[ValueCoercer] = None,
    ) -> None:
        self.options = options or MarshalOptions()
        self.value_setter = value_setter or set_attribute_value
        self.key_resolver = key_resolver or first_present
        self.value_coercer = value_coercer or coerce_value

    def populate(self, proto: ProtoRecord) -> List[Diagnostic]:
        diagnostics: List[Diagnostic] = []
        for attribute in proto.representation.attributes:
            diagnostic = self.populate_attribute(proto, attribute, proto.document)
            if diagnostic is not None:
                diagnostics.append(diagnostic)

        proto.diagnostics.extend(diagnostics)
        if diagnostics and self.options.strict:
            raise StrictCoercionError(proto.entity, diagnostics)
        return diagnostics

    def populate_attribute(
        self,
        proto: ProtoRecord,
        attribute: AttributeDescription,
        document: Mapping[str, Any],
    ) -> Optional[Diagnostic]:
        raw = self.key_resolver(attribute.key_paths, document)
        if raw is MISSING:
            if attribute.has_default:
                self.value_setter(proto.record, attribute, attribute.default)
            else:
                LOGGER.debug("%s.%s absent from document", proto.entity, attribute.name)
            return None

        try:
            value = self.value_coercer(raw, attribute, self.options)
            self.value_setter(proto.record, attribute, value)
        except (CoercionError, TypeError, ValueError) as exc:
            LOGGER.warning(
                "Could not populate %s.%s from %r: %s",
                proto.entity,
                attribute.name,
                raw,
                exc,
            )
            return Diagnostic(
                kind=COERCION_FAILED,
                entity=proto.entity,
                field=attribute.name,
                message=str(exc),
                value=raw,
            )
        return None
