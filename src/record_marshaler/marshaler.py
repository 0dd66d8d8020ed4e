"""Entry point for populating proto records.

A :class:`Marshaler` holds no per-record state. It is built once with the
marshaling options and the four strategies that decide how a pass behaves:

* ``value_setter(record, attribute, value)`` stores a coerced attribute value;
* ``edge_establisher(relationship, from_record, to_record)`` wires one edge;
* ``key_resolver(key_paths, document)`` picks the raw value for an attribute;
* ``value_coercer(raw, attribute, options)`` turns that raw value into the
  attribute's type and raises :class:`~record_marshaler.errors.CoercionError`
  when it cannot.

The driver creates one :class:`~record_marshaler.proto.ProtoRecord` per source
sub-document and, for each of them, calls :meth:`Marshaler.populate_attributes`
and then :meth:`Marshaler.establish_relationships` once the related records
exist. Parents whose identity backs a primary key relationship must be
identified before their children are bound.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .attributes import (AttributePopulator, KeyResolver, ValueCoercer,
                         ValueSetter)
from .diagnostics import Diagnostic
from .errors import StrictCoercionError
from .models import MarshalOptions
from .proto import ProtoRecord
from .relationships import EdgeEstablisher, RelationshipEstablisher
from .schema import SchemaRegistry

LOGGER = logging.getLogger("record_marshaler.marshaler")


class Marshaler:
    def __init__(
        self,
        options: Optional[MarshalOptions] = None,
        *,
        value_setter: Optional[ValueSetter] = None,
        edge_establisher: Optional[EdgeEstablisher] = None,
        key_resolver: Optional[KeyResolver] = None,
        value_coercer: Optional[ValueCoercer] = None,
        registry: Optional[SchemaRegistry] = None,
    ) -> None:
        self.options = options or MarshalOptions()
        self._attributes = AttributePopulator(
            self.options,
            value_setter=value_setter,
            key_resolver=key_resolver,
            value_coercer=value_coercer,
        )
        self._relationships = RelationshipEstablisher(
            edge_establisher=edge_establisher, registry=registry
        )

    def populate_attributes(self, proto: ProtoRecord) -> List[Diagnostic]:
        """Populate every attribute of ``proto.record`` from ``proto.document``.

        Returns the diagnostics of fields that could not be coerced. In strict
        mode a :class:`~record_marshaler.errors.StrictCoercionError` is raised
        instead, after all other attributes have been populated.
        """
        LOGGER.debug("Populating attributes of %r", proto)
        return self._attributes.populate(proto)

    def establish_relationships(self, proto: ProtoRecord) -> List[Diagnostic]:
        """Wire every relationship of ``proto.record`` to its targets."""
        LOGGER.debug("Establishing relationships of %r", proto)
        return self._relationships.establish(proto)

    def bind_primary_key_relationship(
        self, proto: ProtoRecord, parent: ProtoRecord
    ) -> List[Diagnostic]:
        """Bind the primary key relationship of ``proto`` to ``parent``'s record.

        Returns a diagnostic when the inverse edge could not be wired. Raises
        :class:`~record_marshaler.errors.UnresolvedParentIdentityError` when
        ``parent`` has not been identified yet.
        """
        return self._relationships.bind_primary_key(proto, parent)

    def marshal(self, proto: ProtoRecord) -> List[Diagnostic]:
        """Populate attributes and then establish relationships of ``proto``.

        In strict mode relationships are still established before the
        :class:`~record_marshaler.errors.StrictCoercionError` propagates.
        """
        try:
            diagnostics = self.populate_attributes(proto)
        except StrictCoercionError:
            self.establish_relationships(proto)
            raise
        diagnostics.extend(self.establish_relationships(proto))
        return diagnostics
