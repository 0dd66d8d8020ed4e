"""Populate typed records and their relationships from decoded documents."""

from .diagnostics import Diagnostic
from .errors import (CoercionError, MarshalError, PrimaryKeyRelationshipError,
                     SchemaError, StrictCoercionError, UnknownEntityError,
                     UnresolvedParentIdentityError)
from .keypaths import MISSING, Document, first_present, resolve_key_path
from .marshaler import Marshaler
from .models import MarshalOptions
from .proto import ProtoRecord
from .records import DynamicRecord
from .schema import (AttributeDescription, EntityRepresentation,
                     RelationshipDescription, SchemaRegistry)
from .transformers import TransformerRegistry

__all__ = [
    "AttributeDescription",
    "CoercionError",
    "Diagnostic",
    "Document",
    "DynamicRecord",
    "EntityRepresentation",
    "MISSING",
    "MarshalError",
    "MarshalOptions",
    "Marshaler",
    "PrimaryKeyRelationshipError",
    "ProtoRecord",
    "RelationshipDescription",
    "SchemaError",
    "SchemaRegistry",
    "StrictCoercionError",
    "TransformerRegistry",
    "UnknownEntityError",
    "UnresolvedParentIdentityError",
    "first_present",
    "resolve_key_path",
]
