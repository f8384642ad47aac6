# File: codeforge/type_mapper.py
"""
CodeForge - Type Mapper
=======================
Pure functions translating an abstract :class:`DataType` into
target-specific fragments:

    to_openapi_property   -> OpenAPI 3.0 schema object
    to_asyncapi_property  -> AsyncAPI 2.x schema object
    to_column_type        -> TypeORM column type
    to_language_type      -> TypeScript type expression

Every function branches over all seven :class:`DataKind` members and raises
``ValueError`` for anything else, so a newly added kind fails loudly instead
of silently producing an empty fragment.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from codeforge.models import DataKind, DataModel, DataType
from codeforge.utils import ts_string

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("codeforge.type_mapper")

SCHEMA_REF_PREFIX: str = "#/components/schemas/"

_INTEGER_FORMATS: frozenset = frozenset({"int32", "int64"})
_VARCHAR_LIMIT: int = 255


# ---------------------------------------------------------------------------
# Enum helpers
# ---------------------------------------------------------------------------


def enum_reference(data_type: DataType) -> Optional[str]:
    """
    Name of the referenced :class:`EnumDefinition`, if any.

    A single-element ``enum`` list is read as a reference by name; longer
    lists are inline value sets.
    """
    if data_type.type != DataKind.ENUM or not data_type.enum:
        return None
    if len(data_type.enum) == 1:
        return data_type.enum[0]
    return None


def enum_values(data_type: DataType, model: Optional[DataModel] = None) -> List[str]:
    """
    Literal values of an enum data type.

    References are resolved against *model* when it is given; an unresolved
    reference yields an empty list.
    """
    reference: Optional[str] = enum_reference(data_type)
    if reference is None:
        return list(data_type.enum or [])
    if model is None:
        return []
    definition = model.get_enum(reference)
    return list(definition.values) if definition is not None else []


# ---------------------------------------------------------------------------
# Schema-object mapping (OpenAPI / AsyncAPI)
# ---------------------------------------------------------------------------


def _schema_property(data_type: DataType) -> Dict[str, Any]:
    kind: str = data_type.type
    rules = data_type.validation
    prop: Dict[str, Any]

    if kind == DataKind.STRING:
        prop = {"type": "string"}
        if data_type.format:
            prop["format"] = data_type.format
        elif rules is not None:
            if rules.email:
                prop["format"] = "email"
            elif rules.url:
                prop["format"] = "uri"
            elif rules.uuid:
                prop["format"] = "uuid"
        if rules is not None:
            if rules.min_length is not None:
                prop["minLength"] = rules.min_length
            if rules.max_length is not None:
                prop["maxLength"] = rules.max_length
            if rules.pattern:
                prop["pattern"] = rules.pattern
    elif kind == DataKind.NUMBER:
        prop = {
            "type": "integer" if data_type.format in _INTEGER_FORMATS else "number",
        }
        if data_type.format:
            prop["format"] = data_type.format
        if rules is not None:
            if rules.min is not None:
                prop["minimum"] = rules.min
            if rules.max is not None:
                prop["maximum"] = rules.max
    elif kind == DataKind.BOOLEAN:
        prop = {"type": "boolean"}
    elif kind == DataKind.DATE:
        fmt: str = data_type.format or "date-time"
        prop = {"type": "string", "format": "date-time" if fmt == "datetime" else fmt}
    elif kind == DataKind.ARRAY:
        prop = {
            "type": "array",
            "items": _schema_property(data_type.items) if data_type.items else {},
        }
    elif kind == DataKind.OBJECT:
        prop = {"type": "object"}
        if data_type.properties:
            prop["properties"] = {
                name: _schema_property(nested)
                for name, nested in data_type.properties.items()
            }
    elif kind == DataKind.ENUM:
        reference: Optional[str] = enum_reference(data_type)
        if reference is not None:
            prop = {"$ref": f"{SCHEMA_REF_PREFIX}{reference}"}
        else:
            prop = {"type": "string", "enum": list(data_type.enum or [])}
    else:
        raise ValueError(f"Unsupported data type: {kind!r}")

    if data_type.description:
        prop["description"] = data_type.description
    if data_type.default is not None:
        prop["default"] = data_type.default
    if data_type.nullable is not None:
        prop["nullable"] = data_type.nullable
    return prop


def to_openapi_property(data_type: DataType) -> Dict[str, Any]:
    """
    OpenAPI 3.0 schema object for *data_type*.

    Examples:
        >>> to_openapi_property(DataType(type="number", format="int64"))
        {'type': 'integer', 'format': 'int64'}
    """
    return _schema_property(data_type)


def to_asyncapi_property(data_type: DataType) -> Dict[str, Any]:
    """
    AsyncAPI schema object for *data_type*.

    Shares one mapping with :func:`to_openapi_property`; both documents keep
    reusable schemas under ``#/components/schemas``.
    """
    return _schema_property(data_type)


# ---------------------------------------------------------------------------
# Storage column type
# ---------------------------------------------------------------------------


def to_column_type(data_type: DataType) -> str:
    kind: str = data_type.type
    rules = data_type.validation

    if kind == DataKind.STRING:
        if data_type.format == "uuid":
            return "uuid"
        if rules is not None and rules.max_length is not None and rules.max_length <= _VARCHAR_LIMIT:
            return "varchar"
        return "text"
    if kind == DataKind.NUMBER:
        if data_type.format == "int32":
            return "int"
        if data_type.format == "int64":
            return "bigint"
        return "decimal"
    if kind == DataKind.BOOLEAN:
        return "boolean"
    if kind == DataKind.DATE:
        return "date" if data_type.format == "date" else "timestamp"
    if kind in (DataKind.ARRAY, DataKind.OBJECT):
        return "json"
    if kind == DataKind.ENUM:
        return "enum"
    raise ValueError(f"Unsupported data type: {kind!r}")


# ---------------------------------------------------------------------------
# TypeScript type expression
# ---------------------------------------------------------------------------


def to_language_type(
    data_type: DataType,
    relationship_target: Optional[str] = None,
) -> str:
    """
    TypeScript type for a field.

    A relationship target wins over the field's own data type: to-many sides
    (array data types) render as ``Target[]``.

    Examples:
        >>> to_language_type(DataType(type="array", items=DataType(type="object")), "Post")
        'Post[]'
        >>> to_language_type(DataType(type="enum", enum=["A", "B"]))
        "'A' | 'B'"
    """
    if relationship_target:
        if data_type.type == DataKind.ARRAY:
            return f"{relationship_target}[]"
        return relationship_target

    kind: str = data_type.type

    if kind == DataKind.STRING:
        return "string"
    if kind == DataKind.NUMBER:
        return "number"
    if kind == DataKind.BOOLEAN:
        return "boolean"
    if kind == DataKind.DATE:
        return "Date"
    if kind == DataKind.ARRAY:
        if data_type.items is None:
            return "any[]"
        item_type: str = to_language_type(data_type.items)
        if " | " in item_type:
            item_type = f"({item_type})"
        return f"{item_type}[]"
    if kind == DataKind.OBJECT:
        return "Record<string, any>"
    if kind == DataKind.ENUM:
        if enum_reference(data_type) is not None or not data_type.enum:
            return "string"
        return " | ".join(ts_string(value) for value in data_type.enum)
    raise ValueError(f"Unsupported data type: {kind!r}")


__all__: List[str] = [
    "SCHEMA_REF_PREFIX",
    "enum_reference",
    "enum_values",
    "to_openapi_property",
    "to_asyncapi_property",
    "to_column_type",
    "to_language_type",
]

logger.debug("codeforge.type_mapper loaded — %d public symbols.", len(__all__))
