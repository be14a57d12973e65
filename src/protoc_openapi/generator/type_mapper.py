from __future__ import annotations

from typing import Dict

from google.protobuf import descriptor_pb2 as d2

FieldType = d2.FieldDescriptorProto

# Proto wire type -> OpenAPI schema type. Anything not listed maps to string.
SCALAR_TYPE_MAP: Dict[int, str] = {
    FieldType.TYPE_BOOL: "boolean",
    FieldType.TYPE_DOUBLE: "number",
    FieldType.TYPE_FLOAT: "number",
    FieldType.TYPE_INT32: "integer",
    FieldType.TYPE_INT64: "integer",
    FieldType.TYPE_UINT32: "integer",
    FieldType.TYPE_UINT64: "integer",
    FieldType.TYPE_STRING: "string",
}


def map_scalar_type(field_type: int) -> str:
    return SCALAR_TYPE_MAP.get(field_type, "string")


def map_field_type(field: d2.FieldDescriptorProto) -> Dict[str, str]:
    """Inline schema for a field's declared type, ignoring any type reference."""
    return {"type": map_scalar_type(field.type)}
