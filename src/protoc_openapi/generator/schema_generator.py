"""Flatten proto message and enum descriptors into OpenAPI component schemas.

OpenAPI has no notion of nested types, so every nested message and enum is
emitted at the top level under its own short name. The enclosing message
name is dropped: ``Outer.Item`` and ``Other.Item`` both become ``Item`` and
the one generated last wins.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, List, Sequence, Tuple

from google.protobuf import descriptor_pb2 as d2

from protoc_openapi.generator.type_mapper import map_field_type
from protoc_openapi.models import schema_ref

Schema = Dict[str, Any]

MAX_DEPTH = 10


def generate_schema_recursive(message: d2.DescriptorProto, depth: int = 0) -> Dict[str, Schema]:
    """Return schemas for ``message`` and every message/enum nested inside it.

    Nesting deeper than MAX_DEPTH levels is silently cut off.
    """
    depth += 1
    schemas: Dict[str, Schema] = {}
    if depth >= MAX_DEPTH:
        return schemas

    for nested in message.nested_type:
        schemas.update(generate_schema_recursive(nested, depth))

    fields, oneof_fields = _partition_fields(message.field)
    own_schema = generate_fields_schema(fields, oneof_fields, message.oneof_decl)

    for enum in message.enum_type:
        schemas[enum.name] = generate_enum_schema(enum.value)

    schemas[message.name] = own_schema
    return schemas


def _partition_fields(
    fields: Sequence[d2.FieldDescriptorProto],
) -> Tuple[List[d2.FieldDescriptorProto], Dict[int, List[d2.FieldDescriptorProto]]]:
    """Split fields into plain fields and oneof members grouped by oneof index.

    proto3 ``optional`` fields live in a synthetic oneof but are plain fields.
    """
    plain: List[d2.FieldDescriptorProto] = []
    oneofs: Dict[int, List[d2.FieldDescriptorProto]] = defaultdict(list)
    for field in fields:
        if field.proto3_optional or not field.HasField("oneof_index"):
            plain.append(field)
        else:
            oneofs[field.oneof_index].append(field)
    return plain, oneofs


def generate_field_schema(field: d2.FieldDescriptorProto) -> Schema:
    if field.HasField("type_name"):
        item: Schema = schema_ref(field.type_name)
    else:
        item = map_field_type(field)

    if field.label == d2.FieldDescriptorProto.LABEL_REPEATED:
        return {"type": "array", "items": item}
    return item


def generate_oneof_schema(members: Sequence[d2.FieldDescriptorProto]) -> Schema:
    return {
        "oneOf": [
            {"type": "object", "properties": {member.name: map_field_type(member)}}
            for member in members
        ]
    }


def generate_fields_schema(
    fields: Sequence[d2.FieldDescriptorProto],
    oneof_fields: Dict[int, List[d2.FieldDescriptorProto]],
    oneof_decl: Sequence[d2.OneofDescriptorProto],
) -> Schema:
    """Build the object schema of one message from its partitioned fields."""
    properties: Dict[str, Schema] = {}
    for field in fields:
        properties[field.name] = generate_field_schema(field)

    for idx, oneof in enumerate(oneof_decl):
        members = oneof_fields.get(idx)
        if not members:
            continue
        properties[oneof.name] = generate_oneof_schema(members)

    return {"type": "object", "properties": properties}


def generate_enum_schema(values: Sequence[d2.EnumValueDescriptorProto]) -> Schema:
    """Integer schema listing the enum numbers.

    Integer enums cannot label their values, so the names go in the description.
    """
    return {
        "type": "integer",
        "description": "\n\n".join(f"{v.name} = {v.number}" for v in values),
        "enum": [v.number for v in values],
    }
