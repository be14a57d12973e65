"""Group annotated routes by path and build OpenAPI path items."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence

from protoc_openapi.models import RouteBinding, RouteInfo, schema_ref, short_name
from protoc_openapi.parser.route_parser import parameter_schema, to_openapi_path

PathItem = Dict[str, Any]

JSON_CONTENT_TYPE = "application/json"

# HTTP method -> path item slot. Other methods are dropped.
OPERATION_SLOTS: Dict[str, str] = {
    "GET": "get",
    "POST": "post",
    "PUT": "put",
    "DELETE": "delete",
}


def group_routes(bindings: Iterable[RouteBinding]) -> Dict[str, List[RouteBinding]]:
    """Group bindings by raw route path, keeping first-seen path order."""
    groups: Dict[str, List[RouteBinding]] = {}
    for binding in bindings:
        groups.setdefault(binding.route.path, []).append(binding)
    return groups


def generate_path_parameters(route: RouteInfo) -> List[Dict[str, Any]]:
    return [
        {
            "in": "path",
            "name": name,
            "required": True,
            "style": "simple",
            "schema": parameter_schema(param_type),
        }
        for name, param_type in route.parameters.items()
    ]


def generate_operation(binding: RouteBinding) -> Dict[str, Any]:
    route = binding.route
    operation: Dict[str, Any] = {}
    if route.tags:
        operation["tags"] = list(route.tags)
    if route.method != "GET" and route.include_body:
        operation["requestBody"] = {
            "content": {JSON_CONTENT_TYPE: {"schema": schema_ref(binding.input_type)}},
        }
    operation["responses"] = {
        "200": {
            "description": f"A response containing {short_name(binding.output_type)}",
            "content": {JSON_CONTENT_TYPE: {"schema": schema_ref(binding.output_type)}},
        }
    }
    return operation


def generate_path_item(group: Sequence[RouteBinding]) -> PathItem:
    """Build one path item from routes sharing the same path.

    Parameters are taken from the first route of the group; the others are
    assumed to declare the same ones. A repeated HTTP method overwrites the
    earlier operation.
    """
    path_item: PathItem = {}
    parameters = generate_path_parameters(group[0].route)
    if parameters:
        path_item["parameters"] = parameters

    for binding in group:
        slot = OPERATION_SLOTS.get(binding.route.method)
        if slot is None:
            continue
        path_item[slot] = generate_operation(binding)
    return path_item


def generate_paths(bindings: Iterable[RouteBinding]) -> Dict[str, PathItem]:
    paths: Dict[str, PathItem] = {}
    for path, group in group_routes(bindings).items():
        paths[to_openapi_path(path)] = generate_path_item(group)
    return paths
