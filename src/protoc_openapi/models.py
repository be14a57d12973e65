from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

OPENAPI_VERSION = "3.0.0"


def short_name(type_name: str) -> str:
    """Strip the package/enclosing-message qualification from a proto type name."""
    return type_name.split(".")[-1]


def schema_ref(type_name: str) -> Dict[str, str]:
    return {"$ref": f"#/components/schemas/{short_name(type_name)}"}


@dataclass
class Comments:
    leading_detached: List[List[str]] = field(default_factory=list)
    leading: List[str] = field(default_factory=list)
    trailing: List[str] = field(default_factory=list)


@dataclass
class RouteInfo:
    """HTTP route read from a single method comment line."""

    method: str
    path: str
    parameters: Dict[str, str] = field(default_factory=dict)
    include_body: bool = True
    tags: List[str] = field(default_factory=list)


@dataclass
class MethodInfo:
    name: str
    input_type: str
    output_type: str
    client_streaming: bool = False
    server_streaming: bool = False
    comments: Comments = field(default_factory=Comments)


@dataclass
class ServiceInfo:
    name: str
    comments: Comments = field(default_factory=Comments)
    methods: List[MethodInfo] = field(default_factory=list)


@dataclass
class RouteBinding:
    input_type: str
    output_type: str
    route: RouteInfo


@dataclass
class OpenAPIDocument:
    title: str = ""
    version: str = ""
    schemas: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    paths: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "openapi": OPENAPI_VERSION,
            "info": {"title": self.title, "version": self.version},
            "paths": self.paths,
            "components": {"schemas": self.schemas},
        }
