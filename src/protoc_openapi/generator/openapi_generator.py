from __future__ import annotations

from typing import Dict, Iterable, List

from google.protobuf import descriptor_pb2 as d2

from protoc_openapi.generator.path_generator import PathItem, generate_paths
from protoc_openapi.generator.schema_generator import (
    Schema,
    generate_enum_schema,
    generate_schema_recursive,
)
from protoc_openapi.models import MethodInfo, OpenAPIDocument, RouteBinding, ServiceInfo
from protoc_openapi.parser.route_parser import extract_routes
from protoc_openapi.parser.source_info import (
    METHOD_FIELD,
    SERVICE_FIELD,
    DescriptorError,
    SourceInfo,
)


def _require(method: d2.MethodDescriptorProto, attr: str, service_name: str) -> str:
    if not method.HasField(attr):
        label = method.name if method.HasField("name") else "<unnamed>"
        raise DescriptorError(f"Method '{label}' of service '{service_name}' has no {attr}")
    return getattr(method, attr)


def collect_service(
    service: d2.ServiceDescriptorProto,
    source_info: SourceInfo,
    service_index: int,
) -> ServiceInfo:
    """Read a service and its methods together with their leading comments."""
    service_path = [SERVICE_FIELD, service_index]
    info = ServiceInfo(name=service.name, comments=source_info.comments_at(service_path))

    for idx, method in enumerate(service.method):
        comments = source_info.comments_at(service_path + [METHOD_FIELD, idx])
        info.methods.append(
            MethodInfo(
                name=_require(method, "name", service.name),
                input_type=_require(method, "input_type", service.name),
                output_type=_require(method, "output_type", service.name),
                client_streaming=method.client_streaming,
                server_streaming=method.server_streaming,
                comments=comments,
            )
        )
    return info


def route_bindings(services: Iterable[ServiceInfo]) -> List[RouteBinding]:
    bindings: List[RouteBinding] = []
    for service in services:
        for method in service.methods:
            for route in extract_routes(method.comments.leading):
                bindings.append(RouteBinding(method.input_type, method.output_type, route))
    return bindings


class OpenAPIGenerator:
    """Accumulates schemas and paths over the files of a descriptor set."""

    def __init__(self) -> None:
        self.schemas: Dict[str, Schema] = {}
        self.paths: Dict[str, PathItem] = {}

    def add_file(self, file: d2.FileDescriptorProto) -> None:
        source_info = SourceInfo.from_file(file)

        for message in file.message_type:
            self.schemas.update(generate_schema_recursive(message))

        for enum in file.enum_type:
            self.schemas[enum.name] = generate_enum_schema(enum.value)

        services = [
            collect_service(service, source_info, idx)
            for idx, service in enumerate(file.service)
        ]
        self.paths.update(generate_paths(route_bindings(services)))

    def document(self, title: str = "", version: str = "") -> OpenAPIDocument:
        return OpenAPIDocument(
            title=title,
            version=version,
            schemas=dict(self.schemas),
            paths=dict(self.paths),
        )


def generate_openapi(descriptor_set: d2.FileDescriptorSet, title: str = "", version: str = "") -> OpenAPIDocument:
    """Build the OpenAPI document for every file of a descriptor set."""
    generator = OpenAPIGenerator()
    for file in descriptor_set.file:
        generator.add_file(file)
    return generator.document(title=title, version=version)
