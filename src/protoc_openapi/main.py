from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional, Sequence

from protoc_openapi.generator.openapi_generator import OpenAPIGenerator
from protoc_openapi.parser.descriptor_loader import ProtocError, load_descriptor_set
from protoc_openapi.parser.source_info import DescriptorError
from protoc_openapi.serializer import write_document


def _include_dirs(protos: Sequence[str], extra: Sequence[str]) -> List[str]:
    """Parent directory of every proto, followed by user-supplied include dirs."""
    # protoc requires each proto path to start with one of the -I dirs verbatim.
    dirs = [os.path.dirname(p) or "." for p in protos]
    dirs.extend(extra)
    return dirs


def run(
    protos: Sequence[str],
    output: str,
    title: str,
    version: str,
    includes: Optional[Sequence[str]] = None,
) -> None:
    """Main pipeline: compile, generate, write."""
    # 1. Compile protos into a descriptor set
    try:
        fds = load_descriptor_set(protos, _include_dirs(protos, includes or []))
    except ProtocError as e:
        print(f"FATAL: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Loaded {len(fds.file)} file(s) from protoc")

    # 2. Generate the document
    generator = OpenAPIGenerator()
    try:
        for file in fds.file:
            generator.add_file(file)
            print(
                f"  {file.name}: {len(file.message_type)} message(s), "
                f"{len(file.enum_type)} enum(s), {len(file.service)} service(s)"
            )
        doc = generator.document(title=title, version=version)
    except DescriptorError as e:
        print(f"FATAL: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Generated {len(doc.schemas)} schema(s) and {len(doc.paths)} path(s)")

    # 3. Write output
    try:
        write_document(doc, output)
    except OSError as e:
        print(f"FATAL: Failed to create file: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"  Wrote {output}")
    print("Done!")


def main(argv: Optional[Sequence[str]] = None):
    parser = argparse.ArgumentParser(
        description="Generate an OpenAPI 3.0 document from annotated .proto files",
    )
    parser.add_argument(
        "proto",
        nargs="+",
        help="Path(s) to the .proto file(s) to compile",
    )
    parser.add_argument(
        "output",
        help="Output file (.json for JSON, YAML otherwise)",
    )
    parser.add_argument(
        "--openapi-title",
        required=True,
        help="Title written to info.title",
    )
    parser.add_argument(
        "--openapi-version",
        required=True,
        help="Version written to info.version",
    )
    parser.add_argument(
        "-I",
        "--include",
        action="append",
        default=[],
        help="Additional protoc include directory (repeatable)",
    )

    args = parser.parse_args(argv)
    run(args.proto, args.output, args.openapi_title, args.openapi_version, args.include)


if __name__ == "__main__":
    main()
