from __future__ import annotations

import json
from pathlib import Path

import yaml

from protoc_openapi.models import OpenAPIDocument

JSON_SUFFIXES = (".json",)


def format_for_path(output_path: str) -> str:
    return "json" if output_path.lower().endswith(JSON_SUFFIXES) else "yaml"


def render_document(doc: OpenAPIDocument, fmt: str = "yaml") -> str:
    data = doc.to_dict()
    if fmt == "json":
        return json.dumps(data, indent=2) + "\n"
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)


def write_document(doc: OpenAPIDocument, output_path: str) -> None:
    """Serialize the document and write it to output_path (format picked by extension)."""
    text = render_document(doc, format_for_path(output_path))
    Path(output_path).write_text(text, encoding="utf-8")
