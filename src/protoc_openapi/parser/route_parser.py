"""Route annotations embedded in RPC method comments.

A route line looks like::

    GET /users/{id:string}/posts - BODY [Users, Posts]

Each piece (verb, path, parameters, body marker, tags) is recognized by its
own pattern, so the pieces may appear in any order after the verb.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional

from protoc_openapi.models import RouteInfo

METHOD_RE = re.compile(r"^\s*(GET|PUT|POST|DELETE)")
PATH_RE = re.compile(r"(?:/(?:\w+|\{\w+:\w+\}))+")
PARAM_RE = re.compile(r"\{(?P<param>\w+):(?P<param_type>\w+)\}")
BODY_RE = re.compile(r"([+-]) BODY")
TAG_RE = re.compile(r"\[([a-zA-Z0-9, ]+)\]")

PARAMETER_TYPE_MAP: Dict[str, str] = {
    "string": "string",
    "int": "integer",
}


def parse_route(line: str) -> Optional[RouteInfo]:
    """Parse one comment line. Returns None when the line is not a route."""
    method = _match_method(line)
    if method is None:
        return None
    path = _match_path(line)
    if path is None:
        return None
    return RouteInfo(
        method=method,
        path=path,
        parameters=_extract_parameters(line),
        include_body=_include_body(line),
        tags=_extract_tags(line),
    )


def extract_routes(lines: Iterable[str]) -> List[RouteInfo]:
    """Collect every route declared in a block of comment lines."""
    routes: List[RouteInfo] = []
    for line in lines:
        route = parse_route(line)
        if route is not None:
            routes.append(route)
    return routes


def to_openapi_path(path: str) -> str:
    """Rewrite ``{name:type}`` placeholders to OpenAPI ``{name}`` form."""
    return PARAM_RE.sub(r"{\g<param>}", path)


def parameter_schema(param_type: str) -> Dict[str, str]:
    return {"type": PARAMETER_TYPE_MAP.get(param_type, "string")}


def _match_method(line: str) -> Optional[str]:
    m = METHOD_RE.match(line)
    return m.group(1) if m else None


def _match_path(line: str) -> Optional[str]:
    m = PATH_RE.search(line)
    return m.group(0) if m else None


def _extract_parameters(line: str) -> Dict[str, str]:
    return {m.group("param"): m.group("param_type") for m in PARAM_RE.finditer(line)}


def _include_body(line: str) -> bool:
    m = BODY_RE.search(line)
    if m is None:
        return True
    return m.group(1) == "+"


def _extract_tags(line: str) -> List[str]:
    m = TAG_RE.search(line)
    if m is None:
        return []
    return [tag.strip() for tag in m.group(1).split(",")]
