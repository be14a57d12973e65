"""Lookup of comments attached to declarations through ``SourceCodeInfo``."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from google.protobuf import descriptor_pb2 as d2

from protoc_openapi.models import Comments

# Field numbers of FileDescriptorProto.service / ServiceDescriptorProto.method in location paths.
SERVICE_FIELD = 6
METHOD_FIELD = 2


class DescriptorError(Exception):
    """Raised when the descriptor set is missing data required for generation."""


def _lines(text: str) -> List[str]:
    return text.splitlines()


def comments_from_location(location: d2.SourceCodeInfo.Location) -> Comments:
    return Comments(
        leading_detached=[_lines(c) for c in location.leading_detached_comments],
        leading=_lines(location.leading_comments) if location.HasField("leading_comments") else [],
        trailing=_lines(location.trailing_comments) if location.HasField("trailing_comments") else [],
    )


class SourceInfo:
    """Index of a file's source locations keyed by their path."""

    def __init__(self, file_name: str, locations: Dict[Tuple[int, ...], d2.SourceCodeInfo.Location]):
        self._file_name = file_name
        self._locations = locations

    @classmethod
    def from_file(cls, file: d2.FileDescriptorProto) -> SourceInfo:
        if not file.HasField("source_code_info"):
            raise DescriptorError(
                f"File '{file.name}' has no source code info; "
                f"descriptors must be produced with --include_source_info"
            )
        locations: Dict[Tuple[int, ...], d2.SourceCodeInfo.Location] = {}
        for location in file.source_code_info.location:
            # Only declarations have even-length paths; odd ones point at single tokens.
            if not location.path or len(location.path) % 2 != 0:
                continue
            locations.setdefault(tuple(location.path), location)
        return cls(file.name, locations)

    def __len__(self) -> int:
        return len(self._locations)

    def location(self, path: Sequence[int]) -> d2.SourceCodeInfo.Location:
        key = tuple(path)
        try:
            return self._locations[key]
        except KeyError:
            raise DescriptorError(
                f"No source location {list(key)} in file '{self._file_name}'"
            ) from None

    def comments_at(self, path: Sequence[int]) -> Comments:
        return comments_from_location(self.location(path))
