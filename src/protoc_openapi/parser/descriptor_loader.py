from __future__ import annotations

import os
import subprocess
import tempfile
from typing import List, Sequence

from google.protobuf import descriptor_pb2 as d2
from google.protobuf.message import DecodeError


class ProtocError(Exception):
    """Raised when protoc cannot produce a usable descriptor set."""


def protoc_executable() -> str:
    return os.environ.get("PROTOC", "protoc")


def _include_args(includes: Sequence[str]) -> List[str]:
    dirs = list(includes)
    extra = os.environ.get("PROTOC_INCLUDE")
    if extra:
        dirs.append(extra)

    # de-dup while preserving order
    seen = set()
    args: List[str] = []
    for inc in dirs:
        if inc and inc not in seen:
            seen.add(inc)
            args.extend(["-I", inc])
    return args


def load_descriptor_set(protos: Sequence[str], includes: Sequence[str]) -> d2.FileDescriptorSet:
    """Run protoc on the given files and decode the resulting descriptor set.

    Imports are included and source info is kept, since method comments are
    read from it.
    """
    with tempfile.TemporaryDirectory(prefix="protoc-openapi-") as td:
        desc_path = os.path.join(td, "descriptor_set.pb")
        cmd = [
            protoc_executable(),
            "--include_imports",
            "--include_source_info",
            "-o",
            desc_path,
        ] + _include_args(includes) + list(protos)
        try:
            subprocess.run(cmd, check=True, capture_output=True)
        except FileNotFoundError as e:
            raise ProtocError(
                f"'{cmd[0]}' not found. Install the Protocol Buffers compiler or set PROTOC."
            ) from e
        except subprocess.CalledProcessError as e:
            raise ProtocError(f"protoc failed: {e.stderr.decode('utf-8', errors='ignore')}") from e

        fds = d2.FileDescriptorSet()
        try:
            with open(desc_path, "rb") as f:
                fds.ParseFromString(f.read())
        except (OSError, DecodeError) as e:
            raise ProtocError(f"failed to decode FileDescriptorSet: {e}") from e

    return fds
