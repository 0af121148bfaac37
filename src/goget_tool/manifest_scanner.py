from __future__ import annotations
"""Tolerant line scanner extracting module paths from a `go.mod` manifest."""

from pathlib import Path
from typing import Iterable


REQUIRE_BLOCK_START = "require ("
REQUIRE_PREFIX = "require "
COMMENT_PREFIX = "//"


def parse_manifest_lines(lines: Iterable[str]) -> list[str]:
    """Return module paths from single-line and block `require` declarations.

    Version fields and trailing `// indirect` style annotations are dropped;
    order follows the file.
    """
    dependencies: list[str] = []
    in_require_block = False

    for raw_line in lines:
        line = raw_line.strip()
        if line.startswith(COMMENT_PREFIX):
            continue

        if line == REQUIRE_BLOCK_START:
            in_require_block = True
            continue

        if in_require_block and line.startswith(")"):
            in_require_block = False
            continue

        if in_require_block:
            candidate = line
        elif line.startswith(REQUIRE_PREFIX):
            candidate = line[len(REQUIRE_PREFIX):]
        else:
            continue

        fields = candidate.split()
        if len(fields) >= 2:
            dependencies.append(fields[0])

    return dependencies


def scan_manifest(path: Path | str) -> list[str]:
    """Read `path` and return its dependency module paths.

    Raises:
        RuntimeError: When the manifest cannot be read.
    """
    manifest_path = Path(path)
    try:
        with manifest_path.open("r", encoding="utf-8") as manifest_file:
            return parse_manifest_lines(manifest_file)
    except OSError as error:
        raise RuntimeError(f"failed to read manifest file {manifest_path}: {error}") from error
    except UnicodeDecodeError as error:
        raise RuntimeError(f"manifest file {manifest_path} is not valid UTF-8") from error
