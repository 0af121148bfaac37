from __future__ import annotations
"""Classification and validation of raw import-path arguments."""

import logging
import os
from pathlib import Path

from .entities import ResolvedRequest
from .errors import ImportPathError


WILDCARD_SUFFIX = "/..."

LOGGER = logging.getLogger(__name__)


def parse_import_path(arg: str) -> tuple[str, bool]:
    """Split a raw argument into `(import_path, wildcard)`.

    A trailing `/...` is stripped and reported as `wildcard=True`.
    """
    if not arg:
        raise ImportPathError("empty import path")

    if arg.endswith(WILDCARD_SUFFIX):
        return arg[: -len(WILDCARD_SUFFIX)], True

    return arg, False


def validate_import_path(import_path: str) -> None:
    """Require a non-empty first segment that looks like a domain name."""
    segments = import_path.split("/")
    if not segments or not segments[0]:
        raise ImportPathError(f"no package to retrieve: {import_path!r}")

    if "." not in segments[0]:
        raise ImportPathError(
            f"first part of package path should be a domain name, got {import_path!r}"
        )


def first_root_entry(raw_root: str) -> str:
    """Return the first entry of a path-list style root value."""
    if os.pathsep in raw_root:
        LOGGER.warning(
            "multiple paths in GOPATH; only the first one is used",
            extra={"event": "import_path.root.multiple", "gopath": raw_root},
        )
        return raw_root.split(os.pathsep, 1)[0]
    return raw_root


def classify_import_path(arg: str, root: str | Path | None, working_dir: str | Path) -> ResolvedRequest:
    """Build a validated `ResolvedRequest` from raw inputs.

    Args:
        arg: Raw positional argument, optionally suffixed with `/...`.
        root: Workspace root (`GOPATH`); multi-entry values keep the first entry.
        working_dir: Directory the tool was invoked from.
    """
    import_path, wildcard = parse_import_path(arg)
    validate_import_path(import_path)

    raw_root = str(root) if root is not None else ""
    if not raw_root:
        raise ImportPathError("cannot clone without GOPATH set")

    absolute_root = Path(os.path.abspath(first_root_entry(raw_root)))

    return ResolvedRequest(
        root=absolute_root,
        working_dir=Path(working_dir),
        import_path=import_path,
        wildcard=wildcard,
    )
