from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from goget_tool.domain.import_path import first_root_entry


DEFAULT_DISCOVERY_TIMEOUT_SECONDS = 10.0
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class AppConfig:
    root: str
    working_dir: Path
    import_path: str | None
    manifest_path: Path | None
    use_https: bool
    dry_run: bool
    git_executable: str
    git_timeout_seconds: float | None
    discovery_timeout_seconds: float
    log_level: str = DEFAULT_LOG_LEVEL


def load_config(args, env: Mapping[str, str], working_dir: Path) -> AppConfig:
    import_path = _normalize_empty(args.import_path)
    raw_manifest = _normalize_empty(args.mod)

    if import_path and raw_manifest:
        raise ValueError("Use either an import path or --mod, not both")

    if not import_path and not raw_manifest:
        raise ValueError("usage: goget <path> or goget --mod <path/to/go.mod>")

    raw_root = _normalize_empty(env.get("GOPATH"))
    if not raw_root:
        raise ValueError("cannot clone without GOPATH set")
    root = first_root_entry(raw_root)

    git_executable = _normalize_empty(env.get("GOGET_GIT_EXECUTABLE")) or "git"

    raw_git_timeout = _normalize_empty(env.get("GOGET_GIT_TIMEOUT_SECONDS"))
    git_timeout_seconds = (
        _parse_positive_float(raw_git_timeout, "GOGET_GIT_TIMEOUT_SECONDS") if raw_git_timeout else None
    )

    raw_discovery_timeout = _normalize_empty(env.get("GOGET_DISCOVERY_TIMEOUT_SECONDS"))
    discovery_timeout_seconds = (
        _parse_positive_float(raw_discovery_timeout, "GOGET_DISCOVERY_TIMEOUT_SECONDS")
        if raw_discovery_timeout
        else DEFAULT_DISCOVERY_TIMEOUT_SECONDS
    )

    log_level = (_normalize_empty(env.get("LOG_LEVEL")) or DEFAULT_LOG_LEVEL).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")

    return AppConfig(
        root=root,
        working_dir=working_dir,
        import_path=import_path,
        manifest_path=Path(raw_manifest).expanduser() if raw_manifest else None,
        use_https=args.https,
        dry_run=args.dry_run,
        git_executable=git_executable,
        git_timeout_seconds=git_timeout_seconds,
        discovery_timeout_seconds=discovery_timeout_seconds,
        log_level=log_level,
    )


def _parse_positive_float(value: str, name: str) -> float:
    try:
        parsed = float(value)
    except ValueError as error:
        raise ValueError(f"{name} must be a number") from error
    if parsed <= 0:
        raise ValueError(f"{name} must be greater than 0")
    return parsed


def _normalize_empty(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None
