from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from goget_tool.adapters.filesystem.local_filesystem import LocalFileSystemAdapter
from goget_tool.adapters.git_client.shell_git_client import ShellGitClientAdapter
from goget_tool.adapters.http.urllib_page_fetcher import UrllibPageFetcher
from goget_tool.application.use_cases.batch_fetcher import BatchFetcher
from goget_tool.application.use_cases.fetch_package import FetchPackageUseCase
from goget_tool.cli.config import DEFAULT_LOG_LEVEL, AppConfig, load_config
from goget_tool.console import Console
from goget_tool.domain.entities import BatchSummary
from goget_tool.logging_utils import configure_logging
from goget_tool.manifest_scanner import scan_manifest
from goget_tool.resolution.discovery import GoImportDiscoveryClient
from goget_tool.resolution.url_resolver import RepositoryUrlResolver


EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

SUMMARY_RULE = "=" * 60


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="goget",
        description="Clone the repository behind a Go import path into $GOPATH/src.",
    )

    parser.add_argument(
        "import_path",
        nargs="?",
        help="Import path to fetch, e.g. github.com/user/repo or golang.org/x/sync/...",
    )
    parser.add_argument("--https", action="store_true", help="use HTTPS for git clones instead of SSH")
    parser.add_argument("--mod", required=False, help="path to go.mod file; fetch every required module")
    parser.add_argument("--dry-run", action="store_true", help="print planned clones without running git")

    return parser


def main(argv: Sequence[str] | None = None, console: Console | None = None) -> int:
    configure_logging(DEFAULT_LOG_LEVEL)
    logger = logging.getLogger(__name__)

    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_config(args=args, env=os.environ, working_dir=Path.cwd())
    except ValueError as error:
        parser.error(str(error))
    configure_logging(config.log_level)

    logger.info(
        "cli configuration resolved",
        extra={
            "event": "cli.config.resolved",
            "root": config.root,
            "import_path": config.import_path,
            "manifest_path": str(config.manifest_path) if config.manifest_path else None,
            "use_https": config.use_https,
            "dry_run": config.dry_run,
            "log_level": config.log_level,
        },
    )

    console = console or Console()
    fetcher = _build_fetcher(config, console)

    try:
        if config.manifest_path is not None:
            return _run_manifest(config, fetcher, console)
        return _run_single(config, fetcher)
    except KeyboardInterrupt:
        logger.warning("interrupted", extra={"event": "cli.interrupted"})
        return EXIT_INTERRUPTED


def _build_fetcher(config: AppConfig, console: Console) -> FetchPackageUseCase:
    page_fetcher = UrllibPageFetcher(timeout_seconds=config.discovery_timeout_seconds)
    resolver = RepositoryUrlResolver(GoImportDiscoveryClient(page_fetcher))

    return FetchPackageUseCase(
        resolver=resolver,
        git_client=ShellGitClientAdapter(
            git_executable=config.git_executable,
            timeout_seconds=config.git_timeout_seconds,
        ),
        filesystem=LocalFileSystemAdapter(),
        console=console,
        git_executable=config.git_executable,
        dry_run=config.dry_run,
    )


def _run_single(config: AppConfig, fetcher: FetchPackageUseCase) -> int:
    logger = logging.getLogger(__name__)
    try:
        fetcher.fetch(config.import_path, config.root, config.working_dir, config.use_https)
    except (ValueError, RuntimeError) as error:
        logger.error("fetch failed", extra={"event": "cli.fetch.failed", "import_path": config.import_path})
        print(f"goget: {error}", file=sys.stderr)
        return EXIT_FAILURE
    return 0


def _run_manifest(config: AppConfig, fetcher: FetchPackageUseCase, console: Console) -> int:
    logger = logging.getLogger(__name__)
    console.line(f"Parsing dependencies from {config.manifest_path}...")
    try:
        dependencies = scan_manifest(config.manifest_path)
    except RuntimeError as error:
        logger.error("manifest scan failed", extra={"event": "cli.manifest.failed", "error": str(error)})
        print(f"goget: {error}", file=sys.stderr)
        return EXIT_FAILURE

    if not dependencies:
        console.line("No dependencies found in go.mod")
        return 0

    console.line(f"Found {len(dependencies)} dependencies (direct and indirect)")
    summary = BatchFetcher(fetcher=fetcher).run_all(
        dependencies,
        config.root,
        config.working_dir,
        config.use_https,
    )
    _print_summary(summary, console)
    return EXIT_FAILURE if summary.failed else 0


def _print_summary(summary: BatchSummary, console: Console) -> None:
    mode = "DRY-RUN " if summary.dry_run else ""
    console.line()
    console.line(SUMMARY_RULE)
    console.line(f"{mode}SUMMARY")
    console.line(SUMMARY_RULE)
    console.line(
        f"Total: {summary.total} | Success: {summary.success_count} "
        f"(fetched {summary.fetched_count}, skipped {summary.skipped_count}) | Failed: {len(summary.failed)}"
    )

    if summary.failed:
        console.line()
        console.line("Failed dependencies:")
        for outcome in summary.failed:
            console.line(f"  - {outcome.import_path}: {outcome.error}")


if __name__ == "__main__":
    raise SystemExit(main())
