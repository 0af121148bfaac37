from __future__ import annotations
"""Application use case fetching one import path into the workspace."""

from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
import threading

from goget_tool.console import Console
from goget_tool.domain.entities import ClonePlan, FetchOutcome, ResolvedRequest
from goget_tool.domain.errors import CloneError, DestinationError
from goget_tool.domain.import_path import classify_import_path
from goget_tool.domain.ports import FileSystemPort, GitClientPort
from goget_tool.resolution.url_resolver import RepositoryUrlResolver


LOGGER = logging.getLogger(__name__)

MODULE_MANIFEST_NAME = "go.mod"
VCS_METADATA_DIR = ".git"


@dataclass(slots=True)
class FetchPackageUseCase:
    """Single-fetch pipeline.

    Responsibilities:
    - classify and validate the raw argument
    - compute the destination below `<root>/src`
    - resolve the clone URL
    - skip when `go.mod` or `.git` already sits at the destination
    - run git through `GitClientPort` (or only plan it in dry-run mode)
    """

    resolver: RepositoryUrlResolver
    git_client: GitClientPort
    filesystem: FileSystemPort
    console: Console = field(default_factory=Console)
    git_executable: str = "git"
    dry_run: bool = False

    def fetch(
        self,
        arg: str,
        root: str | Path | None,
        working_dir: str | Path,
        use_https: bool,
        cancel_event: threading.Event | None = None,
    ) -> FetchOutcome:
        """Fetch one raw argument.

        Returns:
            `FetchOutcome` with `skipped=True` when the destination was already
            populated. Failures are raised, never stored in the outcome.

        Raises:
            ImportPathError: Invalid argument or missing root.
            DestinationError: Relative path outside `<root>/src`.
            CloneError: git failed, was missing, or was cancelled.
        """
        request = classify_import_path(arg, root, working_dir)

        if request.wildcard:
            self.console.line(f"Stripping /... suffix, will clone: {request.import_path}")

        plan = self.build_clone_plan(request, use_https)
        self.console.line(plan.command_line(self.git_executable))

        skipped = self._execute(plan, cancel_event)

        if request.wildcard and not skipped and not self.dry_run:
            self.console.line(
                f"Successfully cloned {request.import_path} (note: /... means this package and all subpackages)"
            )

        return FetchOutcome(import_path=request.import_path, skipped=skipped, plan=plan)

    def build_clone_plan(self, request: ResolvedRequest, use_https: bool) -> ClonePlan:
        """Compute destination and clone URL for a validated request."""
        if request.is_relative:
            destination, logical_path = self._relative_destination(request)
        else:
            destination = request.source_dir / request.import_path
            logical_path = request.import_path

        url = self.resolver.resolve(logical_path, use_https)
        if not url:
            raise DestinationError(f"could not determine git URL for {request.import_path}")

        plan = ClonePlan(url=url, destination=destination)
        LOGGER.info(
            "clone plan built",
            extra={
                "event": "fetch.plan.built",
                "import_path": request.import_path,
                "logical_path": logical_path,
                "clone_url": plan.url,
                "local_path": str(plan.destination),
            },
        )
        return plan

    def _relative_destination(self, request: ResolvedRequest) -> tuple[Path, str]:
        if not str(request.working_dir):
            raise DestinationError("working directory required for relative paths")

        absolute_wd = os.path.abspath(request.working_dir)
        destination = Path(os.path.normpath(os.path.join(absolute_wd, request.import_path)))

        try:
            logical = destination.relative_to(request.source_dir)
        except ValueError as error:
            raise DestinationError(
                f"working directory should be contained inside {request.source_dir}, got {absolute_wd}"
            ) from error

        if logical == Path("."):
            raise DestinationError(f"{request.import_path} resolves to {request.source_dir} itself")

        return destination, logical.as_posix()

    def _execute(self, plan: ClonePlan, cancel_event: threading.Event | None) -> bool:
        # A go.mod marker covers modules nested inside a repository cloned at a parent path.
        if self.filesystem.path_exists(plan.destination / MODULE_MANIFEST_NAME):
            self.console.line(f"Package already exists at {plan.destination} (go.mod found), skipping clone")
            self._log_skip(plan, MODULE_MANIFEST_NAME)
            return True

        if self.filesystem.path_exists(plan.destination / VCS_METADATA_DIR):
            self.console.line(f"Repository already exists at {plan.destination}, skipping clone")
            self._log_skip(plan, VCS_METADATA_DIR)
            return True

        if self.dry_run:
            LOGGER.info(
                "clone dry-run planned",
                extra={"event": "fetch.dry_run", "clone_url": plan.url, "local_path": str(plan.destination)},
            )
            return False

        if cancel_event is not None and cancel_event.is_set():
            raise CloneError(
                f"error running {plan.command_line(self.git_executable)}: cancelled before start",
                command=(self.git_executable, *plan.args),
            )

        self.filesystem.ensure_directory(plan.destination.parent)
        self.git_client.clone(plan, cancel_event)
        return False

    def _log_skip(self, plan: ClonePlan, marker: str) -> None:
        LOGGER.info(
            "clone skipped: destination already populated",
            extra={"event": "fetch.skip_exists", "local_path": str(plan.destination), "marker": marker},
        )
