from __future__ import annotations
"""Transient value objects flowing through one fetch attempt.

None of these survive a process run; they are built from raw CLI input,
consumed by the fetch pipeline, and folded into a batch summary.
"""

from dataclasses import dataclass
from pathlib import Path


CLONE_BASE_ARGS = ("clone", "--quiet")


@dataclass(frozen=True, slots=True)
class ResolvedRequest:
    """Validated request for one import path.

    Attributes:
        root: Absolute workspace root (first `GOPATH` entry).
        working_dir: Directory the tool was invoked from.
        import_path: Import path with any `/...` suffix stripped.
        wildcard: Whether the raw argument ended with `/...`.
    """

    root: Path
    working_dir: Path
    import_path: str
    wildcard: bool = False

    @property
    def is_relative(self) -> bool:
        return self.import_path.startswith(".")

    @property
    def source_dir(self) -> Path:
        return self.root / "src"


@dataclass(frozen=True, slots=True)
class ClonePlan:
    """Concrete git clone invocation derived from a `ResolvedRequest`."""

    url: str
    destination: Path
    args: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("clone plan requires a non-empty source URL")
        if not self.destination.parts:
            raise ValueError("clone plan requires a non-empty destination path")
        if not self.args:
            object.__setattr__(self, "args", (*CLONE_BASE_ARGS, self.url, str(self.destination)))

    def command_line(self, git_executable: str = "git") -> str:
        return " ".join((git_executable, *self.args))


@dataclass(frozen=True, slots=True)
class FetchOutcome:
    """Result of one fetch attempt as recorded by the batch runner."""

    import_path: str
    error: Exception | None = None
    skipped: bool = False
    plan: ClonePlan | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class DiscoveryDirective:
    """One well-formed `<meta name="go-import">` directive."""

    prefix: str
    vcs: str
    repo_url: str

    @classmethod
    def from_content(cls, content: str) -> DiscoveryDirective | None:
        """Build a directive from tag content; `None` unless exactly three fields."""
        fields = content.split()
        if len(fields) != 3:
            return None
        prefix, vcs, repo_url = fields
        return cls(prefix=prefix, vcs=vcs, repo_url=repo_url)

    def matches(self, import_path: str) -> bool:
        return import_path.startswith(self.prefix)


@dataclass(frozen=True, slots=True)
class BatchSummary:
    """Aggregate counts for one batch run."""

    outcomes: tuple[FetchOutcome, ...]
    dry_run: bool = False

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def failed(self) -> tuple[FetchOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if not outcome.success)

    @property
    def skipped_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success and outcome.skipped)

    @property
    def fetched_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success and not outcome.skipped)

    @property
    def success_count(self) -> int:
        return self.total - len(self.failed)
