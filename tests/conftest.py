"""Shared test fixtures and port fakes."""

from __future__ import annotations

import io
import threading
import time
from pathlib import Path

import pytest

from goget_tool.adapters.filesystem.local_filesystem import LocalFileSystemAdapter
from goget_tool.application.use_cases.fetch_package import FetchPackageUseCase
from goget_tool.console import Console
from goget_tool.domain.entities import ClonePlan
from goget_tool.domain.errors import CloneError, DiscoveryError
from goget_tool.domain.ports import GitClientPort, PageFetcherPort
from goget_tool.resolution.discovery import GoImportDiscoveryClient
from goget_tool.resolution.url_resolver import RepositoryUrlResolver


def go_import_page(content: str) -> str:
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n"
        f'\t<meta name="go-import" content="{content}">\n'
        "</head>\n</html>"
    )


class FakePageFetcher(PageFetcherPort):
    """Return a canned body (or raise) and remember requested URLs."""

    def __init__(self, body: str = "", error: Exception | None = None) -> None:
        self.body = body
        self.error = error
        self.urls: list[str] = []

    def fetch_text(self, url: str) -> str:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.body


class RecordingGitClient(GitClientPort):
    """Record clone plans; optionally fail for selected URLs or sleep to overlap."""

    def __init__(self, *, fail_urls: set[str] | None = None, delay_seconds: float = 0.0) -> None:
        self.fail_urls = fail_urls or set()
        self.delay_seconds = delay_seconds
        self.plans: list[ClonePlan] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def clone(self, plan: ClonePlan, cancel_event: threading.Event | None = None) -> None:
        with self._lock:
            self.plans.append(plan)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.delay_seconds:
                time.sleep(self.delay_seconds)
            if plan.url in self.fail_urls:
                raise CloneError(f"error running git {' '.join(plan.args)}: exit status 128")
        finally:
            with self._lock:
                self.active -= 1


@pytest.fixture
def gopath(tmp_path: Path) -> Path:
    root = tmp_path / "go"
    (root / "src").mkdir(parents=True)
    return root


@pytest.fixture
def console_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def console(console_stream: io.StringIO) -> Console:
    return Console(stream=console_stream)


@pytest.fixture
def offline_resolver() -> RepositoryUrlResolver:
    """Resolver whose discovery always fails, so heuristics decide."""
    return RepositoryUrlResolver(GoImportDiscoveryClient(FakePageFetcher(error=DiscoveryError("offline"))))


@pytest.fixture
def git_client() -> RecordingGitClient:
    return RecordingGitClient()


@pytest.fixture
def fetcher(offline_resolver: RepositoryUrlResolver, git_client: RecordingGitClient, console: Console) -> FetchPackageUseCase:
    return FetchPackageUseCase(
        resolver=offline_resolver,
        git_client=git_client,
        filesystem=LocalFileSystemAdapter(),
        console=console,
    )
