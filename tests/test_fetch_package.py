"""Tests for the single-fetch pipeline."""

from __future__ import annotations

import io
import threading
from pathlib import Path

import pytest

from goget_tool.adapters.filesystem.local_filesystem import LocalFileSystemAdapter
from goget_tool.application.use_cases.fetch_package import FetchPackageUseCase
from goget_tool.domain.entities import ClonePlan, ResolvedRequest
from goget_tool.domain.errors import CloneError, DestinationError, ImportPathError

from conftest import RecordingGitClient


class TestBuildClonePlan:
    def test_absolute_path_ssh(self, fetcher: FetchPackageUseCase) -> None:
        request = ResolvedRequest(root=Path("/home/user/go"), working_dir=Path("/"), import_path="github.com/user/repo")

        plan = fetcher.build_clone_plan(request, use_https=False)

        assert plan.url == "git@github.com:user/repo.git"
        assert plan.destination == Path("/home/user/go/src/github.com/user/repo")
        assert plan.args == ("clone", "--quiet", "git@github.com:user/repo.git", "/home/user/go/src/github.com/user/repo")

    def test_absolute_path_https(self, fetcher: FetchPackageUseCase) -> None:
        request = ResolvedRequest(root=Path("/home/user/go"), working_dir=Path("/"), import_path="github.com/user/repo")

        assert fetcher.build_clone_plan(request, use_https=True).url == "https://github.com/user/repo.git"

    def test_subpackage_destination_keeps_full_path(self, fetcher: FetchPackageUseCase) -> None:
        request = ResolvedRequest(root=Path("/home/user/go"), working_dir=Path("/"), import_path="golang.org/x/crypto/ssh")

        plan = fetcher.build_clone_plan(request, use_https=False)

        assert plan.url == "https://go.googlesource.com/crypto"
        assert plan.destination == Path("/home/user/go/src/golang.org/x/crypto/ssh")

    @pytest.mark.parametrize("use_https,expected", [(False, "git@github.com:user/repo.git"), (True, "https://github.com/user/repo.git")])
    def test_relative_path_resolves_through_working_dir(
        self, fetcher: FetchPackageUseCase, use_https: bool, expected: str
    ) -> None:
        request = ResolvedRequest(
            root=Path("/home/user/go"),
            working_dir=Path("/home/user/go/src/github.com/user"),
            import_path="./repo",
        )

        plan = fetcher.build_clone_plan(request, use_https=use_https)

        assert plan.url == expected
        assert plan.destination == Path("/home/user/go/src/github.com/user/repo")

    def test_relative_path_outside_source_dir_fails(self, fetcher: FetchPackageUseCase) -> None:
        request = ResolvedRequest(root=Path("/home/user/go"), working_dir=Path("/tmp/elsewhere"), import_path="./repo")

        with pytest.raises(DestinationError, match="should be contained inside"):
            fetcher.build_clone_plan(request, use_https=False)

    def test_relative_path_escaping_source_dir_fails(self, fetcher: FetchPackageUseCase) -> None:
        request = ResolvedRequest(
            root=Path("/home/user/go"),
            working_dir=Path("/home/user/go/src/github.com"),
            import_path="../../pkg",
        )

        with pytest.raises(DestinationError):
            fetcher.build_clone_plan(request, use_https=False)

    def test_relative_path_naming_source_dir_itself_fails(self, fetcher: FetchPackageUseCase) -> None:
        request = ResolvedRequest(
            root=Path("/home/user/go"),
            working_dir=Path("/home/user/go/src/github.com"),
            import_path="..",
        )

        with pytest.raises(DestinationError):
            fetcher.build_clone_plan(request, use_https=False)


def test_clone_plan_requires_url_and_destination() -> None:
    with pytest.raises(ValueError):
        ClonePlan(url="", destination=Path("/tmp/x"))
    with pytest.raises(ValueError):
        ClonePlan(url="git@github.com:u/r.git", destination=Path(""))


def test_fetch_clones_into_source_dir(
    fetcher: FetchPackageUseCase, git_client: RecordingGitClient, gopath: Path, console_stream: io.StringIO
) -> None:
    outcome = fetcher.fetch("github.com/user/repo", str(gopath), gopath, use_https=False)

    assert outcome.skipped is False
    assert outcome.success
    assert [plan.url for plan in git_client.plans] == ["git@github.com:user/repo.git"]
    assert git_client.plans[0].destination == gopath / "src" / "github.com" / "user" / "repo"
    assert (gopath / "src" / "github.com" / "user").is_dir()
    assert f"git clone --quiet git@github.com:user/repo.git {gopath}/src/github.com/user/repo" in console_stream.getvalue()


def test_fetch_skips_when_module_manifest_exists(
    fetcher: FetchPackageUseCase, git_client: RecordingGitClient, gopath: Path, console_stream: io.StringIO
) -> None:
    destination = gopath / "src" / "github.com" / "user" / "repo"
    destination.mkdir(parents=True)
    (destination / "go.mod").write_text("module github.com/user/repo\n", encoding="utf-8")
    (destination / ".git").mkdir()

    outcome = fetcher.fetch("github.com/user/repo", str(gopath), gopath, use_https=False)

    assert outcome.skipped is True
    assert git_client.plans == []
    assert "(go.mod found), skipping clone" in console_stream.getvalue()


def test_fetch_skips_when_repository_exists(
    fetcher: FetchPackageUseCase, git_client: RecordingGitClient, gopath: Path, console_stream: io.StringIO
) -> None:
    destination = gopath / "src" / "github.com" / "user" / "repo"
    (destination / ".git").mkdir(parents=True)

    outcome = fetcher.fetch("github.com/user/repo", str(gopath), gopath, use_https=True)

    assert outcome.skipped is True
    assert git_client.plans == []
    assert f"Repository already exists at {destination}, skipping clone" in console_stream.getvalue()


def test_fetch_with_plain_existing_directory_still_clones(
    fetcher: FetchPackageUseCase, git_client: RecordingGitClient, gopath: Path
) -> None:
    (gopath / "src" / "github.com" / "user" / "repo").mkdir(parents=True)

    outcome = fetcher.fetch("github.com/user/repo", str(gopath), gopath, use_https=False)

    assert outcome.skipped is False
    assert len(git_client.plans) == 1


def test_fetch_wildcard_prints_notes(
    fetcher: FetchPackageUseCase, gopath: Path, console_stream: io.StringIO
) -> None:
    outcome = fetcher.fetch("github.com/user/repo/...", str(gopath), gopath, use_https=False)

    output = console_stream.getvalue()
    assert outcome.import_path == "github.com/user/repo"
    assert "Stripping /... suffix, will clone: github.com/user/repo" in output
    assert "Successfully cloned github.com/user/repo (note: /... means this package and all subpackages)" in output


def test_fetch_propagates_clone_failure(offline_resolver, console, gopath: Path) -> None:
    git_client = RecordingGitClient(fail_urls={"git@github.com:user/broken.git"})
    fetcher = FetchPackageUseCase(
        resolver=offline_resolver,
        git_client=git_client,
        filesystem=LocalFileSystemAdapter(),
        console=console,
    )

    with pytest.raises(CloneError, match="git clone --quiet git@github.com:user/broken.git"):
        fetcher.fetch("github.com/user/broken", str(gopath), gopath, use_https=False)


def test_fetch_rejects_invalid_argument(fetcher: FetchPackageUseCase, gopath: Path) -> None:
    with pytest.raises(ImportPathError):
        fetcher.fetch("not-a-domain/pkg", str(gopath), gopath, use_https=False)


def test_dry_run_plans_without_cloning(offline_resolver, git_client: RecordingGitClient, console, console_stream, gopath: Path) -> None:
    fetcher = FetchPackageUseCase(
        resolver=offline_resolver,
        git_client=git_client,
        filesystem=LocalFileSystemAdapter(),
        console=console,
        dry_run=True,
    )

    outcome = fetcher.fetch("github.com/user/repo/...", str(gopath), gopath, use_https=True)

    assert outcome.skipped is False
    assert outcome.plan is not None
    assert outcome.plan.url == "https://github.com/user/repo.git"
    assert git_client.plans == []
    assert not (gopath / "src" / "github.com").exists()
    assert "Successfully cloned" not in console_stream.getvalue()


def test_fetch_refuses_to_start_when_cancelled(fetcher: FetchPackageUseCase, git_client: RecordingGitClient, gopath: Path) -> None:
    cancel_event = threading.Event()
    cancel_event.set()

    with pytest.raises(CloneError, match="cancelled"):
        fetcher.fetch("github.com/user/repo", str(gopath), gopath, use_https=False, cancel_event=cancel_event)

    assert git_client.plans == []
