from __future__ import annotations

import logging
import subprocess
import threading
import time
from typing import Callable

from goget_tool.domain.entities import ClonePlan
from goget_tool.domain.errors import CloneError
from goget_tool.domain.ports import GitClientPort


class ShellGitClientAdapter(GitClientPort):
    """Run `git clone` as a child process.

    The child is polled every `poll_interval_seconds`; when the cancel event is
    set (or the caller is interrupted) the child is terminated.
    """

    def __init__(
        self,
        *,
        git_executable: str = "git",
        timeout_seconds: float | None = None,
        poll_interval_seconds: float = 0.2,
        terminate_grace_seconds: float = 5.0,
        popen: Callable[..., subprocess.Popen[str]] = subprocess.Popen,
    ) -> None:
        self._git_executable = git_executable
        self._timeout_seconds = timeout_seconds
        self._poll_interval_seconds = poll_interval_seconds
        self._terminate_grace_seconds = terminate_grace_seconds
        self._popen = popen
        self._logger = logging.getLogger(__name__)

    @property
    def git_executable(self) -> str:
        return self._git_executable

    def clone(self, plan: ClonePlan, cancel_event: threading.Event | None = None) -> None:
        command = (self._git_executable, *plan.args)
        command_line = " ".join(command)

        self._logger.info(
            "cloning repository",
            extra={
                "event": "git.clone.start",
                "clone_url": plan.url,
                "local_path": str(plan.destination),
            },
        )
        return_code, stdout, stderr = self._run(command, cancel_event)

        if return_code != 0:
            details = (stderr or "").strip() or (stdout or "").strip() or "No command output"
            self._logger.error(
                "git command failed",
                extra={
                    "event": "git.command.error",
                    "command": command_line,
                    "return_code": return_code,
                    "details": details,
                },
            )
            raise CloneError(
                f"error running {command_line}: exit status {return_code}\n{details}",
                command=command,
            )

        self._logger.info(
            "clone completed",
            extra={"event": "git.clone.success", "local_path": str(plan.destination)},
        )

    def _run(self, command: tuple[str, ...], cancel_event: threading.Event | None) -> tuple[int, str, str]:
        command_line = " ".join(command)
        try:
            process = self._popen(
                list(command),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except FileNotFoundError as error:
            raise CloneError(
                f"error running {command_line}: git executable '{self._git_executable}' was not found in PATH",
                command=command,
            ) from error
        except OSError as error:
            raise CloneError(f"error running {command_line}: {error}", command=command) from error

        deadline = None if self._timeout_seconds is None else time.monotonic() + self._timeout_seconds
        try:
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    self._stop(process)
                    raise CloneError(f"error running {command_line}: cancelled", command=command)
                if deadline is not None and time.monotonic() >= deadline:
                    self._stop(process)
                    raise CloneError(
                        f"error running {command_line}: timed out after {self._timeout_seconds}s",
                        command=command,
                    )
                try:
                    stdout, stderr = process.communicate(timeout=self._poll_interval_seconds)
                except subprocess.TimeoutExpired:
                    continue
                return process.returncode, stdout or "", stderr or ""
        except KeyboardInterrupt:
            self._stop(process)
            raise

    def _stop(self, process: subprocess.Popen[str]) -> None:
        self._logger.warning(
            "terminating git process",
            extra={"event": "git.process.terminate", "pid": getattr(process, "pid", None)},
        )
        process.terminate()
        try:
            process.communicate(timeout=self._terminate_grace_seconds)
        except subprocess.TimeoutExpired:
            process.kill()
            process.communicate()
