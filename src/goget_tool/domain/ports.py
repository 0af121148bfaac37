from __future__ import annotations
"""Hexagonal architecture port interfaces.

Resolution and fetch use cases depend only on these abstractions. Adapters
provide the concrete HTTP, shell and filesystem implementations.
"""

import threading
from abc import ABC, abstractmethod
from pathlib import Path

from .entities import ClonePlan


class PageFetcherPort(ABC):
    """Fetch the text body of a URL (used by go-import discovery)."""

    @abstractmethod
    def fetch_text(self, url: str) -> str:
        """Return the decoded body of a `200 OK` response.

        Raises:
            DiscoveryError: On transport failure or any non-OK status.
        """
        raise NotImplementedError


class GitClientPort(ABC):
    """Local git operations used by the fetch pipeline."""

    @abstractmethod
    def clone(self, plan: ClonePlan, cancel_event: threading.Event | None = None) -> None:
        """Run the clone described by `plan`.

        Raises:
            CloneError: When git cannot be started, fails, or is cancelled.
        """
        raise NotImplementedError


class FileSystemPort(ABC):
    """Filesystem checks abstracted for testability."""

    @abstractmethod
    def path_exists(self, path: Path) -> bool:
        """Return whether a path exists."""
        raise NotImplementedError

    @abstractmethod
    def ensure_directory(self, path: Path) -> None:
        """Ensure target directory exists (create recursively if needed)."""
        raise NotImplementedError
