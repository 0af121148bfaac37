from __future__ import annotations

from pathlib import Path

from goget_tool.domain.ports import FileSystemPort


class LocalFileSystemAdapter(FileSystemPort):
    def path_exists(self, path: Path) -> bool:
        return path.exists()

    def ensure_directory(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)
