"""Local filesystem implementation of :class:`FileStorage`."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Optional, Union
from urllib.parse import quote

from .. import logging_manager as log_mgr

PathLikeStr = Union[str, os.PathLike[str]]

logger = log_mgr.get_logger().getChild("storage.local")

_COPY_CHUNK_SIZE = 1 << 16


class LocalFileStorage:
    """Resolve root-relative paths onto a directory of the local filesystem."""

    def __init__(self, root: PathLikeStr, *, base_url: Optional[str] = None) -> None:
        self._root = self._normalize_root(root)
        self._base_url = (base_url or "").rstrip("/")

    @staticmethod
    def _normalize_root(path_value: PathLikeStr) -> Path:
        path = Path(path_value).expanduser()
        if not path.is_absolute():
            path = Path.cwd() / path
        return path.resolve()

    @property
    def root(self) -> Path:
        """Absolute directory every relative path is resolved against."""

        return self._root

    @property
    def base_url(self) -> str:
        return self._base_url

    def resolve(self, path: PathLikeStr) -> Path:
        """Return the absolute location for ``path``.

        ``path`` must be relative. A :class:`ValueError` is raised if an absolute
        path or parent directory traversal is requested.
        """

        relative = PurePosixPath(str(path).replace("\\", "/"))
        if relative.is_absolute() or any(part == ".." for part in relative.parts):
            raise ValueError("path must be a relative path inside the storage root")
        return self._root.joinpath(*relative.parts)

    def list_files(self) -> list[str]:
        if not self._root.is_dir():
            return []
        files: list[str] = []
        for candidate in self._root.rglob("*"):
            try:
                if not candidate.is_file():
                    continue
            except OSError:
                logger.debug("Skipping unreadable entry %s", candidate, exc_info=True)
                continue
            files.append(candidate.relative_to(self._root).as_posix())
        return files

    def open_read_stream(self, path: str) -> BinaryIO:
        return self.resolve(path).open("rb")

    def size(self, path: str) -> int:
        return int(self.resolve(path).stat().st_size)

    def last_modified(self, path: str) -> float:
        return float(self.resolve(path).stat().st_mtime)

    def exists(self, path: str) -> bool:
        try:
            return self.resolve(path).is_file()
        except (ValueError, OSError):
            return False

    def absolute_path(self, path: str) -> Optional[Path]:
        return self.resolve(path)

    def public_url(self, path: str) -> Optional[str]:
        """Return the URL for ``path`` if a base URL is set."""

        if not self._base_url:
            return None
        segments = []
        for part in PurePosixPath(str(path).replace("\\", "/")).parts:
            if part in {"", ".", "/"}:
                continue
            if part == "..":
                raise ValueError("path must not traverse parent directories")
            segments.append(quote(part))
        encoded = "/".join(segments)
        return f"{self._base_url}/{encoded}" if encoded else self._base_url

    def write_stream(self, path: str, stream: BinaryIO) -> int:
        target = self.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        written = 0
        with target.open("wb") as handle:
            while True:
                chunk = stream.read(_COPY_CHUNK_SIZE)
                if not chunk:
                    break
                handle.write(chunk)
                written += len(chunk)
        return written


__all__ = ["LocalFileStorage"]
