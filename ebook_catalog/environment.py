"""Populate ``os.environ`` from dotenv files before settings are read.

Lookup order is: paths listed in ``EBOOK_CATALOG_ENV_FILE`` (separated by
``os.pathsep``), then ``.env``, ``.env.<EBOOK_CATALOG_ENV>`` and
``.env.local`` in the project root. Values already present in the process
environment are never overwritten.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

ENV_FILE_VAR = "EBOOK_CATALOG_ENV_FILE"
ENV_PROFILE_VAR = "EBOOK_CATALOG_ENV"
PROJECT_ROOT = Path(__file__).resolve().parents[1]

_applied: Optional[Tuple[Path, ...]] = None


def dotenv_candidates(root: Path = PROJECT_ROOT) -> List[Path]:
    """Return de-duplicated dotenv paths in the order they should be applied."""

    ordered: List[Path] = [
        Path(entry.strip()).expanduser().resolve()
        for entry in os.environ.get(ENV_FILE_VAR, "").split(os.pathsep)
        if entry.strip()
    ]
    profile = os.environ.get(ENV_PROFILE_VAR, "").strip()
    names = [".env", f".env.{profile}" if profile else None, ".env.local"]
    ordered.extend((root / name).resolve() for name in names if name)
    return list(dict.fromkeys(ordered))


def load_environment(*, force: bool = False) -> Tuple[Path, ...]:
    """Apply every existing candidate file once and return the ones applied."""

    global _applied
    if _applied is None or force:
        _applied = tuple(
            path for path in dotenv_candidates() if path.is_file() and load_dotenv(path, override=False)
        )
    return _applied


__all__ = ["dotenv_candidates", "load_environment"]
