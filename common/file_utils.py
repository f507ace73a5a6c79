"""Reusable filesystem helpers for directory management and cleanup."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


def _to_path(path: PathLike) -> Path:
    """Convert ``path`` to :class:`Path` without resolving it."""
    return path if isinstance(path, Path) else Path(path)


def ensure_dir(directory: PathLike) -> Path:
    """Create ``directory`` (and parents) if it does not already exist."""
    path = _to_path(directory)
    path.mkdir(parents=True, exist_ok=True)
    return path


def remove_path(path: PathLike) -> bool:
    """Remove a file, symlink or directory tree at ``path``.

    Symlinks are unlinked, never followed.

    Returns:
        True if something was removed, False if ``path`` did not exist.
    """
    target = _to_path(path)
    if target.is_symlink():
        target.unlink()
        return True
    if target.is_dir():
        shutil.rmtree(target)
        return True
    if target.exists():
        target.unlink()
        return True
    return False
