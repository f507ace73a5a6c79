"""Utility functions for copying extracted layer content."""

import contextlib
import logging
import os
import posixpath
import shutil
import tempfile
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Union

from common import CopyFailure, CopyReport, ensure_dir

from .config import ERROR_MESSAGES
from .exceptions import CopyError, SourceNotFoundError, wrap_exception

logger = logging.getLogger("encore_extractor.copy")

PathLike = Union[str, Path]
PARTIAL_SUFFIX = ".partial"


def normalize_exclusions(exclusions: Optional[Iterable[str]]) -> FrozenSet[str]:
    """
    Normalize exclusion paths to ``/``-separated paths relative to the copy root.

    ``a/./b/`` becomes ``a/b`` and backslashes are treated as separators.

    Args:
        exclusions: Relative paths to skip during a copy

    Returns:
        The normalized exclusion set

    Raises:
        ValueError: For empty, absolute, ``.`` or parent-escaping exclusions
    """
    normalized = set()
    for raw in exclusions or ():
        candidate = raw.replace("\\", "/").strip()
        if not candidate:
            raise ValueError("Exclusion paths must not be empty")
        if candidate.startswith("/"):
            raise ValueError(f"Exclusion paths must be relative: {raw!r}")

        path = posixpath.normpath(candidate)
        if path == "." or path == ".." or path.startswith("../"):
            raise ValueError(f"Exclusion path does not name an entry inside the source: {raw!r}")
        normalized.add(path)
    return frozenset(normalized)


def is_excluded(rel_path: str, exclusions: FrozenSet[str]) -> bool:
    """Return True if ``rel_path`` equals an exclusion or lies underneath one."""
    return any(rel_path == ex or rel_path.startswith(ex + "/") for ex in exclusions)


def _copy_atomic(src: Path, target: Path) -> None:
    """
    Copy ``src`` to ``target`` through a uniquely named hidden sibling.

    The partial file is removed if the copy fails, so ``target`` never
    holds half-written content. Symlinks are recreated, not followed.
    """
    fd, name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=PARTIAL_SUFFIX)
    os.close(fd)
    partial = Path(name)
    try:
        # 링크는 기존 파일 위에 만들 수 없으므로 확보한 임시 파일을 먼저 비운다
        if src.is_symlink():
            partial.unlink()
        shutil.copy2(src, partial, follow_symlinks=False)
        os.replace(partial, target)
    except OSError:
        with contextlib.suppress(FileNotFoundError):
            partial.unlink()
        raise


def copy_file(src: PathLike, target: PathLike) -> None:
    """
    Copy a single file, creating the target's parent directories.

    Raises:
        CopyError: If the file cannot be copied
    """
    src_path, target_path = Path(src), Path(target)
    try:
        ensure_dir(target_path.parent)
        _copy_atomic(src_path, target_path)
    except OSError as e:
        raise wrap_exception(CopyError, f"Failed to copy {src_path} to {target_path}", e)


def copy_tree(
    source_dir: PathLike,
    dest_dir: PathLike,
    exclusions: Optional[Iterable[str]] = None,
) -> CopyReport:
    """
    Recursively copy ``source_dir`` into ``dest_dir``, skipping excluded paths.

    Directories are created before their contents are copied. A file that
    fails to copy is recorded in the report and skipped; the walk goes on.

    Args:
        source_dir: Directory to copy from
        dest_dir: Directory to copy into (created with its ancestors)
        exclusions: Optional relative paths to skip together with their subtrees

    Returns:
        Report of the copied, skipped and failed entries

    Raises:
        SourceNotFoundError: If ``source_dir`` is missing or not a directory
        CopyError: If a directory cannot be created or the source cannot be walked
        ValueError: If an exclusion path is invalid
    """
    source = Path(source_dir)
    dest = Path(dest_dir)
    if not source.is_dir():
        raise SourceNotFoundError(ERROR_MESSAGES["source_not_found"].format(path=source))

    excluded = normalize_exclusions(exclusions)
    report = CopyReport(source=source, destination=dest)

    def _raise_walk_error(error: OSError) -> None:
        raise error

    try:
        ensure_dir(dest)

        for root, dirnames, filenames in os.walk(source, onerror=_raise_walk_error):
            root_path = Path(root)
            rel_root = root_path.relative_to(source)
            dest_root = dest / rel_root

            kept_dirs: List[str] = []
            for name in sorted(dirnames):
                rel_path = (rel_root / name).as_posix()
                if is_excluded(rel_path, excluded):
                    logger.debug("Skipping excluded: %s", rel_path)
                    report.skipped.append(rel_path)
                    continue

                # 디렉토리를 가리키는 심볼릭 링크는 링크 자체로 복사
                if (root_path / name).is_symlink():
                    _copy_entry(root_path / name, dest_root / name, rel_path, report)
                    continue

                ensure_dir(dest_root / name)
                report.directories_created += 1
                kept_dirs.append(name)

            # 제외된 디렉토리는 하위 탐색 대상에서 제거
            dirnames[:] = kept_dirs

            for name in sorted(filenames):
                rel_path = (rel_root / name).as_posix()
                if is_excluded(rel_path, excluded):
                    logger.debug("Skipping excluded: %s", rel_path)
                    report.skipped.append(rel_path)
                    continue
                ensure_dir(dest_root)
                _copy_entry(root_path / name, dest_root / name, rel_path, report)

    except OSError as e:
        raise wrap_exception(CopyError, f"Failed to copy {source} to {dest}", e)

    return report


def _copy_entry(src: Path, target: Path, rel_path: str, report: CopyReport) -> None:
    """Copy one file, turning an I/O error into a soft failure on ``report``."""
    try:
        _copy_atomic(src, target)
    except OSError as e:
        logger.warning("Warning: Failed to copy %s: %s", src, e)
        report.failures.append(CopyFailure(path=rel_path, reason=str(e)))
        return
    report.files_copied += 1
