import os
import shutil
import sys
from pathlib import Path

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from encore_extractor.modules import utils
from encore_extractor.modules.exceptions import CopyError, SourceNotFoundError
from encore_extractor.modules.utils import copy_file, copy_tree, is_excluded, normalize_exclusions


def _write_tree(root: Path, files: dict) -> None:
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)


def _relative_files(root: Path) -> set:
    return {p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()}


def test_copy_without_exclusions_mirrors_source(tmp_path: Path):
    src = tmp_path / "src"
    files = {
        "a.txt": b"alpha",
        "nested/b.bin": bytes(range(256)),
        "nested/deeper/c.json": b'{"c": 1}',
    }
    _write_tree(src, files)
    (src / "empty_dir").mkdir()

    report = copy_tree(src, tmp_path / "dst")

    dst = tmp_path / "dst"
    assert _relative_files(dst) == set(files)
    for rel_path, content in files.items():
        assert (dst / rel_path).read_bytes() == content
    assert (dst / "empty_dir").is_dir()
    assert report.ok
    assert report.files_copied == 3
    assert report.directories_created == 3
    assert report.skipped == []


def test_exclusion_scenario(tmp_path: Path):
    src = tmp_path / "src"
    _write_tree(src, {"a/x.txt": b"x", "a/b/y.txt": b"y", "skip/z.txt": b"z"})
    dst = tmp_path / "dst"
    dst.mkdir()

    report = copy_tree(src, dst, ["skip"])

    assert _relative_files(dst) == {"a/x.txt", "a/b/y.txt"}
    assert not (dst / "skip").exists()
    assert report.skipped == ["skip"]


def test_exclusion_does_not_match_partial_names(tmp_path: Path):
    src = tmp_path / "src"
    _write_tree(
        src,
        {
            "node_modules/pkg/index.js": b"module.exports = 1",
            "node_modules_backup/pkg/index.js": b"module.exports = 2",
            "node_modules.txt": b"notes",
        },
    )

    copy_tree(src, tmp_path / "dst", {"node_modules"})

    assert _relative_files(tmp_path / "dst") == {
        "node_modules_backup/pkg/index.js",
        "node_modules.txt",
    }


def test_nested_exclusion_only_skips_that_subtree(tmp_path: Path):
    src = tmp_path / "src"
    _write_tree(
        src,
        {
            "app/cache/blob": b"1",
            "app/main.js": b"2",
            "cache/keep": b"3",
            "app/config.json": b"4",
        },
    )

    report = copy_tree(src, tmp_path / "dst", ["app/cache", "app/config.json"])

    assert _relative_files(tmp_path / "dst") == {"app/main.js", "cache/keep"}
    assert sorted(report.skipped) == ["app/cache", "app/config.json"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("skip/", "skip"),
        ("./skip", "skip"),
        ("a/./b//", "a/b"),
        ("a\\b", "a/b"),
        ("a/c/../b", "a/b"),
    ],
)
def test_normalize_exclusions(raw: str, expected: str):
    assert normalize_exclusions([raw]) == frozenset({expected})


@pytest.mark.parametrize("raw", ["", "   ", "/abs/path", ".", "./", "..", "../outside", "a/../../b"])
def test_invalid_exclusions_are_rejected(raw: str):
    with pytest.raises(ValueError):
        normalize_exclusions([raw])


def test_trailing_slash_exclusion_skips_directory(tmp_path: Path):
    src = tmp_path / "src"
    _write_tree(src, {"skip/z.txt": b"z", "keep.txt": b"k"})

    copy_tree(src, tmp_path / "dst", ["skip/"])

    assert _relative_files(tmp_path / "dst") == {"keep.txt"}


@pytest.mark.parametrize(
    "rel_path, expected",
    [
        ("node_modules", True),
        ("node_modules/a/b", True),
        ("node_modules_backup", False),
        ("src/node_modules", False),
    ],
)
def test_is_excluded(rel_path: str, expected: bool):
    assert is_excluded(rel_path, frozenset({"node_modules"})) is expected


def test_single_file_failure_is_recorded_and_copy_continues(tmp_path: Path, monkeypatch):
    src = tmp_path / "src"
    _write_tree(src, {"a.txt": b"a", "locked.txt": b"secret", "sub/c.txt": b"c"})
    real_copy2 = shutil.copy2

    def flaky_copy2(source, target, *, follow_symlinks=True):
        if Path(source).name == "locked.txt":
            # simulate a failure after the partial file was created
            Path(target).write_bytes(b"sec")
            raise PermissionError(13, "Permission denied", str(source))
        return real_copy2(source, target, follow_symlinks=follow_symlinks)

    monkeypatch.setattr(utils.shutil, "copy2", flaky_copy2)

    report = copy_tree(src, tmp_path / "dst")

    dst = tmp_path / "dst"
    assert not report.ok
    assert [failure.path for failure in report.failures] == ["locked.txt"]
    assert "Permission denied" in report.failures[0].reason
    assert report.files_copied == 2
    assert _relative_files(dst) == {"a.txt", "sub/c.txt"}
    assert not any(name.endswith(utils.PARTIAL_SUFFIX) for name in os.listdir(dst))


def test_source_files_named_like_temporaries_are_preserved(tmp_path: Path):
    src = tmp_path / "src"
    _write_tree(src, {"x": b"real x", ".x.partial": b"dotfile that looks temporary"})

    report = copy_tree(src, tmp_path / "dst")

    dst = tmp_path / "dst"
    assert report.ok
    assert report.files_copied == 2
    assert sorted(os.listdir(dst)) == [".x.partial", "x"]
    assert (dst / "x").read_bytes() == b"real x"
    assert (dst / ".x.partial").read_bytes() == b"dotfile that looks temporary"


def test_unreadable_subdirectory_raises_copy_error(tmp_path: Path, monkeypatch):
    src = tmp_path / "src"
    _write_tree(src, {"ok/a.txt": b"a", "locked/b.txt": b"b"})
    real_scandir = os.scandir

    def guarded_scandir(path="."):
        if os.path.basename(os.fspath(path)) == "locked":
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", guarded_scandir)

    with pytest.raises(CopyError) as excinfo:
        copy_tree(src, tmp_path / "dst")

    assert isinstance(excinfo.value.cause, PermissionError)


def test_intermediate_directory_creation_failure_raises_copy_error(tmp_path: Path):
    src = tmp_path / "src"
    _write_tree(src, {"sub/a.txt": b"a"})
    dst = tmp_path / "dst"
    _write_tree(dst, {"sub": b"a file where the directory should go"})

    with pytest.raises(CopyError):
        copy_tree(src, dst)

    assert (dst / "sub").read_bytes() == b"a file where the directory should go"


def test_failed_copy_keeps_previous_destination_content(tmp_path: Path, monkeypatch):
    src = tmp_path / "src"
    _write_tree(src, {"data.txt": b"new content"})
    dst = tmp_path / "dst"
    _write_tree(dst, {"data.txt": b"old content"})

    def failing_copy2(source, target, *, follow_symlinks=True):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(utils.shutil, "copy2", failing_copy2)

    report = copy_tree(src, dst)

    assert len(report.failures) == 1
    assert (dst / "data.txt").read_bytes() == b"old content"


def test_nonexistent_source_raises_and_creates_nothing(tmp_path: Path):
    dst = tmp_path / "dst"

    with pytest.raises(SourceNotFoundError):
        copy_tree(tmp_path / "missing", dst)

    assert not dst.exists()


def test_file_source_raises_source_not_found(tmp_path: Path):
    src = tmp_path / "file.txt"
    src.write_text("not a directory", encoding="utf-8")

    with pytest.raises(SourceNotFoundError):
        copy_tree(src, tmp_path / "dst")

    assert not (tmp_path / "dst").exists()


def test_source_not_found_is_a_copy_error():
    assert issubclass(SourceNotFoundError, CopyError)


def test_destination_creation_failure_raises_copy_error(tmp_path: Path):
    src = tmp_path / "src"
    _write_tree(src, {"a.txt": b"a"})
    blocker = tmp_path / "blocker"
    blocker.write_text("file in the way", encoding="utf-8")

    with pytest.raises(CopyError):
        copy_tree(src, blocker / "dst")


def test_copy_into_existing_destination_is_idempotent(tmp_path: Path):
    src = tmp_path / "src"
    _write_tree(src, {"a/b.txt": b"b"})
    dst = tmp_path / "dst"

    copy_tree(src, dst)
    report = copy_tree(src, dst)

    assert report.ok
    assert (dst / "a" / "b.txt").read_bytes() == b"b"


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
def test_symlinks_are_copied_as_links(tmp_path: Path):
    src = tmp_path / "src"
    _write_tree(src, {"lib/real.js": b"real"})
    (src / "bin").mkdir()
    os.symlink("../lib/real.js", src / "bin" / "tool")
    os.symlink("lib", src / "lib-link")

    report = copy_tree(src, tmp_path / "dst")

    dst = tmp_path / "dst"
    assert report.ok
    assert (dst / "bin" / "tool").is_symlink()
    assert os.readlink(dst / "bin" / "tool") == "../lib/real.js"
    assert (dst / "lib-link").is_symlink()
    assert (dst / "bin" / "tool").read_bytes() == b"real"


def test_copy_file_creates_parent_directories(tmp_path: Path):
    src = tmp_path / "manifest.json"
    src.write_text('{"ok": true}', encoding="utf-8")
    target = tmp_path / "out" / "artifacts" / "manifest.json"

    copy_file(src, target)

    assert target.read_text(encoding="utf-8") == '{"ok": true}'


def test_copy_file_failure_is_fatal(tmp_path: Path):
    with pytest.raises(CopyError):
        copy_file(tmp_path / "missing.json", tmp_path / "out" / "missing.json")

    assert not (tmp_path / "out" / "missing.json").exists()
