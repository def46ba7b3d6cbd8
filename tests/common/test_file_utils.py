from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from common.file_utils import (
    remove_siblings,
    remove_tree,
    replace_directory,
    scratch_directory,
)


def test_scratch_directory_is_removed_after_error():
    with pytest.raises(RuntimeError):
        with scratch_directory() as scratch:
            (scratch / "partial.tgz").write_bytes(b"x")
            raise RuntimeError("download interrupted")

    assert not scratch.exists()


def test_remove_tree(tmp_path: Path):
    target = tmp_path / "old"
    (target / "nested").mkdir(parents=True)
    (target / "nested" / "file").write_text("x")

    assert remove_tree(target) is True
    assert not target.exists()
    assert remove_tree(target) is False


def test_remove_tree_propagates_os_errors(tmp_path: Path, mocker: MockerFixture):
    target = tmp_path / "locked"
    target.mkdir()
    mocker.patch("common.file_utils.shutil.rmtree", side_effect=PermissionError("denied"))

    with pytest.raises(PermissionError):
        remove_tree(target)


def test_replace_directory_leaves_no_old_files(tmp_path: Path):
    final = tmp_path / "kafka"
    final.mkdir()
    (final / "stale.jar").write_text("old")
    staged = tmp_path / "staging"
    staged.mkdir()
    (staged / "fresh.jar").write_text("new")

    replace_directory(staged, final)

    assert sorted(p.name for p in final.iterdir()) == ["fresh.jar"]
    assert not staged.exists()


def test_remove_siblings_only_touches_prefixed_directories(tmp_path: Path):
    keep = tmp_path / "jdk-21.0.1"
    for name in ["jdk-21.0.1", "jdk-17.0.2", "jdk-11.0.2", "other"]:
        (tmp_path / name).mkdir()
    (tmp_path / "jdk-notes.txt").write_text("file, not a leaf")

    removed = remove_siblings(keep, "jdk-")

    assert sorted(p.name for p in removed) == ["jdk-11.0.2", "jdk-17.0.2"]
    assert sorted(p.name for p in tmp_path.iterdir()) == [
        "jdk-21.0.1",
        "jdk-notes.txt",
        "other",
    ]


def test_replace_directory_stages_beside_target(tmp_path: Path, mocker: MockerFixture):
    root = tmp_path / "opt"
    final = root / "kafka"
    final.mkdir(parents=True)
    (root / ".kafka.incoming").mkdir()
    (root / ".kafka.incoming" / "interrupted.jar").write_text("partial")
    staged = tmp_path / "scratch" / "staging"
    staged.mkdir(parents=True)
    (staged / "fresh.jar").write_text("new")
    rename = mocker.spy(Path, "rename")

    replace_directory(staged, final)

    rename.assert_called_once_with(root / ".kafka.incoming", final)
    assert sorted(p.name for p in root.iterdir()) == ["kafka"]
    assert sorted(p.name for p in final.iterdir()) == ["fresh.jar"]
