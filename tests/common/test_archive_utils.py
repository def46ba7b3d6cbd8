import shutil
import zipfile
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from common.archive_utils import extract_archive, single_top_level_directory
from provisioning.errors import ArchiveToolUnavailable, MalformedArchive

needs_tar = pytest.mark.skipif(shutil.which("tar") is None, reason="tar not installed")


def _zip(path: Path, members: dict) -> Path:
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in members.items():
            archive.writestr(name, content)
    return path


def test_extract_zip(tmp_path: Path):
    archive = _zip(tmp_path / "jdk.zip", {"jdk-21.0.1/bin/java": "#!"})

    extract_archive(archive, tmp_path / "out")

    assert (tmp_path / "out" / "jdk-21.0.1" / "bin" / "java").read_text() == "#!"


def test_extract_zip_strip_components(tmp_path: Path):
    archive = _zip(tmp_path / "kafka.zip", {"kafka_2.13-3.8.0/bin/kafka-storage.sh": "x"})

    extract_archive(archive, tmp_path / "out", strip_components=1)

    assert (tmp_path / "out" / "bin" / "kafka-storage.sh").exists()


def test_corrupt_zip_is_malformed(tmp_path: Path):
    archive = tmp_path / "broken.zip"
    archive.write_bytes(b"not a zip")

    with pytest.raises(MalformedArchive):
        extract_archive(archive, tmp_path / "out")


@needs_tar
def test_extract_tarball_strip_components(tmp_path: Path, make_tarball):
    archive = make_tarball(
        tmp_path / "kafka_2.13-3.8.0.tgz",
        "kafka_2.13-3.8.0",
        {"libs/kafka_2.13-3.8.0.jar": "jar", "bin/kafka-storage.sh": "sh"},
    )

    out = extract_archive(archive, tmp_path / "out", strip_components=1)

    assert sorted(p.name for p in out.iterdir()) == ["bin", "libs"]


@needs_tar
def test_truncated_tarball_is_malformed(tmp_path: Path):
    archive = tmp_path / "truncated.tgz"
    archive.write_bytes(b"\x1f\x8b\x08\x00garbage")

    with pytest.raises(MalformedArchive):
        extract_archive(archive, tmp_path / "out")


def test_missing_tar_is_reported(tmp_path: Path, mocker: MockerFixture):
    mocker.patch("common.archive_utils.command_exists", return_value=False)
    archive = tmp_path / "kafka.tgz"
    archive.write_bytes(b"")

    with pytest.raises(ArchiveToolUnavailable):
        extract_archive(archive, tmp_path / "out")


def test_single_top_level_directory(tmp_path: Path):
    (tmp_path / "jdk-21.0.1").mkdir()

    assert single_top_level_directory(tmp_path) == tmp_path / "jdk-21.0.1"


@pytest.mark.parametrize("entries", [[], ["a/", "b/"], ["a/", "README"], ["README"]])
def test_single_top_level_directory_rejects_ambiguous_layouts(tmp_path: Path, entries):
    for entry in entries:
        if entry.endswith("/"):
            (tmp_path / entry).mkdir()
        else:
            (tmp_path / entry).write_text("")

    with pytest.raises(MalformedArchive):
        single_top_level_directory(tmp_path)
