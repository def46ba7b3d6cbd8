# common/archive_utils.py
# -*- coding: utf-8 -*-
"""
Archive extraction for downloaded release artifacts.

Zip files are unpacked with :mod:`zipfile`; gzip-compressed tarballs are
handed to the host ``tar`` tool, which also implements stripping of leading
path components.
"""

import logging
import subprocess
import zipfile
from pathlib import Path, PurePosixPath
from typing import List, Optional, Union

from common.command_utils import command_exists, run_command
from provisioning.errors import ArchiveToolUnavailable, MalformedArchive
from settings.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def is_zip_archive(archive_path: Union[str, Path]) -> bool:
    return str(archive_path).lower().endswith(".zip")


def _extract_zip(
    archive_path: Path, destination: Path, strip_components: int
) -> None:
    try:
        with zipfile.ZipFile(archive_path, "r") as zip_ref:
            if strip_components == 0:
                zip_ref.extractall(destination)
                return
            for member in zip_ref.infolist():
                parts = PurePosixPath(member.filename).parts[strip_components:]
                if not parts or ".." in parts:
                    continue
                target = destination.joinpath(*parts)
                if member.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with zip_ref.open(member) as src, open(target, "wb") as dst:
                    dst.write(src.read())
    except zipfile.BadZipFile as e:
        raise MalformedArchive(
            f"'{archive_path}' is not a valid zip file or is corrupted: {e}"
        ) from e


def _extract_tar(
    archive_path: Path,
    destination: Path,
    strip_components: int,
    app_settings: Optional[AppSettings],
    logger: logging.Logger,
) -> None:
    if not command_exists("tar"):
        raise ArchiveToolUnavailable(
            "The 'tar' tool is required to extract "
            f"'{archive_path.name}' but was not found on PATH"
        )
    flags = "-xzf" if str(archive_path).endswith((".tar.gz", ".tgz")) else "-xf"
    command: List[str] = ["tar", flags, str(archive_path), "-C", str(destination)]
    if strip_components:
        command.append(f"--strip-components={strip_components}")
    try:
        run_command(
            command,
            app_settings,
            capture_output=True,
            current_logger=logger,
        )
    except subprocess.CalledProcessError as e:
        raise MalformedArchive(
            f"tar could not extract '{archive_path}': {(e.stderr or '').strip() or e}"
        ) from e


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    strip_components: int = 0,
    app_settings: Optional[AppSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> Path:
    """
    Extract an archive into ``destination``.

    Args:
        archive_path: The ``.zip``, ``.tar.gz``/``.tgz`` or ``.tar`` file.
        destination: Target directory; created when missing.
        strip_components: Leading path components dropped from every member.
        app_settings: Optional settings passed through to command logging.
        logger: Optional logger instance.

    Returns:
        The destination directory.

    Raises:
        ArchiveToolUnavailable: If a tarball is given and ``tar`` is missing.
        MalformedArchive: If the archive cannot be read.
    """
    logger_to_use = logger or module_logger
    archive = Path(archive_path)
    dest = Path(destination)
    dest.mkdir(parents=True, exist_ok=True)
    logger_to_use.info(f"Extracting '{archive.name}' to '{dest}'")

    if is_zip_archive(archive):
        _extract_zip(archive, dest, strip_components)
    else:
        _extract_tar(archive, dest, strip_components, app_settings, logger_to_use)

    if not any(dest.iterdir()):
        raise MalformedArchive(f"Archive '{archive.name}' extracted no files")
    return dest


def single_top_level_directory(extracted_dir: Union[str, Path]) -> Path:
    """
    Return the one directory an archive unpacked into.

    Raises:
        MalformedArchive: If there is no top-level directory, or more than one
            entry so the root is ambiguous.
    """
    entries = list(Path(extracted_dir).iterdir())
    directories = [entry for entry in entries if entry.is_dir()]
    if len(directories) != 1 or len(entries) != 1:
        names = sorted(entry.name for entry in entries)
        raise MalformedArchive(
            f"Expected exactly one top-level directory in '{extracted_dir}', found {names}"
        )
    return directories[0]
