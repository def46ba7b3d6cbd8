# common/file_utils.py
# -*- coding: utf-8 -*-
"""
File system utility functions: scratch directories, whole-directory
replacement and recursive removal.
"""

import logging
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

module_logger = logging.getLogger(__name__)


@contextmanager
def scratch_directory(prefix: str = "kraft_dl_") -> Iterator[Path]:
    """
    Yield a temporary directory that is removed on exit, even after errors.
    """
    path = Path(tempfile.mkdtemp(prefix=prefix))
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


def remove_tree(
    directory_path: Union[str, Path],
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Recursively delete a directory.

    Parameters:
        directory_path: The directory to delete.
        current_logger: Logger instance to use for logging messages.

    Returns:
        bool: True if something was removed, False if the path did not exist.

    Raises:
        OSError: If the directory exists but cannot be removed (permissions,
            open handles).
    """
    logger_to_use = current_logger if current_logger else module_logger
    path = Path(directory_path)
    if not path.exists() and not path.is_symlink():
        return False
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
    logger_to_use.info(f"Removed '{path}'")
    return True


def replace_directory(
    staged_path: Union[str, Path],
    final_path: Union[str, Path],
    current_logger: Optional[logging.Logger] = None,
) -> Path:
    """
    Replace ``final_path`` with ``staged_path``.

    The staged tree is first moved next to ``final_path``; the existing
    directory is then removed and the staged one renamed into its place, so
    nothing from a previous install survives alongside the new files.

    Returns:
        The final path.
    """
    logger_to_use = current_logger if current_logger else module_logger
    final = Path(final_path)
    final.parent.mkdir(parents=True, exist_ok=True)
    incoming = final.parent / f".{final.name}.incoming"
    remove_tree(incoming, logger_to_use)
    shutil.move(str(staged_path), str(incoming))
    remove_tree(final, logger_to_use)
    incoming.rename(final)
    logger_to_use.info(f"Placed '{final}'")
    return final


def remove_siblings(
    keep_path: Union[str, Path],
    prefix: str,
    current_logger: Optional[logging.Logger] = None,
) -> List[Path]:
    """
    Remove directories next to ``keep_path`` whose names start with ``prefix``.

    Returns:
        The removed paths.
    """
    keep = Path(keep_path)
    removed: List[Path] = []
    if not keep.parent.is_dir():
        return removed
    for sibling in sorted(keep.parent.iterdir()):
        if sibling == keep or not sibling.name.startswith(prefix):
            continue
        if sibling.is_dir():
            remove_tree(sibling, current_logger)
            removed.append(sibling)
    return removed
