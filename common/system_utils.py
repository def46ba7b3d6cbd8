# common/system_utils.py
# -*- coding: utf-8 -*-
"""
System-level utility functions for the provisioner.

This module includes the free-space precondition check and detached
process launching used to start the broker and smoke-test sessions.
"""

import contextlib
import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from common.command_utils import get_symbols, log_step
from provisioning.errors import PreconditionFailure
from settings.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def format_bytes(num_bytes: int) -> str:
    value = float(num_bytes)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if value < 1024 or unit == "GiB":
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GiB"


def check_disk_space(
    required_bytes: int,
    volume: Union[str, Path],
    app_settings: Optional[AppSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> int:
    """
    Verify that ``volume`` has at least ``required_bytes`` free.

    Args:
        required_bytes: The static threshold.
        volume: Any path on the volume to inspect. A missing path is checked
            through its nearest existing ancestor.
        app_settings: Optional application settings for logging symbols.
        current_logger: Optional logger instance.

    Returns:
        The number of free bytes.

    Raises:
        PreconditionFailure: If free space is below the threshold or the
            volume cannot be inspected.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)

    existing = Path(volume)
    while not existing.exists() and existing != existing.parent:
        existing = existing.parent

    try:
        free = shutil.disk_usage(existing).free
    except OSError as e:
        raise PreconditionFailure(
            f"Could not read free space of '{volume}': {e}"
        ) from e

    if free >= required_bytes:
        log_step(
            f"{symbols.get('success', '✅')} {format_bytes(free)} free on '{existing}' "
            f"(need {format_bytes(required_bytes)})",
            "info",
            logger_to_use,
            app_settings,
        )
        return free

    raise PreconditionFailure(
        f"Insufficient space on '{existing}': {format_bytes(free)} free, "
        f"{format_bytes(required_bytes)} required"
    )


def start_detached(
    command: List[str],
    cwd: Optional[Union[str, Path]] = None,
    log_file: Optional[Union[str, Path]] = None,
    input_file: Optional[Union[str, Path]] = None,
    current_logger: Optional[logging.Logger] = None,
) -> subprocess.Popen:
    """
    Start ``command`` in its own session so it outlives the provisioner.

    Output goes to ``log_file`` when given, otherwise it is discarded.
    Standard input is read from ``input_file`` when given.
    """
    logger_to_use = current_logger if current_logger else module_logger
    logger_to_use.info(f"Starting detached: {subprocess.list2cmdline(command)}")

    with contextlib.ExitStack() as stack:
        stdin = (
            stack.enter_context(open(input_file, "rb"))
            if input_file is not None
            else subprocess.DEVNULL
        )
        stdout = subprocess.DEVNULL
        if log_file is not None:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            stdout = stack.enter_context(open(log_file, "ab"))
        return subprocess.Popen(
            command,
            cwd=cwd,
            stdin=stdin,
            stdout=stdout,
            stderr=subprocess.STDOUT if log_file is not None else subprocess.DEVNULL,
            start_new_session=True,
        )


def is_process_running(process: subprocess.Popen) -> bool:
    return process.poll() is None
