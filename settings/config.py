# settings/config.py
# -*- coding: utf-8 -*-
"""
Centralized static constants for the KRaft provisioner.

This module holds values that never change between runs: the tool version,
the managed environment file locations and the exit code used when the
operator aborts an interactive selection.

Mutable runtime configuration (install roots, listing URLs, versions) is
handled by 'settings/config_models.py' and 'settings/config_loader.py'.
"""

from pathlib import Path

SCRIPT_VERSION: str = "1.0"

DEFAULT_CONFIG_FILE: str = "kraft-provisioner.yaml"

MACHINE_ENV_FILE: Path = Path("/etc/profile.d/kraft-provisioner.sh")
USER_ENV_FILE: Path = Path.home() / ".config" / "kraft-provisioner" / "env.sh"

SELECTION_CANCELLED_EXIT_CODE: int = 130
