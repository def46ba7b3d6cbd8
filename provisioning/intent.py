# provisioning/intent.py
# -*- coding: utf-8 -*-
"""
Provision intents and the records describing on-disk state and outcomes.
"""

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from catalog.version import Version
from provisioning.errors import EnvPersistenceFailure, ProvisionerError


class IntentKind(str, enum.Enum):
    UPDATE_TO_DETECTED = "update"
    REINSTALL_DETECTED = "reinstall"
    INSTALL_NEW = "install"
    KEEP_CURRENT = "keep"


@dataclass(frozen=True)
class ProvisionIntent:
    """
    What the caller wants done with one component during this run.

    ``INSTALL_NEW`` without ``requested_version`` means "ask interactively"
    (or take the newest release when prompts are disabled).
    """

    kind: IntentKind
    requested_version: Optional[str] = None

    @classmethod
    def update_to_detected(cls) -> "ProvisionIntent":
        return cls(IntentKind.UPDATE_TO_DETECTED)

    @classmethod
    def reinstall_detected(cls) -> "ProvisionIntent":
        return cls(IntentKind.REINSTALL_DETECTED)

    @classmethod
    def install_new(cls, version: Optional[str] = None) -> "ProvisionIntent":
        return cls(IntentKind.INSTALL_NEW, version)

    @classmethod
    def keep_current(cls) -> "ProvisionIntent":
        return cls(IntentKind.KEEP_CURRENT)

    def describe(self) -> str:
        if self.kind is IntentKind.INSTALL_NEW:
            return f"install {self.requested_version or '(choose version)'}"
        return self.kind.value


@dataclass(frozen=True)
class InstallationRecord:
    """What inspection of the filesystem found for one component."""

    component: str
    install_root: Path
    version: Optional[Version] = None
    install_path: Optional[Path] = None
    signal: str = ""

    @property
    def is_installed(self) -> bool:
        return self.version is not None


class ProvisionStatus(str, enum.Enum):
    INSTALLED = "installed"
    PLACED_NOT_WIRED = "placed-not-wired"
    KEPT = "kept"
    FAILED = "failed"


@dataclass
class ProvisionResult:
    component: str
    status: ProvisionStatus
    version: Optional[str] = None
    install_path: Optional[Path] = None
    cluster_id: Optional[str] = None
    error: Optional[ProvisionerError] = None

    @property
    def exit_code(self) -> int:
        if self.status is ProvisionStatus.PLACED_NOT_WIRED:
            return EnvPersistenceFailure.exit_code
        if self.status is ProvisionStatus.FAILED:
            return self.error.exit_code if self.error else 1
        return 0

    def summary(self) -> str:
        text = f"{self.component}: {self.status.value}"
        if self.version:
            text += f" {self.version}"
        if self.install_path:
            text += f" at {self.install_path}"
        if self.cluster_id:
            text += f" (cluster id {self.cluster_id})"
        if self.error:
            text += f" - {type(self.error).__name__}: {self.error}"
        return text
