"""
Base provisioner class for all component modules.

This module provides the base class that the runtime and broker provisioners
inherit from. It owns the parts of the state machine both share: turning an
intent into a target version, and the single bounded fallback from a
version whose artifact cannot be fetched to an interactive catalog choice.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TypeVar

from catalog.resolver import (
    RegexListingParser,
    VersionCatalogResolver,
    require_versions,
)
from catalog.version import Catalog
from common.command_utils import get_symbols, log_step
from common.env_utils import EnvironmentStore, ProfileEnvironmentStore
from common.file_utils import remove_tree
from provisioning.errors import (
    CatalogUnavailable,
    DownloadFailure,
    DownloadTimeout,
    EmptyCatalog,
)
from provisioning.intent import (
    InstallationRecord,
    IntentKind,
    ProvisionIntent,
    ProvisionResult,
    ProvisionStatus,
)
from settings.config_models import AppSettings
from ui.tui_constants import SelectFunction

T = TypeVar("T")

# Retries after the first failed attempt to fetch an artifact.
MAX_FALLBACK_RETRIES = 1


class BaseProvisioner(ABC):
    """
    Base class for component provisioners.

    Subclasses describe where releases are listed, how an installed version
    is detected and how an artifact is fetched and placed. Capabilities with
    side effects (selector, environment store, catalog resolver) are injected
    so tests can replace them.
    """

    component_name: str = ""

    # Class-level metadata that can be overridden by subclasses or set by the registry decorator
    metadata: Dict[str, Any] = {
        "dependencies": [],  # Components that must be provisioned first
        "description": "",
    }

    def __init__(
        self,
        app_settings: AppSettings,
        select: Optional[SelectFunction] = None,
        env_store: Optional[EnvironmentStore] = None,
        resolver: Optional[VersionCatalogResolver] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the provisioner.

        Args:
            app_settings: The application settings.
            select: Interactive selector ``(options, title) -> option``. When
                None, prompts are unavailable and fallbacks that need one fail.
            env_store: Environment persistence capability.
            resolver: Catalog resolver; built from the settings when omitted.
            logger: Optional logger instance. If not provided, a new logger will be created.
        """
        self.app_settings = app_settings
        self.select = select
        self.env_store = env_store or ProfileEnvironmentStore()
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.resolver = resolver or VersionCatalogResolver(
            parser=RegexListingParser(self.version_pattern),
            timeout=app_settings.http_timeout_seconds,
            logger=self.logger,
        )
        self.symbols = get_symbols(app_settings)

    # --- Component specifics -------------------------------------------

    @property
    @abstractmethod
    def install_root(self) -> Path:
        """Directory owned by this component."""

    @property
    @abstractmethod
    def listing_url(self) -> str:
        """Where releases are listed."""

    @property
    @abstractmethod
    def version_pattern(self) -> str:
        """Regular expression matching one version in the listing."""

    @property
    def configured_version(self) -> Optional[str]:
        return None

    @abstractmethod
    def detect(self) -> InstallationRecord:
        """Inspect the filesystem for an existing installation."""

    @abstractmethod
    def install_version(self, version: str) -> ProvisionResult:
        """Download, place, configure and verify ``version``."""

    # --- Shared behaviour ----------------------------------------------

    @property
    def can_prompt(self) -> bool:
        return self.select is not None and self.app_settings.interactive

    def is_installed(self) -> bool:
        return self.detect().is_installed

    def uninstall(self) -> bool:
        """Remove the component's install root."""
        try:
            remove_tree(self.install_root, self.logger)
        except OSError as e:
            log_step(
                f"{self.symbols.get('error', '❌')} Could not remove {self.install_root}: {e}",
                "error",
                self.logger,
                self.app_settings,
            )
            return False
        return True

    def rollback(self) -> bool:
        """
        Undo a partially completed installation. Defaults to uninstalling.
        """
        log_step(
            f"{self.symbols.get('warning', '⚠️')} Rolling back {self.component_name}",
            "warning",
            self.logger,
            self.app_settings,
        )
        return self.uninstall()

    def resolve_catalog(self) -> Catalog:
        return self.resolver.resolve(self.listing_url)

    def choose_version(self, catalog: Catalog, title: str) -> str:
        """
        Present ``catalog`` in the selector.

        Raises:
            EmptyCatalog: If there is nothing to choose from.
            DownloadFailure: If prompting is not possible.
        """
        require_versions(catalog, self.component_name)
        if not self.can_prompt:
            raise DownloadFailure(
                f"{title}: interactive selection is disabled"
            )
        return self.select(catalog.as_strings(), title)

    def target_version(
        self, intent: ProvisionIntent, record: InstallationRecord
    ) -> Optional[str]:
        """
        Decide which version an intent asks for. Returns None for KeepCurrent.
        """
        if intent.kind is IntentKind.KEEP_CURRENT:
            return None

        if intent.kind is IntentKind.REINSTALL_DETECTED and record.version:
            return str(record.version)

        if intent.kind is IntentKind.INSTALL_NEW and intent.requested_version:
            return intent.requested_version

        try:
            catalog = self.resolve_catalog()
        except CatalogUnavailable as e:
            if not self.configured_version:
                raise
            log_step(
                f"{self.symbols.get('warning', '⚠️')} Release listing unavailable ({e}); using configured version {self.configured_version}",
                "warning",
                self.logger,
                self.app_settings,
            )
            return self.configured_version

        if intent.kind is IntentKind.UPDATE_TO_DETECTED or not self.can_prompt:
            latest = catalog.latest()
            if latest is not None:
                return str(latest)
            if self.configured_version:
                log_step(
                    f"{self.symbols.get('warning', '⚠️')} No releases listed; using configured version {self.configured_version}",
                    "warning",
                    self.logger,
                    self.app_settings,
                )
                return self.configured_version
            raise EmptyCatalog(
                f"No {self.component_name} releases found at {self.listing_url}"
            )

        return self.choose_version(
            catalog, f"Select {self.component_name} version"
        )

    def with_version_fallback(
        self, version: str, attempt: Callable[[str], T]
    ) -> T:
        """
        Run ``attempt(version)``; if the artifact cannot be fetched, offer the
        catalog once and retry with the chosen version.

        Timeouts are not retried: they say nothing about the version.
        """
        candidate = version
        retries = 0
        while True:
            try:
                return attempt(candidate)
            except DownloadTimeout:
                raise
            except DownloadFailure as e:
                if retries >= MAX_FALLBACK_RETRIES or not self.can_prompt:
                    raise
                retries += 1
                log_step(
                    f"{self.symbols.get('warning', '⚠️')} {self.component_name} {candidate} unavailable ({e}); choose another version",
                    "warning",
                    self.logger,
                    self.app_settings,
                )
                candidate = self.choose_version(
                    self.resolve_catalog(),
                    f"{self.component_name} {candidate} unavailable - select a version",
                )

    def provision(
        self,
        intent: ProvisionIntent,
        record: Optional[InstallationRecord] = None,
    ) -> ProvisionResult:
        """
        Converge the component to what ``intent`` asks for.

        Raises:
            ProvisionerError: Any gate failure; see provisioning.errors.
        """
        record = record or self.detect()
        log_step(
            f"{self.symbols.get('step', '➡️')} {self.component_name}: {intent.describe()} "
            f"(detected: {record.version or 'none'})",
            "info",
            self.logger,
            self.app_settings,
        )

        version = self.target_version(intent, record)
        if version is None:
            return ProvisionResult(
                self.component_name,
                ProvisionStatus.KEPT,
                version=str(record.version) if record.version else None,
                install_path=record.install_path,
            )
        return self.with_version_fallback(version, self.install_version)
