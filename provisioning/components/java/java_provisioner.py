# provisioning/components/java/java_provisioner.py
# -*- coding: utf-8 -*-
"""
OpenJDK runtime provisioner.

Releases are discovered on the OpenJDK archive page, which carries both the
version numbers and the direct download links. The runtime lives in a
version-qualified leaf (``<install_root>/jdk-<version>``); after placing a
new leaf every other ``jdk-*`` leaf is removed so exactly one remains.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional

from catalog.version import Version
from common.archive_utils import extract_archive, single_top_level_directory
from common.command_utils import log_step
from common.env_utils import persist_search_path, persist_variable
from common.file_utils import remove_siblings, replace_directory, scratch_directory
from common.network_utils import download_file
from provisioning.base_provisioner import BaseProvisioner
from provisioning.errors import DownloadFailure, EnvPersistenceFailure
from provisioning.intent import InstallationRecord, ProvisionResult, ProvisionStatus
from provisioning.registry import ProvisionerRegistry

JAVA_HOME_VARIABLE = "JAVA_HOME"


@ProvisionerRegistry.register(
    name="java",
    metadata={
        "dependencies": [],
        "description": "OpenJDK runtime required by the Kafka broker",
    },
)
class JavaProvisioner(BaseProvisioner):
    """Converges the OpenJDK installation to one requested version."""

    @property
    def install_root(self) -> Path:
        return Path(self.app_settings.java.install_root)

    @property
    def listing_url(self) -> str:
        return self.app_settings.java.listing_url

    @property
    def version_pattern(self) -> str:
        return self.app_settings.java.version_pattern

    @property
    def configured_version(self) -> Optional[str]:
        return self.app_settings.java.requested_version

    def leaf_path(self, version: str) -> Path:
        return self.install_root / f"{self.app_settings.java.leaf_prefix}{version}"

    def installed_versions(self) -> List[Version]:
        """Versions of every ``jdk-*`` leaf under the install root, newest first."""
        prefix = self.app_settings.java.leaf_prefix
        if not self.install_root.is_dir():
            return []
        found: List[Version] = []
        for entry in self.install_root.iterdir():
            if not entry.is_dir() or not entry.name.startswith(prefix):
                continue
            try:
                found.append(Version.parse(entry.name[len(prefix):]))
            except ValueError:
                self.logger.debug(f"Ignoring unrecognised runtime directory {entry}")
        return sorted(found, reverse=True)

    def detect(self) -> InstallationRecord:
        versions = self.installed_versions()
        if not versions:
            return InstallationRecord("java", self.install_root)
        newest = versions[0]
        return InstallationRecord(
            "java",
            self.install_root,
            version=newest,
            install_path=self.leaf_path(newest.original),
            signal=f"{self.app_settings.java.leaf_prefix}{newest.original} directory",
        )

    def locate_download_url(self, listing: str, version: str) -> str:
        """
        Find the archive link for ``version`` in the release listing.

        Raises:
            DownloadFailure: If the listing has no link for this version and
                platform.
        """
        java = self.app_settings.java
        pattern = re.compile(
            r"https?://[^\"'\s<>]+/openjdk-"
            + re.escape(version)
            + "_"
            + re.escape(java.platform)
            + r"_bin\."
            + re.escape(java.archive_extension)
        )
        match = pattern.search(listing)
        if not match:
            raise DownloadFailure(
                f"No {java.platform} download link for OpenJDK {version} at {self.listing_url}"
            )
        return match.group(0)

    def install_version(self, version: str) -> ProvisionResult:
        listing = self.resolver.fetch_listing(self.listing_url)
        url = self.locate_download_url(listing, version)
        final_path = self.leaf_path(version)

        with scratch_directory(prefix="kraft_java_") as scratch:
            archive = download_file(
                url,
                scratch / url.rsplit("/", 1)[-1],
                timeout=self.app_settings.http_timeout_seconds,
                logger=self.logger,
            )
            staging = extract_archive(
                archive,
                scratch / "staging",
                app_settings=self.app_settings,
                logger=self.logger,
            )
            replace_directory(
                single_top_level_directory(staging), final_path, self.logger
            )

        for stale in remove_siblings(
            final_path, self.app_settings.java.leaf_prefix, self.logger
        ):
            self.logger.info(f"Removed previous runtime {stale.name}")

        log_step(
            f"{self.symbols.get('package', '📦')} OpenJDK {version} placed at {final_path}",
            "info",
            self.logger,
            self.app_settings,
        )
        return self.wire_environment(version, final_path)

    def wire_environment(self, version: str, java_home: Path) -> ProvisionResult:
        """
        Point JAVA_HOME at ``java_home`` and put its ``bin`` first on PATH.

        A failure to persist leaves the files in place and is reported as
        placed-but-not-wired rather than as a failed install.
        """
        try:
            scope = persist_variable(
                self.env_store, JAVA_HOME_VARIABLE, str(java_home), self.logger
            )
            persist_search_path(
                self.env_store, java_home / "bin", self.install_root, self.logger
            )
        except EnvPersistenceFailure as e:
            log_step(
                f"{self.symbols.get('warning', '⚠️')} OpenJDK {version} is installed at {java_home} "
                f"but the environment could not be updated: {e}",
                "warning",
                self.logger,
                self.app_settings,
            )
            return ProvisionResult(
                "java",
                ProvisionStatus.PLACED_NOT_WIRED,
                version=version,
                install_path=java_home,
                error=e,
            )

        log_step(
            f"{self.symbols.get('success', '✅')} JAVA_HOME={java_home} ({scope.value} scope)",
            "info",
            self.logger,
            self.app_settings,
        )
        return ProvisionResult(
            "java", ProvisionStatus.INSTALLED, version=version, install_path=java_home
        )
