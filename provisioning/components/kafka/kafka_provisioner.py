# provisioning/components/kafka/kafka_provisioner.py
# -*- coding: utf-8 -*-
"""
Kafka broker provisioner.

The broker directory is not version-qualified: each install replaces it
wholesale and then bootstraps a fresh cluster identity.
"""

import re
from pathlib import Path
from typing import List, Optional

from catalog.version import Version
from common.archive_utils import extract_archive
from common.command_utils import log_step
from common.file_utils import replace_directory, scratch_directory
from common.network_utils import download_file
from provisioning.base_provisioner import BaseProvisioner
from provisioning.components.kafka.cluster_bootstrap import ClusterIdentityBootstrap
from provisioning.components.kafka.kafka_tools import KafkaTools
from provisioning.intent import InstallationRecord, ProvisionResult, ProvisionStatus
from provisioning.registry import ProvisionerRegistry


@ProvisionerRegistry.register(
    name="kafka",
    metadata={
        "dependencies": ["java"],
        "description": "Apache Kafka broker in single-node KRaft mode",
    },
)
class KafkaProvisioner(BaseProvisioner):
    """Converges the broker installation and bootstraps its cluster identity."""

    @property
    def install_root(self) -> Path:
        return Path(self.app_settings.kafka.install_root)

    @property
    def listing_url(self) -> str:
        return self.app_settings.kafka.listing_url

    @property
    def version_pattern(self) -> str:
        return self.app_settings.kafka.version_pattern

    @property
    def configured_version(self) -> Optional[str]:
        return self.app_settings.kafka.requested_version

    def artifact_name(self, version: str) -> str:
        return f"kafka_{self.app_settings.kafka.scala_version}-{version}.tgz"

    def download_url(self, version: str) -> str:
        base = self.app_settings.kafka.download_base.rstrip("/")
        return f"{base}/{version}/{self.artifact_name(version)}"

    def installed_versions(self) -> List[Version]:
        """Versions named by ``libs/kafka_<scala>-<version>.jar``, newest first."""
        libs = self.install_root / "libs"
        if not libs.is_dir():
            return []
        jar = re.compile(
            r"^kafka_"
            + re.escape(self.app_settings.kafka.scala_version)
            + r"-(\d+(?:\.\d+)+)\.jar$"
        )
        found: List[Version] = []
        for entry in libs.iterdir():
            match = jar.match(entry.name)
            if match:
                found.append(Version.parse(match.group(1)))
        return sorted(found, reverse=True)

    def detect(self) -> InstallationRecord:
        versions = self.installed_versions()
        if not versions:
            return InstallationRecord("kafka", self.install_root)
        return InstallationRecord(
            "kafka",
            self.install_root,
            version=versions[0],
            install_path=self.install_root,
            signal=f"libs/kafka_{self.app_settings.kafka.scala_version}-{versions[0]}.jar",
        )

    def install_version(self, version: str) -> ProvisionResult:
        url = self.download_url(version)
        with scratch_directory(prefix="kraft_kafka_") as scratch:
            archive = download_file(
                url,
                scratch / self.artifact_name(version),
                timeout=self.app_settings.http_timeout_seconds,
                logger=self.logger,
            )
            staging = extract_archive(
                archive,
                scratch / "staging",
                strip_components=1,
                app_settings=self.app_settings,
                logger=self.logger,
            )
            replace_directory(staging, self.install_root, self.logger)

        log_step(
            f"{self.symbols.get('package', '📦')} Kafka {version} placed at {self.install_root}",
            "info",
            self.logger,
            self.app_settings,
        )

        try:
            cluster_id = ClusterIdentityBootstrap(
                self.install_root,
                self.app_settings,
                tools=KafkaTools(self.install_root, self.app_settings, self.logger),
                logger=self.logger,
            ).bootstrap()
        except Exception as e:
            log_step(
                f"{self.symbols.get('error', '❌')} Cluster bootstrap failed ({type(e).__name__}): {e}",
                "error",
                self.logger,
                self.app_settings,
            )
            self.rollback()
            raise

        return ProvisionResult(
            "kafka",
            ProvisionStatus.INSTALLED,
            version=version,
            install_path=self.install_root,
            cluster_id=cluster_id,
        )
