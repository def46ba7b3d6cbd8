# provisioning/components/kafka/cluster_bootstrap.py
# -*- coding: utf-8 -*-
"""
Cluster identity bootstrap for a single-node KRaft broker.

The bootstrap runs six steps, each gating the next:

1. generate a cluster id with the distribution's own tool;
2. write ``server.properties`` for a one-node quorum (broker and controller
   in the same process), regenerated in full;
3. remove a stale log directory left by an earlier install;
4. format storage with the generated id;
5. read ``meta.properties`` back from the log directory;
6. compare the persisted id with the generated one.

A broker is only reported as installed once step 6 has passed.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from common.command_utils import get_symbols, log_step
from common.file_utils import remove_tree
from provisioning.components.kafka.kafka_tools import KafkaTools
from provisioning.errors import (
    BootstrapError,
    IdentityIntegrityError,
    LogDirRemovalFailed,
)
from settings.config_models import AppSettings, KafkaSettings

module_logger = logging.getLogger(__name__)

META_PROPERTIES = "meta.properties"
CLUSTER_ID_KEY = "cluster.id"


def render_server_properties(kafka: KafkaSettings, log_dir: Path) -> str:
    """
    Render the complete broker configuration for a one-node KRaft quorum.
    """
    lines = [
        "# Generated by kraft-provisioner; replaced on every install.",
        "process.roles=broker,controller",
        f"node.id={kafka.node_id}",
        f"controller.quorum.voters={kafka.node_id}@{kafka.host}:{kafka.controller_port}",
        f"listeners=PLAINTEXT://{kafka.host}:{kafka.listener_port},"
        f"CONTROLLER://{kafka.host}:{kafka.controller_port}",
        f"advertised.listeners=PLAINTEXT://{kafka.host}:{kafka.listener_port}",
        "inter.broker.listener.name=PLAINTEXT",
        "controller.listener.names=CONTROLLER",
        "listener.security.protocol.map=CONTROLLER:PLAINTEXT,PLAINTEXT:PLAINTEXT",
        f"log.dirs={log_dir}",
        "num.partitions=1",
        "offsets.topic.replication.factor=1",
        "transaction.state.log.replication.factor=1",
        "transaction.state.log.min.isr=1",
    ]
    return "\n".join(lines) + "\n"


def read_properties(path: Union[str, Path]) -> Dict[str, str]:
    """Parse a ``key=value`` properties file, skipping comments and blanks."""
    properties: Dict[str, str] = {}
    for raw_line in Path(path).read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith(("#", "!")):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            key, sep, value = line.partition(":")
        properties[key.strip()] = value.strip()
    return properties


class ClusterIdentityBootstrap:
    """Formats broker storage and verifies the persisted cluster id."""

    def __init__(
        self,
        install_dir: Union[str, Path],
        app_settings: AppSettings,
        tools: Optional[KafkaTools] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.install_dir = Path(install_dir)
        self.app_settings = app_settings
        self.logger = logger or module_logger
        self.tools = tools or KafkaTools(self.install_dir, app_settings, self.logger)
        self.symbols = get_symbols(app_settings)

    @property
    def config_path(self) -> Path:
        return self.install_dir / self.app_settings.kafka.config_relative_path

    @property
    def log_dir(self) -> Path:
        return self.install_dir / self.app_settings.kafka.log_dir_relative_path

    def write_configuration(self) -> Path:
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self.config_path.write_text(
                render_server_properties(self.app_settings.kafka, self.log_dir),
                encoding="utf-8",
            )
        except OSError as e:
            raise BootstrapError(
                f"Could not write broker configuration {self.config_path}: {e}"
            ) from e
        self.logger.info(f"Wrote broker configuration {self.config_path}")
        return self.config_path

    def clear_log_dir(self) -> None:
        try:
            if remove_tree(self.log_dir, self.logger):
                self.logger.info(f"Removed stale log directory {self.log_dir}")
        except OSError as e:
            raise LogDirRemovalFailed(
                f"Could not remove stale log directory {self.log_dir}: {e}"
            ) from e

    def read_persisted_identity(self) -> str:
        meta_path = self.log_dir / META_PROPERTIES
        try:
            properties = read_properties(meta_path)
        except OSError as e:
            raise IdentityIntegrityError(
                f"Formatted storage has no readable {META_PROPERTIES} at {meta_path}: {e}"
            ) from e
        persisted = properties.get(CLUSTER_ID_KEY)
        if not persisted:
            raise IdentityIntegrityError(
                f"{meta_path} does not record a {CLUSTER_ID_KEY}"
            )
        return persisted

    def bootstrap(self) -> str:
        """
        Run all bootstrap steps and return the verified cluster id.

        Raises:
            BootstrapError: If id generation or formatting fails.
            LogDirRemovalFailed: If a stale log directory cannot be removed.
            IdentityIntegrityError: If the persisted id is missing or differs.
        """
        cluster_id = self.tools.random_uuid()
        self.logger.info(f"Generated cluster id {cluster_id}")

        self.write_configuration()
        self.clear_log_dir()
        self.tools.format_storage(cluster_id, self.config_path)

        persisted = self.read_persisted_identity()
        if persisted != cluster_id:
            raise IdentityIntegrityError(
                f"Storage was formatted with cluster id {persisted!r} "
                f"but {cluster_id!r} was generated"
            )

        log_step(
            f"{self.symbols.get('success', '✅')} Cluster id {cluster_id} verified in {self.log_dir / META_PROPERTIES}",
            "info",
            self.logger,
            self.app_settings,
        )
        return cluster_id
