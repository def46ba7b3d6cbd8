# provisioning/components/kafka/kafka_tools.py
# -*- coding: utf-8 -*-
"""
Thin wrappers around the shell scripts shipped in a Kafka distribution.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Type, Union

from common.command_utils import run_command
from common.system_utils import start_detached
from provisioning.errors import BootstrapError, BrokerStartFailure, ProvisionerError
from settings.config_models import AppSettings

module_logger = logging.getLogger(__name__)


class KafkaTools:
    """Runs ``bin/*.sh`` scripts of the distribution in ``install_dir``."""

    def __init__(
        self,
        install_dir: Union[str, Path],
        app_settings: AppSettings,
        logger: Optional[logging.Logger] = None,
    ):
        self.install_dir = Path(install_dir)
        self.app_settings = app_settings
        self.logger = logger or module_logger

    @property
    def bootstrap_server(self) -> str:
        kafka = self.app_settings.kafka
        return f"{kafka.host}:{kafka.listener_port}"

    def script(self, name: str) -> str:
        return str(self.install_dir / "bin" / name)

    def _run(
        self,
        command: List[str],
        what: str,
        error: Type[ProvisionerError] = BootstrapError,
    ) -> str:
        try:
            result = run_command(
                command,
                self.app_settings,
                capture_output=True,
                current_logger=self.logger,
                cwd=str(self.install_dir),
            )
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or e.stdout or "").strip() or str(e)
            raise error(f"{what} failed: {detail}") from e
        except OSError as e:
            raise error(f"{what} failed: {e}") from e
        return result.stdout or ""

    def random_uuid(self) -> str:
        """Generate a cluster id with ``kafka-storage.sh random-uuid``."""
        output = self._run(
            [self.script("kafka-storage.sh"), "random-uuid"],
            "Cluster id generation",
        )
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        if not lines:
            raise BootstrapError("kafka-storage.sh random-uuid printed no cluster id")
        return lines[-1]

    def format_storage(self, cluster_id: str, config_path: Union[str, Path]) -> None:
        """Format the log directories named in ``config_path`` under ``cluster_id``."""
        self._run(
            [
                self.script("kafka-storage.sh"),
                "format",
                "-t",
                cluster_id,
                "-c",
                str(config_path),
            ],
            "Storage format",
        )

    def start_server(
        self, config_path: Union[str, Path], log_file: Union[str, Path]
    ) -> subprocess.Popen:
        return start_detached(
            [self.script("kafka-server-start.sh"), str(config_path)],
            cwd=self.install_dir,
            log_file=log_file,
            current_logger=self.logger,
        )

    def create_topic(self, topic: str) -> None:
        self._run(
            [
                self.script("kafka-topics.sh"),
                "--create",
                "--if-not-exists",
                "--topic",
                topic,
                "--partitions",
                "1",
                "--replication-factor",
                "1",
                "--bootstrap-server",
                self.bootstrap_server,
            ],
            f"Creating topic '{topic}'",
            BrokerStartFailure,
        )

    def start_console_producer(
        self,
        topic: str,
        input_file: Union[str, Path],
        log_file: Union[str, Path],
    ) -> subprocess.Popen:
        return start_detached(
            [
                self.script("kafka-console-producer.sh"),
                "--topic",
                topic,
                "--bootstrap-server",
                self.bootstrap_server,
            ],
            cwd=self.install_dir,
            log_file=log_file,
            input_file=input_file,
            current_logger=self.logger,
        )

    def start_console_consumer(
        self, topic: str, log_file: Union[str, Path]
    ) -> subprocess.Popen:
        return start_detached(
            [
                self.script("kafka-console-consumer.sh"),
                "--topic",
                topic,
                "--from-beginning",
                "--bootstrap-server",
                self.bootstrap_server,
            ],
            cwd=self.install_dir,
            log_file=log_file,
            current_logger=self.logger,
        )
