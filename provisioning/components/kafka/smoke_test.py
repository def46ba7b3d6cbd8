# provisioning/components/kafka/smoke_test.py
# -*- coding: utf-8 -*-
"""
End-to-end smoke test of a freshly provisioned broker.

The broker, a console producer and a console consumer are started detached
so the provisioner does not block on them; their output goes to log files
under the broker's ``logs`` directory.
"""

import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from common.command_utils import get_symbols, log_step
from common.system_utils import is_process_running
from provisioning.components.kafka.kafka_tools import KafkaTools
from provisioning.errors import BrokerStartFailure
from settings.config_models import AppSettings

module_logger = logging.getLogger(__name__)

SMOKE_MESSAGES = (
    "kraft-provisioner smoke test message 1",
    "kraft-provisioner smoke test message 2",
    "kraft-provisioner smoke test message 3",
)


@dataclass
class SmokeTestSessions:
    server: subprocess.Popen
    producer: subprocess.Popen
    consumer: subprocess.Popen
    topic: str
    log_dir: Path


class SmokeTest:
    def __init__(
        self,
        install_dir: Union[str, Path],
        app_settings: AppSettings,
        tools: Optional[KafkaTools] = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        self.install_dir = Path(install_dir)
        self.app_settings = app_settings
        self.logger = logger or module_logger
        self.tools = tools or KafkaTools(self.install_dir, app_settings, self.logger)
        self.sleep = sleep
        self.symbols = get_symbols(app_settings)

    @property
    def log_dir(self) -> Path:
        return self.install_dir / "logs"

    def run(self) -> SmokeTestSessions:
        """
        Start the broker, wait for it to settle, create the smoke topic and
        launch a producer and a consumer against it.

        Raises:
            BrokerStartFailure: If the broker exits during the settle delay or
                the topic cannot be created.
        """
        kafka = self.app_settings.kafka
        config_path = self.install_dir / kafka.config_relative_path
        server_log = self.log_dir / "smoke-server.log"

        server = self.tools.start_server(config_path, server_log)
        self.logger.info(
            f"Waiting {kafka.settle_seconds}s for the broker to settle (pid {server.pid})"
        )
        self.sleep(kafka.settle_seconds)
        if not is_process_running(server):
            raise BrokerStartFailure(
                f"Broker exited with code {server.returncode} during startup; see {server_log}"
            )

        self.tools.create_topic(kafka.smoke_topic)

        input_file = self.log_dir / "smoke-input.txt"
        input_file.parent.mkdir(parents=True, exist_ok=True)
        input_file.write_text("\n".join(SMOKE_MESSAGES) + "\n", encoding="utf-8")

        producer = self.tools.start_console_producer(
            kafka.smoke_topic, input_file, self.log_dir / "smoke-producer.log"
        )
        consumer = self.tools.start_console_consumer(
            kafka.smoke_topic, self.log_dir / "smoke-consumer.log"
        )

        log_step(
            f"{self.symbols.get('rocket', '🚀')} Broker running (pid {server.pid}); "
            f"producer and consumer attached to topic '{kafka.smoke_topic}'. Logs in {self.log_dir}",
            "info",
            self.logger,
            self.app_settings,
        )
        return SmokeTestSessions(
            server=server,
            producer=producer,
            consumer=consumer,
            topic=kafka.smoke_topic,
            log_dir=self.log_dir,
        )
