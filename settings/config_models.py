# settings/config_models.py
# -*- coding: utf-8 -*-
"""
Pydantic models for application configuration.

This module defines the structured settings for the provisioner,
including defaults, type annotations, and descriptions.
It utilizes Pydantic for data validation and settings management.
"""

from pathlib import Path
from typing import Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Default Static Values (can be overridden by config file/env/cli) ---
REQUIRED_FREE_BYTES_DEFAULT: int = 2 * 1024 * 1024 * 1024
DISK_CHECK_VOLUME_DEFAULT: str = "/"
HTTP_TIMEOUT_SECONDS_DEFAULT: float = 60.0
SELECTOR_PAGE_SIZE_DEFAULT: int = 10
LOG_PREFIX_DEFAULT: str = "[KRAFT-SETUP]"

JAVA_INSTALL_ROOT_DEFAULT: Path = Path("/opt/java")
JAVA_LEAF_PREFIX_DEFAULT: str = "jdk-"
JAVA_LISTING_URL_DEFAULT: str = "https://jdk.java.net/archive/"
JAVA_PLATFORM_DEFAULT: str = "linux-x64"
JAVA_ARCHIVE_EXTENSION_DEFAULT: str = "tar.gz"

KAFKA_INSTALL_ROOT_DEFAULT: Path = Path("/opt/kafka")
KAFKA_LISTING_URL_DEFAULT: str = "https://downloads.apache.org/kafka/"
KAFKA_DOWNLOAD_BASE_DEFAULT: str = "https://downloads.apache.org/kafka"
KAFKA_SCALA_VERSION_DEFAULT: str = "2.13"

VERSION_PATTERN_DEFAULT: str = r"\d+\.\d+\.\d+"

SYMBOLS_DEFAULT: Dict[str, str] = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "step": "➡️",
    "gear": "⚙️",
    "package": "📦",
    "rocket": "🚀",
    "sparkles": "✨",
    "critical": "🔥",
    "debug": "🐛",
}


class JavaSettings(BaseSettings):
    """Java runtime provisioning settings."""
    model_config = SettingsConfigDict(
        env_prefix='JAVA_',
        extra='ignore'
    )

    install_root: Path = Field(default=JAVA_INSTALL_ROOT_DEFAULT,
                               description="Directory holding the version-qualified JDK leaf directory.")
    leaf_prefix: str = Field(default=JAVA_LEAF_PREFIX_DEFAULT,
                             description="Prefix of the version-qualified leaf directory, e.g. 'jdk-'.")
    listing_url: str = Field(default=JAVA_LISTING_URL_DEFAULT,
                             description="Page listing OpenJDK releases and their download links.")
    platform: str = Field(default=JAVA_PLATFORM_DEFAULT,
                          description="Platform tag used in OpenJDK archive names (e.g. linux-x64).")
    archive_extension: str = Field(default=JAVA_ARCHIVE_EXTENSION_DEFAULT,
                                   description="Archive extension of the OpenJDK build (tar.gz or zip).")
    version_pattern: str = Field(default=VERSION_PATTERN_DEFAULT,
                                 description="Regular expression matching a version in the listing.")
    requested_version: Optional[str] = Field(default=None,
                                             description="Version to install; None means ask interactively.")


class KafkaSettings(BaseSettings):
    """Kafka broker provisioning settings."""
    model_config = SettingsConfigDict(
        env_prefix='KAFKA_',
        extra='ignore'
    )

    install_root: Path = Field(default=KAFKA_INSTALL_ROOT_DEFAULT,
                               description="Broker install directory, replaced wholesale per install.")
    listing_url: str = Field(default=KAFKA_LISTING_URL_DEFAULT,
                             description="Directory listing of Kafka releases.")
    download_base: str = Field(default=KAFKA_DOWNLOAD_BASE_DEFAULT,
                               description="Base URL; archives live at {base}/{version}/kafka_{scala}-{version}.tgz.")
    scala_version: str = Field(default=KAFKA_SCALA_VERSION_DEFAULT,
                               description="Scala build of the Kafka distribution.")
    version_pattern: str = Field(default=VERSION_PATTERN_DEFAULT,
                                 description="Regular expression matching a version in the listing.")
    config_relative_path: Path = Field(default=Path("config/kraft/server.properties"),
                                       description="Server configuration path relative to the install root.")
    log_dir_relative_path: Path = Field(default=Path("data/kraft-combined-logs"),
                                        description="Durable log directory relative to the install root.")
    node_id: int = Field(default=1, description="Node id of the single quorum member.")
    host: str = Field(default="localhost", description="Host name advertised by the listeners.")
    listener_port: int = Field(default=9092, description="Client listener port.")
    controller_port: int = Field(default=9093, description="Controller listener port.")
    settle_seconds: float = Field(default=10.0,
                                  description="Delay after starting the broker before verifying it.")
    smoke_topic: str = Field(default="smoke-test", description="Topic created by the smoke test.")
    requested_version: Optional[str] = Field(default=None,
                                             description="Version to install; None means ask interactively.")


class AppSettings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(extra='ignore')

    required_free_bytes: int = Field(default=REQUIRED_FREE_BYTES_DEFAULT,
                                     description="Free space required on the target volume before any change.")
    disk_check_volume: Path = Field(default=Path(DISK_CHECK_VOLUME_DEFAULT),
                                    description="Volume whose free space is checked.")
    http_timeout_seconds: float = Field(default=HTTP_TIMEOUT_SECONDS_DEFAULT,
                                        description="Timeout applied to listing fetches and downloads.")
    selector_page_size: int = Field(default=SELECTOR_PAGE_SIZE_DEFAULT, ge=1,
                                    description="Number of options visible per page in the selector.")
    interactive: bool = Field(default=True,
                              description="Whether interactive prompts may be shown.")
    log_prefix: str = Field(default=LOG_PREFIX_DEFAULT,
                            description="Prefix for log messages from the provisioner.")

    java: JavaSettings = Field(default_factory=JavaSettings)
    kafka: KafkaSettings = Field(default_factory=KafkaSettings)

    symbols: Dict[str, str] = Field(default_factory=lambda: dict(SYMBOLS_DEFAULT))
