# tests/conftest.py
import logging
import tarfile
import uuid
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from common.env_utils import InMemoryEnvironmentStore
from provisioning.components.kafka.cluster_bootstrap import read_properties
from settings.config_models import AppSettings, JavaSettings, KafkaSettings


@pytest.fixture
def app_settings(tmp_path: Path) -> AppSettings:
    """Settings whose install roots and disk check live under tmp_path."""
    return AppSettings(
        required_free_bytes=1,
        disk_check_volume=tmp_path,
        http_timeout_seconds=5,
        interactive=True,
        java=JavaSettings(
            install_root=tmp_path / "java",
            listing_url="https://jdk.example.test/archive/",
        ),
        kafka=KafkaSettings(
            install_root=tmp_path / "kafka",
            listing_url="https://kafka.example.test/",
            download_base="https://kafka.example.test/dist",
            settle_seconds=0,
        ),
    )


@pytest.fixture
def env_store() -> InMemoryEnvironmentStore:
    return InMemoryEnvironmentStore()


@pytest.fixture
def test_logger() -> logging.Logger:
    return logging.getLogger("kraft_provisioner.tests")


class ScriptedSelector:
    """Selector double answering from a script and recording what it was shown."""

    def __init__(self, *answers: str):
        self.answers = list(answers)
        self.calls: List[tuple] = []

    def __call__(self, options, title):
        self.calls.append((list(options), title))
        return self.answers.pop(0)


@pytest.fixture
def scripted_selector():
    return ScriptedSelector


class FakeKafkaTools:
    """
    Stands in for the distribution scripts. ``format_storage`` writes
    meta.properties into the configured log directory, recording
    ``persisted_id`` instead of the given id when one is set.
    """

    def __init__(self, persisted_id: Optional[str] = None):
        self.persisted_id = persisted_id
        self.generated: List[str] = []
        self.formatted: List[str] = []

    def random_uuid(self) -> str:
        cluster_id = str(uuid.uuid4())
        self.generated.append(cluster_id)
        return cluster_id

    def format_storage(self, cluster_id: str, config_path) -> None:
        log_dir = Path(read_properties(config_path)["log.dirs"])
        log_dir.mkdir(parents=True, exist_ok=True)
        (log_dir / "meta.properties").write_text(
            "version=1\nnode.id=1\n"
            f"cluster.id={self.persisted_id or cluster_id}\n",
            encoding="utf-8",
        )
        self.formatted.append(cluster_id)


@pytest.fixture
def fake_kafka_tools():
    return FakeKafkaTools


def build_tarball(archive_path: Path, root_name: str, files: Dict[str, str]) -> Path:
    """Write a .tgz whose members all sit under ``root_name/``."""
    source = archive_path.parent / f"{archive_path.name}.src"
    for relative, content in files.items():
        target = source / root_name / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    with tarfile.open(archive_path, "w:gz") as tar:
        tar.add(source / root_name, arcname=root_name)
    return archive_path


@pytest.fixture
def make_tarball():
    return build_tarball
