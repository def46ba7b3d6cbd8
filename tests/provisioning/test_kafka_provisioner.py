import re
import shutil
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from catalog.resolver import VersionCatalogResolver
from provisioning.components.kafka.cluster_bootstrap import read_properties
from provisioning.components.kafka.kafka_provisioner import KafkaProvisioner
from provisioning.errors import CatalogUnavailable, DownloadFailure, IdentityIntegrityError
from provisioning.intent import ProvisionIntent, ProvisionStatus

pytestmark = pytest.mark.skipif(shutil.which("tar") is None, reason="tar not installed")

KAFKA_LISTING = '<a href="3.7.1/">3.7.1/</a>\n<a href="3.8.0/">3.8.0/</a>\n'
AVAILABLE = {"3.7.1", "3.8.0"}


@pytest.fixture
def resolver():
    return VersionCatalogResolver(fetch=lambda url, timeout: KAFKA_LISTING)


@pytest.fixture
def mock_download(mocker: MockerFixture, make_tarball):
    """Serve a minimal broker distribution for versions in AVAILABLE, 404 otherwise."""

    def fake_download(url, download_to_path, timeout=60.0, logger=None):
        version = re.search(r"kafka_2\.13-([\d.]+)\.tgz$", url).group(1)
        if version not in AVAILABLE:
            raise DownloadFailure(f"HTTP error downloading {url}: 404 Not Found")
        return make_tarball(
            Path(download_to_path),
            f"kafka_2.13-{version}",
            {
                f"libs/kafka_2.13-{version}.jar": "jar",
                f"libs/kafka_2.13-{version}-sources.jar": "jar",
                "bin/kafka-storage.sh": "#!/bin/sh\n",
                "config/kraft/server.properties": "node.id=99\n",
            },
        )

    return mocker.patch(
        "provisioning.components.kafka.kafka_provisioner.download_file",
        side_effect=fake_download,
    )


@pytest.fixture
def tools(mocker: MockerFixture, fake_kafka_tools):
    fake = fake_kafka_tools()
    mocker.patch(
        "provisioning.components.kafka.kafka_provisioner.KafkaTools", return_value=fake
    )
    return fake


def _provisioner(app_settings, resolver, env_store, select=None):
    return KafkaProvisioner(
        app_settings, select=select, env_store=env_store, resolver=resolver
    )


def test_download_url_is_derived_from_version(app_settings, resolver, env_store):
    provisioner = _provisioner(app_settings, resolver, env_store)

    assert (
        provisioner.download_url("3.8.0")
        == "https://kafka.example.test/dist/3.8.0/kafka_2.13-3.8.0.tgz"
    )


def test_install_new_places_configures_and_bootstraps(
    app_settings, resolver, env_store, mock_download, tools
):
    result = _provisioner(app_settings, resolver, env_store).provision(
        ProvisionIntent.install_new("3.8.0")
    )

    root = app_settings.kafka.install_root
    config = read_properties(root / "config" / "kraft" / "server.properties")
    meta = read_properties(root / "data" / "kraft-combined-logs" / "meta.properties")
    assert result.status is ProvisionStatus.INSTALLED
    assert (root / "bin" / "kafka-storage.sh").exists()
    assert config["node.id"] == "1"
    assert config["process.roles"] == "broker,controller"
    assert config["controller.quorum.voters"] == "1@localhost:9093"
    assert result.cluster_id == tools.generated[0] == meta["cluster.id"]


def test_detect_reads_version_from_library_jar(
    app_settings, resolver, env_store, mock_download, tools
):
    provisioner = _provisioner(app_settings, resolver, env_store)
    provisioner.provision(ProvisionIntent.install_new("3.7.1"))

    record = provisioner.detect()

    assert str(record.version) == "3.7.1"
    assert record.signal == "libs/kafka_2.13-3.7.1.jar"


def test_identity_mismatch_fails_and_rolls_back(
    app_settings, resolver, env_store, mock_download, mocker: MockerFixture, fake_kafka_tools
):
    mocker.patch(
        "provisioning.components.kafka.kafka_provisioner.KafkaTools",
        return_value=fake_kafka_tools(persisted_id="someone-elses-cluster"),
    )
    provisioner = _provisioner(app_settings, resolver, env_store)

    with pytest.raises(IdentityIntegrityError):
        provisioner.provision(ProvisionIntent.install_new("3.8.0"))

    assert not provisioner.detect().is_installed
    assert not app_settings.kafka.install_root.exists()


def test_update_replaces_previous_install(
    app_settings, resolver, env_store, mock_download, tools
):
    provisioner = _provisioner(app_settings, resolver, env_store)
    provisioner.provision(ProvisionIntent.install_new("3.7.1"))

    result = provisioner.provision(ProvisionIntent.update_to_detected())

    libs = sorted(p.name for p in (app_settings.kafka.install_root / "libs").iterdir())
    assert result.version == "3.8.0"
    assert libs == ["kafka_2.13-3.8.0-sources.jar", "kafka_2.13-3.8.0.jar"]
    assert len(set(tools.generated)) == 2


def test_unknown_version_falls_back_to_catalog(
    app_settings, resolver, env_store, mock_download, tools, scripted_selector
):
    select = scripted_selector("3.7.1")

    result = _provisioner(app_settings, resolver, env_store, select).provision(
        ProvisionIntent.install_new("9.9.9")
    )

    assert result.version == "3.7.1"
    assert select.calls[0][0] == ["3.8.0", "3.7.1"]


def test_install_new_without_version_asks(
    app_settings, resolver, env_store, mock_download, tools, scripted_selector
):
    select = scripted_selector("3.7.1")

    result = _provisioner(app_settings, resolver, env_store, select).provision(
        ProvisionIntent.install_new()
    )

    assert result.version == "3.7.1"
    assert select.calls[0][1] == "Select kafka version"


def test_unexpected_bootstrap_error_rolls_back(
    app_settings, resolver, env_store, mock_download, mocker: MockerFixture, tools
):
    tools.format_storage = mocker.Mock(side_effect=PermissionError(13, "Permission denied"))
    provisioner = _provisioner(app_settings, resolver, env_store)

    with pytest.raises(PermissionError):
        provisioner.provision(ProvisionIntent.install_new("3.8.0"))

    assert not provisioner.detect().is_installed
    assert not app_settings.kafka.install_root.exists()


def _unreachable_listing(url, timeout):
    raise ConnectionError(f"cannot reach {url}")


def test_unavailable_listing_uses_configured_version(
    app_settings, env_store, mock_download, tools
):
    app_settings.kafka.requested_version = "3.8.0"
    resolver = VersionCatalogResolver(fetch=_unreachable_listing)

    result = _provisioner(app_settings, resolver, env_store).provision(
        ProvisionIntent.update_to_detected()
    )

    assert result.status is ProvisionStatus.INSTALLED
    assert result.version == "3.8.0"


def test_unavailable_listing_without_configured_version(app_settings, env_store):
    resolver = VersionCatalogResolver(fetch=_unreachable_listing)

    with pytest.raises(CatalogUnavailable, match="cannot reach"):
        _provisioner(app_settings, resolver, env_store).provision(
            ProvisionIntent.update_to_detected()
        )
