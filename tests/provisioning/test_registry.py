import pytest
from pytest_mock import MockerFixture

from provisioning.registry import ProvisionerRegistry


@pytest.fixture
def empty_registry(mocker: MockerFixture):
    mocker.patch.dict(ProvisionerRegistry._registry, clear=True)


def _register(name, dependencies):
    @ProvisionerRegistry.register(name, {"dependencies": dependencies, "description": name})
    class Dummy:
        pass

    return Dummy


def test_register_sets_name_and_metadata(empty_registry):
    cls = _register("java", [])

    assert ProvisionerRegistry.get_provisioner("java") is cls
    assert cls.component_name == "java"
    assert cls.metadata["description"] == "java"


def test_duplicate_name_with_different_class_rejected(empty_registry):
    _register("java", [])

    with pytest.raises(ValueError):
        _register("java", [])


def test_unknown_name(empty_registry):
    with pytest.raises(KeyError):
        ProvisionerRegistry.get_provisioner("zookeeper")


def test_dependencies_come_first(empty_registry):
    _register("java", [])
    _register("kafka", ["java"])

    assert ProvisionerRegistry.resolve_dependencies(["kafka"]) == ["java", "kafka"]
    assert ProvisionerRegistry.resolve_dependencies(["kafka", "java"]) == ["java", "kafka"]


def test_circular_dependency(empty_registry):
    _register("a", ["b"])
    _register("b", ["a"])

    with pytest.raises(ValueError, match="Circular"):
        ProvisionerRegistry.resolve_dependencies(["a"])
