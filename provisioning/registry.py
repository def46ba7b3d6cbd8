"""
Registry for provisioner modules.

This module provides a registry for provisioner modules to register themselves
and a decorator for registering provisioner classes.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set, Type

if TYPE_CHECKING:  # pragma: no cover
    from provisioning.base_provisioner import BaseProvisioner


class ProvisionerRegistry:
    """
    Registry for provisioner modules.

    This class provides a registry for provisioner modules to register
    themselves and methods for accessing registered provisioners.
    """

    _registry: Dict[str, Type["BaseProvisioner"]] = {}

    @classmethod
    def register(cls, name: str, metadata: Optional[Dict[str, Any]] = None):
        """
        Decorator for registering provisioner classes.

        Args:
            name: The name of the component.
            metadata: Optional metadata such as dependencies and a description.

        Returns:
            A decorator function that registers the provisioner class.
        """

        def decorator(
            provisioner_class: Type["BaseProvisioner"],
        ) -> Type["BaseProvisioner"]:
            if name in cls._registry and cls._registry[name] is not provisioner_class:
                raise ValueError(
                    f"Provisioner with name '{name}' already registered"
                )

            if metadata:
                provisioner_class.metadata = metadata
            provisioner_class.component_name = name

            cls._registry[name] = provisioner_class
            return provisioner_class

        return decorator

    @classmethod
    def get_provisioner(cls, name: str) -> Type["BaseProvisioner"]:
        """
        Get a provisioner class by name.

        Raises:
            KeyError: If no provisioner with the given name is registered.
        """
        if name not in cls._registry:
            raise KeyError(f"No provisioner registered with name '{name}'")

        return cls._registry[name]

    @classmethod
    def get_all_provisioners(cls) -> Dict[str, Type["BaseProvisioner"]]:
        """
        Get all registered provisioners.

        Returns:
            A dictionary mapping component names to provisioner classes.
        """
        return cls._registry.copy()

    @classmethod
    def get_dependencies(cls, name: str) -> Set[str]:
        provisioner_class = cls.get_provisioner(name)
        metadata = getattr(provisioner_class, "metadata", {})
        return set(metadata.get("dependencies", []))

    @classmethod
    def resolve_dependencies(cls, names: List[str]) -> List[str]:
        """
        Order components so that dependencies come first.

        Args:
            names: A list of component names.

        Returns:
            A list of component names in the order they should be provisioned.

        Raises:
            KeyError: If any of the components or their dependencies are not registered.
            ValueError: If there is a circular dependency.
        """
        result = []
        visited = set()
        temp_visited = set()

        def visit(name: str):
            if name in temp_visited:
                raise ValueError(
                    f"Circular dependency detected involving '{name}'"
                )

            if name in visited:
                return

            temp_visited.add(name)

            for dependency in sorted(cls.get_dependencies(name)):
                visit(dependency)

            temp_visited.remove(name)
            visited.add(name)
            result.append(name)

        for name in names:
            if name not in visited:
                visit(name)

        return result
