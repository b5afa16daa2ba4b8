"""
Name-based lookup of cluster transports and management interfaces.

Connectors register under the name used in ``CLUSTER_CONNECTOR`` so the
factory can build whichever transport the configuration asks for.
"""

from typing import TYPE_CHECKING, Callable, Dict, Type, TypeVar

if TYPE_CHECKING:
    from clustermgr.core.base_class.base_connectors import ClusterConnector
    from clustermgr.interface.base import BaseInterface

C = TypeVar("C", bound=type)

CONNECTOR_REGISTRY: Dict[str, Type["ClusterConnector"]] = {}
INTERFACE_REGISTRY: Dict[str, Type["BaseInterface"]] = {}


def _register(registry: Dict[str, type], kind: str, name: str) -> Callable[[C], C]:
    def decorator(cls: C) -> C:
        existing = registry.get(name)
        if existing is not None and existing.__qualname__ != cls.__qualname__:
            raise ValueError(f"{kind} name '{name}' is already taken by {existing.__qualname__}")
        registry[name] = cls
        return cls
    return decorator


def register_connector(name: str) -> Callable[[C], C]:
    """Class decorator making a ClusterConnector available as ``name``"""
    return _register(CONNECTOR_REGISTRY, "connector", name)


def register_interface(name: str) -> Callable[[C], C]:
    """Class decorator making a manager interface available as ``name``"""
    return _register(INTERFACE_REGISTRY, "interface", name)


def get_connector_class(name: str) -> Type["ClusterConnector"]:
    """
    Connector class registered as ``name``.

    Raises:
        KeyError: If nothing is registered under the name
    """
    try:
        return CONNECTOR_REGISTRY[name]
    except KeyError:
        known = ", ".join(sorted(CONNECTOR_REGISTRY)) or "none"
        raise KeyError(f"unknown cluster connector '{name}' (registered: {known})") from None


def get_interface_class(name: str) -> Type["BaseInterface"]:
    """
    Interface class registered as ``name``.

    Raises:
        KeyError: If nothing is registered under the name
    """
    try:
        return INTERFACE_REGISTRY[name]
    except KeyError:
        known = ", ".join(sorted(INTERFACE_REGISTRY)) or "none"
        raise KeyError(f"unknown interface '{name}' (registered: {known})") from None


def get_all_connectors() -> Dict[str, Type["ClusterConnector"]]:
    """Snapshot of registered connectors by name"""
    return dict(CONNECTOR_REGISTRY)
