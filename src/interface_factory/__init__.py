from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "Contract",
    "ContractKey",
    "ConfigError",
    "DefaultValues",
    "FactorySettings",
    "InterfaceObjectFactory",
    "NO_VALUE",
    "TypeIsNotAnInterface",
    "UnsupportedMemberError",
    "configure",
    "get_factory",
    "interface",
    "is_interface",
    "new",
]

_EXPORTS = {
    "Contract": "interface_factory.contracts.model",
    "ContractKey": "interface_factory.contracts.model",
    "NO_VALUE": "interface_factory.contracts.model",
    "TypeIsNotAnInterface": "interface_factory.contracts.inspector",
    "UnsupportedMemberError": "interface_factory.contracts.inspector",
    "interface": "interface_factory.contracts.marker",
    "is_interface": "interface_factory.contracts.marker",
    "ConfigError": "interface_factory.config.loader",
    "FactorySettings": "interface_factory.config.models",
    "DefaultValues": "interface_factory.synthesis.defaults",
    "InterfaceObjectFactory": "interface_factory.factory",
    "configure": "interface_factory.factory",
    "get_factory": "interface_factory.factory",
    "new": "interface_factory.factory",
}


def __getattr__(name: str) -> Any:
    # Lazy exports keep "import interface_factory" free of pydantic/yaml until needed.
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(name)
    return getattr(import_module(module_name), name)
