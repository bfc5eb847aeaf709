from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from interface_factory.contracts.model import Contract
from interface_factory.synthesis.defaults import DefaultFactory


@dataclass(frozen=True, slots=True)
class SlotDef:
    # Storage for one property; accessors exist only for the declared capabilities.
    property_name: str
    slot_name: str
    default: DefaultFactory
    readable: bool
    writable: bool


@dataclass(frozen=True, slots=True)
class StubDef:
    # Inert body for one method; result() yields the zero value of the return type.
    method_name: str
    result: DefaultFactory
    is_async: bool = False


@dataclass(frozen=True, slots=True)
class GeneratedDescriptor:
    # Immutable synthesis result for one contract; shared by every proxy instance of it.
    contract: Contract
    proxy_type: type[Any]
    slots: tuple[SlotDef, ...] = ()
    stubs: tuple[StubDef, ...] = ()

    def instantiate(self) -> Any:
        return self.proxy_type()
