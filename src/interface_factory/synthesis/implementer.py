from __future__ import annotations

import inspect
import types
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from interface_factory.contracts.model import Contract, MethodDescriptor, PropertyDescriptor
from interface_factory.observability.logging import StructuredLogger
from interface_factory.synthesis.defaults import DefaultFactory, DefaultValues
from interface_factory.synthesis.descriptor import GeneratedDescriptor, SlotDef, StubDef

SLOT_PREFIX = "_slot_"


def _no_value() -> None:
    return None


@dataclass(slots=True)
class MemberImplementer:
    # Builds the proxy class for a contract: slot-backed properties and default-returning stubs.
    defaults: DefaultValues = field(default_factory=DefaultValues)
    check_arity: bool = True
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    def build(self, contract: Contract) -> GeneratedDescriptor:
        slots = tuple(self._slot_for(prop) for prop in contract.properties)
        stubs = tuple(self._stub_for(method) for method in contract.methods)

        proxy_name = f"{contract.interface.__name__}Proxy"
        namespace: dict[str, object] = {
            "__slots__": tuple(slot.slot_name for slot in slots),
            "__module__": __name__,
            "__contract__": contract,
            "__init__": _make_init(slots),
            "__repr__": _make_repr(contract),
        }
        for slot in slots:
            namespace[slot.property_name] = _make_property(slot)
        for stub, method in zip(stubs, contract.methods):
            namespace[method.name] = _make_stub(stub, method, owner=proxy_name, check_arity=self.check_arity)

        proxy_type = types.new_class(
            proxy_name,
            (contract.interface,),
            exec_body=lambda ns: ns.update(namespace),
        )
        leftover = getattr(proxy_type, "__abstractmethods__", frozenset())
        if leftover:
            # Private or skipped abstract members keep the interface's own body.
            self.logger.warning(
                "abstract.unimplemented",
                contract=contract.name,
                members=sorted(leftover),
            )
            proxy_type.__abstractmethods__ = frozenset()

        descriptor = GeneratedDescriptor(contract=contract, proxy_type=proxy_type, slots=slots, stubs=stubs)
        self.logger.info(
            "contract.synthesized",
            contract=contract.name,
            proxy=proxy_type.__name__,
            slots=len(slots),
            stubs=len(stubs),
        )
        return descriptor

    def _slot_for(self, prop: PropertyDescriptor) -> SlotDef:
        return SlotDef(
            property_name=prop.name,
            slot_name=f"{SLOT_PREFIX}{prop.name}",
            default=self.defaults.factory_for(prop.value_type),
            readable=prop.has_getter,
            writable=prop.has_setter,
        )

    def _stub_for(self, method: MethodDescriptor) -> StubDef:
        result: DefaultFactory = _no_value
        if method.returns_value:
            result = self.defaults.factory_for(method.return_type)
        return StubDef(method_name=method.name, result=result, is_async=method.is_async)


def _make_init(slots: tuple[SlotDef, ...]) -> Callable[[Any], None]:
    def __init__(self: Any) -> None:
        # Every instance gets fresh defaults; nothing mutable is shared between proxies.
        for slot in slots:
            object.__setattr__(self, slot.slot_name, slot.default())

    return __init__


def _make_repr(contract: Contract) -> Callable[[Any], str]:
    # Values are left out: self-referencing properties would recurse.
    def __repr__(self: Any) -> str:
        return f"<{contract.name} proxy at {id(self):#x}>"

    return __repr__


def _make_property(slot: SlotDef) -> property:
    attr = slot.slot_name
    fget: Callable[[Any], Any] | None = None
    fset: Callable[[Any, Any], None] | None = None

    if slot.readable:
        def fget(self: Any) -> Any:
            return getattr(self, attr)

        fget.__name__ = slot.property_name

    if slot.writable:
        def fset(self: Any, value: Any) -> None:
            object.__setattr__(self, attr, value)

        fset.__name__ = slot.property_name

    return property(fget, fset, doc=f"Slot-backed property '{slot.property_name}'.")


def _make_stub(stub: StubDef, method: MethodDescriptor, *, owner: str, check_arity: bool) -> Callable[..., Any]:
    declared = method.signature
    result = stub.result
    binder = declared.bind if (check_arity and declared is not None) else None

    if stub.is_async:
        async def _async_stub(self: Any, *args: Any, **kwargs: Any) -> Any:
            if binder is not None:
                binder(*args, **kwargs)
            return result()

        function: Callable[..., Any] = _async_stub
    else:
        def _stub(self: Any, *args: Any, **kwargs: Any) -> Any:
            if binder is not None:
                binder(*args, **kwargs)
            return result()

        function = _stub

    function.__name__ = method.name
    function.__qualname__ = f"{owner}.{method.name}"
    if declared is not None:
        receiver = inspect.Parameter("self", inspect.Parameter.POSITIONAL_ONLY)
        function.__signature__ = declared.replace(  # type: ignore[attr-defined]
            parameters=[receiver, *declared.parameters.values()]
        )
    return function
