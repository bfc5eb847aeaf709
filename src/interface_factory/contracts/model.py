from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any


class _NoValue:
    # Return marker for void-like methods (-> None, NoReturn, Never).
    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_VALUE"

    def __reduce__(self) -> str:
        return "NO_VALUE"


NO_VALUE = _NoValue()


@dataclass(frozen=True, slots=True)
class ContractKey:
    # Contract identity: interface class plus ordered concrete type arguments.
    interface: type[Any]
    type_args: tuple[Any, ...] = ()

    @property
    def name(self) -> str:
        if not self.type_args:
            return self.interface.__qualname__
        rendered = ", ".join(type_repr(arg) for arg in self.type_args)
        return f"{self.interface.__qualname__}[{rendered}]"

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class PropertyDescriptor:
    name: str
    value_type: Any
    has_getter: bool = True
    has_setter: bool = True
    declared_by: type[Any] | None = None

    def __post_init__(self) -> None:
        if not self.has_getter and not self.has_setter:
            raise ValueError(f"Property '{self.name}' must declare a getter or a setter")


@dataclass(frozen=True, slots=True)
class MethodDescriptor:
    name: str
    parameter_names: tuple[str, ...] = ()
    parameter_types: tuple[Any, ...] = ()
    return_type: Any = NO_VALUE
    is_async: bool = False
    declared_by: type[Any] | None = None
    # Declared call signature (self excluded); informational, not part of identity.
    signature: inspect.Signature | None = field(default=None, compare=False, hash=False, repr=False)

    @property
    def returns_value(self) -> bool:
        return self.return_type is not NO_VALUE


@dataclass(frozen=True, slots=True)
class Contract:
    # Normalized, immutable view of an interface including inherited members.
    key: ContractKey
    bases: tuple[ContractKey, ...] = ()
    properties: tuple[PropertyDescriptor, ...] = ()
    methods: tuple[MethodDescriptor, ...] = ()

    @property
    def name(self) -> str:
        return self.key.name

    @property
    def interface(self) -> type[Any]:
        return self.key.interface

    def member_names(self) -> list[str]:
        return [p.name for p in self.properties] + [m.name for m in self.methods]

    def to_dict(self) -> dict[str, object]:
        # JSON-friendly rendering used by the describe command and log fields.
        return {
            "name": self.name,
            "bases": [base.name for base in self.bases],
            "properties": [
                {
                    "name": prop.name,
                    "type": type_repr(prop.value_type),
                    "get": prop.has_getter,
                    "set": prop.has_setter,
                }
                for prop in self.properties
            ],
            "methods": [
                {
                    "name": method.name,
                    "parameters": [
                        {"name": pname, "type": type_repr(ptype)}
                        for pname, ptype in zip(method.parameter_names, method.parameter_types)
                    ],
                    "returns": None if not method.returns_value else type_repr(method.return_type),
                    "async": method.is_async,
                }
                for method in self.methods
            ],
        }


def type_repr(tp: object) -> str:
    if tp is NO_VALUE:
        return "None"
    if isinstance(tp, type) and not getattr(tp, "__args__", None):
        if tp.__module__ == "builtins":
            return tp.__qualname__
        return f"{tp.__module__}.{tp.__qualname__}"
    if tp is Ellipsis:
        return "..."
    return repr(tp).replace("typing.", "")
