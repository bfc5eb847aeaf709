from __future__ import annotations

from abc import ABC, ABCMeta
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

T = TypeVar("T")

# Roots every interface may inherit from without declaring members of its own.
INTERFACE_ROOTS: frozenset[object] = frozenset({object, Generic, Protocol, ABC})


@dataclass(frozen=True, slots=True)
class InterfaceMeta:
    # Metadata marker for plain classes declared as interfaces.
    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("InterfaceMeta.name must be a non-empty string")


def interface(target: type[T] | None = None, *, name: str | None = None) -> Any:
    # Explicit marker for "port" classes whose members raise NotImplementedError.
    def _decorate(cls: type[T]) -> type[T]:
        if not isinstance(cls, type):
            raise ValueError(f"@interface target is not a class: {cls!r}")
        resolved_name = name if name is not None else cls.__name__
        setattr(cls, "__interface_meta__", InterfaceMeta(name=resolved_name))
        return cls

    if target is not None:
        return _decorate(target)
    return _decorate


def get_interface_meta(target: object) -> InterfaceMeta | None:
    # Only the class that carries the marker itself counts; subclasses are implementations.
    meta = getattr(target, "__dict__", {}).get("__interface_meta__")
    if isinstance(meta, InterfaceMeta):
        return meta
    return None


def is_interface(target: object) -> bool:
    if not isinstance(target, type):
        return False
    if target in INTERFACE_ROOTS:
        return False
    if target.__dict__.get("_is_protocol", False):
        return True
    if get_interface_meta(target) is not None:
        return True
    if isinstance(target, ABCMeta):
        return _declares_only_abstract_members(target)
    return False


def _declares_only_abstract_members(cls: type[Any]) -> bool:
    # Pure ABCs qualify; any concrete public method or constant makes the class an implementation.
    for name, value in cls.__dict__.items():
        if name.startswith("_"):
            continue
        if not getattr(value, "__isabstractmethod__", False):
            return False
    return True
