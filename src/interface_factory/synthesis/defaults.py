from __future__ import annotations

import types
import typing
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Annotated, Any, Literal, TypeVar, get_args, get_origin

DefaultFactory = Callable[[], object]


def _builtin_defaults() -> dict[object, DefaultFactory]:
    # Zero values of value-like types; everything else is an absent reference (None).
    return {
        int: int,
        float: float,
        complex: complex,
        bool: bool,
        Decimal: Decimal,
        bytes: bytes,
        str: str,
        timedelta: timedelta,
        datetime: lambda: datetime.min,
        date: lambda: date.min,
        time: lambda: time.min,
    }


def _none() -> None:
    return None


@dataclass(slots=True)
class DefaultValues:
    # Registry of zero-value factories keyed by declared type.
    text_default: Literal["empty", "none"] = "empty"
    _factories: dict[object, DefaultFactory] = field(default_factory=_builtin_defaults)

    def __post_init__(self) -> None:
        if self.text_default not in ("empty", "none"):
            raise ValueError(f"Unknown text default: {self.text_default!r}")
        if self.text_default == "none":
            self._factories[str] = _none

    def register(self, tp: object, factory: DefaultFactory) -> None:
        # Later registrations override earlier ones, including builtin zero values.
        if not callable(factory):
            raise TypeError(f"Default factory for {tp!r} must be callable")
        self._factories[tp] = factory

    def factory_for(self, tp: object) -> DefaultFactory:
        # Resolution happens once per synthesized member; the factory runs per slot/per call.
        tp = _unwrap(tp)
        for candidate in (tp, get_origin(tp)):
            if candidate is None:
                continue
            try:
                registered = self._factories.get(candidate)
            except TypeError:
                continue
            if registered is not None:
                return registered
        # Enums, collections, unions and interface references start out absent.
        return _none

    def zero_value(self, tp: object) -> object:
        return self.factory_for(tp)()


def _unwrap(tp: object) -> object:
    # Annotated[X, ...] -> X, NewType -> supertype, Optional/unions with None stay absent.
    while True:
        if get_origin(tp) is Annotated:
            tp = get_args(tp)[0]
            continue
        supertype = getattr(tp, "__supertype__", None)
        if supertype is not None:
            tp = supertype
            continue
        break
    if isinstance(tp, TypeVar) or tp is Any:
        return None
    origin = get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        return None
    return tp
