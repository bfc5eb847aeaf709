from __future__ import annotations

import inspect
import sys
import typing
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal, NoReturn, TypeVar, get_args, get_origin

from interface_factory.contracts.marker import INTERFACE_ROOTS, is_interface
from interface_factory.contracts.model import (
    NO_VALUE,
    Contract,
    ContractKey,
    MethodDescriptor,
    PropertyDescriptor,
)
from interface_factory.observability.logging import StructuredLogger

Substitution = dict[Any, Any]
Member = PropertyDescriptor | MethodDescriptor

# Dunders that describe construction/typing machinery rather than contract members.
_CLASS_MACHINERY = frozenset(
    {
        "__init__",
        "__new__",
        "__init_subclass__",
        "__class_getitem__",
        "__subclasshook__",
        "__annotate__",
        "__annotate_func__",
    }
)
_VOID_RETURNS = (None, type(None), NoReturn, typing.Never)
_UNRESOLVED_ANNOTATION_ERRORS = (NameError, AttributeError, SyntaxError, TypeError)


class TypeIsNotAnInterface(TypeError):
    # Raised when a synthesis request names something other than an interface-kind class.
    def __init__(self, contract_type: object) -> None:
        self.contract_type = contract_type
        super().__init__(f"Type is not an interface: {_describe(contract_type)}")


class UnsupportedMemberError(TypeError):
    # Raised under the "reject" policy for member shapes the factory cannot stub faithfully.
    def __init__(self, interface: type[Any], member: str, reason: str) -> None:
        self.interface = interface
        self.member = member
        self.reason = reason
        super().__init__(f"Unsupported member {interface.__qualname__}.{member}: {reason}")


@dataclass(slots=True)
class ContractInspector:
    # Turns an interface class (or parameterized alias) into a normalized Contract.
    unsupported_members: Literal["reject", "skip"] = "reject"
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    def __post_init__(self) -> None:
        if self.unsupported_members not in ("reject", "skip"):
            raise ValueError(f"Unknown unsupported-member policy: {self.unsupported_members!r}")

    def resolve(self, contract_type: object, generic_args: Iterable[object] = ()) -> Contract:
        origin, type_args = _split_alias(contract_type, tuple(generic_args))
        if not is_interface(origin):
            raise TypeIsNotAnInterface(contract_type)

        params = _type_parameters(origin)
        if type_args and len(type_args) != len(params):
            raise TypeError(
                f"{origin.__qualname__} expects {len(params)} type argument(s), got {len(type_args)}"
            )
        key = ContractKey(interface=origin, type_args=type_args)
        substitutions = _collect_substitutions(origin, dict(zip(params, type_args)))

        bases: list[ContractKey] = []
        properties: list[PropertyDescriptor] = []
        methods: list[MethodDescriptor] = []
        seen: set[str] = set()
        for cls in origin.__mro__:
            if cls in INTERFACE_ROOTS:
                continue
            if not is_interface(cls):
                raise TypeIsNotAnInterface(cls)
            subst = substitutions.get(cls, {})
            if cls is not origin:
                bases.append(ContractKey(interface=cls, type_args=_bound_args(cls, subst)))
            for member in self._declared_members(cls, subst):
                # MRO order: the most derived declaration of a name wins.
                if member.name in seen:
                    continue
                seen.add(member.name)
                if isinstance(member, PropertyDescriptor):
                    properties.append(member)
                else:
                    methods.append(member)

        contract = Contract(
            key=key,
            bases=tuple(bases),
            properties=tuple(properties),
            methods=tuple(methods),
        )
        self.logger.debug(
            "contract.resolved",
            contract=contract.name,
            bases=[base.name for base in contract.bases],
            properties=len(contract.properties),
            methods=len(contract.methods),
        )
        return contract

    def _declared_members(self, cls: type[Any], subst: Substitution) -> Iterator[Member]:
        namespace = cls.__dict__
        annotated = self._own_annotations(cls)
        for name, hint in annotated.items():
            if name.startswith("_") or name in namespace and not _is_plain_value(namespace[name]):
                continue
            if hint is ClassVar or get_origin(hint) is ClassVar:
                self._unsupported(cls, name, "class variables are not instance members")
                continue
            yield PropertyDescriptor(
                name=name,
                value_type=substitute_type_vars(hint, subst),
                has_getter=True,
                has_setter=True,
                declared_by=cls,
            )

        for name, value in namespace.items():
            if _is_user_dunder(cls, name, value):
                self._unsupported(cls, name, "special methods (operators, indexers) are not stubbed")
                continue
            if name.startswith("_"):
                continue
            if isinstance(value, property):
                prop = self._property_from(cls, name, value, subst)
                if prop is not None:
                    yield prop
            elif isinstance(value, (staticmethod, classmethod)):
                self._unsupported(cls, name, f"{type(value).__name__} members are not instance members")
            elif inspect.isfunction(value):
                method = self._method_from(cls, name, value, subst)
                if method is not None:
                    yield method
            elif isinstance(value, type):
                self._unsupported(cls, name, "nested classes are not members")
            elif name not in annotated:
                self._unsupported(cls, name, "class constants are not members")

    def _property_from(
        self, cls: type[Any], name: str, prop: property, subst: Substitution
    ) -> PropertyDescriptor | None:
        getter, setter = prop.fget, prop.fset
        if getter is None and setter is None:
            self._unsupported(cls, name, "property declares neither getter nor setter")
            return None
        value_type: Any = Any
        if getter is not None:
            value_type = self._function_hints(cls, getter).get("return", Any)
        elif setter is not None:
            hints = self._function_hints(cls, setter)
            arg_names = list(inspect.signature(setter).parameters)
            if len(arg_names) > 1:
                value_type = hints.get(arg_names[1], Any)
        return PropertyDescriptor(
            name=name,
            value_type=substitute_type_vars(value_type, subst),
            has_getter=getter is not None,
            has_setter=setter is not None,
            declared_by=cls,
        )

    def _method_from(
        self, cls: type[Any], name: str, func: Any, subst: Substitution
    ) -> MethodDescriptor | None:
        if getattr(func, "__type_params__", ()):
            self._unsupported(cls, name, "generic methods are not supported")
            return None
        hints = self._function_hints(cls, func)
        free = _free_type_vars(hints.values()) - set(_type_parameters(cls))
        if free:
            self._unsupported(cls, name, "generic methods are not supported")
            return None

        signature = inspect.signature(func)
        # The first positional parameter is the receiver.
        parameters = list(signature.parameters.values())[1:]
        parameter_types = tuple(
            substitute_type_vars(hints.get(param.name, Any), subst) for param in parameters
        )
        if "return" not in hints:
            return_type: Any = Any
        elif hints["return"] in _VOID_RETURNS:
            return_type = NO_VALUE
        else:
            return_type = substitute_type_vars(hints["return"], subst)

        declared = signature.replace(
            parameters=[
                param.replace(annotation=ptype) for param, ptype in zip(parameters, parameter_types)
            ],
            return_annotation=None if return_type is NO_VALUE else return_type,
        )
        return MethodDescriptor(
            name=name,
            parameter_names=tuple(param.name for param in parameters),
            parameter_types=parameter_types,
            return_type=return_type,
            is_async=inspect.iscoroutinefunction(func),
            declared_by=cls,
            signature=declared,
        )

    def _own_annotations(self, cls: type[Any]) -> dict[str, Any]:
        own = inspect.get_annotations(cls)
        if not own:
            return {}
        localns = {cls.__name__: cls}
        try:
            resolved = typing.get_type_hints(cls, localns=localns)
        except _UNRESOLVED_ANNOTATION_ERRORS:
            module = sys.modules.get(cls.__module__)
            return self._resolve_each(cls.__qualname__, own, getattr(module, "__dict__", {}), localns)
        return {name: resolved.get(name, hint) for name, hint in own.items()}

    def _function_hints(self, cls: type[Any], func: Any) -> dict[str, Any]:
        localns = {cls.__name__: cls}
        try:
            return typing.get_type_hints(func, localns=localns)
        except _UNRESOLVED_ANNOTATION_ERRORS:
            return self._resolve_each(
                f"{cls.__qualname__}.{func.__name__}",
                inspect.get_annotations(func),
                getattr(func, "__globals__", {}),
                localns,
            )

    def _resolve_each(
        self, owner: str, raw: dict[str, Any], globalns: dict[str, Any], localns: dict[str, Any]
    ) -> dict[str, Any]:
        # Only the annotations that fail to evaluate degrade to Any; the rest keep their types.
        hints: dict[str, Any] = {}
        for name, hint in raw.items():
            if not isinstance(hint, str):
                hints[name] = hint
                continue
            try:
                value = eval(hint, globalns, localns)
            except _UNRESOLVED_ANNOTATION_ERRORS as exc:
                self.logger.warning("annotation.unresolved", owner=owner, name=name, error=str(exc))
                value = Any
            hints[name] = type(None) if value is None else value
        return hints

    def _unsupported(self, cls: type[Any], name: str, reason: str) -> None:
        if self.unsupported_members == "reject":
            raise UnsupportedMemberError(cls, name, reason)
        self.logger.warning("member.skipped", interface=cls.__qualname__, member=name, reason=reason)


def substitute_type_vars(hint: Any, subst: Substitution) -> Any:
    # Replace bound type variables, including inside parameterized hints (list[T], T | None).
    if not subst:
        return hint
    if isinstance(hint, TypeVar):
        return subst.get(hint, hint)
    if isinstance(hint, type):
        return hint
    params = getattr(hint, "__parameters__", ())
    if not params or not any(param in subst for param in params):
        return hint
    try:
        return hint[tuple(subst.get(param, param) for param in params)]
    except TypeError:
        return hint


def _split_alias(contract_type: object, generic_args: tuple[object, ...]) -> tuple[object, tuple[object, ...]]:
    origin = get_origin(contract_type)
    if origin is None:
        return contract_type, generic_args
    if generic_args:
        raise TypeError("Type arguments were given both by subscription and explicitly")
    return origin, tuple(get_args(contract_type))


def _type_parameters(cls: type[Any]) -> tuple[Any, ...]:
    params = cls.__dict__.get("__parameters__", ())
    return tuple(params) if isinstance(params, tuple) else ()


def _bound_args(cls: type[Any], subst: Substitution) -> tuple[Any, ...]:
    return tuple(subst.get(param, param) for param in _type_parameters(cls))


def _collect_substitutions(origin: type[Any], root: Substitution) -> dict[type[Any], Substitution]:
    # Walk __orig_bases__ so each ancestor learns what its own type parameters became.
    result: dict[type[Any], Substitution] = {origin: root}

    def _walk(cls: type[Any], subst: Substitution) -> None:
        for base in cls.__dict__.get("__orig_bases__", cls.__bases__):
            base_origin = get_origin(base) or base
            if not isinstance(base_origin, type) or base_origin in INTERFACE_ROOTS:
                continue
            if base_origin in result:
                continue
            args = tuple(substitute_type_vars(arg, subst) for arg in get_args(base))
            base_subst = dict(zip(_type_parameters(base_origin), args))
            result[base_origin] = base_subst
            _walk(base_origin, base_subst)

    _walk(origin, root)
    return result


def _free_type_vars(hints: Iterable[Any]) -> set[Any]:
    found: set[Any] = set()
    for hint in hints:
        if isinstance(hint, TypeVar):
            found.add(hint)
        elif not isinstance(hint, type):
            found.update(getattr(hint, "__parameters__", ()))
    return found


def _is_plain_value(value: object) -> bool:
    return not isinstance(value, (property, staticmethod, classmethod, type)) and not inspect.isfunction(value)


def _is_user_dunder(cls: type[Any], name: str, value: object) -> bool:
    if not (name.startswith("__") and name.endswith("__")) or name in _CLASS_MACHINERY:
        return False
    func = value.__func__ if isinstance(value, (staticmethod, classmethod)) else value
    if isinstance(func, property):
        return True
    return inspect.isfunction(func) and func.__qualname__.startswith(f"{cls.__qualname__}.")


def _describe(target: object) -> str:
    name = getattr(target, "__qualname__", None)
    if isinstance(name, str):
        module = getattr(target, "__module__", None)
        return f"{module}.{name}" if module and module != "builtins" else name
    return repr(target)
