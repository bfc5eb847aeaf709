from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Protocol, TypeVar

import pytest

from interface_factory.contracts.inspector import (
    ContractInspector,
    TypeIsNotAnInterface,
    UnsupportedMemberError,
    substitute_type_vars,
)
from interface_factory.contracts.marker import interface
from interface_factory.contracts.model import NO_VALUE, ContractKey
from interface_factory.observability.logging import LogMessage, StructuredLogger

T = TypeVar("T")
U = TypeVar("U")
S = TypeVar("S")


@dataclass
class _RecordingSink:
    messages: list[LogMessage] = field(default_factory=list)

    def emit(self, message: LogMessage) -> None:
        self.messages.append(message)


class Concrete:
    def run(self) -> int:
        return 1


class IBase(Protocol):
    my_int: int

    def base_method(self) -> None: ...


class IDerived(IBase, Protocol):
    my_long: int

    def derived_method(self, count: int, label: str = "x") -> bool: ...


class IRoot(Protocol):
    root_value: int


class ILeft(IRoot, Protocol):
    def left(self) -> None: ...


class IRight(IRoot, Protocol):
    def right(self) -> None: ...


class IDiamond(ILeft, IRight, Protocol):
    pass


class IOverride(IBase, Protocol):
    my_int: str


class IBox(Protocol[T]):
    item: T

    def items(self) -> list[T]: ...


class IIntBox(IBox[int], Protocol):
    pass


class IRebound(IBox[U], Protocol[U]):
    pass


class IAccessors(Protocol):
    @property
    def read_only(self) -> int: ...

    def _write(self, value: str) -> None: ...

    write_only = property(fset=_write)

    @property
    def read_write(self) -> float: ...

    @read_write.setter
    def read_write(self, value: float) -> None: ...


class IMethods(Protocol):
    def untyped(self, value): ...

    async def fetch(self, key: str) -> bytes: ...

    def stop(self) -> None: ...


class IIndexer(Protocol):
    name: str

    def __getitem__(self, key: int) -> str: ...


class IGenericMethod(Protocol):
    def first(self, items: list[S]) -> S: ...


class IStatic(Protocol):
    @staticmethod
    def build() -> int: ...


class IClassVar(Protocol):
    limit: ClassVar[int]


class IAbstract(ABC):
    @property
    @abstractmethod
    def size(self) -> int: ...

    @abstractmethod
    def grow(self, by: int) -> None: ...


class NotPureAbstract(ABC):
    @abstractmethod
    def grow(self) -> None: ...

    def shrink(self) -> None:
        return None


@interface
class IMixed(Concrete):
    def extra(self) -> None:
        raise NotImplementedError


class ISelf(Protocol):
    parent: ISelf | None


@pytest.fixture
def inspector() -> ContractInspector:
    return ContractInspector()


@pytest.mark.parametrize("target", [Concrete, int, len, "IBase", NotPureAbstract, list[int]])
def test_resolve_rejects_non_interfaces(inspector: ContractInspector, target: object) -> None:
    with pytest.raises(TypeIsNotAnInterface) as info:
        inspector.resolve(target)
    assert info.value.contract_type is target


def test_resolve_rejects_interface_built_on_concrete_base(inspector: ContractInspector) -> None:
    # The offending ancestor is reported, not the marked interface.
    with pytest.raises(TypeIsNotAnInterface) as info:
        inspector.resolve(IMixed)
    assert info.value.contract_type is Concrete


def test_flattening_lists_derived_members_before_inherited(inspector: ContractInspector) -> None:
    contract = inspector.resolve(IDerived)
    assert [p.name for p in contract.properties] == ["my_long", "my_int"]
    assert [m.name for m in contract.methods] == ["derived_method", "base_method"]
    assert contract.bases == (ContractKey(IBase),)
    assert contract.properties[1].declared_by is IBase


def test_diamond_inheritance_contributes_shared_members_once(inspector: ContractInspector) -> None:
    contract = inspector.resolve(IDiamond)
    assert [p.name for p in contract.properties] == ["root_value"]
    assert [m.name for m in contract.methods] == ["left", "right"]
    assert [base.interface for base in contract.bases] == [ILeft, IRight, IRoot]


def test_most_derived_redeclaration_wins(inspector: ContractInspector) -> None:
    contract = inspector.resolve(IOverride)
    assert [(p.name, p.value_type) for p in contract.properties] == [("my_int", str)]


def test_generic_arguments_substitute_into_members(inspector: ContractInspector) -> None:
    contract = inspector.resolve(IBox[int])
    assert contract.key == ContractKey(IBox, (int,))
    assert contract.name == "IBox[int]"
    assert contract.properties[0].value_type is int
    assert contract.methods[0].return_type == list[int]


def test_generic_arguments_flow_through_inheritance(inspector: ContractInspector) -> None:
    closed = inspector.resolve(IIntBox)
    assert closed.properties[0].value_type is int
    assert closed.bases == (ContractKey(IBox, (int,)),)

    rebound = inspector.resolve(IRebound[str])
    assert rebound.properties[0].value_type is str
    assert rebound.methods[0].return_type == list[str]


def test_explicit_generic_arguments_match_subscription(inspector: ContractInspector) -> None:
    assert inspector.resolve(IBox, [str]) == inspector.resolve(IBox[str])


def test_resolution_is_deterministic_and_keyed_by_arguments(inspector: ContractInspector) -> None:
    assert inspector.resolve(IBox[int]) == inspector.resolve(IBox[int])
    assert inspector.resolve(IBox[int]) != inspector.resolve(IBox[str])


def test_unbound_generic_leaves_type_variables(inspector: ContractInspector) -> None:
    contract = inspector.resolve(IBox)
    assert contract.properties[0].value_type is T


def test_generic_argument_misuse_is_a_type_error(inspector: ContractInspector) -> None:
    with pytest.raises(TypeError):
        inspector.resolve(IBox, [int, str])
    with pytest.raises(TypeError):
        inspector.resolve(IBox[int], [int])
    with pytest.raises(TypeError):
        inspector.resolve(IBase, [int])


def test_property_accessor_flags(inspector: ContractInspector) -> None:
    props = {p.name: p for p in inspector.resolve(IAccessors).properties}
    assert set(props) == {"read_only", "write_only", "read_write"}
    assert (props["read_only"].has_getter, props["read_only"].has_setter) == (True, False)
    assert (props["write_only"].has_getter, props["write_only"].has_setter) == (False, True)
    assert (props["read_write"].has_getter, props["read_write"].has_setter) == (True, True)
    assert props["write_only"].value_type is str
    assert props["read_write"].value_type is float


def test_method_descriptors_capture_parameters_and_returns(inspector: ContractInspector) -> None:
    methods = {m.name: m for m in inspector.resolve(IMethods).methods}
    assert methods["untyped"].parameter_names == ("value",)
    assert methods["untyped"].parameter_types == (Any,)
    assert methods["untyped"].return_type is Any
    assert methods["fetch"].is_async is True
    assert methods["fetch"].return_type is bytes
    assert methods["stop"].return_type is NO_VALUE
    assert methods["stop"].returns_value is False


def test_method_signature_keeps_defaults_without_receiver(inspector: ContractInspector) -> None:
    method = inspector.resolve(IDerived).methods[0]
    assert method.parameter_types == (int, str)
    assert list(method.signature.parameters) == ["count", "label"]
    assert method.signature.parameters["label"].default == "x"


def test_self_reference_resolves_to_the_interface(inspector: ContractInspector) -> None:
    prop = inspector.resolve(ISelf).properties[0]
    assert prop.value_type == ISelf | None


@pytest.mark.parametrize("target", [IIndexer, IGenericMethod, IStatic, IClassVar])
def test_unsupported_members_are_rejected_by_default(inspector: ContractInspector, target: type) -> None:
    with pytest.raises(UnsupportedMemberError) as info:
        inspector.resolve(target)
    assert info.value.interface is target


def test_skip_policy_omits_unsupported_members_and_logs() -> None:
    sink = _RecordingSink()
    inspector = ContractInspector(
        unsupported_members="skip",
        logger=StructuredLogger(sink=sink, level="debug"),
    )
    contract = inspector.resolve(IIndexer)
    assert contract.member_names() == ["name"]
    skipped = [m for m in sink.messages if m.message == "member.skipped"]
    assert skipped[0].fields["member"] == "__getitem__"
    assert skipped[0].level == "warning"
    assert sink.messages[-1].message == "contract.resolved"


def test_unknown_policy_is_rejected() -> None:
    with pytest.raises(ValueError):
        ContractInspector(unsupported_members="ignore")  # type: ignore[arg-type]


def test_pure_abc_is_an_interface(inspector: ContractInspector) -> None:
    contract = inspector.resolve(IAbstract)
    assert [(p.name, p.has_setter) for p in contract.properties] == [("size", False)]
    assert [m.name for m in contract.methods] == ["grow"]


def test_contract_to_dict_is_json_friendly(inspector: ContractInspector) -> None:
    rendered = inspector.resolve(IDerived).to_dict()
    assert rendered["name"] == "IDerived"
    assert rendered["bases"] == ["IBase"]
    assert rendered["properties"][0] == {"name": "my_long", "type": "int", "get": True, "set": True}
    assert rendered["methods"][0]["returns"] == "bool"
    assert rendered["methods"][1]["returns"] is None


def test_substitute_type_vars_handles_nested_hints() -> None:
    subst = {T: int}
    assert substitute_type_vars(T, subst) is int
    assert substitute_type_vars(list[T], subst) == list[int]
    assert substitute_type_vars(dict[str, T], subst) == dict[str, int]
    assert substitute_type_vars(U, subst) is U
    assert substitute_type_vars(str, subst) is str


def test_unresolvable_annotation_degrades_only_that_member() -> None:
    # Helper is local to this function, so it cannot be found through module globals.
    class Helper:
        pass

    class ILocal(Protocol):
        count: int
        other: Helper

        def total(self) -> int: ...

        def link(self, h: Helper) -> int: ...

    sink = _RecordingSink()
    inspector = ContractInspector(logger=StructuredLogger(sink=sink, level="debug"))
    contract = inspector.resolve(ILocal)

    props = {p.name: p.value_type for p in contract.properties}
    assert props == {"count": int, "other": Any}
    methods = {m.name: m for m in contract.methods}
    assert methods["total"].return_type is int
    assert methods["link"].parameter_types == (Any,)
    assert methods["link"].return_type is int

    unresolved = [m.fields for m in sink.messages if m.message == "annotation.unresolved"]
    assert [(f["owner"], f["name"]) for f in unresolved] == [
        (ILocal.__qualname__, "other"),
        (f"{ILocal.__qualname__}.link", "h"),
    ]
    assert all(m.level == "warning" for m in sink.messages if m.message == "annotation.unresolved")
