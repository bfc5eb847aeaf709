from .inspector import ContractInspector, TypeIsNotAnInterface, UnsupportedMemberError, substitute_type_vars
from .marker import InterfaceMeta, get_interface_meta, interface, is_interface
from .model import NO_VALUE, Contract, ContractKey, MethodDescriptor, PropertyDescriptor, type_repr

__all__ = [
    "NO_VALUE",
    "Contract",
    "ContractInspector",
    "ContractKey",
    "InterfaceMeta",
    "MethodDescriptor",
    "PropertyDescriptor",
    "TypeIsNotAnInterface",
    "UnsupportedMemberError",
    "get_interface_meta",
    "interface",
    "is_interface",
    "substitute_type_vars",
    "type_repr",
]
