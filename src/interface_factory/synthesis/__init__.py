from .cache import SynthesisCache
from .defaults import DefaultValues
from .descriptor import GeneratedDescriptor, SlotDef, StubDef
from .implementer import MemberImplementer

__all__ = [
    "DefaultValues",
    "GeneratedDescriptor",
    "MemberImplementer",
    "SlotDef",
    "StubDef",
    "SynthesisCache",
]
