from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock

from interface_factory.contracts.model import Contract, ContractKey
from interface_factory.synthesis.descriptor import GeneratedDescriptor

Builder = Callable[[Contract], GeneratedDescriptor]


@dataclass(slots=True)
class SynthesisCache:
    # Memoizes one GeneratedDescriptor per contract key; builds are single-flight per key.
    builder: Builder
    _entries: dict[ContractKey, GeneratedDescriptor] = field(default_factory=dict, init=False, repr=False)
    _key_locks: dict[ContractKey, Lock] = field(default_factory=dict, init=False, repr=False)
    _lock: Lock = field(default_factory=Lock, init=False, repr=False)
    _builds: int = field(default=0, init=False)

    def get_or_create(self, contract: Contract) -> GeneratedDescriptor:
        key = contract.key
        # Descriptors are published only after construction completes.
        cached = self._entries.get(key)
        if cached is not None:
            return cached

        with self._lock:
            key_lock = self._key_locks.setdefault(key, Lock())

        with key_lock:
            cached = self._entries.get(key)
            if cached is not None:
                return cached
            descriptor = self.builder(contract)
            with self._lock:
                self._entries[key] = descriptor
                self._builds += 1
                self._key_locks.pop(key, None)
            return descriptor

    def get(self, key: ContractKey) -> GeneratedDescriptor | None:
        return self._entries.get(key)

    @property
    def builds(self) -> int:
        return self._builds

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
