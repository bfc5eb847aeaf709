from __future__ import annotations

from threading import Lock
from typing import Any, TypeVar, overload

from interface_factory.config.loader import settings_from_env
from interface_factory.config.models import FactorySettings
from interface_factory.contracts.inspector import ContractInspector
from interface_factory.contracts.model import Contract
from interface_factory.observability.logging import LogSink, StructuredLogger, build_logger
from interface_factory.synthesis.cache import SynthesisCache
from interface_factory.synthesis.defaults import DefaultValues
from interface_factory.synthesis.implementer import MemberImplementer

T = TypeVar("T")


class InterfaceObjectFactory:
    # Composition root: inspector -> cache (-> implementer) -> fresh proxy instance.
    def __init__(
        self,
        settings: FactorySettings | None = None,
        *,
        defaults: DefaultValues | None = None,
        log_sink: LogSink | None = None,
    ) -> None:
        self.settings = settings if settings is not None else FactorySettings()
        self.logger: StructuredLogger = build_logger(self.settings.logging, log_sink)
        self.defaults = defaults if defaults is not None else DefaultValues(text_default=self.settings.text_default)
        self.inspector = ContractInspector(
            unsupported_members=self.settings.unsupported_members,
            logger=self.logger,
        )
        self.implementer = MemberImplementer(
            defaults=self.defaults,
            check_arity=self.settings.check_arity,
            logger=self.logger,
        )
        self.cache = SynthesisCache(builder=self.implementer.build)

    @overload
    def new(self, contract: type[T]) -> T: ...

    @overload
    def new(self, contract: Any, *generic_args: Any) -> Any: ...

    def new(self, contract: Any, *generic_args: Any) -> Any:
        # Raises TypeIsNotAnInterface before anything is built or instantiated.
        resolved = self.inspector.resolve(contract, generic_args)
        descriptor = self.cache.get_or_create(resolved)
        return descriptor.instantiate()

    def describe(self, contract: Any, *generic_args: Any) -> Contract:
        return self.inspector.resolve(contract, generic_args)


_default_factory: InterfaceObjectFactory | None = None
_default_lock = Lock()


def configure(
    settings: FactorySettings | None = None,
    *,
    defaults: DefaultValues | None = None,
    log_sink: LogSink | None = None,
) -> InterfaceObjectFactory:
    # Installs the process-wide factory; previously synthesized proxies stay valid.
    global _default_factory
    factory = InterfaceObjectFactory(settings, defaults=defaults, log_sink=log_sink)
    with _default_lock:
        _default_factory = factory
    return factory


def get_factory() -> InterfaceObjectFactory:
    # First use without configure() reads settings from INTERFACE_FACTORY_CONFIG.
    global _default_factory
    factory = _default_factory
    if factory is not None:
        return factory
    with _default_lock:
        if _default_factory is None:
            _default_factory = InterfaceObjectFactory(settings_from_env())
        return _default_factory


@overload
def new(contract: type[T]) -> T: ...


@overload
def new(contract: Any, *generic_args: Any) -> Any: ...


def new(contract: Any, *generic_args: Any) -> Any:
    return get_factory().new(contract, *generic_args)
