# finance/mixins/__init__.py
from .envelope import EnvelopeResponseMixin
from .owner_scoped import OwnerScopedMixin
from .service_exception_handler import ServiceExceptionHandlerMixin

__all__ = [
    "EnvelopeResponseMixin",
    "OwnerScopedMixin",
    "ServiceExceptionHandlerMixin",
]
