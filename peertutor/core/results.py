"""Typed success/failure results returned by the service layer."""

import functools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    FORBIDDEN = "forbidden"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class ServiceError:
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    value: T | None = None
    error: ServiceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ServiceResult[T]":
        return cls(error=ServiceError(kind=kind, message=message))


def service_operation(func: Callable[..., T]) -> Callable[..., ServiceResult[T]]:
    """
    Wrap a service method so it returns a ``ServiceResult`` instead of raising.

    Domain exceptions keep their kind and message. Anything else is logged
    with its traceback and reported as an opaque ``UNEXPECTED`` failure.
    """
    # Imported lazily: exceptions depends on ErrorKind defined above.
    from peertutor.core.exceptions import DomainException

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> ServiceResult[T]:
        try:
            return ServiceResult.success(func(*args, **kwargs))
        except DomainException as exc:
            logger.warning("%s rejected: %s", func.__qualname__, exc.message)
            return ServiceResult.failure(exc.kind, exc.message)
        except Exception:
            logger.exception("Unexpected error in %s", func.__qualname__)
            return ServiceResult.failure(ErrorKind.UNEXPECTED, UNEXPECTED_ERROR_MESSAGE)

    return wrapper
