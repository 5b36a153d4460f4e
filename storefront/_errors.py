"""
Storefront errors — values carried inside Error(...), never raised across
component boundaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


# ═══════════════════════════════════════════════════════════════════════════════
# Error Kind
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorKind(Enum):
    """
    Kinds of storefront errors.

    VALIDATION blocks a transition before any network call.
    AUTH is kept apart from SERVER so callers can redirect to login.
    PARTIAL_COMPLETION means the remote cart is indeterminate: refetch it.
    """

    VALIDATION = auto()
    AUTH = auto()
    NETWORK = auto()
    SERVER = auto()
    PAYMENT = auto()
    PARTIAL_COMPLETION = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Error Value
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StorefrontError:
    """
    Storefront operation error.

    status: HTTP status for SERVER/AUTH errors coming from a response.
    ordered: lines already ordered when a checkout broke mid-way.
    detail: message of the step that broke a checkout, when it had one.
    """

    kind: ErrorKind
    message: str
    status: int | None = None
    cause: Exception | None = None
    ordered: int = 0
    detail: str | None = None

    @property
    def is_auth(self) -> bool:
        return self.kind == ErrorKind.AUTH

    @property
    def is_validation(self) -> bool:
        return self.kind == ErrorKind.VALIDATION

    def __str__(self) -> str:
        return self.message


class Errors:
    @staticmethod
    def validation(message: str) -> StorefrontError:
        return StorefrontError(ErrorKind.VALIDATION, message)

    @staticmethod
    def unauthenticated(message: str = "User not authenticated") -> StorefrontError:
        return StorefrontError(ErrorKind.AUTH, message)

    @staticmethod
    def network(cause: Exception) -> StorefrontError:
        return StorefrontError(ErrorKind.NETWORK, "Something went wrong.", cause=cause)

    @staticmethod
    def server(status: int, message: str) -> StorefrontError:
        kind = ErrorKind.AUTH if status in (401, 403) else ErrorKind.SERVER
        return StorefrontError(kind, message, status=status)

    @staticmethod
    def malformed(cause: Exception) -> StorefrontError:
        return StorefrontError(ErrorKind.SERVER, "Unexpected response from server", cause=cause)

    @staticmethod
    def payment(message: str, cause: Exception | None = None) -> StorefrontError:
        return StorefrontError(ErrorKind.PAYMENT, message, cause=cause)

    @staticmethod
    def partial(
        message: str,
        ordered: int,
        cause: StorefrontError | Exception | None = None,
    ) -> StorefrontError:
        match cause:
            case StorefrontError():
                return StorefrontError(
                    ErrorKind.PARTIAL_COMPLETION,
                    message,
                    status=cause.status,
                    cause=cause.cause,
                    ordered=ordered,
                    detail=cause.message,
                )
            case Exception():
                return StorefrontError(
                    ErrorKind.PARTIAL_COMPLETION,
                    message,
                    cause=cause,
                    ordered=ordered,
                    detail=str(cause) or type(cause).__name__,
                )
            case _:
                return StorefrontError(ErrorKind.PARTIAL_COMPLETION, message, ordered=ordered)


__all__ = ("ErrorKind", "StorefrontError", "Errors")
