"""
Credential store — opaque key/value storage holding the bearer token.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol


class CredentialStore(Protocol):
    """
    Async key/value store for credentials.

    Example — file-backed implementation:

        class FileCredentials(CredentialStore):
            async def get(self, key: str) -> str | None:
                ...
    """

    async def get(self, key: str) -> str | None:
        """Return stored value or None."""
        ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Function-based Store Builder
# ═══════════════════════════════════════════════════════════════════════════════

type GetFn = Callable[[str], Awaitable[str | None]]
type SetFn = Callable[[str, str], Awaitable[None]]
type RemoveFn = Callable[[str], Awaitable[None]]


@dataclass(frozen=True)
class FunctionalCredentials:
    """
    Credential store built from functions.

    Example:
        store = credentials_from(
            get=keychain.read,
            set=keychain.write,
            remove=keychain.delete,
        )
    """

    _get: GetFn
    _set: SetFn
    _remove: RemoveFn

    async def get(self, key: str) -> str | None:
        return await self._get(key)

    async def set(self, key: str, value: str) -> None:
        await self._set(key, value)

    async def remove(self, key: str) -> None:
        await self._remove(key)


def credentials_from(get: GetFn, set: SetFn, remove: RemoveFn) -> FunctionalCredentials:
    return FunctionalCredentials(_get=get, _set=set, _remove=remove)


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Store
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCredentials:
    """In-memory credential store. Does not survive a restart."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> str | None:
        async with self._lock:
            return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            self._values[key] = value

    async def remove(self, key: str) -> None:
        async with self._lock:
            self._values.pop(key, None)


__all__ = (
    "CredentialStore",
    "FunctionalCredentials",
    "credentials_from",
    "MemoryCredentials",
)
