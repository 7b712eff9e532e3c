"""Key/value storage for persisted contract instances.

The facade persists encoded terms and state through the :class:`StateStore`
protocol, so a host can plug in its own storage backend. The in-memory store
is the default and mirrors the host's instance storage: one store per
contract instance, bytes in and bytes out.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class StateStore(Protocol):
    """Protocol for the byte storage of one contract instance.

    Example:
        >>> store = InMemoryStateStore()
        >>> isinstance(store, StateStore)
        True
    """

    def get(self, key: str) -> bytes | None:
        """Return the stored bytes for ``key``, or None if absent."""
        ...

    def set(self, key: str, value: bytes) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    def has(self, key: str) -> bool:
        """Whether a value is stored under ``key``."""
        ...


class InMemoryStateStore:
    """Dictionary backed StateStore."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def has(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)
