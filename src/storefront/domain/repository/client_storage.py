"""Abstract key/value storage owned by the visitor's client.

Plays the part of browser local storage: string keys, JSON string values,
last write wins.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ClientStorage(ABC):

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if nothing is stored."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; no-op if absent."""
