"""
Persisted city selection.

The key-value store itself belongs to the host application (user defaults,
a settings file, ...). This module only knows the two keys it owns and how to
read/write them through the minimal `KeyValueStore` protocol.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

SELECTED_CITY_KEY = "selected_city"
SELECTED_CITY_NAME_KEY = "selected_city_name"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


@dataclass
class InMemoryKeyValueStore:
    """Dict-backed store for tests and the CLI."""

    values: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str) -> Any:
        return self.values.get(key)

    def set(self, key: str, value: Any) -> None:
        self.values[key] = value


class SelectedCityStore:
    """Reads/writes the selected city id and display name."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def save(self, city_id: str, display_name: str) -> None:
        self._store.set(SELECTED_CITY_KEY, city_id)
        self._store.set(SELECTED_CITY_NAME_KEY, display_name)

    def city_id(self) -> str | None:
        value = self._store.get(SELECTED_CITY_KEY)
        return str(value) if value else None

    def display_name(self) -> str | None:
        value = self._store.get(SELECTED_CITY_NAME_KEY)
        return str(value) if value else None
