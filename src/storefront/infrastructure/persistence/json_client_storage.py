"""JSON-file-backed implementation of ClientStorage.

Lets the CLI keep a cart and an affiliate attribution between runs, the
way a browser keeps them in local storage.
"""

from __future__ import annotations

import json
from pathlib import Path

from storefront.domain.repository.client_storage import ClientStorage


class JsonClientStorage(ClientStorage):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- ClientStorage interface ----------------------------------------------

    def get(self, key: str) -> str | None:
        return self._load_raw().get(key)

    def set(self, key: str, value: str) -> None:
        entries = self._load_raw()
        entries[key] = value
        self._persist_raw(entries)

    def remove(self, key: str) -> None:
        entries = self._load_raw()
        if entries.pop(key, None) is not None:
            self._persist_raw(entries)

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict[str, str]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, entries: dict[str, str]) -> None:
        self._file_path.write_text(
            json.dumps(entries, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("{}", encoding="utf-8")
