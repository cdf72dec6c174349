"""
familyvault/services/token_store.py

Purpose: Persisted key/value store

- Survives restarts (JSON file)
- Holds the last-issued bearer token for code paths without a live user
- A missing or unreadable file reads as empty
"""

import json
from pathlib import Path
from typing import Optional, Dict
import logging


class TokenStore:
    """
    Small JSON-file key/value store.
    """

    def __init__(self, path: str, logger: logging.Logger):
        self.path = Path(path).expanduser()
        self.logger = logger

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self.logger.warning(f"Ignoring unreadable store {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str):
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str):
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def has(self, key: str) -> bool:
        return key in self._read()
