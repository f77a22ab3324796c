"""Key-value option storage for plugin settings."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class OptionStore(Protocol):
    """Named string options, in the manner of the WordPress options table."""

    def get_option(self, name: str, default: str = "") -> str: ...

    def update_option(self, name: str, value: str) -> bool: ...


class InMemoryOptionStore:
    """Process-local option store."""

    def __init__(self, options: dict[str, str] | None = None) -> None:
        self._options: dict[str, str] = dict(options or {})
        self._lock = threading.Lock()

    def get_option(self, name: str, default: str = "") -> str:
        with self._lock:
            return self._options.get(name, default)

    def update_option(self, name: str, value: str) -> bool:
        """Store a value; False when it was already stored unchanged."""
        with self._lock:
            if self._options.get(name) == value:
                return False
            self._options[name] = value
            return True


class JsonFileOptionStore:
    """Option store persisted as a single JSON object on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(
                "Failed to read option store",
                extra={"path": str(self.path), "error": str(e)},
            )
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)} if isinstance(data, dict) else {}

    def get_option(self, name: str, default: str = "") -> str:
        with self._lock:
            return self._read().get(name, default)

    def update_option(self, name: str, value: str) -> bool:
        with self._lock:
            options = self._read()
            if options.get(name) == value:
                return False
            options[name] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(f"{self.path.suffix}.tmp")
            tmp_path.write_text(json.dumps(options, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
            return True
