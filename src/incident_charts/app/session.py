"""Key/value session store for view state.

Values must be JSON-serializable. With a ``path`` the store is backed by a
JSON file: it is read once on construction and rewritten atomically (tmp
file + replace) on every ``set``. A missing file starts empty; a corrupt or
non-object file is logged and also starts empty.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

__all__ = ["SessionStore", "DEFAULT_FILENAME"]

log = logging.getLogger(__name__)

DEFAULT_FILENAME = "incident_charts_session.json"


class SessionStore:
    def __init__(self, path: str | Path | None = None) -> None:
        self.path: Optional[Path] = Path(path) if path is not None else None
        self._data: Dict[str, Any] = self._load()

    @classmethod
    def in_dir(cls, base_dir: str | Path) -> "SessionStore":
        return cls(Path(base_dir) / DEFAULT_FILENAME)

    def _load(self) -> Dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.warning("Session file %s unreadable (%s), starting empty", self.path, exc)
            return {}
        if not isinstance(data, dict):
            log.warning("Session file %s does not hold an object, starting empty", self.path)
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        # fail before mutating when the value cannot be stored
        json.dumps(value)
        self._data[key] = copy.deepcopy(value)
        self._flush()

    def keys(self) -> list[str]:
        return list(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def _flush(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._data, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self.path)
