# src/rooma_client/local_storage.py

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


class LocalStorage:
    """
    Durable string-to-string storage with browser localStorage semantics, kept as a single
    JSON object on disk. Each write rewrites the whole file through a temp file and
    os.replace, so readers see either the old or the new snapshot.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"LocalStorage: Unreadable storage file {self.path}, treating as empty: {e}")
            return {}
        try:
            data = json.loads(text)
        except ValueError as e:
            self._set_aside(f"is not valid JSON ({e})")
            return {}
        if not isinstance(data, dict):
            self._set_aside("does not hold an object")
            return {}
        return {key: value for key, value in data.items() if isinstance(value, str)}

    @property
    def corrupt_path(self) -> Path:
        return self.path.with_name(f"{self.path.name}.corrupt")

    def _set_aside(self, reason: str) -> None:
        """Moves a corrupt file out of the way so the next write cannot destroy its contents."""
        try:
            os.replace(self.path, self.corrupt_path)
        except OSError as e:
            logger.error(f"LocalStorage: Storage file {self.path} {reason}; could not move it aside: {e}")
            return
        logger.error(
            f"LocalStorage: Storage file {self.path} {reason}; moved to {self.corrupt_path}, starting empty"
        )

    def _write_all(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                json.dump(items, tmp_file, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)
