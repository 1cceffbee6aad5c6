import json
import logging
import os
import tempfile
from typing import Dict, Optional

from memograph.core.interfaces.ports import IKeyValueStore

logger = logging.getLogger(__name__)


class JsonFileKeyValueStore(IKeyValueStore):
    """All keys live in one JSON object on disk; every write rewrites the file."""

    def __init__(self, path: str = "memograph_store.json"):
        self.path = path

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Store file %s is not valid JSON, treating it as empty: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        # Write to a temp file first so a crash never leaves half a file behind
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def delete(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)

    def clear(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
