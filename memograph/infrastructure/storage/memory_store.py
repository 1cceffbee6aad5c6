from typing import Dict, Optional

from memograph.core.interfaces.ports import IKeyValueStore


class InMemoryKeyValueStore(IKeyValueStore):
    def __init__(self, initial: Dict[str, str] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def clear(self) -> None:
        self.data.clear()
