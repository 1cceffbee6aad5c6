import json
import logging
from typing import Any, Callable, List, Sequence

from memograph.core.domain.note import Cluster, Note
from memograph.core.interfaces.ports import IKeyValueStore

logger = logging.getLogger(__name__)

NOTES_KEY = "memograph_notes"
CLUSTERS_KEY = "memograph_clusters"


class NoteRepository:
    """
    Persists the note and cluster collections as one JSON blob per key.
    Collections are always written whole.
    """

    def __init__(self, store: IKeyValueStore):
        self.store = store

    def _load(self, key: str, parse: Callable[[dict], Any]) -> List[Any]:
        raw = self.store.get(key)
        if not raw:
            return []
        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise ValueError(f"expected a list under '{key}'")
            return [parse(item) for item in items]
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Could not parse stored '%s', starting empty: %s", key, e)
            return []

    def load_notes(self) -> List[Note]:
        return self._load(NOTES_KEY, Note.from_dict)

    def save_notes(self, notes: Sequence[Note]) -> None:
        self.store.set(NOTES_KEY, json.dumps([n.to_dict() for n in notes], ensure_ascii=False))

    def load_clusters(self) -> List[Cluster]:
        return self._load(CLUSTERS_KEY, Cluster.from_dict)

    def save_clusters(self, clusters: Sequence[Cluster]) -> None:
        self.store.set(CLUSTERS_KEY, json.dumps([c.to_dict() for c in clusters], ensure_ascii=False))
