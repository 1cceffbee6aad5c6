import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional


def new_id() -> str:
    return str(uuid.uuid4())


def now_millis() -> int:
    return int(time.time() * 1000)


def embedding_text(title: str, content: str) -> str:
    """The text that gets embedded for a note."""
    return f"Title: {title}\nContent: {content}"


@dataclass
class Note:
    """
    Represents a single note in the collection.
    """
    id: str
    title: str
    content: str
    created_at: int = field(default_factory=now_millis)
    embedding: Optional[List[float]] = None
    cluster_id: Optional[str] = None
    is_generated: bool = False

    @property
    def key(self) -> str:
        """Unique identifier for the note."""
        return self.id

    def with_changes(self, **changes) -> "Note":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "createdAt": self.created_at,
        }
        if self.embedding is not None:
            data["embedding"] = list(self.embedding)
        if self.cluster_id is not None:
            data["clusterId"] = self.cluster_id
        if self.is_generated:
            data["isGenerated"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Note":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            content=data.get("content", ""),
            created_at=int(data.get("createdAt", 0)),
            embedding=data.get("embedding"),
            cluster_id=data.get("clusterId"),
            is_generated=bool(data.get("isGenerated", False)),
        )


@dataclass
class Cluster:
    id: str
    name: str
    note_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "noteIds": list(self.note_ids)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Cluster":
        return cls(id=data["id"], name=data.get("name", ""), note_ids=list(data.get("noteIds") or []))


@dataclass
class SearchResult:
    note: Note
    score: float


@dataclass
class ToolCallLog:
    id: str
    name: str
    args: Dict[str, Any]


@dataclass
class ToolResultLog:
    id: str
    name: str
    result: Any


@dataclass
class ChatMessage:
    """
    One entry of the chat transcript. Tool-call log entries carry
    `tool_calls` (and later `tool_results`) instead of text.
    """
    id: str
    role: str  # user | assistant | system
    content: Optional[str] = None
    tool_calls: Optional[List[ToolCallLog]] = None
    tool_results: Optional[List[ToolResultLog]] = None
    source_note_ids: Optional[List[str]] = None
    is_audio_playing: bool = False


class AppView(Enum):
    NOTES = "NOTES"
    GRAPH = "GRAPH"
    AGENT = "AGENT"


def find_note(notes: List[Note], note_id: str) -> Optional[Note]:
    for note in notes:
        if note.id == note_id:
            return note
    return None
