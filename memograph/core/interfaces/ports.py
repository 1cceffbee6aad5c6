from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


class ILLMProvider(ABC):
    """Interface for Large Language Model text generation."""

    @abstractmethod
    def generate(self, prompt: str, json_mode: bool = False, response_schema: Optional[Dict[str, Any]] = None) -> str:
        """
        Generates text based on the provided prompt. Raises ProviderError on failure.
        `response_schema` constrains JSON mode output where the provider supports it.
        """
        pass


class IEmbeddingProvider(ABC):
    """Interface for generating vector embeddings."""

    @abstractmethod
    def embed(self, text: str) -> List[float]:
        """Generates a vector embedding for the given text. Returns [] on failure."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Returns the dimension of the embeddings."""
        pass


@dataclass
class FunctionCall:
    name: str
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ModelTurn:
    """One response of a tool-calling chat model."""
    text: Optional[str] = None
    function_calls: List[FunctionCall] = field(default_factory=list)


class IChatModel(ABC):
    """Interface for a chat model that can request tool calls."""

    @abstractmethod
    def generate_turn(
        self,
        contents: List[Dict[str, Any]],
        tools: List[Dict[str, Any]],
        system_instruction: str,
    ) -> ModelTurn:
        """
        Sends the conversation and returns either text or tool calls.

        `contents` items look like {"role": "user" | "model", "parts": [...]}, where
        a part is {"text": ...}, {"function_call": {"name", "args"}} or
        {"function_response": {"name", "response"}}.
        """
        pass


class IKeyValueStore(ABC):
    """Interface for the local key-value blob storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass


@dataclass
class TranscriptResult:
    transcript: str
    is_final: bool = False


# (results, result_index) -> None
TranscriptCallback = Callable[[List[TranscriptResult], int], None]


class ITranscriptSource(ABC):
    """Interface for a continuous speech transcript stream."""

    @abstractmethod
    def start(self, on_result: TranscriptCallback) -> None:
        """Starts listening; `on_result` receives every batch of results."""
        pass

    @abstractmethod
    def stop(self) -> None:
        pass


class ISpeechSynthesizer(ABC):
    """Interface for text-to-speech."""

    sample_rate: int = 24000

    @abstractmethod
    def synthesize(self, text: str) -> Optional[str]:
        """Returns base64-encoded 16-bit PCM audio, or None on failure."""
        pass


class ICalendarClient(ABC):
    """Interface for creating calendar events from natural language."""

    @abstractmethod
    def create_event(self, text: str) -> Dict[str, Any]:
        """Returns {"success": True, "eventId": ...} or {"success": False, "error": ...}."""
        pass
