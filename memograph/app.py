"""
MemographApp - the application state holder behind the CLI.

Owns the note and cluster collections, the chat transcript and the view
state. Every change to notes or clusters replaces the collection and is
written through the repository right away.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from tqdm import tqdm

from memograph.config import Settings
from memograph.core.domain.demo_notes import demo_notes
from memograph.core.domain.note import (
    AppView,
    ChatMessage,
    Cluster,
    Note,
    SearchResult,
    embedding_text,
    find_note,
    new_id,
    now_millis,
)
from memograph.core.domain.similarity import related_notes, top_matches
from memograph.core.errors import SpeechUnavailableError
from memograph.core.interfaces.ports import IEmbeddingProvider, ISpeechSynthesizer
from memograph.core.services.agent_service import AgentService, AgentTurn
from memograph.core.services.graph_service import SemanticGraph, build_graph
from memograph.core.services.prompts import AGENT_GREETING
from memograph.core.services.voice_service import VoiceInput
from memograph.infrastructure.speech.gemini_tts import decode_audio, write_wav
from memograph.infrastructure.storage.note_repository import NoteRepository

logger = logging.getLogger(__name__)

IMPORT_EXTENSIONS = (".txt", ".md")
TITLE_MAX_LENGTH = 60
ORGANIZE_MESSAGE = "Cluster my notes"


@dataclass
class ImportReport:
    imported: List[Note] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)  # (path, reason)


def split_imported_text(text: str, file_name: str) -> Tuple[str, str]:
    """
    Picks a title for an imported file: the first line when it is short,
    otherwise the file name without extension.
    """
    stem = os.path.splitext(os.path.basename(file_name))[0]
    lines = text.split("\n")
    first_line = lines[0].strip() if lines else ""

    if 0 < len(first_line) < TITLE_MAX_LENGTH:
        rest = "\n".join(lines[1:]).strip()
        return first_line, rest or text.strip()
    return stem or "Imported Note", text.strip()


def fallback_title(content: str) -> str:
    if content.strip():
        return " ".join(content.split(" ")[:5]) + "..."
    return "Untitled Note"


class MemographApp:
    def __init__(
        self,
        repository: NoteRepository,
        embedder: IEmbeddingProvider,
        agent: AgentService,
        synthesizer: Optional[ISpeechSynthesizer] = None,
        voice: Optional[VoiceInput] = None,
    ):
        self.repository = repository
        self.embedder = embedder
        self.agent = agent
        self.synthesizer = synthesizer
        self.voice = voice or VoiceInput()

        self.notes: List[Note] = []
        self.clusters: List[Cluster] = []
        self.chat_history: List[ChatMessage] = [
            ChatMessage(id="init-greeting", role="assistant", content=AGENT_GREETING)
        ]

        self.view = AppView.NOTES
        self.active_cluster_id: Optional[str] = None
        self.sort_order = "newest"
        self.selected_note: Optional[Note] = None
        self.query = ""
        self.new_note_content = ""
        self.input_mode = "text"

    # --- State ---

    def load(self) -> None:
        self.notes = self.repository.load_notes()
        self.clusters = self.repository.load_clusters()
        logger.info("Loaded %d notes and %d clusters", len(self.notes), len(self.clusters))

    def _set_notes(self, notes: Sequence[Note]) -> None:
        self.notes = list(notes)
        self.repository.save_notes(self.notes)

    def _set_clusters(self, clusters: Sequence[Cluster]) -> None:
        self.clusters = list(clusters)
        self.repository.save_clusters(self.clusters)

    def get_note(self, note_id: str) -> Optional[Note]:
        return find_note(self.notes, note_id)

    def _embed(self, title: str, content: str) -> List[float]:
        return self.embedder.embed(embedding_text(title, content))

    def _stop_listening(self) -> str:
        if self.voice.is_listening:
            return self.voice.stop()
        return ""

    # --- Notes ---

    def add_note(self, content: str = "", title: str = "") -> Optional[Note]:
        transcript = self._stop_listening()
        content = content or transcript
        if not content.strip() and not title.strip():
            return None

        title = title.strip() or fallback_title(content.strip())
        content = content.strip()
        note = Note(
            id=new_id(),
            title=title,
            content=content,
            created_at=now_millis(),
            embedding=self._embed(title, content),
        )
        self._set_notes([note] + self.notes)
        self.new_note_content = ""
        return note

    def save_note(self, note: Note) -> Note:
        """Saves an edited note; a note with an unknown id is added as new."""
        is_new = self.get_note(note.id) is None
        final = note.with_changes(
            id=new_id() if is_new else note.id,
            embedding=self._embed(note.title, note.content),
        )
        if is_new:
            self._set_notes([final] + self.notes)
        else:
            self._set_notes([final if n.id == final.id else n for n in self.notes])
        self.selected_note = None
        return final

    def delete_note(self, note_id: str) -> bool:
        if self.get_note(note_id) is None:
            return False
        self._set_notes([n for n in self.notes if n.id != note_id])
        if self.selected_note and self.selected_note.id == note_id:
            self.selected_note = None
        return True

    def ai_edit(self, note_id: str, instruction: str) -> Optional[Note]:
        """Rewrites a note's content with the LLM and saves it."""
        note = self.get_note(note_id)
        if note is None:
            return None
        content = self.agent.executor.generator.edit_note_content(note.content, instruction)
        return self.save_note(note.with_changes(content=content))

    def visible_notes(self) -> List[Note]:
        notes = self.notes
        if self.active_cluster_id:
            cluster = next((c for c in self.clusters if c.id == self.active_cluster_id), None)
            ids = set(cluster.note_ids) if cluster else set()
            notes = [n for n in notes if n.id in ids]
        return sorted(notes, key=lambda n: n.created_at, reverse=self.sort_order == "newest")

    def search(self, query: str) -> List[SearchResult]:
        return top_matches(self.embedder.embed(query), self.notes)

    def related(self, note_id: str) -> List[SearchResult]:
        note = self.get_note(note_id)
        if note is None:
            return []
        return related_notes(note, self.notes)

    def graph(self) -> SemanticGraph:
        return build_graph(self.notes, self.clusters)

    def import_files(self, paths: Sequence[str]) -> ImportReport:
        report = ImportReport()
        for path in tqdm(paths, desc="Importing", disable=len(paths) < 2):
            if not path.lower().endswith(IMPORT_EXTENSIONS):
                report.failed.append((path, "unsupported file type"))
                continue
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    text = f.read()
            except (OSError, UnicodeDecodeError) as e:
                logger.error("Error reading file %s: %s", path, e)
                report.failed.append((path, str(e)))
                continue

            if not text.strip():
                continue

            title, content = split_imported_text(text, path)
            note = Note(
                id=new_id(),
                title=title,
                content=content,
                created_at=now_millis(),
                embedding=self._embed(title, content),
            )
            self._set_notes([note] + self.notes)
            report.imported.append(note)
        return report

    def load_demo(self) -> List[Note]:
        self._set_notes([])
        embedded = []
        for note in tqdm(demo_notes(), desc="Embedding demo notes"):
            embedded.append(note.with_changes(embedding=self._embed(note.title, note.content)))
        self._set_notes(embedded)
        return embedded

    # --- Agent ---

    def handle_agent_message(
        self,
        text: str,
        on_message: Optional[Callable[[ChatMessage], None]] = None,
    ) -> Optional[AgentTurn]:
        if not text.strip():
            return None

        self._stop_listening()
        self.view = AppView.AGENT
        self.selected_note = None

        history = list(self.chat_history)
        self.chat_history.append(ChatMessage(id=new_id(), role="user", content=text))
        self.query = ""

        turn = self.agent.run_turn(text, history, self.notes, self.clusters, on_message=on_message)

        self.chat_history.extend(turn.messages)
        if turn.notes != self.notes:
            self._set_notes(turn.notes)
        if turn.clusters != self.clusters:
            self._set_clusters(turn.clusters)
        if turn.opened_note_id:
            self.selected_note = self.get_note(turn.opened_note_id)
        return turn

    def organize(self, on_message: Optional[Callable[[ChatMessage], None]] = None) -> Optional[AgentTurn]:
        return self.handle_agent_message(ORGANIZE_MESSAGE, on_message=on_message)

    # --- Audio ---

    def speak(self, message_id: str, output_path: str) -> Optional[str]:
        """Synthesizes a chat message to a WAV file; returns the path or None."""
        message = next((m for m in self.chat_history if m.id == message_id), None)
        if message is None or not message.content or self.synthesizer is None:
            return None

        message.is_audio_playing = True
        try:
            audio = self.synthesizer.synthesize(message.content)
            if not audio:
                return None
            return write_wav(decode_audio(audio), output_path, sample_rate=self.synthesizer.sample_rate)
        finally:
            message.is_audio_playing = False

    def toggle_listening(self, mode: str = "search") -> Optional[str]:
        """
        Starts dictation, or stops it and puts the transcript into the note
        field (mode "voice") or the query field (mode "search").
        """
        if not self.voice.supported:
            raise SpeechUnavailableError("Speech not supported")

        if self.voice.is_listening:
            transcript = self.voice.stop()
            if mode == "voice":
                self.new_note_content = transcript
            else:
                self.query = transcript
            return transcript

        if mode == "voice":
            self.input_mode = "voice"
        self.voice.start()
        return None


def create_app(settings: Settings = None) -> MemographApp:
    """Factory function to create MemographApp with configured providers."""
    from memograph.core.services.generation_service import GenerationService
    from memograph.core.services.tool_executor import ToolExecutor
    from memograph.infrastructure.embedding.gemini_embedder import GeminiEmbeddingProvider
    from memograph.infrastructure.llm.gemini_provider import GeminiChatModel, GeminiFlashProvider
    from memograph.infrastructure.speech.gemini_tts import GeminiSpeechSynthesizer

    settings = settings or Settings.from_env()
    api_key = settings.gemini_api_key

    if settings.llm_provider == "ollama":
        from memograph.infrastructure.llm.ollama_provider import OllamaGemmaProvider
        llm = OllamaGemmaProvider(model_name=settings.ollama_model, base_url=settings.ollama_url)
        print(f"Using Local LLM for note edits: Ollama ({settings.ollama_model})")
    else:
        llm = GeminiFlashProvider(api_key=api_key, model_name=settings.gemini_model, rate_limit_rpm=settings.rate_limit_rpm)

    if settings.store == "sqlite":
        from memograph.infrastructure.storage.sqlite_store import SQLiteKeyValueStore
        store = SQLiteKeyValueStore(db_path=settings.store_path)
    else:
        from memograph.infrastructure.storage.json_store import JsonFileKeyValueStore
        store = JsonFileKeyValueStore(path=settings.store_path)

    calendar = None
    if settings.calendar_configured:
        from memograph.infrastructure.calendar.google_calendar import GoogleCalendarClient
        calendar = GoogleCalendarClient(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            refresh_token=settings.google_refresh_token,
            access_token=settings.google_access_token,
        )

    embedder = GeminiEmbeddingProvider(api_key=api_key, model_name=settings.embedding_model)
    executor = ToolExecutor(embedder=embedder, generator=GenerationService(llm), calendar=calendar)
    chat_model = GeminiChatModel(api_key=api_key, model_name=settings.gemini_model, rate_limit_rpm=settings.rate_limit_rpm)
    synthesizer = GeminiSpeechSynthesizer(api_key=api_key, model_name=settings.tts_model, voice_name=settings.tts_voice)

    app = MemographApp(
        repository=NoteRepository(store),
        embedder=embedder,
        agent=AgentService(chat_model, executor),
        synthesizer=synthesizer,
    )
    app.load()
    return app
