"""Tool Executor - Maps agent tool calls onto note operations.

Each call receives a snapshot of the note and cluster collections and returns
a ToolOutcome holding the result record and the (possibly new) collections.
Snapshots are never mutated; errors come back as {"error": ...} records.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from memograph.core.domain.note import Cluster, Note, embedding_text, find_note, new_id, now_millis
from memograph.core.domain.similarity import RELEVANT_THRESHOLD, note_score, top_matches
from memograph.core.interfaces.ports import ICalendarClient, IEmbeddingProvider
from memograph.core.services.generation_service import GenerationService
from memograph.core.services.prompts import NO_RELEVANT_CANDIDATES_ANSWER, SUMMARIZE_INSTRUCTION

logger = logging.getLogger(__name__)

NOTE_NOT_FOUND = "Note not found."


@dataclass
class ToolOutcome:
    result: Dict[str, Any]
    notes: List[Note]
    clusters: List[Cluster]
    opened_note_id: Optional[str] = None


class ToolExecutor:
    """
    Executes tool calls against explicit note/cluster snapshots.
    """

    def __init__(
        self,
        embedder: IEmbeddingProvider,
        generator: GenerationService,
        calendar: Optional[ICalendarClient] = None,
    ):
        self.embedder = embedder
        self.generator = generator
        self.calendar = calendar

        self._tools: Dict[str, Callable[..., ToolOutcome]] = {
            "createNote": self._create_note,
            "updateNote": self._update_note,
            "deleteNote": self._delete_note,
            "searchNotes": self._search_notes,
            "ragAnswer": self._rag_answer,
            "clusterNotes": self._cluster_notes,
            "openNote": self._open_note,
            "summarizeNote": self._summarize_note,
            "rewriteNote": self._rewrite_note,
            "createCalendarEvent": self._create_calendar_event,
        }

    @property
    def tool_names(self) -> List[str]:
        return list(self._tools)

    def execute(
        self,
        name: str,
        args: Optional[Dict[str, Any]],
        notes: Sequence[Note],
        clusters: Sequence[Cluster],
    ) -> ToolOutcome:
        notes = list(notes)
        clusters = list(clusters)
        args = dict(args or {})

        handler = self._tools.get(name)
        if handler is None:
            logger.warning("Unknown tool requested: %s", name)
            return ToolOutcome({"error": f"Unknown tool: {name}"}, notes, clusters)

        logger.info("Executing tool: %s (args: %s)", name, sorted(args))
        try:
            return handler(args, notes, clusters)
        except Exception as e:
            logger.exception("Tool %s failed", name)
            return ToolOutcome({"error": str(e) or e.__class__.__name__}, notes, clusters)

    def _embed_note(self, title: str, content: str) -> List[float]:
        return self.embedder.embed(embedding_text(title, content))

    def _create_note(self, args, notes, clusters) -> ToolOutcome:
        title = str(args.get("title") or "")
        content = str(args.get("content") or "")
        note = Note(
            id=new_id(),
            title=title,
            content=content,
            created_at=now_millis(),
            embedding=self._embed_note(title, content),
            is_generated=True,
        )
        return ToolOutcome(
            {"success": True, "noteId": note.id, "message": "Note created successfully."},
            [note] + notes,
            clusters,
        )

    def _update_note(self, args, notes, clusters) -> ToolOutcome:
        note_id = args.get("noteId")
        target = find_note(notes, note_id)
        if target is None:
            return ToolOutcome({"error": NOTE_NOT_FOUND}, notes, clusters)

        title = args.get("title")
        content = args.get("content")
        changes = {}
        if title:
            changes["title"] = str(title)
        if content:
            changes["content"] = str(content)
        updated = target.with_changes(**changes)
        if changes:
            updated = updated.with_changes(embedding=self._embed_note(updated.title, updated.content))

        new_notes = [updated if n.id == note_id else n for n in notes]
        return ToolOutcome({"success": True, "message": "Note updated."}, new_notes, clusters)

    def _delete_note(self, args, notes, clusters) -> ToolOutcome:
        note_id = args.get("noteId")
        target = find_note(notes, note_id)
        if target is None:
            return ToolOutcome({"error": NOTE_NOT_FOUND}, notes, clusters)

        new_notes = [n for n in notes if n.id != note_id]
        return ToolOutcome(
            {"success": True, "message": f"Note '{target.title}' deleted."}, new_notes, clusters
        )

    def _search_notes(self, args, notes, clusters) -> ToolOutcome:
        query = str(args.get("query") or "")
        query_embedding = self.embedder.embed(query)
        matches = top_matches(query_embedding, notes)

        results = [
            {
                "id": m.note.id,
                "title": m.note.title,
                "snippet": m.note.content[:150],
                "score": m.score,
                "highlyRelevant": m.score > RELEVANT_THRESHOLD,
            }
            for m in matches
        ]
        relevant_count = sum(1 for r in results if r["highlyRelevant"])
        if relevant_count:
            message = (
                f"Found {len(results)} notes. {relevant_count} are highly relevant (score > 0.3). "
                "Use these note IDs with 'ragAnswer' for best results."
            )
        else:
            message = f"Found {len(results)} notes, but none are highly relevant. Consider refining your search query."

        return ToolOutcome({"results": results, "message": message}, notes, clusters)

    def _rag_answer(self, args, notes, clusters) -> ToolOutcome:
        query = str(args.get("query") or "")
        raw_ids = args.get("candidateNoteIds") or []
        if isinstance(raw_ids, str):
            raw_ids = [raw_ids]
        candidate_ids = [str(i) for i in raw_ids]
        candidates = [n for n in notes if n.id in candidate_ids]

        query_embedding = self.embedder.embed(query)
        scores = {n.id: note_score(query_embedding, n) for n in candidates if n.embedding is not None}
        relevant = [n for n in candidates if scores.get(n.id, 0.0) > RELEVANT_THRESHOLD]

        if not relevant:
            return ToolOutcome(
                {"answer": NO_RELEVANT_CANDIDATES_ANSWER, "usedNoteIds": []}, notes, clusters
            )

        result = self.generator.generate_answer(query, relevant, scores)
        return ToolOutcome(result, notes, clusters)

    def _cluster_notes(self, args, notes, clusters) -> ToolOutcome:
        new_clusters = self.generator.generate_clusters(notes)
        return ToolOutcome(
            {"success": True, "clusters": [c.name for c in new_clusters]}, notes, new_clusters
        )

    def _open_note(self, args, notes, clusters) -> ToolOutcome:
        target = find_note(notes, args.get("noteId"))
        if target is None:
            return ToolOutcome({"error": "Note not found"}, notes, clusters)
        return ToolOutcome(
            {"success": True, "message": "Note opened in UI."}, notes, clusters, opened_note_id=target.id
        )

    def _summarize_note(self, args, notes, clusters) -> ToolOutcome:
        target = find_note(notes, args.get("noteId"))
        if target is None:
            return ToolOutcome({"error": "Note not found"}, notes, clusters)
        summary = self.generator.edit_note_content(target.content, SUMMARIZE_INSTRUCTION)
        return ToolOutcome({"summary": summary}, notes, clusters)

    def _rewrite_note(self, args, notes, clusters) -> ToolOutcome:
        note_id = args.get("noteId")
        target = find_note(notes, note_id)
        if target is None:
            return ToolOutcome({"error": "Note not found"}, notes, clusters)

        new_text = self.generator.edit_note_content(target.content, str(args.get("instruction") or ""))
        updated = target.with_changes(
            content=new_text, embedding=self._embed_note(target.title, new_text)
        )
        new_notes = [updated if n.id == note_id else n for n in notes]
        return ToolOutcome({"success": True, "message": "Note rewritten and saved."}, new_notes, clusters)

    def _create_calendar_event(self, args, notes, clusters) -> ToolOutcome:
        if self.calendar is None:
            return ToolOutcome(
                {"success": False, "error": "Calendar is not configured. Sign in to Google Calendar first."},
                notes,
                clusters,
            )
        result = self.calendar.create_event(str(args.get("text") or ""))
        return ToolOutcome(result, notes, clusters)
