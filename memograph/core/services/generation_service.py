import json
import logging
from typing import Dict, List, Optional

from memograph.core.domain.note import Cluster, Note, now_millis
from memograph.core.domain.similarity import HIGH_RELEVANCE_THRESHOLD, RELEVANT_THRESHOLD
from memograph.core.errors import ProviderError
from memograph.core.interfaces.ports import ILLMProvider
from memograph.core.services.prompts import (
    CLUSTER_PROMPT,
    CLUSTER_RESPONSE_SCHEMA,
    NO_RELEVANT_NOTES_ANSWER,
    RAG_ANSWER_PROMPT,
    REWRITE_PROMPT,
    SYSTEM_INSTRUCTION_RAG,
    format_context_notes,
    parse_cluster_response,
)

logger = logging.getLogger(__name__)


class GenerationService:
    """
    Single-shot LLM helpers used by the agent tools: grounded answers,
    clustering and note rewriting. Failures degrade to fallback values.
    """

    def __init__(self, llm: ILLMProvider):
        self.llm = llm

    def generate_answer(
        self,
        query: str,
        context_notes: List[Note],
        relevance_scores: Optional[Dict[str, float]] = None,
    ) -> Dict[str, object]:
        relevant = context_notes
        if relevance_scores:
            relevant = [n for n in context_notes if relevance_scores.get(n.id, 0.0) > RELEVANT_THRESHOLD]

        if not relevant:
            return {"answer": NO_RELEVANT_NOTES_ANSWER, "usedNoteIds": []}

        prompt = RAG_ANSWER_PROMPT.format(
            system_instruction=SYSTEM_INSTRUCTION_RAG.strip(),
            query=query,
            context_text=format_context_notes(relevant, relevance_scores),
        )

        try:
            answer = self.llm.generate(prompt)
        except ProviderError as e:
            logger.error("Answer generation failed: %s", e)
            return {"answer": "Error generating answer.", "usedNoteIds": []}

        used = relevant
        if relevance_scores:
            high = [n for n in relevant if relevance_scores.get(n.id, 0.0) >= HIGH_RELEVANCE_THRESHOLD]
            if high:
                used = high
            else:
                used = sorted(relevant, key=lambda n: relevance_scores.get(n.id, 0.0), reverse=True)[:3]

        return {
            "answer": answer or "No answer generated.",
            "usedNoteIds": [n.id for n in used],
        }

    def generate_clusters(self, notes: List[Note]) -> List[Cluster]:
        if not notes:
            return []

        notes_data = [{"id": n.id, "content": f"{n.title}: {n.content[:100]}"} for n in notes]
        prompt = CLUSTER_PROMPT.format(notes_json=json.dumps(notes_data, ensure_ascii=False))

        try:
            response = self.llm.generate(prompt, json_mode=True, response_schema=CLUSTER_RESPONSE_SCHEMA)
            raw_clusters = parse_cluster_response(response)
        except (ProviderError, ValueError) as e:
            logger.warning("Clustering failed, keeping no clusters: %s", e)
            return []

        stamp = now_millis()
        return [
            Cluster(id=f"cluster-{idx}-{stamp}", name=c["name"], note_ids=c["noteIds"])
            for idx, c in enumerate(raw_clusters)
        ]

    def edit_note_content(self, current_content: str, instruction: str) -> str:
        prompt = REWRITE_PROMPT.format(instruction=instruction, content=current_content)
        try:
            return self.llm.generate(prompt) or current_content
        except ProviderError as e:
            logger.error("Note edit failed: %s", e)
            return current_content
