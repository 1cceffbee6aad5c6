"""
Cosine similarity and the ranking helpers built on it.

Thresholds:
- GRAPH_EDGE_THRESHOLD: two notes are connected in the semantic graph (strict >)
- RELATED_THRESHOLD: a note shows up as "related" to another
- SEARCH_FLOOR / SEARCH_LIMIT: search candidates
- RELEVANT_THRESHOLD: note may be used as context for an answer
- HIGH_RELEVANCE_THRESHOLD: note is cited as a source of an answer
"""

from typing import List, Optional, Sequence

import numpy as np

from memograph.core.domain.note import Note, SearchResult

GRAPH_EDGE_THRESHOLD = 0.65
RELATED_THRESHOLD = 0.65
RELATED_LIMIT = 3
SEARCH_FLOOR = 0.05
SEARCH_LIMIT = 5
RELEVANT_THRESHOLD = 0.3
HIGH_RELEVANCE_THRESHOLD = 0.5


def cosine_similarity(vec_a: Optional[Sequence[float]], vec_b: Optional[Sequence[float]]) -> float:
    if vec_a is None or vec_b is None:
        return 0.0
    if len(vec_a) == 0 or len(vec_a) != len(vec_b):
        return 0.0

    a = np.asarray(vec_a, dtype=np.float64)
    b = np.asarray(vec_b, dtype=np.float64)
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    score = float(np.dot(a, b) / (norm_a * norm_b))
    return max(-1.0, min(1.0, score))


def note_score(query_embedding: Optional[Sequence[float]], note: Note) -> float:
    if not note.embedding:
        return 0.0
    return cosine_similarity(query_embedding, note.embedding)


def rank_notes(query_embedding: Optional[Sequence[float]], notes: List[Note]) -> List[SearchResult]:
    """Scores every note against the query, highest first (stable for ties)."""
    results = [SearchResult(note=n, score=note_score(query_embedding, n)) for n in notes]
    return sorted(results, key=lambda r: r.score, reverse=True)


def top_matches(
    query_embedding: Optional[Sequence[float]],
    notes: List[Note],
    floor: float = SEARCH_FLOOR,
    limit: int = SEARCH_LIMIT,
) -> List[SearchResult]:
    ranked = rank_notes(query_embedding, notes)
    return [r for r in ranked if r.score > floor][:limit]


def related_notes(note: Note, notes: List[Note], limit: int = RELATED_LIMIT) -> List[SearchResult]:
    """Other notes whose similarity to `note` is above RELATED_THRESHOLD."""
    if not note.embedding:
        return []
    others = [n for n in notes if n.id != note.id]
    ranked = rank_notes(note.embedding, others)
    return [r for r in ranked if r.score > RELATED_THRESHOLD][:limit]
