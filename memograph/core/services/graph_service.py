from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence

from memograph.core.domain.note import Cluster, Note
from memograph.core.domain.similarity import GRAPH_EDGE_THRESHOLD, cosine_similarity

UNCLUSTERED = "unclustered"


@dataclass
class GraphNode:
    id: str
    group: str
    type: str  # cluster | note
    label: str


@dataclass
class GraphLink:
    source: str
    target: str
    type: str  # cluster | semantic
    value: float


@dataclass
class SemanticGraph:
    nodes: List[GraphNode]
    links: List[GraphLink]

    def semantic_links(self) -> List[GraphLink]:
        return [l for l in self.links if l.type == "semantic"]

    def to_node_link(self) -> Dict[str, Any]:
        """Node-link data for a force-directed renderer."""
        return {
            "nodes": [asdict(n) for n in self.nodes],
            "links": [asdict(l) for l in self.links],
        }


def _cluster_for(note: Note, clusters: Sequence[Cluster]) -> Optional[Cluster]:
    for cluster in clusters:
        if note.id in cluster.note_ids:
            return cluster
    return None


def build_graph(
    notes: Sequence[Note],
    clusters: Sequence[Cluster],
    threshold: float = GRAPH_EDGE_THRESHOLD,
) -> SemanticGraph:
    """
    Builds cluster hubs, note nodes, note->cluster links and semantic links
    between every pair of notes whose similarity is strictly above `threshold`.
    Cluster entries pointing at deleted notes are ignored.
    """
    nodes = [GraphNode(id=c.id, group=c.id, type="cluster", label=c.name) for c in clusters]
    links: List[GraphLink] = []

    for note in notes:
        cluster = _cluster_for(note, clusters)
        nodes.append(GraphNode(
            id=note.id,
            group=cluster.id if cluster else UNCLUSTERED,
            type="note",
            label=note.title,
        ))
        if cluster:
            links.append(GraphLink(source=note.id, target=cluster.id, type="cluster", value=1.0))

    for i, first in enumerate(notes):
        if not first.embedding:
            continue
        for second in notes[i + 1:]:
            if not second.embedding:
                continue
            sim = cosine_similarity(first.embedding, second.embedding)
            if sim > threshold:
                links.append(GraphLink(source=first.id, target=second.id, type="semantic", value=sim))

    return SemanticGraph(nodes=nodes, links=links)
