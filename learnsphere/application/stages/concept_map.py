from __future__ import annotations

from typing import Any, Dict, Optional

from learnsphere.application.stages.base import GenerationStage, RunState
from learnsphere.core.settings import settings
from learnsphere.domain.generation import PipelineStep
from learnsphere.domain.interfaces.capability_registry import CapabilityKind
from learnsphere.domain.materials import (
    ConceptEdge,
    ConceptMap,
    ConceptNode,
    GenerationMetadata,
)
from learnsphere.domain.policies.personalization import (
    build_context,
    extract_concepts,
    generation_options,
)

ROOT_NODE_ID = "concept_0"
FALLBACK_ROOT_LABEL = "Main Topic"


def build_concept_tree(
    text: str, outline: str, metadata: GenerationMetadata, max_concepts: int
) -> ConceptMap:
    """
    Star-shaped tree: the most frequent concept is the root, every other
    concept hangs off it through one hierarchical edge.
    """
    concepts = extract_concepts(text, max_concepts)
    if not concepts:
        root = ConceptNode(
            id=ROOT_NODE_ID,
            label=FALLBACK_ROOT_LABEL,
            level=0,
            category="main_topic",
            importance=10,
        )
        return ConceptMap(nodes=[root], edges=[], root_node_id=root.id, outline=outline, metadata=metadata)

    nodes: list[ConceptNode] = []
    edges: list[ConceptEdge] = []
    for rank, term in enumerate(concepts):
        is_root = rank == 0
        node = ConceptNode(
            id=f"concept_{rank}",
            label=term.capitalize(),
            description=f"Key concept: {term}",
            level=0 if is_root else 1,
            category="main_topic" if is_root else "subtopic",
            importance=10 if is_root else max(1, 10 - rank),
        )
        nodes.append(node)
        if not is_root:
            edges.append(
                ConceptEdge(
                    id=f"edge_{rank}",
                    source_id=ROOT_NODE_ID,
                    target_id=node.id,
                    relationship="contains",
                    weight=node.importance,
                    type="hierarchical",
                )
            )
    return ConceptMap(nodes=nodes, edges=edges, root_node_id=ROOT_NODE_ID, outline=outline, metadata=metadata)


class ConceptMapStage(GenerationStage):
    step = PipelineStep.CONCEPT_MAP
    kind = CapabilityKind.EXTRACT_STRUCTURE

    def __init__(self, max_concepts: Optional[int] = None, input_max_chars: Optional[int] = None):
        self.max_concepts = max_concepts or settings.CONCEPT_MAP_MAX_CONCEPTS
        self.input_max_chars = input_max_chars or settings.EXTRACT_STRUCTURE_INPUT_MAX_CHARS

    def build_options(self, state: RunState) -> Dict[str, Any]:
        return generation_options(state.preferences, max_concepts=self.max_concepts)

    def build_context(self, state: RunState) -> str:
        return build_context(
            state.preferences, "Outline the main concepts and how they relate in this content"
        )

    def build_input(self, state: RunState) -> str:
        return state.adapted_text[: self.input_max_chars]

    def parse(self, raw: str, state: RunState, metadata: GenerationMetadata) -> ConceptMap:
        return build_concept_tree(state.adapted_text, raw.strip(), metadata, self.max_concepts)
