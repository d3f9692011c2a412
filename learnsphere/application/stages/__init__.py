from learnsphere.application.stages.adapt import AdaptStage
from learnsphere.application.stages.audio_script import AudioScriptStage
from learnsphere.application.stages.base import GenerationStage, RunState, acquire_capability
from learnsphere.application.stages.concept_map import ConceptMapStage
from learnsphere.application.stages.quiz import QuizStage
from learnsphere.application.stages.summarize import SummarizeStage


def default_stages() -> list[GenerationStage]:
    """The five generation stages in pipeline order."""
    return [SummarizeStage(), AdaptStage(), ConceptMapStage(), AudioScriptStage(), QuizStage()]


__all__ = [
    "AdaptStage",
    "AudioScriptStage",
    "ConceptMapStage",
    "GenerationStage",
    "QuizStage",
    "RunState",
    "SummarizeStage",
    "acquire_capability",
    "default_stages",
]
