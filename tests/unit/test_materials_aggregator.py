from __future__ import annotations

from datetime import datetime, timezone

import pytest

from learnsphere.application.services.materials_aggregator import MaterialsAggregator
from learnsphere.application.stages import default_stages
from learnsphere.application.stages.base import RunState
from learnsphere.domain.generation import PipelineStep
from learnsphere.domain.materials import GenerationMetadata
from tests.support.fake_capabilities import DEFAULT_OUTPUTS, SAMPLE_TEXT, make_preferences


def _outputs() -> dict:
    prefs = make_preferences()
    state = RunState(source_text=SAMPLE_TEXT, preferences=prefs)
    metadata = GenerationMetadata(
        generated_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        processing_time_ms=2.5,
        grade_level=prefs.grade_level,
        interest=prefs.interest,
    )
    for stage in default_stages():
        state.outputs[stage.step] = stage.parse(DEFAULT_OUTPUTS[stage.kind], state, metadata)
    return state.outputs


def test_assemble_bundles_every_artifact() -> None:
    outputs = _outputs()
    generated_at = datetime(2026, 2, 1, tzinfo=timezone.utc)

    materials = MaterialsAggregator(schema_version="9.9.9").assemble(
        outputs, processing_time_ms=12.0, generated_at=generated_at
    )

    assert materials.summary is outputs[PipelineStep.SUMMARIZE]
    assert materials.quiz is outputs[PipelineStep.QUIZ]
    assert materials.processing_time_ms == 12.0
    assert materials.generated_at == generated_at
    assert materials.schema_version == "9.9.9"


def test_assemble_rejects_missing_outputs() -> None:
    outputs = _outputs()
    outputs.pop(PipelineStep.AUDIO_SCRIPT)

    with pytest.raises(ValueError, match="audio_script"):
        MaterialsAggregator().assemble(outputs, processing_time_ms=1.0)


def test_assemble_rejects_mismatched_outputs() -> None:
    outputs = _outputs()
    outputs[PipelineStep.QUIZ] = outputs[PipelineStep.SUMMARIZE]

    with pytest.raises(ValueError, match="must be Quiz"):
        MaterialsAggregator().assemble(outputs, processing_time_ms=1.0)
