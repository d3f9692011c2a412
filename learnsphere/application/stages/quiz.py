from __future__ import annotations

import math
import re
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import structlog

from learnsphere.application.stages.base import GenerationStage, RunState
from learnsphere.core.settings import settings
from learnsphere.domain.generation import PipelineStep
from learnsphere.domain.interfaces.capability_registry import CapabilityKind
from learnsphere.domain.materials import (
    GenerationMetadata,
    Quiz,
    QuizDifficulty,
    QuizOption,
    QuizQuestion,
)
from learnsphere.domain.policies.personalization import (
    build_context,
    generation_options,
    quiz_difficulty_for,
)

logger = structlog.get_logger(__name__)

OPTION_LETTERS = ("A", "B", "C", "D")
QUESTION_TIME_LIMIT_SECONDS = 60

_QUESTION_RE = re.compile(r"^\s*(?:\d+[.)]\s*)?Question\s*\d*\s*[:.]\s*(.+)$", re.IGNORECASE)
_OPTION_RE = re.compile(r"^\s*([A-Da-d])\s*[).:]\s*(.+)$")
_ANSWER_RE = re.compile(r"^\s*(?:Correct\s+)?Answer\s*[:.]\s*\(?([A-Da-d])\b", re.IGNORECASE)
_EXPLANATION_RE = re.compile(r"^\s*Explanation\s*[:.]\s*(.+)$", re.IGNORECASE)

_FALLBACK_DISTRACTORS = (
    "An unrelated detail",
    "A topic the content does not cover",
    "None of the ideas in the content",
)


@dataclass
class ParsedQuestion:
    question: str
    options: List[str]
    answer_index: int
    explanation: str = ""


def parse_questions(raw: str) -> List[ParsedQuestion]:
    """
    Reads `Question:` / `A)`..`D)` / `Answer: X` blocks.

    Blocks without 3-4 options or without an answer pointing at one of
    them are dropped.
    """
    parsed: List[ParsedQuestion] = []
    question: Optional[str] = None
    options: Dict[str, str] = {}
    answer: Optional[str] = None
    explanation = ""

    def flush() -> None:
        if question is None:
            return
        letters = [letter for letter in OPTION_LETTERS if letter in options]
        if not 3 <= len(letters) <= 4 or letters != list(OPTION_LETTERS[: len(letters)]):
            return
        if answer is None or answer not in letters:
            return
        parsed.append(
            ParsedQuestion(
                question=question,
                options=[options[letter] for letter in letters],
                answer_index=letters.index(answer),
                explanation=explanation,
            )
        )

    for line in (raw or "").splitlines():
        if match := _QUESTION_RE.match(line):
            flush()
            question, options, answer, explanation = match.group(1).strip(), {}, None, ""
        elif question is None:
            continue
        elif match := _ANSWER_RE.match(line):
            answer = match.group(1).upper()
        elif match := _EXPLANATION_RE.match(line):
            explanation = match.group(1).strip()
        elif match := _OPTION_RE.match(line):
            options.setdefault(match.group(1).upper(), match.group(2).strip())
    flush()
    return parsed


def _build_question(
    index: int,
    parsed: ParsedQuestion,
    difficulty: QuizDifficulty,
    points: int,
    category: str,
) -> QuizQuestion:
    question_id = f"q{index + 1}"
    options = [
        QuizOption(
            id=f"{question_id}_{OPTION_LETTERS[position].lower()}",
            text=text,
            is_correct=position == parsed.answer_index,
        )
        for position, text in enumerate(parsed.options)
    ]
    return QuizQuestion(
        id=question_id,
        question=parsed.question,
        options=options,
        correct_option_id=options[parsed.answer_index].id,
        explanation=parsed.explanation,
        points=points,
        category=category,
        difficulty=difficulty,
        time_limit_seconds=QUESTION_TIME_LIMIT_SECONDS,
    )


def fallback_question(index: int, concept_labels: List[str]) -> ParsedQuestion:
    """Deterministic four-option question about one concept."""
    labels = concept_labels or ["Main Topic"]
    correct = labels[index % len(labels)]

    distractors: List[str] = []
    for candidate in _FALLBACK_DISTRACTORS:
        if candidate != correct and candidate not in distractors:
            distractors.append(candidate)

    answer_index = index % len(OPTION_LETTERS)
    options = list(distractors[: len(OPTION_LETTERS) - 1])
    options.insert(answer_index, correct)
    return ParsedQuestion(
        question="Which of these is a key concept discussed in the content?",
        options=options,
        answer_index=answer_index,
        explanation=f"'{correct}' is one of the main concepts in the content.",
    )


class QuizStage(GenerationStage):
    step = PipelineStep.QUIZ
    kind = CapabilityKind.AUTHOR_QUESTIONS

    def __init__(self, question_count: Optional[int] = None, input_max_chars: Optional[int] = None):
        self.question_count = question_count or settings.QUIZ_QUESTION_COUNT
        self.input_max_chars = input_max_chars or settings.QUIZ_INPUT_MAX_CHARS

    def build_options(self, state: RunState) -> Dict[str, Any]:
        difficulty, _ = quiz_difficulty_for(state.preferences.complexity)
        return generation_options(
            state.preferences,
            question_count=self.question_count,
            difficulty=difficulty,
            format="multiple-choice",
        )

    def build_context(self, state: RunState) -> str:
        task = (
            f"Write {self.question_count} multiple-choice questions, each with options "
            "A) to D), an 'Answer: X' line and an 'Explanation:' line, about this content"
        )
        return build_context(state.preferences, task)

    def build_input(self, state: RunState) -> str:
        return state.source_text[: self.input_max_chars]

    def parse(self, raw: str, state: RunState, metadata: GenerationMetadata) -> Quiz:
        difficulty, points = quiz_difficulty_for(state.preferences.complexity)
        parsed = parse_questions(raw)[: self.question_count]
        authored = len(parsed)

        if authored < self.question_count:
            concept_map = state.concept_map
            labels = [node.label for node in concept_map.nodes] if concept_map else []
            logger.info(
                "quiz_fallback_questions_used",
                authored=authored,
                missing=self.question_count - authored,
            )
            parsed.extend(
                fallback_question(index, labels) for index in range(authored, self.question_count)
            )

        questions = [
            _build_question(
                index,
                item,
                difficulty,
                points,
                "comprehension" if index < authored else "recall",
            )
            for index, item in enumerate(parsed)
        ]
        total_seconds = sum(q.time_limit_seconds or 0 for q in questions)
        return Quiz(
            id=f"quiz_{uuid.uuid4().hex[:12]}",
            questions=questions,
            total_points=sum(q.points for q in questions),
            time_estimate_minutes=max(1, math.ceil(total_seconds / 60)),
            difficulty=state.preferences.grade_level,
            metadata=metadata,
        )
