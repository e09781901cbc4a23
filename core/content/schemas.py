"""
Schema registry: content type -> (response schema, system instruction).

Every ContentType member has exactly one ContentSpec. The response schema
is a pydantic model; its JSON schema is what the model is constrained to
upstream, and the same model validates what comes back.

    resolved = resolve(ContentType.QUIZ, "Make a quiz with 15 questions")
    resolved.system_instruction   # "... exactly 15 questions ..."
    resolved.json_schema          # strict JSON schema for the request
    parse_generated(resolved, text) -> QuizContent
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Dict, List, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from exceptions.exceptions import MalformedModelOutputError
from core.content.classifier import ContentType
from core.content import prompts


logger = logging.getLogger(__name__)

DEFAULT_QUESTION_COUNT = 20

_QUESTION_COUNT_RE = re.compile(r"(\d+)\s*questions?", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class StrictModel(BaseModel):
    """Every field required, no extra keys (strict structured output)."""

    model_config = ConfigDict(extra="forbid")


class DefaultContent(StrictModel):
    title: str = Field(description="A comprehensive and descriptive title for the content.")
    summary: str = Field(description="A detailed summary of the key points.")
    content: str = Field(
        description="A long-form, detailed body of text, formatted with markdown for readability."
    )


class LessonPlanContent(StrictModel):
    title: str
    gradeLevel: str
    duration: str
    learningObjectives: List[str]
    keyTerms: List[str]
    hookIntroduction: str = Field(
        description="A detailed and engaging opening to capture student interest."
    )
    mainActivity: str = Field(
        description="A comprehensive description of the main learning activity."
    )
    assessment: str = Field(description="A detailed description of the assessment method.")


class AssignmentContent(StrictModel):
    title: str
    instructions: str = Field(
        description="A long-form, step-by-step set of instructions for the assignment."
    )
    submissionCriteria: str = Field(description="A detailed list of all submission requirements.")
    rubric: str = Field(
        description="A comprehensive grading rubric, detailing all criteria for success."
    )


class QuizQuestion(StrictModel):
    questionNumber: int
    question: str
    choices: List[str]
    correctAnswer: str

    @field_validator("choices")
    @classmethod
    def _choices_not_empty(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("choices must contain at least one entry")
        return value


class QuizContent(StrictModel):
    title: str
    questions: List[QuizQuestion]


class LectureContent(StrictModel):
    title: str
    duration: str
    keyConcepts: List[str]
    script: str = Field(
        description=(
            "A detailed, comprehensive, long-form lecture script formatted with "
            "markdown, suitable for the specified duration."
        )
    )


class Slide(StrictModel):
    slideNumber: int
    heading: str
    bulletPoints: List[str]
    speakerNotes: str


class PresentationContent(StrictModel):
    title: str
    slides: List[Slide]


class DocumentSection(StrictModel):
    heading: str
    content: str = Field(description="Section body formatted with markdown.")


class DocumentContent(StrictModel):
    title: str
    summary: str
    sections: List[DocumentSection]
    keyTakeaways: List[str]


# ---------------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------------


def extract_question_count(prompt: str) -> int:
    """First integer right before "question(s)" in the prompt, else 20."""
    match = _QUESTION_COUNT_RE.search(prompt)
    return int(match.group(1)) if match else DEFAULT_QUESTION_COUNT


def _fixed(instruction: str) -> Callable[[str], str]:
    return lambda _prompt: instruction


def _quiz_instruction(prompt: str) -> str:
    return prompts.INSTRUCTION_QUIZ.format(question_count=extract_question_count(prompt))


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ContentSpec:
    """Static description of one content type."""

    content_type: ContentType
    response_model: Type[StrictModel]
    instruction: Callable[[str], str]

    @property
    def schema_name(self) -> str:
        return self.response_model.__name__


@dataclass(frozen=True)
class ResolvedContent:
    """A ContentSpec bound to one prompt (instruction parameters filled in)."""

    spec: ContentSpec
    system_instruction: str

    @property
    def content_type(self) -> ContentType:
        return self.spec.content_type

    @property
    def schema_name(self) -> str:
        return self.spec.schema_name

    @property
    def json_schema(self) -> Dict[str, Any]:
        return _json_schema(self.spec.response_model)


CONTENT_SPECS: Dict[ContentType, ContentSpec] = {
    ContentType.LESSON_PLAN: ContentSpec(
        ContentType.LESSON_PLAN, LessonPlanContent, _fixed(prompts.INSTRUCTION_LESSON_PLAN)
    ),
    ContentType.ASSIGNMENT: ContentSpec(
        ContentType.ASSIGNMENT, AssignmentContent, _fixed(prompts.INSTRUCTION_ASSIGNMENT)
    ),
    ContentType.QUIZ: ContentSpec(ContentType.QUIZ, QuizContent, _quiz_instruction),
    ContentType.LECTURE: ContentSpec(
        ContentType.LECTURE, LectureContent, _fixed(prompts.INSTRUCTION_LECTURE)
    ),
    ContentType.PRESENTATION: ContentSpec(
        ContentType.PRESENTATION, PresentationContent, _fixed(prompts.INSTRUCTION_PRESENTATION)
    ),
    ContentType.DOCUMENT: ContentSpec(
        ContentType.DOCUMENT, DocumentContent, _fixed(prompts.INSTRUCTION_DOCUMENT)
    ),
    ContentType.DEFAULT: ContentSpec(
        ContentType.DEFAULT, DefaultContent, _fixed(prompts.INSTRUCTION_DEFAULT)
    ),
}

_missing = set(ContentType) - set(CONTENT_SPECS)
if _missing:
    raise RuntimeError(
        "No ContentSpec registered for: " + ", ".join(sorted(t.value for t in _missing))
    )


@lru_cache(maxsize=None)
def _json_schema(model: Type[StrictModel]) -> Dict[str, Any]:
    return model.model_json_schema()


def resolve(content_type: ContentType, prompt: str) -> ResolvedContent:
    """Return schema + system instruction for `content_type` and `prompt`."""
    spec = CONTENT_SPECS[content_type]
    return ResolvedContent(spec=spec, system_instruction=spec.instruction(prompt))


def parse_content_types(labels) -> frozenset:
    """Map raw labels (e.g. from settings) onto ContentType; DEFAULT is always added."""
    types = {ContentType.DEFAULT}
    for label in labels:
        try:
            types.add(ContentType(label))
        except ValueError as e:
            raise ValueError(f"Unknown content type label: {label!r}") from e
    return frozenset(types)


# ---------------------------------------------------------------------------
# Output parsing
# ---------------------------------------------------------------------------


def _extract_json_from_text(text: str) -> str:
    """Strip Markdown code fences around a JSON body, if present."""
    text = text.strip()
    if text.startswith("```"):
        lines = text.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].startswith("```"):
            lines = lines[:-1]
        text = "\n".join(lines).strip()
    return text


def parse_generated(resolved: ResolvedContent, raw_text: str) -> StrictModel:
    """Parse model text as JSON and validate it against the resolved schema.

    Raises
    ------
    MalformedModelOutputError
        If the text is not JSON or does not satisfy the schema.
    """
    label = resolved.content_type.value
    try:
        data = json.loads(_extract_json_from_text(raw_text or ""))
    except json.JSONDecodeError as e:
        logger.error(
            "Model output is not valid JSON (label=%s, schema=%s): %s",
            label,
            resolved.schema_name,
            e,
        )
        raise MalformedModelOutputError(label, resolved.schema_name, str(e), raw_text) from e

    try:
        return resolved.spec.response_model.model_validate(data)
    except ValidationError as e:
        logger.error(
            "Model output failed schema validation (label=%s, schema=%s): %s",
            label,
            resolved.schema_name,
            e,
        )
        raise MalformedModelOutputError(label, resolved.schema_name, str(e), raw_text) from e
