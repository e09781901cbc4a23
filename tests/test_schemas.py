import json

import pytest

from core.content.classifier import ContentType
from core.content.schemas import (
    CONTENT_SPECS,
    DEFAULT_QUESTION_COUNT,
    QuizContent,
    extract_question_count,
    parse_content_types,
    parse_generated,
    resolve,
)
from exceptions.exceptions import MalformedModelOutputError

from conftest import QUIZ_JSON


def test_quiz_count_extracted_from_prompt() -> None:
    assert extract_question_count("Make a quiz with 15 questions") == 15
    assert extract_question_count("quiz, 3 Question max") == 3


def test_quiz_count_defaults_to_twenty() -> None:
    assert extract_question_count("Make a quiz") == DEFAULT_QUESTION_COUNT == 20


def test_quiz_instruction_is_parameterized() -> None:
    resolved = resolve(ContentType.QUIZ, "Make a quiz with 15 questions")
    assert "exactly 15 questions" in resolved.system_instruction
    assert resolved.schema_name == "QuizContent"


def test_every_content_type_resolves() -> None:
    for content_type in ContentType:
        resolved = resolve(content_type, "anything")
        assert resolved.content_type is content_type
        assert resolved.system_instruction
        assert resolved.json_schema["type"] == "object"
    assert set(CONTENT_SPECS) == set(ContentType)


def test_json_schema_is_strict() -> None:
    schema = resolve(ContentType.QUIZ, "quiz").json_schema
    assert schema["additionalProperties"] is False
    assert set(schema["required"]) == {"title", "questions"}
    question = schema["$defs"]["QuizQuestion"]
    assert set(question["required"]) == {"questionNumber", "question", "choices", "correctAnswer"}


def test_parse_valid_quiz() -> None:
    resolved = resolve(ContentType.QUIZ, "quiz")
    result = parse_generated(resolved, QUIZ_JSON)

    assert isinstance(result, QuizContent)
    for question in result.questions:
        assert question.questionNumber >= 1
        assert question.question
        assert question.choices
        assert isinstance(question.correctAnswer, str)


def test_parse_strips_code_fences() -> None:
    resolved = resolve(ContentType.DEFAULT, "hi")
    text = "```json\n" + json.dumps({"title": "a", "summary": "b", "content": "c"}) + "\n```"
    assert parse_generated(resolved, text).title == "a"


def test_invalid_json_is_malformed_output() -> None:
    resolved = resolve(ContentType.LECTURE, "lecture")
    with pytest.raises(MalformedModelOutputError) as excinfo:
        parse_generated(resolved, "{not json")
    assert excinfo.value.label == "lecture"
    assert excinfo.value.schema_name == "LectureContent"
    assert excinfo.value.raw_text == "{not json"


def test_missing_field_is_malformed_output() -> None:
    resolved = resolve(ContentType.DEFAULT, "hi")
    with pytest.raises(MalformedModelOutputError):
        parse_generated(resolved, json.dumps({"title": "only"}))


def test_empty_choices_rejected() -> None:
    resolved = resolve(ContentType.QUIZ, "quiz")
    bad = {
        "title": "t",
        "questions": [
            {"questionNumber": 1, "question": "q", "choices": [], "correctAnswer": "a"}
        ],
    }
    with pytest.raises(MalformedModelOutputError):
        parse_generated(resolved, json.dumps(bad))


def test_parse_content_types_always_includes_default() -> None:
    assert parse_content_types(["presentation"]) == {
        ContentType.PRESENTATION,
        ContentType.DEFAULT,
    }
    with pytest.raises(ValueError):
        parse_content_types(["poem"])
