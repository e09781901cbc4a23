"""Shared fixtures: a scripted fake LLM client, a session store, a ContentAgent."""

import json
from pathlib import Path
from typing import List, Union

import pytest

from core.api.retry import RetryPolicy
from core.content.models import Attachment
from runtime.agents.content_agent import ContentAgent
from runtime.store.session_store import InMemorySessionStore


QUIZ_JSON = json.dumps(
    {
        "title": "Photosynthesis",
        "questions": [
            {
                "questionNumber": 1,
                "question": "What gas do plants absorb?",
                "choices": ["Oxygen", "Carbon dioxide", "Nitrogen"],
                "correctAnswer": "Carbon dioxide",
            }
        ],
    }
)

DEFAULT_JSON = json.dumps({"title": "T", "summary": "S", "content": "C"})

DOCUMENT_JSON = json.dumps(
    {
        "title": "Solar power",
        "summary": "Overview",
        "sections": [{"heading": "Intro", "content": "Sunlight."}],
        "keyTakeaways": ["Cheap"],
    }
)

PRESENTATION_JSON = json.dumps(
    {
        "title": "Cells",
        "slides": [
            {
                "slideNumber": 1,
                "heading": "What is a cell?",
                "bulletPoints": ["Basic unit of life", "Bounded by a membrane"],
                "speakerNotes": "Start with a microscope image.",
            }
        ],
    }
)


class FakeLLMClient:
    """Returns (or raises) scripted outcomes in order and records every request."""

    def __init__(self, outcomes: List[Union[str, Exception]] = None, image: str = "aW1n"):
        self.outcomes = list(outcomes or [])
        self.image = image
        self.requests = []
        self.image_prompts = []

    async def generate_structured(self, request):
        self.requests.append(request)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def generate_image(self, prompt):
        self.image_prompts.append(prompt)
        if isinstance(self.image, Exception):
            raise self.image
        return self.image


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def session_store():
    return InMemorySessionStore(capacity=10, ttl_seconds=None)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def agent(fake_llm, session_store, recording_sleep):
    return ContentAgent(
        llm_client=fake_llm,
        session_store=session_store,
        model="test-model",
        temperature=0.7,
        retry_policy=RetryPolicy(max_attempts=5, base_delay=2.0),
        retry_sleep=recording_sleep,
    )


@pytest.fixture
def make_attachment(tmp_path: Path):
    def _make(name="notes.pdf", media_type="application/pdf", data=b"%PDF-1.4 test"):
        path = tmp_path / f"staged-{name}"
        path.write_bytes(data)
        return Attachment(staging_path=str(path), media_type=media_type, original_name=name)

    return _make
