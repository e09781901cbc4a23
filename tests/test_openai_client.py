from types import SimpleNamespace

import httpx
import openai
import pytest

from core.api.openai_client import LLMClient, to_chat_messages, to_response_format, translate_error
from core.content.models import (
    ConversationTurn,
    GenerationConfig,
    GenerationRequest,
    InlineDataPart,
    TextPart,
)
from exceptions.exceptions import (
    ImageMissingError,
    PermanentUpstreamError,
    TransientUpstreamError,
)


REQUEST = httpx.Request("POST", "https://upstream.test/v1/chat/completions")


def _status_error(cls, status):
    response = httpx.Response(status, request=REQUEST)
    return cls("upstream said no", response=response, body=None)


def _request(*turns, temperature=0.7):
    return GenerationRequest(
        model="m",
        turns=list(turns),
        config=GenerationConfig(
            system_instruction="be helpful",
            schema_name="DefaultContent",
            response_schema={"type": "object"},
            temperature=temperature,
        ),
    )


class FakeCompletions:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class FakeImages:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    async def generate(self, **kwargs):
        self.calls.append(kwargs)
        return self.outcome


class FakeAsyncOpenAI:
    def __init__(self, completion=None, images=None):
        self.chat = SimpleNamespace(completions=FakeCompletions(completion))
        self.images = FakeImages(images)
        self.closed = False

    async def close(self):
        self.closed = True


def _completion(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def test_rate_limit_and_unavailable_are_transient() -> None:
    err = translate_error(_status_error(openai.RateLimitError, 429))
    assert isinstance(err, TransientUpstreamError)
    assert err.status_code == 429

    err = translate_error(_status_error(openai.InternalServerError, 503))
    assert isinstance(err, TransientUpstreamError)
    assert err.status_code == 503


def test_other_statuses_are_permanent() -> None:
    for cls, status in [
        (openai.AuthenticationError, 401),
        (openai.BadRequestError, 400),
        (openai.InternalServerError, 500),
    ]:
        err = translate_error(_status_error(cls, status))
        assert isinstance(err, PermanentUpstreamError)
        assert err.status_code == status


def test_connection_errors_are_transient() -> None:
    assert isinstance(
        translate_error(openai.APIConnectionError(request=REQUEST)), TransientUpstreamError
    )
    assert isinstance(translate_error(openai.OpenAIError("odd")), PermanentUpstreamError)


def test_chat_messages_map_roles_and_attachments() -> None:
    request = _request(
        ConversationTurn.from_user("earlier"),
        ConversationTurn.from_model('{"title": "x"}'),
        ConversationTurn(
            role="user",
            parts=[
                TextPart(text="look"),
                InlineDataPart(mime_type="image/png", data="QUJD"),
                InlineDataPart(mime_type="application/pdf", data="UERG", filename="a.pdf"),
            ],
        ),
    )

    messages = to_chat_messages(request)

    assert [m["role"] for m in messages] == ["system", "user", "assistant", "user"]
    assert messages[0]["content"] == "be helpful"
    assert messages[2]["content"] == '{"title": "x"}'
    last = messages[3]["content"]
    assert last[0] == {"type": "text", "text": "look"}
    assert last[1]["image_url"]["url"] == "data:image/png;base64,QUJD"
    assert last[2]["file"] == {"filename": "a.pdf", "file_data": "data:application/pdf;base64,UERG"}


def test_text_attachments_are_inlined_as_text() -> None:
    request = _request(
        ConversationTurn(
            role="user",
            parts=[
                TextPart(text="summarize"),
                InlineDataPart(mime_type="text/plain", data="aGVsbG8gd29ybGQ=", filename="notes.txt"),
            ],
        )
    )

    content = to_chat_messages(request)[1]["content"]

    assert content[1]["type"] == "text"
    assert "notes.txt" in content[1]["text"]
    assert content[1]["text"].endswith("hello world")
    assert not any(part["type"] == "file" for part in content)


def test_response_format_is_strict_json_schema() -> None:
    fmt = to_response_format(_request(ConversationTurn.from_user("hi")))
    assert fmt["type"] == "json_schema"
    assert fmt["json_schema"]["name"] == "DefaultContent"
    assert fmt["json_schema"]["strict"] is True


@pytest.mark.asyncio
async def test_generate_structured_returns_text() -> None:
    fake = FakeAsyncOpenAI(completion=_completion('{"a": 1}'))
    client = LLMClient(client=fake, image_model="gpt-image-1")

    text = await client.generate_structured(_request(ConversationTurn.from_user("hi")))

    assert text == '{"a": 1}'
    call = fake.chat.completions.calls[0]
    assert call["model"] == "m"
    assert call["temperature"] == 0.7


@pytest.mark.asyncio
async def test_temperature_omitted_when_unset() -> None:
    fake = FakeAsyncOpenAI(completion=_completion("{}"))
    client = LLMClient(client=fake, image_model="gpt-image-1")

    await client.generate_structured(_request(ConversationTurn.from_user("hi"), temperature=None))

    assert "temperature" not in fake.chat.completions.calls[0]


@pytest.mark.asyncio
async def test_generate_structured_translates_sdk_errors() -> None:
    fake = FakeAsyncOpenAI(completion=_status_error(openai.RateLimitError, 429))
    client = LLMClient(client=fake, image_model="gpt-image-1")

    with pytest.raises(TransientUpstreamError):
        await client.generate_structured(_request(ConversationTurn.from_user("hi")))


@pytest.mark.asyncio
async def test_generate_image_returns_base64() -> None:
    fake = FakeAsyncOpenAI(images=SimpleNamespace(data=[SimpleNamespace(b64_json="aW1n")]))
    client = LLMClient(client=fake, image_model="dall-e-3")

    assert await client.generate_image("a fox") == "aW1n"
    assert fake.images.calls[0]["response_format"] == "b64_json"


@pytest.mark.asyncio
async def test_generate_image_without_data_raises() -> None:
    fake = FakeAsyncOpenAI(images=SimpleNamespace(data=[]))
    client = LLMClient(client=fake, image_model="gpt-image-1")

    with pytest.raises(ImageMissingError):
        await client.generate_image("a fox")


@pytest.mark.asyncio
async def test_close_closes_underlying_client() -> None:
    fake = FakeAsyncOpenAI()
    await LLMClient(client=fake, image_model="gpt-image-1").close()
    assert fake.closed
