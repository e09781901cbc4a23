"""
core.api.openai_client

Thin async wrapper around an OpenAI-compatible API for content generation.

Used by:
  - runtime/agents/content_agent.py (structured content + images)

Any OpenAI-compatible endpoint works; point OPENAI_BASE_URL at e.g.
Gemini's OpenAI compatibility layer to use Gemini models.

Attachments: image/* goes out as an `image_url` part and text/* is
decoded (UTF-8) into a text part. Anything else is sent as a `file`
part; many compatible endpoints only accept PDFs there and reject other
media types with a 400 (PermanentUpstreamError).

SDK failures never leave this module raw: they are translated into
TransientUpstreamError (429, 503, connection/timeouts) or
PermanentUpstreamError (everything else) so the retry loop can tell
them apart.
"""

from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI, OpenAIError

from configs.settings import settings
from core.content.models import ConversationTurn, GenerationRequest, InlineDataPart, TextPart
from exceptions.exceptions import (
    ImageMissingError,
    PermanentUpstreamError,
    TransientUpstreamError,
    UpstreamError,
)


TRANSIENT_STATUS_CODES = frozenset({429, 503})


# -------------------------------------------------------------------
# Internal helpers
# -------------------------------------------------------------------


def translate_error(error: OpenAIError) -> UpstreamError:
    """Map an SDK exception onto the upstream error taxonomy."""
    if isinstance(error, openai.APIStatusError):
        status = error.status_code
        if status in TRANSIENT_STATUS_CODES:
            return TransientUpstreamError(str(error), status_code=status)
        return PermanentUpstreamError(str(error), status_code=status)

    # APITimeoutError is a subclass of APIConnectionError.
    if isinstance(error, openai.APIConnectionError):
        return TransientUpstreamError(str(error))

    return PermanentUpstreamError(str(error))


def _data_url(part: InlineDataPart) -> str:
    return f"data:{part.mime_type};base64,{part.data}"


def _text_attachment(part: InlineDataPart) -> Dict[str, Any]:
    body = base64.b64decode(part.data).decode("utf-8", errors="replace")
    return {
        "type": "text",
        "text": f"Attached file ({part.filename or 'attachment'}):\n{body}",
    }


def _user_content(turn: ConversationTurn) -> List[Dict[str, Any]]:
    content: List[Dict[str, Any]] = []
    for part in turn.parts:
        if isinstance(part, TextPart):
            content.append({"type": "text", "text": part.text})
        elif part.mime_type.startswith("image/"):
            content.append({"type": "image_url", "image_url": {"url": _data_url(part)}})
        elif part.mime_type.startswith("text/"):
            content.append(_text_attachment(part))
        else:
            content.append(
                {
                    "type": "file",
                    "file": {
                        "filename": part.filename or "attachment",
                        "file_data": _data_url(part),
                    },
                }
            )
    return content


def to_chat_messages(request: GenerationRequest) -> List[Dict[str, Any]]:
    """Convert a GenerationRequest into chat-completions messages.

    The system instruction leads; "model" turns become "assistant".
    """
    messages: List[Dict[str, Any]] = [
        {"role": "system", "content": request.config.system_instruction}
    ]
    for turn in request.turns:
        if turn.role == "model":
            messages.append({"role": "assistant", "content": turn.text})
        else:
            messages.append({"role": "user", "content": _user_content(turn)})
    return messages


def to_response_format(request: GenerationRequest) -> Dict[str, Any]:
    return {
        "type": "json_schema",
        "json_schema": {
            "name": request.config.schema_name,
            "schema": request.config.response_schema,
            "strict": True,
        },
    }


# -------------------------------------------------------------------
# Client
# -------------------------------------------------------------------


class LLMClient:
    """
    One attempt per call; retries are the caller's business.

    Parameters
    ----------
    api_key : str, optional
        Defaults to settings.openai_api_key (raises ConfigurationMissingError
        if unset).
    base_url : str, optional
        Defaults to settings.openai_base_url.
    image_model : str, optional
        Defaults to settings.image_model.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        image_model: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.image_model = image_model or settings.image_model
        self._client = client or AsyncOpenAI(
            api_key=api_key or settings.openai_api_key,
            base_url=base_url or settings.openai_base_url,
        )

    async def generate_structured(self, request: GenerationRequest) -> str:
        """Send one structured-output request and return the raw response text."""
        kwargs: Dict[str, Any] = {
            "model": request.model,
            "messages": to_chat_messages(request),
            "response_format": to_response_format(request),
        }
        if request.config.temperature is not None:
            kwargs["temperature"] = request.config.temperature

        try:
            completion = await self._client.chat.completions.create(**kwargs)
        except OpenAIError as e:
            raise translate_error(e) from e

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""

    async def generate_image(self, prompt: str) -> str:
        """Generate one image and return it base64-encoded.

        Raises
        ------
        ImageMissingError
            If the response carries no inline image data.
        """
        kwargs: Dict[str, Any] = {"model": self.image_model, "prompt": prompt, "n": 1}
        if self.image_model.startswith("dall-e"):
            kwargs["response_format"] = "b64_json"

        try:
            response = await self._client.images.generate(**kwargs)
        except OpenAIError as e:
            raise translate_error(e) from e

        data = response.data or []
        if not data or not data[0].b64_json:
            raise ImageMissingError(self.image_model)
        return data[0].b64_json

    async def close(self) -> None:
        await self._client.close()
