"""ContentAgent implementation.

Responsible for:
- classifying a prompt into a content type
- resolving the schema + system instruction for it
- building the upstream request (prompt, attachment, prior turns)
- calling the model through the retry loop
- validating the structured result
- keeping session transcripts up to date (stateful path)

Two public flows:
- generate_once(prompt, attachment)             -> no session state touched
- send_message(session_id, prompt, attachment)  -> folds in and extends history

The stateful flow only chooses among `session_content_types` (by default
presentation / document / default); see configs.settings.
"""

import asyncio
import logging
from typing import AbstractSet, Awaitable, Callable, Optional

from core.api.retry import DEFAULT_POLICY, RetryPolicy, invoke_with_retry
from core.content.classifier import ContentType, classify
from core.content.models import Attachment, ConversationTurn, GenerationRequest
from core.content.request_builder import build_request, discard_attachment
from core.content.schemas import StrictModel, parse_generated, resolve

from ..store.session_store import SessionStore


logger = logging.getLogger(__name__)

DEFAULT_SESSION_CONTENT_TYPES = frozenset(
    {ContentType.PRESENTATION, ContentType.DOCUMENT, ContentType.DEFAULT}
)


class ContentAgent:
    """Orchestration façade over classifier, registry, builder, client and store.

    Parameters
    ----------
    llm_client:
        Object exposing `generate_structured(request) -> str` and
        `generate_image(prompt) -> str` coroutines (see core.api.openai_client).
    session_store:
        SessionStore used by the stateful flow.
    model:
        Model identifier placed in every structured request.
    temperature:
        Optional sampling temperature forwarded upstream.
    retry_policy:
        Attempt budget / backoff for upstream calls.
    session_content_types:
        Labels the stateful flow may select. DEFAULT is always added.
    retry_sleep:
        Sleep coroutine used between retries (injectable for tests).
    """

    def __init__(
        self,
        llm_client,
        session_store: SessionStore,
        model: str,
        temperature: Optional[float] = None,
        retry_policy: RetryPolicy = DEFAULT_POLICY,
        session_content_types: AbstractSet[ContentType] = DEFAULT_SESSION_CONTENT_TYPES,
        retry_sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.llm_client = llm_client
        self.session_store = session_store
        self.model = model
        self.temperature = temperature
        self.retry_policy = retry_policy
        self.session_content_types = frozenset(session_content_types) | {ContentType.DEFAULT}
        self._retry_sleep = retry_sleep

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def start_session(self) -> str:
        session_id = await self.session_store.create()
        logger.info("Started session %s", session_id[:8])
        return session_id

    async def close_session(self, session_id: str) -> None:
        await self.session_store.close(session_id)
        logger.info("Closed session %s", session_id[:8])

    # ------------------------------------------------------------------
    # Generation flows
    # ------------------------------------------------------------------

    async def generate_once(
        self,
        prompt: str,
        attachment: Optional[Attachment] = None,
    ) -> StrictModel:
        """Stateless one-shot generation."""
        try:
            content_type = classify(prompt)
            resolved = resolve(content_type, prompt)
            logger.info(
                "Generating %s content (schema=%s, attachment=%s)",
                content_type.value,
                resolved.schema_name,
                attachment.original_name if attachment else None,
            )

            request = await build_request(
                prompt,
                resolved,
                model=self.model,
                attachment=attachment,
                temperature=self.temperature,
            )
            raw_text = await self._invoke(request)
            return parse_generated(resolved, raw_text)
        finally:
            await discard_attachment(attachment)

    async def send_message(
        self,
        session_id: str,
        prompt: str,
        attachment: Optional[Attachment] = None,
    ) -> StrictModel:
        """Session-based generation; appends (user, model) turns on success.

        Flow:
        - load the transcript (UnknownSessionError if absent)
        - classify within the session content types
        - build the request on top of the transcript
        - invoke, parse, validate
        - append the user turn (text only) and the raw model text
        """
        try:
            history = await self.session_store.get(session_id)

            content_type = classify(prompt, allowed=self.session_content_types)
            resolved = resolve(content_type, prompt)
            logger.info(
                "Session %s: generating %s content (schema=%s, prior turns=%d)",
                session_id[:8],
                content_type.value,
                resolved.schema_name,
                len(history),
            )

            request = await build_request(
                prompt,
                resolved,
                model=self.model,
                attachment=attachment,
                history=history,
                temperature=self.temperature,
            )
            raw_text = await self._invoke(request)
            result = parse_generated(resolved, raw_text)

            user_turn = request.turns[-1].without_inline_data()
            await self.session_store.append(
                session_id, user_turn, ConversationTurn.from_model(raw_text)
            )
            return result
        finally:
            await discard_attachment(attachment)

    async def generate_image(self, prompt: str) -> str:
        """Stateless pass-through: prompt in, base64 image bytes out."""
        logger.info("Generating image")
        return await invoke_with_retry(
            lambda: self.llm_client.generate_image(prompt),
            self.retry_policy,
            sleep=self._retry_sleep,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _invoke(self, request: GenerationRequest) -> str:
        return await invoke_with_retry(
            lambda: self.llm_client.generate_structured(request),
            self.retry_policy,
            sleep=self._retry_sleep,
        )
