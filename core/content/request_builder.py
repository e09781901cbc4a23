"""
Assembles the upstream request from prompt, resolved schema, optional
attachment and optional prior transcript.

Attachment lifecycle: the staged file is read, base64-encoded and embedded
as an inline part, then deleted. Deletion happens whenever the read was
attempted, including when the read itself fails part way.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import os
from typing import List, Optional, Sequence

from core.content.models import (
    Attachment,
    ConversationTurn,
    GenerationConfig,
    GenerationRequest,
    InlineDataPart,
    TextPart,
)
from core.content.schemas import ResolvedContent
from exceptions.exceptions import AttachmentMissingError


logger = logging.getLogger(__name__)


def _read_and_remove(path: str) -> bytes:
    if not os.path.isfile(path):
        raise AttachmentMissingError(path)
    try:
        with open(path, "rb") as f:
            return f.read()
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass


async def load_attachment(attachment: Attachment) -> InlineDataPart:
    """Read, encode and delete a staged attachment.

    Raises
    ------
    AttachmentMissingError
        If the staged file no longer exists.
    """
    data = await asyncio.to_thread(_read_and_remove, attachment.staging_path)
    logger.debug(
        "Consumed attachment %s (%s, %d bytes)",
        attachment.original_name,
        attachment.media_type,
        len(data),
    )
    return InlineDataPart(
        mime_type=attachment.media_type,
        data=base64.b64encode(data).decode("ascii"),
        filename=attachment.original_name,
    )


async def discard_attachment(attachment: Optional[Attachment]) -> None:
    """Remove a staged attachment that was never consumed (no-op otherwise)."""
    if attachment is None:
        return

    def _remove() -> None:
        try:
            os.remove(attachment.staging_path)
        except FileNotFoundError:
            return
        logger.debug("Discarded unconsumed attachment %s", attachment.original_name)

    await asyncio.to_thread(_remove)


async def build_request(
    prompt: str,
    resolved: ResolvedContent,
    *,
    model: str,
    attachment: Optional[Attachment] = None,
    history: Optional[Sequence[ConversationTurn]] = None,
    temperature: Optional[float] = None,
) -> GenerationRequest:
    """Build the request payload for one generation call.

    `history` is the prior transcript (stateful path); the new user turn
    is appended after it. The last turn of the returned request is always
    the new user turn.
    """
    turns: List[ConversationTurn] = list(history or [])

    user_turn = ConversationTurn(
        role="user",
        parts=[TextPart(text=prompt)],
        attachment_name=attachment.original_name if attachment else None,
    )
    if attachment is not None:
        user_turn.parts.append(await load_attachment(attachment))
    turns.append(user_turn)

    return GenerationRequest(
        model=model,
        turns=turns,
        config=GenerationConfig(
            system_instruction=resolved.system_instruction,
            schema_name=resolved.schema_name,
            response_schema=resolved.json_schema,
            temperature=temperature,
        ),
    )
