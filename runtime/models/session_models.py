"""
Session-related models for the content generation runtime.

These describe:
- a Session object (id + ordered transcript)
- the transcript entries themselves live in core.content.models.ConversationTurn
"""

import time
from typing import List

from pydantic import BaseModel, Field

from core.content.models import ConversationTurn


class Session(BaseModel):
    session_id: str
    turns: List[ConversationTurn] = Field(default_factory=list)
    created_at: float = Field(default_factory=time.monotonic)
    last_used_at: float = Field(default_factory=time.monotonic)
