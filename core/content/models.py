from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class Attachment(BaseModel):
    """
    A file staged by the upload layer for exactly one request.

    The request builder reads it, embeds it inline and deletes the staged
    file; nothing keeps the bytes afterwards.
    """
    staging_path: str
    media_type: str
    original_name: str


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class InlineDataPart(BaseModel):
    """Base64 payload tagged with its media type."""
    type: Literal["inline_data"] = "inline_data"
    mime_type: str
    data: str
    filename: Optional[str] = None


Part = Union[TextPart, InlineDataPart]


class ConversationTurn(BaseModel):
    """
    One entry of a transcript.

    role:
      - "user": the caller's prompt (+ inline attachment parts in a request)
      - "model": the raw textual response of the model
    """
    role: Literal["user", "model"]
    parts: List[Part] = Field(default_factory=list)
    attachment_name: Optional[str] = None

    @classmethod
    def from_user(cls, text: str, attachment_name: Optional[str] = None) -> "ConversationTurn":
        return cls(role="user", parts=[TextPart(text=text)], attachment_name=attachment_name)

    @classmethod
    def from_model(cls, text: str) -> "ConversationTurn":
        return cls(role="model", parts=[TextPart(text=text)])

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.parts if isinstance(p, TextPart))

    def without_inline_data(self) -> "ConversationTurn":
        """Copy keeping only text parts (what a session may retain)."""
        return ConversationTurn(
            role=self.role,
            parts=[p for p in self.parts if isinstance(p, TextPart)],
            attachment_name=self.attachment_name,
        )


class GenerationConfig(BaseModel):
    system_instruction: str
    schema_name: str
    response_schema: Dict[str, Any]
    response_mime_type: str = "application/json"
    temperature: Optional[float] = None


class GenerationRequest(BaseModel):
    """Everything the upstream call needs: model, transcript, generation config."""
    model: str
    turns: List[ConversationTurn]
    config: GenerationConfig
