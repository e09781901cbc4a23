"""
HTTP request/response models for the content generation API.

Field names follow the wire contract (camelCase) used by existing clients.
"""

from typing import Optional

from pydantic import BaseModel


class StartSessionResponse(BaseModel):
    sessionId: str


class ImageRequest(BaseModel):
    prompt: Optional[str] = None


class ImageResponse(BaseModel):
    message: str = "Image generated successfully."
    imageData: str


class ErrorResponse(BaseModel):
    """
    Body returned for every failure.

    kind:
      - "bad_request", "unknown_session", "attachment_missing",
        "transient_upstream", "permanent_upstream", "malformed_model_output", ...
    """
    error: str
    kind: str
