"""HTTP routes for the content generation runtime.

Exposes endpoints like:

- POST /api/chat/generate        -> (prompt, file?) one-shot structured content
- POST /api/chat/start-session   -> returns a new sessionId
- POST /api/chat/send-message    -> (sessionId, prompt, file?) content within a session
- POST /api/chat/generate-image  -> (prompt) base64 image
- DELETE /api/chat/sessions/{id} -> closes a session
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Response, UploadFile

from exceptions.exceptions import ContentGenerationError

from ..agents.content_agent import ContentAgent
from ..models.api_models import ImageRequest, ImageResponse, StartSessionResponse
from ..store.upload_store import stage_upload


logger = logging.getLogger(__name__)

# Router for all content-related endpoints
router = APIRouter()


# Module-level references, to be initialized by the server.
_CONTENT_AGENT: Optional[ContentAgent] = None
_UPLOAD_DIR: Path = Path("uploads")
_MAX_UPLOAD_MB: int = 20


def init_routes(content_agent: ContentAgent, upload_dir: Path, max_upload_mb: int) -> None:
    """Initialize module-level references used by the route handlers."""
    global _CONTENT_AGENT, _UPLOAD_DIR, _MAX_UPLOAD_MB
    _CONTENT_AGENT = content_agent
    _UPLOAD_DIR = Path(upload_dir)
    _MAX_UPLOAD_MB = max_upload_mb


def _require_content_agent() -> ContentAgent:
    if _CONTENT_AGENT is None:
        raise HTTPException(
            status_code=500,
            detail="ContentAgent is not configured on the server.",
        )
    return _CONTENT_AGENT


def _require_prompt(prompt: Optional[str], what: str = "A prompt is required.") -> str:
    if prompt is None or not prompt.strip():
        raise HTTPException(status_code=400, detail=what)
    return prompt


async def _stage(file: Optional[UploadFile]):
    if file is None or not file.filename:
        return None
    return await stage_upload(file, _UPLOAD_DIR, _MAX_UPLOAD_MB)


@router.post("/generate")
async def generate(
    prompt: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
) -> dict:
    """Generate structured content for a single prompt (optionally with a file)."""
    agent = _require_content_agent()
    prompt = _require_prompt(prompt)
    attachment = await _stage(file)

    try:
        result = await agent.generate_once(prompt, attachment)
    except ContentGenerationError:
        logger.warning("[CONTENT] generate failed for prompt=%r", prompt[:80])
        raise
    return result.model_dump()


@router.post("/start-session", response_model=StartSessionResponse)
async def start_session() -> StartSessionResponse:
    """Create a new session and return its ID."""
    agent = _require_content_agent()
    session_id = await agent.start_session()
    return StartSessionResponse(sessionId=session_id)


@router.post("/send-message")
async def send_message(
    sessionId: Optional[str] = Form(None),
    prompt: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
) -> dict:
    """Send a message within a session; prior turns are part of the context."""
    agent = _require_content_agent()
    if not sessionId:
        raise HTTPException(status_code=400, detail="A sessionId is required.")
    prompt = _require_prompt(prompt)
    attachment = await _stage(file)

    try:
        result = await agent.send_message(sessionId, prompt, attachment)
    except ContentGenerationError:
        logger.warning(
            "[CONTENT] send-message failed for session_id=%s prompt=%r",
            sessionId[:8],
            prompt[:80],
        )
        raise
    return result.model_dump()


@router.post("/generate-image", response_model=ImageResponse)
async def generate_image(request: Optional[ImageRequest] = None) -> ImageResponse:
    """Generate an image from a prompt; stateless, no schema involved."""
    agent = _require_content_agent()
    prompt = _require_prompt(
        request.prompt if request else None, "A prompt is required to generate an image."
    )
    image_data = await agent.generate_image(prompt)
    return ImageResponse(imageData=image_data)


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(session_id: str) -> Response:
    agent = _require_content_agent()
    await agent.close_session(session_id)
    return Response(status_code=204)


# --------------------------------------------------------
# Endpoint: GET /healthz
# --------------------------------------------------------
@router.get("/healthz")
def health_check():
    """
    Simple health check endpoint for uptime monitoring.
    """
    return {"status": "ok"}
