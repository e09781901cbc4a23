"""
FastAPI application entry point for the content generation runtime.

Responsibilities:
- validate settings (a missing API key aborts startup)
- construct shared singletons (session store, LLM client, ContentAgent)
- include content routes under /api/chat

Run with:

    uvicorn runtime.api.server:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import HTMLResponse

from configs.settings import settings
from core.api.openai_client import LLMClient
from core.api.retry import RetryPolicy
from core.content.schemas import parse_content_types
from runtime.agents.content_agent import ContentAgent
from runtime.store.session_store import InMemorySessionStore
from . import content_routes
from .errors import register_error_handlers


logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

settings.validate()


# ---------------------------------------------------------------------------
# Shared singletons
# ---------------------------------------------------------------------------

# Session storage: bounded, in-memory, process lifetime only.
session_store = InMemorySessionStore(
    capacity=settings.session_capacity,
    ttl_seconds=settings.session_ttl_seconds,
)

llm_client = LLMClient()

content_agent = ContentAgent(
    llm_client=llm_client,
    session_store=session_store,
    model=settings.content_model,
    temperature=settings.temperature,
    retry_policy=RetryPolicy(
        max_attempts=settings.retry_max_attempts,
        base_delay=settings.retry_base_delay,
    ),
    session_content_types=parse_content_types(settings.session_content_types),
)

# ---------------------------------------------------------------------------
# FastAPI app + route registration
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    await llm_client.close()


app = FastAPI(title="Content Generation Runtime", lifespan=lifespan)
register_error_handlers(app)

# Initialize the router module with our shared objects, then include it.
content_routes.init_routes(
    content_agent=content_agent,
    upload_dir=settings.upload_dir,
    max_upload_mb=settings.max_upload_mb,
)
app.include_router(content_routes.router, prefix="/api/chat")


@app.get("/", response_class=HTMLResponse)
def welcome() -> str:
    return (
        "<h1>Content Generation Backend</h1>"
        "<p>The server is running. Use the /api/chat endpoints to interact with the bot.</p>"
    )
