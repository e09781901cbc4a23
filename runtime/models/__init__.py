"""
Pydantic models used by the content generation runtime.

Split into:
- session_models: Session
- api_models: HTTP request/response schemas
"""
