"""
Runtime package for the content generation server.

This package contains:
- API layer (FastAPI server + routes + error mapping)
- Agents (the ContentAgent orchestration façade)
- Stores (sessions, staged uploads)
- Models (Pydantic models for HTTP payloads and sessions)
"""
