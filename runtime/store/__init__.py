"""
Storage abstractions for the content generation runtime.

Includes:
- SessionStore / InMemorySessionStore: bounded, in-memory session transcripts
- stage_upload: writes multipart uploads to the staging directory
"""
