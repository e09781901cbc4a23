"""
Custom exceptions for the content generation service.

Every error raised by the core derives from ContentGenerationError.
The types are used across:

  - core/api/        (upstream transport + retry)
  - core/content/    (attachment handling, output validation)
  - runtime/         (sessions, orchestration, HTTP mapping)

The HTTP layer (runtime/api/errors.py) maps each type to a status code.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Structured classification of upstream failures used by the retry loop."""

    TRANSIENT = "transient"
    PERMANENT = "permanent"


class ContentGenerationError(Exception):
    """Base class for every error raised by the orchestration core."""

    kind_name = "internal"


class UpstreamError(ContentGenerationError):
    """
    Raised when the remote generation API call fails.

    The `kind` attribute tells the retry loop whether waiting could help.
    """

    kind = ErrorKind.PERMANENT

    def __init__(self, message, status_code=None):
        self.status_code = status_code
        super().__init__(message)

    @property
    def kind_name(self):
        return f"{self.kind.value}_upstream"


class TransientUpstreamError(UpstreamError):
    """Rate limited (429) or temporarily unavailable (503)."""

    kind = ErrorKind.TRANSIENT


class PermanentUpstreamError(UpstreamError):
    """Any other upstream failure: auth, malformed request, quota, ..."""

    kind = ErrorKind.PERMANENT


class UnknownSessionError(ContentGenerationError):
    """
    Raised when a session id was never issued, was closed, or was evicted.

    Clients should react by starting a new session.
    """

    kind_name = "unknown_session"

    def __init__(self, session_id):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class AttachmentMissingError(ContentGenerationError):
    """Raised when a staged attachment no longer exists at read time."""

    kind_name = "attachment_missing"

    def __init__(self, staging_path):
        self.staging_path = staging_path
        super().__init__(f"File not found: {staging_path}")


class MalformedModelOutputError(ContentGenerationError):
    """
    Raised when the model response cannot be parsed into the expected schema.

    Carries the content-type label and schema name in effect so the failure
    can be diagnosed from logs, plus the raw model text.
    """

    kind_name = "malformed_model_output"

    def __init__(self, label, schema_name, details, raw_text=None):
        self.label = label
        self.schema_name = schema_name
        self.details = details
        self.raw_text = raw_text
        msg = (
            f"Model output for '{label}' does not match schema {schema_name}: "
            f"{details}"
        )
        super().__init__(msg)


class ImageMissingError(MalformedModelOutputError):
    """Raised when an image generation response carries no binary part."""

    def __init__(self, model):
        super().__init__(
            label="image",
            schema_name="inline image",
            details=f"The AI model ({model}) did not return a valid image.",
        )


class ConfigurationMissingError(ContentGenerationError):
    """Raised at startup when a required setting (API credential) is absent."""

    kind_name = "configuration_missing"

    def __init__(self, setting_name):
        self.setting_name = setting_name
        msg = (
            f"{setting_name} is not set. Please export it in your environment "
            "or define it in a .env file."
        )
        super().__init__(msg)
