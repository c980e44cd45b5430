"""Error kinds raised by the stylization pipeline.

Every error carries the HTTP status the API layer answers with. The router
turns them into a uniform ``{"success": false, "error": <message>}`` body.
"""


class StylizeError(Exception):
    """Base class for all stylization errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequest(StylizeError):
    """Missing or malformed input field."""

    status_code = 400


class UnknownStyle(BadRequest):
    """Style identifier is not in the catalog."""


class AnalysisFailed(StylizeError):
    """Image analysis could not read the input (real analyzers only)."""


class UpstreamUnavailable(StylizeError):
    """Generation service unreachable, failed, or timed out."""


class UnexpectedResponse(StylizeError):
    """Generation service answered with an unrecognised shape."""


class GenerationFailed(StylizeError):
    """Generation client reported a failure result."""
