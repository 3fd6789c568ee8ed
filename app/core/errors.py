"""
Error types shared by services and routes.

- NotFoundError: user or referenced entity does not exist (404)
- LookupFailure: a store query failed for infrastructure reasons (503)
- EnrichmentFailure: a display-name lookup failed; always recovered locally
"""

from typing import Optional


class ApplicationTrackerError(Exception):
    """Base class for all application tracker errors."""

    status_code = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(ApplicationTrackerError):
    status_code = 404
    default_message = "The requested resource was not found."


class LookupFailure(ApplicationTrackerError):
    """A per-criterion store query failed. Never caused by the user."""

    status_code = 503
    default_message = "Unable to load applications at the moment. Please try again later."

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class EnrichmentFailure(ApplicationTrackerError):
    """Resume or cover-letter name could not be resolved."""

    def __init__(self, kind: str, entity_id: int, cause: Optional[BaseException] = None):
        self.kind = kind
        self.entity_id = entity_id
        self.cause = cause
        super().__init__(f"Could not resolve {kind} {entity_id}: {cause}")
