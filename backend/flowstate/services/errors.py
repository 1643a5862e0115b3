"""Service-level error taxonomy translated to HTTP errors by the routes."""
from __future__ import annotations


class FlowStateError(Exception):
    """Base class for errors raised by FlowState services."""


class ValidationError(FlowStateError):
    """Malformed or missing input, detected before any external call."""


class ExternalServiceError(FlowStateError):
    """The hosted model call failed or returned unusable output."""


class ModelUnavailableError(ExternalServiceError):
    """No model client is configured (missing API key)."""


class GenerationError(ExternalServiceError):
    """Plan generation produced no parsable plan."""


class ExtractionError(ExternalServiceError):
    """Strengths extraction from an uploaded report failed."""


class PersistenceError(FlowStateError):
    """A storage backend operation failed."""


class NotFoundError(FlowStateError):
    """A referenced plan, task, document, block or prompt does not exist."""
