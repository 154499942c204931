"""
Domain exceptions.

Typed exceptions for explicit error handling. Infrastructure adapters
raise these; domain services and the application layer catch them at
each external call boundary and convert them into degraded results.
"""

from __future__ import annotations


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    All domain-specific exceptions inherit from this.
    Allows catching all domain errors with single except clause.
    """

    pass


# ═══════════════════════════════════════════════════════════
# ANALYSIS DOMAIN EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class AnalysisDomainError(DomainError):
    """Base exception for the analysis domain."""

    pass


class PageFetchError(AnalysisDomainError):
    """
    Product page could not be fetched.

    Raised when:
    - HTTP status >= 400
    - Network error or timeout

    Example:
        >>> raise PageFetchError("HTTP 403", status=403)
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ReasoningError(AnalysisDomainError):
    """
    Reasoning collaborator call failed.

    Raised when:
    - The language model API errors out
    - The response is empty

    Example:
        >>> raise ReasoningError("OpenAI returned an empty completion")
    """

    pass


class StructuredDecodeError(AnalysisDomainError):
    """
    Collaborator output is not valid structured data.

    Example:
        >>> raise StructuredDecodeError("Expected JSON object")
    """

    pass


# ═══════════════════════════════════════════════════════════
# CONFIGURATION EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ConfigurationError(DomainError):
    """
    Required configuration is missing.

    Raised at factory time, never at import time.

    Example:
        >>> raise ConfigurationError("GOOGLE_SEARCH_API_KEY not set")
    """

    pass


# ═══════════════════════════════════════════════════════════
# EXTERNAL SERVICE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ExternalServiceError(DomainError):
    """
    External service call failed.

    Base class for all external service errors.

    Raised when:
    - API call fails
    - Network error
    - Service unavailable

    Example:
        >>> raise ExternalServiceError("Search API failed: 500")
    """

    pass


class RateLimitError(ExternalServiceError):
    """
    API rate limit exceeded.

    Example:
        >>> raise RateLimitError("Custom Search quota exhausted")
    """

    pass


class TimeoutError(ExternalServiceError):  # noqa: A001
    """
    External service timeout.

    Example:
        >>> raise TimeoutError("Open Beauty Facts timeout after 10s")
    """

    pass


class ServiceUnavailableError(ExternalServiceError):
    """
    External service temporarily unavailable.

    Raised when:
    - Circuit breaker open
    - Service returns 5xx

    Example:
        >>> raise ServiceUnavailableError("Search circuit open")
    """

    pass
