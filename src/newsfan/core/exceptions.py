#!/usr/bin/env python3
"""
Exception hierarchy for the news aggregator.

Per-source failures (transport, upstream status, malformed payload) are
recovered inside the aggregator. Configuration errors are fatal and raised
before any query is attempted.
"""

from typing import Optional, Dict, Any


class NewsAggregatorError(Exception):
    """
    Root of the error hierarchy.

    ``error_code`` defaults to the class name; ``context`` carries the
    structured details (source id, config key, status) for log records.
    """

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or type(self).__name__
        self.context = dict(context or {})

    def to_dict(self) -> Dict[str, Any]:
        """Structured form for JSON output and log extras."""
        return {
            'error_type': type(self).__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


class SourceError(NewsAggregatorError):
    """Base exception for a failed query against a single news source."""

    def __init__(self, source_id: str, message: str, context: Optional[Dict[str, Any]] = None):
        context = dict(context or {})
        context.setdefault('source_id', source_id)
        super().__init__(message, context=context)
        self.source_id = source_id


class SourceTransportError(SourceError):
    """Network request to the source failed or timed out."""

    def __init__(self, source_id: str, original_error: Exception):
        message = f"Request to {source_id} failed: {original_error or type(original_error).__name__}"
        context = {
            'original_error': repr(original_error)
        }
        super().__init__(source_id, message, context=context)
        self.original_error = original_error


class SourceStatusError(SourceError):
    """Upstream answered with a non-"ok" status."""

    def __init__(self, source_id: str, status: Any, upstream_message: Optional[str] = None):
        message = f"NewsAPI returned status {status} for {source_id}"
        if upstream_message:
            message += f": {upstream_message}"
        context = {
            'status': status,
            'upstream_message': upstream_message
        }
        super().__init__(source_id, message, context=context)
        self.status = status


class SourceParseError(SourceError):
    """Upstream payload could not be decoded."""

    def __init__(self, source_id: str, parse_stage: str, original_error: Optional[Exception] = None):
        message = f"Failed to parse {parse_stage} from {source_id}"
        context = {
            'parse_stage': parse_stage,
            'original_error': str(original_error) if original_error else None
        }
        super().__init__(source_id, message, context=context)


# Configuration-related exceptions
class ConfigurationError(NewsAggregatorError):
    """Configuration is invalid or missing."""

    def __init__(self, config_key: str, issue: str):
        message = f"Configuration error for {config_key}: {issue}"
        context = {
            'config_key': config_key,
            'issue': issue
        }
        super().__init__(message, context=context)
        self.config_key = config_key
