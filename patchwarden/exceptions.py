"""
Custom exception hierarchy for the PatchWarden review pipeline
"""

from typing import Any, Dict, List, Optional


class PatchWardenException(Exception):
    """Base exception for all PatchWarden errors"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationException(PatchWardenException):
    """Missing or invalid provider/runtime settings, raised before any network call"""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        details = kwargs.get("details", {})
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, details, kwargs.get("original_error"))
        self.config_key = config_key


class AIProviderException(PatchWardenException):
    """Network, auth or rate-limit failure reported by an LLM backend"""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.get("details", {})
        if provider:
            details["provider"] = provider
        if model:
            details["model"] = model

        super().__init__(message, details, kwargs.get("original_error"))
        self.provider = provider
        self.model = model


class ResponseParseException(PatchWardenException):
    """Provider returned no parseable structured content (refusal, empty or non-JSON text)"""

    def __init__(self, message: str, provider: Optional[str] = None, **kwargs):
        details = kwargs.get("details", {})
        if provider:
            details["provider"] = provider

        super().__init__(message, details, kwargs.get("original_error"))
        self.provider = provider


class SchemaViolationException(PatchWardenException):
    """Parsed provider content does not match the issue-list schema"""

    def __init__(
        self,
        message: str,
        violations: Optional[List[Dict[str, Any]]] = None,
        **kwargs,
    ):
        details = kwargs.get("details", {})
        self.violations = violations or []
        if self.violations:
            details["violation_count"] = len(self.violations)

        super().__init__(message, details, kwargs.get("original_error"))


class GitHubAPIException(PatchWardenException):
    """GitHub API related errors"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.get("details", {})
        if status_code:
            details["status_code"] = status_code
        if response_body:
            details["response_body"] = response_body

        super().__init__(message, details, kwargs.get("original_error"))
        self.status_code = status_code
