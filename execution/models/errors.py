# OrchestrationError and its subclasses
"""Error types for the orchestration layer"""
from typing import Optional, Dict, Any
from datetime import datetime


class OrchestrationError(Exception):
    """Base exception for orchestration errors"""

    default_code = "ORCHESTRATION_ERROR"

    def __init__(
        self,
        message: str,
        provider_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider_name = provider_name
        self.details = details or {}
        self.original_error = original_error
        self.error_code = error_code or self.default_code
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "error_type": type(self).__name__,
            "error_code": self.error_code,
            "provider_name": self.provider_name,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class ValidationError(OrchestrationError):
    """Malformed plan, report or operation arguments"""
    default_code = "VALIDATION_ERROR"


class ProviderConnectionError(OrchestrationError):
    """Could not connect to a tool provider"""
    default_code = "PROVIDER_CONNECTION_FAILED"


class ProviderFetchError(OrchestrationError):
    """Connected, but listing the provider's operations failed"""
    default_code = "PROVIDER_FETCH_FAILED"


class SummaryUpstreamError(OrchestrationError):
    """Text generation failed to start or broke mid-stream"""
    default_code = "SUMMARY_UPSTREAM_FAILED"


class ToolTimeoutError(OrchestrationError):
    """Operation exceeded its time budget"""
    default_code = "TIMEOUT"
