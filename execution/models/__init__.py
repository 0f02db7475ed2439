# Orchestration data models
"""Orchestration models"""
from .status import ActionType, ActionStatus, SummaryState
from .errors import (
    OrchestrationError,
    ValidationError,
    ProviderConnectionError,
    ProviderFetchError,
    SummaryUpstreamError,
    ToolTimeoutError,
)
from .action import Action, ActionMetadata, ActionPlan
from .report import (
    ActionResult,
    ExecutionReport,
    Statistics,
    AggregatedReport,
    SubmitReceipt,
)

__all__ = [
    # Status
    "ActionType",
    "ActionStatus",
    "SummaryState",
    # Errors
    "OrchestrationError",
    "ValidationError",
    "ProviderConnectionError",
    "ProviderFetchError",
    "SummaryUpstreamError",
    "ToolTimeoutError",
    # Plan
    "Action",
    "ActionMetadata",
    "ActionPlan",
    # Report
    "ActionResult",
    "ExecutionReport",
    "Statistics",
    "AggregatedReport",
    "SubmitReceipt",
]
