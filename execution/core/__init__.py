# Core orchestration components
"""Core orchestration components"""
from .dispatcher import PlanDispatcher
from .result import ResultCollector, compute_statistics, SUMMARY_UNAVAILABLE

__all__ = [
    "PlanDispatcher",
    "ResultCollector",
    "compute_statistics",
    "SUMMARY_UNAVAILABLE",
]
