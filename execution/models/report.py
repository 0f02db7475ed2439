# ActionResult, ExecutionReport, Statistics
"""Execution report and aggregation models"""
from typing import Dict, List, Optional
from datetime import datetime
from pydantic import Field

from .base import FrozenWireModel, WireModel
from .status import ActionType, ActionStatus


class ActionResult(FrozenWireModel):
    """Outcome of one dispatched action, produced by the external runner"""
    type: ActionType
    target: Optional[str] = None
    status: ActionStatus
    message: str = ""
    error: Optional[str] = None
    command: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == ActionStatus.SUCCESS


class ExecutionReport(FrozenWireModel):
    """The runner's account of an executed plan"""
    actions: List[ActionResult] = Field(default_factory=list)
    project_root: str
    success: bool  # reporter's own verdict, never recomputed here
    timestamp: int  # epoch milliseconds

    @property
    def reported_at(self) -> datetime:
        return datetime.utcfromtimestamp(self.timestamp / 1000)


class Statistics(FrozenWireModel):
    """Counts derived from an ExecutionReport"""
    total: int = 0
    successful: int = 0
    failed: int = 0
    skipped: int = 0
    by_type: Dict[str, int] = Field(default_factory=dict)


class AggregatedReport(FrozenWireModel):
    """Payload of the report.aggregated topic"""
    report_id: str
    report: ExecutionReport
    statistics: Statistics


class SubmitReceipt(WireModel):
    """Returned to whoever submitted a report"""
    report_id: str
    summary_id: Optional[str] = None
    received: bool = True
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
