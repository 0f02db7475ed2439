# Report intake and statistics
"""Result collection and aggregation"""
from typing import TYPE_CHECKING, Dict
from collections import Counter
import logging
import uuid

from events import EventBus, REPORT_AGGREGATED
from execution.models import (
    ActionStatus,
    AggregatedReport,
    ExecutionReport,
    Statistics,
    SubmitReceipt,
    ValidationError,
)

if TYPE_CHECKING:
    from summary.generator import SummaryGenerator

logger = logging.getLogger(__name__)

SUMMARY_UNAVAILABLE = "summary unavailable"


def compute_statistics(report: ExecutionReport) -> Statistics:
    """Counts by status and by action type over the whole report"""
    by_status = Counter(result.status for result in report.actions)
    by_type: Dict[str, int] = dict(
        Counter(result.type.value for result in report.actions)
    )

    return Statistics(
        total=len(report.actions),
        successful=by_status[ActionStatus.SUCCESS],
        failed=by_status[ActionStatus.FAILURE],
        skipped=by_status[ActionStatus.SKIPPED],
        by_type=by_type,
    )


class ResultCollector:
    """Accepts execution reports from the runner"""

    def __init__(self, bus: EventBus, summarizer: "SummaryGenerator"):
        self.bus = bus
        self.summarizer = summarizer

    def validate(self, report: ExecutionReport):
        if not report.project_root or not report.project_root.strip():
            raise ValidationError(
                message="Project root path should not be empty",
                details={"field": "projectRoot"},
            )

    async def submit_report(self, report: ExecutionReport) -> SubmitReceipt:
        """
        Aggregate a report, republish it and start its summary

        Args:
            report: Report submitted by the runner

        Returns:
            SubmitReceipt with the report id and, when the summary could be
            started, its correlation id

        Raises:
            ValidationError: If the project root is empty
        """
        self.validate(report)

        report_id = uuid.uuid4().hex
        statistics = compute_statistics(report)

        logger.info(
            f"Received report {report_id} for {report.project_root}: "
            f"total={statistics.total}, successful={statistics.successful}, "
            f"failed={statistics.failed}, skipped={statistics.skipped}, "
            f"reported_at={report.reported_at.isoformat()}"
        )
        self._check_consistency(report_id, report, statistics)

        self.bus.publish(
            REPORT_AGGREGATED,
            AggregatedReport(report_id=report_id, report=report, statistics=statistics),
        )

        try:
            stream = await self.summarizer.summarize(report)
        except Exception as e:
            logger.error(f"Error generating summary for report {report_id}: {e}")
            return SubmitReceipt(
                report_id=report_id,
                summary_id=None,
                error=SUMMARY_UNAVAILABLE,
            )

        logger.debug(f"Summary {stream.correlation_id} started for report {report_id}")
        return SubmitReceipt(report_id=report_id, summary_id=stream.correlation_id)

    def _check_consistency(
        self,
        report_id: str,
        report: ExecutionReport,
        statistics: Statistics,
    ):
        # advisory only; the reporter's flag is kept as submitted
        if report.success and statistics.failed:
            logger.warning(
                f"Report {report_id} claims success but has "
                f"{statistics.failed} failed action(s)"
            )
        elif not report.success and statistics.total and not statistics.failed:
            logger.warning(
                f"Report {report_id} claims failure but no action failed"
            )
