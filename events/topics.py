# Event bus topic names
"""Topic names shared by publishers and subscribers"""

PLAN_DISPATCHED = "plan.dispatched"
REPORT_AGGREGATED = "report.aggregated"
SUMMARY_STREAM_PREFIX = "summary.stream."


def summary_topic(correlation_id: str) -> str:
    """Per-summary subtopic carrying token, done and error events"""
    return f"{SUMMARY_STREAM_PREFIX}{correlation_id}"
