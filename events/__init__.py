"""In-process publish/subscribe"""
from events.bus import EventBus, Subscription
from events.topics import (
    PLAN_DISPATCHED,
    REPORT_AGGREGATED,
    SUMMARY_STREAM_PREFIX,
    summary_topic,
)

__all__ = [
    "EventBus",
    "Subscription",
    "PLAN_DISPATCHED",
    "REPORT_AGGREGATED",
    "SUMMARY_STREAM_PREFIX",
    "summary_topic",
]
