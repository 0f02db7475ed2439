# Plan dispatcher (announces plans for execution)
"""Publishes validated action plans for the external runner"""
import logging

from events import EventBus, PLAN_DISPATCHED
from execution.models import ActionPlan, ValidationError

logger = logging.getLogger(__name__)


class PlanDispatcher:
    """
    Fire-and-forget hand-off of action plans.

    The plan is published once on ``plan.dispatched`` and never retried
    or buffered. Whoever executes plans must be subscribed before
    ``dispatch`` is called; otherwise the plan is dropped and the only
    sign of it is that no report ever arrives.
    """

    def __init__(self, bus: EventBus):
        self.bus = bus

    def validate(self, plan: ActionPlan):
        if not plan.project_root or not plan.project_root.strip():
            raise ValidationError(
                message="Project root path should not be empty",
                details={"field": "projectRoot"},
            )

    def dispatch(self, plan: ActionPlan) -> int:
        """
        Validate and publish a plan

        Args:
            plan: Plan produced by the AI collaborator

        Returns:
            Number of subscribers the plan was delivered to

        Raises:
            ValidationError: If the project root is empty
        """
        self.validate(plan)

        delivered = self.bus.publish(PLAN_DISPATCHED, plan)

        if delivered == 0:
            logger.warning(
                f"Plan for {plan.project_root} dispatched with no runner subscribed; "
                f"{len(plan.actions)} action(s) dropped"
            )
        else:
            logger.info(
                f"Dispatched plan for {plan.project_root}: "
                f"{len(plan.actions)} action(s) to {delivered} subscriber(s)"
            )

        return delivered
