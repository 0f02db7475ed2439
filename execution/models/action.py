# Action, ActionPlan
"""Action plan models produced by the AI collaborator"""
from typing import Optional, List
from pydantic import Field

from .base import FrozenWireModel
from .status import ActionType


class ActionMetadata(FrozenWireModel):
    """Free-form hints attached to an action"""
    type: Optional[str] = None
    description: Optional[str] = None


class Action(FrozenWireModel):
    """A single file or shell operation proposed for a project"""
    type: ActionType
    target: Optional[str] = None
    command: Optional[str] = None
    content: Optional[str] = None
    metadata: ActionMetadata = Field(default_factory=ActionMetadata)


class ActionPlan(FrozenWireModel):
    """
    Ordered list of actions for one project root.

    Position in ``actions`` is the intended execution order.
    """
    project_root: str
    actions: List[Action] = Field(default_factory=list)
    summary: Optional[str] = None  # markdown explanation from the AI
