# Capability aggregation models
"""Connection, status and operation models"""
from typing import Any, Dict, FrozenSet, Optional
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TransportKind(str, Enum):
    """How a provider is reached"""
    SUBPROCESS = "subprocess"
    NETWORK = "network"


class ConnectionState(str, Enum):
    """Lifecycle of one provider connection"""
    PENDING = "pending"
    CONNECTED = "connected"
    CLOSED = "closed"
    FAILED = "failed"


class AggregatorState(str, Enum):
    """Summary flag over all providers"""
    IDLE = "idle"
    INITIALIZING = "initializing"
    DONE = "done"
    ERROR = "error"  # at least one provider failed; the others stay usable


class AggregatorStatus(BaseModel):
    """Snapshot of the aggregator"""
    model_config = ConfigDict(frozen=True)

    state: AggregatorState = AggregatorState.IDLE
    connected_providers: int = 0


class OperationSpec(BaseModel):
    """An operation as listed by a provider"""
    model_config = ConfigDict(frozen=True)

    name: str
    description: Optional[str] = None
    input_schema: Dict[str, Any] = Field(default_factory=lambda: {"type": "object"})


@dataclass
class ToolProviderConnection:
    """Runtime record for one provider, owned by the aggregator"""
    name: str
    transport: TransportKind
    state: ConnectionState = ConnectionState.PENDING
    operations: FrozenSet[str] = frozenset()
    session: Any = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_open(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "transport": self.transport.value,
            "state": self.state.value,
            "operations": sorted(self.operations),
            "error": self.error,
            "created_at": self.created_at.isoformat(),
        }
