"""Tool provider connections and the merged capability registry"""
from capabilities.models import (
    TransportKind,
    ConnectionState,
    AggregatorState,
    AggregatorStatus,
    OperationSpec,
    ToolProviderConnection,
)
from capabilities.config import (
    CommandProviderConfig,
    NetworkProviderConfig,
    ToolProviderConfig,
    parse_provider_config,
    parse_provider_configs,
    load_provider_configs,
)
from capabilities.registry import CapabilityRegistry, OperationHandle, qualify
from capabilities.transports import (
    ProviderSession,
    ProviderConnector,
    McpSession,
    McpStdioConnector,
    McpSseConnector,
)
from capabilities.aggregator import CapabilityAggregator

__all__ = [
    # Models
    "TransportKind",
    "ConnectionState",
    "AggregatorState",
    "AggregatorStatus",
    "OperationSpec",
    "ToolProviderConnection",
    # Config
    "CommandProviderConfig",
    "NetworkProviderConfig",
    "ToolProviderConfig",
    "parse_provider_config",
    "parse_provider_configs",
    "load_provider_configs",
    # Registry
    "CapabilityRegistry",
    "OperationHandle",
    "qualify",
    # Transports
    "ProviderSession",
    "ProviderConnector",
    "McpSession",
    "McpStdioConnector",
    "McpSseConnector",
    # Aggregator
    "CapabilityAggregator",
]
