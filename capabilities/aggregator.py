# Capability aggregator
"""
Connects to the configured tool providers and merges their operations.

Every provider is attempted independently and concurrently. A provider
that fails to connect or to list its operations is logged, marked failed
and released; the rest are merged into a fresh registry which replaces
the previous one in a single assignment.
"""
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple
import asyncio
import logging

from capabilities.config import ToolProviderConfig, coerce_provider_config
from capabilities.models import (
    AggregatorState,
    AggregatorStatus,
    ConnectionState,
    OperationSpec,
    ToolProviderConnection,
    TransportKind,
)
from capabilities.registry import CapabilityRegistry, RegistryBuilder
from capabilities.transports import (
    McpSseConnector,
    McpStdioConnector,
    ProviderConnector,
    ProviderSession,
)
from execution.models import ProviderConnectionError, ProviderFetchError
from execution.safety import RetryStrategy, TimeoutHandler

logger = logging.getLogger(__name__)


class CapabilityAggregator:
    """Owns all provider connections and the merged capability registry"""

    def __init__(
        self,
        connectors: Optional[Dict[TransportKind, ProviderConnector]] = None,
        connect_timeout_seconds: float = 30,
        connect_attempts: int = 1,
        fetch_timeout_seconds: Optional[float] = None,
    ):
        self.connectors: Dict[TransportKind, ProviderConnector] = {
            TransportKind.SUBPROCESS: McpStdioConnector(),
            TransportKind.NETWORK: McpSseConnector(),
        }
        if connectors:
            self.connectors.update(connectors)

        self.timeout_handler = TimeoutHandler(timeout_seconds=connect_timeout_seconds)
        self.fetch_timeout_seconds = fetch_timeout_seconds or connect_timeout_seconds
        self.retry_strategy = RetryStrategy(
            max_attempts=connect_attempts,
            initial_delay_seconds=1.0,
            jitter=False,
        )

        self._connections: Dict[str, ToolProviderConnection] = {}
        self._registry = CapabilityRegistry()
        self._status = AggregatorStatus()
        self._inflight: Set[asyncio.Task] = set()
        self._lock = asyncio.Lock()

    @property
    def registry(self) -> CapabilityRegistry:
        """Latest complete registry"""
        return self._registry

    def status(self) -> AggregatorStatus:
        """Current state and connected provider count. Never blocks."""
        return self._status

    def connections(self) -> List[ToolProviderConnection]:
        return list(self._connections.values())

    async def aggregate(
        self,
        configs: Mapping[str, Any],
    ) -> Tuple[CapabilityRegistry, AggregatorStatus]:
        """
        Connect to every enabled provider and merge their operations

        Args:
            configs: Provider name -> ToolProviderConfig (raw mappings are
                resolved by shape)

        Returns:
            Tuple of (registry, status)
        """
        async with self._lock:
            previous = list(self._connections.values())
            self._connections = {}

            # the previous registry stays live until the swap, and so does its count
            self._status = AggregatorStatus(
                state=AggregatorState.INITIALIZING,
                connected_providers=self._status.connected_providers,
            )

            resolved: Dict[str, ToolProviderConfig] = {}
            for name, value in configs.items():
                config = coerce_provider_config(name, value)
                if config is None:
                    continue
                if not config.enabled:
                    logger.debug(f"Provider '{name}' is disabled, skipping")
                    continue
                resolved[name] = config

            logger.info(f"Aggregating capabilities from {len(resolved)} provider(s)")

            tasks = {
                name: asyncio.create_task(
                    self._attach(name, config),
                    name=f"connect-{name}",
                )
                for name, config in resolved.items()
            }
            self._inflight.update(tasks.values())
            try:
                outcomes = await asyncio.gather(*tasks.values(), return_exceptions=True)
            finally:
                self._inflight.difference_update(tasks.values())

            builder = RegistryBuilder()
            failed = False
            for name, outcome in zip(tasks.keys(), outcomes):
                connection = self._connections.get(name)
                if isinstance(outcome, BaseException):
                    failed = True
                    logger.warning(
                        f"Failed to initialize or fetch tools from {name}: {outcome}"
                    )
                    if connection is not None:
                        connection.state = ConnectionState.FAILED
                        connection.error = str(outcome)
                    continue

                session, specs = outcome
                builder.add_provider(name, specs, session)

            registry = builder.build()
            connected = sum(1 for c in self._connections.values() if c.is_open)

            self._registry = registry
            self._status = AggregatorStatus(
                state=AggregatorState.ERROR if failed else AggregatorState.DONE,
                connected_providers=connected,
            )
            if previous:
                # replaced handles stay readable until the swap above
                await self._close_many(previous)

            logger.info(
                f"Capability aggregation finished: state={self._status.state.value}, "
                f"providers={connected}/{len(resolved)}, operations={len(registry)}"
            )
            return registry, self._status

    async def _attach(
        self,
        name: str,
        config: ToolProviderConfig,
    ) -> Tuple[ProviderSession, List[OperationSpec]]:
        """Connect to one provider and list its operations"""
        connection = ToolProviderConnection(name=name, transport=config.transport)
        self._connections[name] = connection

        logger.info(f"Connecting to tool provider: {name} ({config.transport.value})")
        session = await self._connect(name, config)
        connection.session = session

        try:
            specs = await self.timeout_handler.run(
                session.list_operations(),
                key=name,
                timeout_seconds=self.fetch_timeout_seconds,
            )
        except asyncio.CancelledError:
            await self._release(connection)
            raise
        except Exception as e:
            await self._release(connection)
            raise ProviderFetchError(
                message=f"Could not list operations of {name}: {e}",
                provider_name=name,
                original_error=e,
            ) from e

        connection.operations = frozenset(spec.name for spec in specs)
        connection.state = ConnectionState.CONNECTED
        logger.info(f"Fetched {len(specs)} operations from {name}")
        return session, specs

    async def _connect(self, name: str, config: ToolProviderConfig) -> ProviderSession:
        connector = self.connectors.get(config.transport)
        if connector is None:
            raise ProviderConnectionError(
                message=f"No connector for transport {config.transport.value}",
                provider_name=name,
            )

        async def attempt() -> ProviderSession:
            return await self.timeout_handler.run(connector.connect(name, config), key=name)

        try:
            return await self.retry_strategy.execute(attempt, key=name)
        except ProviderConnectionError:
            raise
        except Exception as e:
            raise ProviderConnectionError(
                message=f"Could not connect to {name}: {e}",
                provider_name=name,
                original_error=e,
            ) from e

    async def _release(self, connection: ToolProviderConnection):
        session = connection.session
        connection.session = None
        if session is None:
            return
        try:
            await session.close()
        except Exception as e:
            logger.warning(f"Error closing provider {connection.name}: {e}")

    async def _close_one(self, connection: ToolProviderConnection):
        await self._release(connection)
        if connection.state != ConnectionState.FAILED:
            connection.state = ConnectionState.CLOSED

    async def _close_many(self, connections: List[ToolProviderConnection]):
        if connections:
            logger.debug(f"Closing {len(connections)} provider connection(s)...")
            await asyncio.gather(
                *(self._close_one(c) for c in connections),
                return_exceptions=True,
            )

    async def close(self):
        """
        Cancel pending connects and close every provider connection

        Safe to call at any time, including before aggregate() ran.
        """
        for task in list(self._inflight):
            task.cancel()

        async with self._lock:
            await self._close_many(list(self._connections.values()))
            self._connections = {}
            self._registry = CapabilityRegistry()
            self._status = AggregatorStatus(state=AggregatorState.IDLE)
