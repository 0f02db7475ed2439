# MCP transports for tool providers
"""
Provider sessions over the Model Context Protocol.

A session keeps its transport context (subprocess pipes or SSE stream)
open inside a single owner task. ``close()`` signals that task, which
exits the contexts in the task that entered them; for subprocess
providers this terminates the child process.
"""
from abc import ABC, abstractmethod
from contextlib import AsyncExitStack
from typing import Any, AsyncContextManager, Callable, Dict, List, Optional
import asyncio
import logging
import os

from mcp import ClientSession, StdioServerParameters
from mcp.client.sse import sse_client
from mcp.client.stdio import stdio_client

from capabilities.config import CommandProviderConfig, NetworkProviderConfig, ToolProviderConfig
from capabilities.models import OperationSpec

logger = logging.getLogger(__name__)


class ProviderSession(ABC):
    """Open connection to one provider"""

    @abstractmethod
    async def list_operations(self) -> List[OperationSpec]:
        """Fetch the operations the provider exposes"""
        pass

    @abstractmethod
    async def call_operation(self, name: str, arguments: Dict[str, Any]) -> Any:
        """Invoke one operation"""
        pass

    @abstractmethod
    async def close(self):
        """Release the subprocess or network handle. Idempotent."""
        pass


class ProviderConnector(ABC):
    """Opens sessions for one transport kind"""

    @abstractmethod
    async def connect(self, name: str, config: ToolProviderConfig) -> ProviderSession:
        pass


class McpSession(ProviderSession):
    """MCP client session held open by an owner task"""

    def __init__(
        self,
        name: str,
        open_transport: Callable[[], AsyncContextManager],
        close_timeout: float = 10.0,
    ):
        self.name = name
        self._open_transport = open_transport
        self._close_timeout = close_timeout
        self._session: Optional[ClientSession] = None
        self._ready: Optional[asyncio.Future] = None
        self._closing = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    async def start(self):
        """Open the transport and run the MCP initialize handshake"""
        loop = asyncio.get_running_loop()
        self._ready = loop.create_future()
        self._task = loop.create_task(self._run(), name=f"mcp-session-{self.name}")

        try:
            await self._ready
        except BaseException:
            # failed handshake, timeout or cancellation: tear the transport down
            self._task.cancel()
            raise

    async def _run(self):
        try:
            async with AsyncExitStack() as stack:
                streams = await stack.enter_async_context(self._open_transport())
                read_stream, write_stream = streams[0], streams[1]
                session = await stack.enter_async_context(
                    ClientSession(read_stream, write_stream)
                )
                await session.initialize()

                self._session = session
                self._ready.set_result(None)
                logger.debug(f"MCP session for {self.name} is open")

                await self._closing.wait()

        except Exception as e:
            if not self._ready.done():
                self._ready.set_exception(e)
            else:
                logger.warning(f"MCP session for {self.name} ended with error: {e}")

        finally:
            self._session = None
            if not self._ready.done():
                self._ready.cancel()

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise RuntimeError(f"MCP session for {self.name} is not open")
        return self._session

    async def list_operations(self) -> List[OperationSpec]:
        result = await self._require_session().list_tools()
        return [
            OperationSpec(
                name=tool.name,
                description=tool.description,
                input_schema=tool.inputSchema or {"type": "object"},
            )
            for tool in result.tools
        ]

    async def call_operation(self, name: str, arguments: Dict[str, Any]) -> Any:
        return await self._require_session().call_tool(name, arguments)

    async def close(self):
        if self._task is None or self._task.done():
            return

        self._closing.set()
        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=self._close_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"MCP session for {self.name} did not close in time, cancelling")
            self._task.cancel()
        logger.debug(f"MCP session for {self.name} closed")


class McpStdioConnector(ProviderConnector):
    """Spawns the provider command and speaks MCP over its stdio"""

    async def connect(self, name: str, config: CommandProviderConfig) -> ProviderSession:
        params = StdioServerParameters(
            command=config.command,
            args=list(config.args),
            env={**os.environ, **config.env},
        )
        logger.debug(f"  -> Using stdio transport for {name}: {config.command}")
        session = McpSession(name, lambda: stdio_client(params))
        await session.start()
        return session


class McpSseConnector(ProviderConnector):
    """Connects to a provider's SSE endpoint"""

    async def connect(self, name: str, config: NetworkProviderConfig) -> ProviderSession:
        headers = dict(config.headers) or None
        logger.debug(f"  -> Using sse transport for {name}: {config.url}")
        session = McpSession(name, lambda: sse_client(config.url, headers=headers))
        await session.start()
        return session
