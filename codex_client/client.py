import os
import sys
from typing import Optional
from contextlib import AsyncExitStack

from mcp import ClientSession, StdioServerParameters, types
from mcp.client.stdio import stdio_client
from mcp.types import LoggingMessageNotificationParams


def result_text(result: types.CallToolResult) -> str:
    parts = [c.text for c in result.content if isinstance(c, types.TextContent)]
    return "\n".join(parts) if parts else "No response"


def tool_arguments(**fields) -> dict:
    """Drop unset optional arguments so the server applies its defaults."""
    return {name: value for name, value in fields.items() if value}


class CodexClient:
    """Stdio session with a Codex Consultant server process."""

    def __init__(
        self,
        command: Optional[str] = None,
        args: Optional[list[str]] = None,
        env: Optional[dict] = None,
    ):
        self.command = command or sys.executable
        self.args = ["-m", "codex_server"] if args is None else args
        # stdio_client only forwards a handful of variables unless told otherwise,
        # and the server reads CODEX_* from its environment
        self.env = dict(os.environ) if env is None else env
        self._exit_stack = AsyncExitStack()
        self._session: ClientSession | None = None

    async def connect(self):
        server_params = StdioServerParameters(
            command=self.command,
            args=self.args,
            env=self.env,
        )
        read, write = await self._exit_stack.enter_async_context(
            stdio_client(server_params)
        )
        self._session = await self._exit_stack.enter_async_context(
            ClientSession(
                read,
                write,
                logging_callback=self._log_callback,
            )
        )
        await self._session.initialize()

    async def list_tools(self) -> list[types.Tool]:
        if self._session is None:
            await self.connect()

        return (await self._session.list_tools()).tools

    async def call_tool(self, name: str, arguments: dict) -> tuple[bool, str]:
        """Returns (is_error, text)."""
        if self._session is None:
            await self.connect()

        result = await self._session.call_tool(name=name, arguments=arguments)
        return bool(result.isError), result_text(result)

    async def ask(
        self,
        prompt: str,
        context: Optional[str] = None,
        model: Optional[str] = None,
    ) -> tuple[bool, str]:
        return await self.call_tool(
            "ask_codex",
            tool_arguments(prompt=prompt, context=context, model=model),
        )

    async def review(self, target: str, focus: Optional[str] = None) -> tuple[bool, str]:
        return await self.call_tool(
            "codex_review",
            tool_arguments(target=target, focus=focus),
        )

    async def _log_callback(self, params: LoggingMessageNotificationParams):
        # stdout is reserved for the tool result
        print(f"[{params.level.upper()}] {params.data}", file=sys.stderr)

    async def close(self):
        await self._exit_stack.aclose()
        self._session = None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
