"""Serving synthesized tools: call handlers and the MCP stdio transport."""

import logging
import shlex
from collections.abc import Mapping
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from anycli.config import ServerConfig
from anycli.models import CommandNode
from anycli.output import format_command_response, format_error_response
from anycli.tools.arguments import (
    RAW_ARGS_KEY,
    ArgumentReconstructor,
    SchemaPositionalStrategy,
)
from anycli.tools.base import (
    ToolDescriptor,
    ToolExecutionError,
    ToolNotFoundError,
    ToolValidationError,
)
from anycli.tools.cli import CLITool
from anycli.tools.synthesis import convert_command_to_tools

logger = logging.getLogger(__name__)

EXECUTE_TOOL_NAME = "execute"

_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str, int, float),
    "boolean": (bool,),
    "number": (int, float),
}


def _execute_descriptor(base_command: str) -> ToolDescriptor:
    return ToolDescriptor(
        name=EXECUTE_TOOL_NAME,
        description=f"Execute arbitrary {base_command} commands",
        input_schema={
            "type": "object",
            "properties": {
                "command": {
                    "type": "string",
                    "description": "The full command to execute (without the base command)",
                }
            },
            "required": ["command"],
        },
    )


class ToolServer:
    """Holds the tool catalog for one wrapped command and dispatches calls."""

    def __init__(
        self,
        base_command: str,
        root: CommandNode,
        config: ServerConfig | None = None,
        runner: CLITool | None = None,
        reconstructor: ArgumentReconstructor | None = None,
    ) -> None:
        """Initialize the server.

        Args:
            base_command: The wrapped program
            root: Discovered command tree
            config: Server settings
            runner: Executes reconstructed commands (default: CLITool)
            reconstructor: Maps parameters to tokens

        Raises:
            ToolExecutionError: If base_command is empty
        """
        if not base_command or not base_command.strip():
            raise ToolExecutionError("Empty base command provided")

        self.base_command = base_command
        self.config = config or ServerConfig()
        self._runner = runner or CLITool(base_command, timeout=self.config.call_timeout)
        self._reconstructor = reconstructor or ArgumentReconstructor()
        self._tools: dict[str, ToolDescriptor] = {}

        for tool in convert_command_to_tools(root, base_command):
            if tool.name in self._tools:
                logger.debug("Skipping duplicate tool: %s", tool.name)
                continue
            self._tools[tool.name] = tool

        logger.info("Found %d tools for %s", len(self._tools), base_command)

        self._execute_enabled = self.config.execute_tool
        if self._execute_enabled and EXECUTE_TOOL_NAME in self._tools:
            logger.warning(
                "'%s' is a discovered subcommand; raw execute tool not registered",
                EXECUTE_TOOL_NAME,
            )
            self._execute_enabled = False

    @property
    def name(self) -> str:
        return self.config.server_name(self.base_command)

    @property
    def tools(self) -> list[ToolDescriptor]:
        """Registered tools in synthesis order, then the execute tool."""
        tools = list(self._tools.values())
        if self._execute_enabled:
            tools.append(_execute_descriptor(self.base_command))
        return tools

    def get_tool(self, name: str) -> ToolDescriptor:
        """Look up a synthesized tool.

        Raises:
            ToolNotFoundError: If no tool has this name
        """
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(f"Unknown tool: {name}", tool_name=name) from None

    def validate_arguments(
        self, tool: ToolDescriptor, arguments: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        """Check arguments against the tool's schema.

        Unknown parameters are dropped and ``None`` counts as absent.

        Returns:
            The accepted parameters, in call order

        Raises:
            ToolValidationError: On a type mismatch or missing required parameter
        """
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            raise ToolValidationError("Arguments must be an object", tool_name=tool.name)

        properties = tool.properties
        accepted: dict[str, Any] = {}

        for key, value in arguments.items():
            if key not in properties:
                logger.debug("Ignoring unknown parameter %s for %s", key, tool.name)
                continue
            if value is None:
                continue
            expected = properties[key].get("type", "string")
            allowed = _JSON_TYPES.get(expected)
            # bool is an int subclass; only boolean properties accept it
            is_bool = isinstance(value, bool)
            if allowed is not None and (
                not isinstance(value, allowed) or (is_bool and expected != "boolean")
            ):
                raise ToolValidationError(
                    f"Parameter '{key}' must be of type {expected}",
                    tool_name=tool.name,
                    parameter=key,
                )
            accepted[key] = value

        for key in tool.required:
            if key not in accepted:
                raise ToolValidationError(
                    f"Missing required parameter '{key}'",
                    tool_name=tool.name,
                    parameter=key,
                )

        return accepted

    async def call_tool(self, name: str, arguments: Mapping[str, Any] | None = None) -> str:
        """Run a tool and return its formatted output.

        Failures of the wrapped program come back as text. Only validation
        problems raise.

        Raises:
            ToolNotFoundError: If the tool is unknown
            ToolValidationError: If the arguments do not match the schema
        """
        if name == EXECUTE_TOOL_NAME and self._execute_enabled:
            command = (arguments or {}).get("command")
            if not isinstance(command, str):
                raise ToolValidationError(
                    "Parameter 'command' must be a string",
                    tool_name=name,
                    parameter="command",
                )
            return await self.execute(command)

        tool = self.get_tool(name)
        params = self.validate_arguments(tool, arguments)
        logger.debug("Executing tool: %s with params: %s", name, params)

        try:
            tokens = self._reconstructor.reconstruct(
                self.base_command,
                tool.name,
                params,
                path=tool.path,
                strategy=SchemaPositionalStrategy(tool.positionals, tool.flags),
            )
            result = await self._runner.run_command(tokens, timeout=self.config.call_timeout)
        except Exception as e:
            logger.debug("Tool %s failed: %s", name, e)
            return format_error_response(e)

        return format_command_response(result)

    async def execute(self, command: str) -> str:
        """Run a free-text command line below the base command."""
        try:
            tokens = shlex.split(command)
            args = self._reconstructor.reconstruct(
                self.base_command, "", {RAW_ARGS_KEY: tokens}
            )
            result = await self._runner.run_command(args, timeout=self.config.call_timeout)
        except Exception as e:
            return format_error_response(e)

        return format_command_response(result)


async def serve_stdio(tool_server: ToolServer) -> None:
    """Expose a ToolServer over MCP on stdin/stdout."""
    server = Server(tool_server.name, version=tool_server.config.version)
    mcp_tools = [
        Tool(name=t.name, title=t.name, description=t.description, inputSchema=t.input_schema)
        for t in tool_server.tools
    ]

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return mcp_tools

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        text = await tool_server.call_tool(name, arguments)
        return [TextContent(type="text", text=text)]

    logger.info("MCP server for %s is running", tool_server.base_command)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
