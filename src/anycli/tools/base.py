"""Base types shared by discovery, synthesis and tool execution."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CommandResult:
    """Result from running the wrapped program.

    Attributes:
        stdout: Standard output from the command
        stderr: Standard error output (or a failure description)
        exit_code: Process exit code (0 = success, -1 = spawn failure or timeout)
        command: The full command line that was executed
        duration_ms: How long the command took in milliseconds
    """

    stdout: str
    stderr: str
    exit_code: int
    command: str = ""
    duration_ms: float | None = None

    @property
    def success(self) -> bool:
        """Whether the command succeeded (exit code 0)."""
        return self.exit_code == 0

    @property
    def output(self) -> str:
        """Help-style output: stdout, falling back to stderr."""
        return self.stdout or self.stderr


@dataclass
class ToolDescriptor:
    """An externally callable tool synthesized from a command path.

    Attributes:
        name: Hyphen-joined path from the base command (base name excluded)
        description: Human readable description
        input_schema: JSON-Schema object with ``properties`` and optional ``required``
        path: Subcommand tokens below the base command
        positionals: Property names declared as positional arguments
        flags: Property names derived from options (long and short forms)
    """

    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=dict)
    path: list[str] = field(default_factory=list)
    positionals: list[str] = field(default_factory=list)
    flags: list[str] = field(default_factory=list)

    @property
    def properties(self) -> dict[str, dict[str, Any]]:
        """Schema properties keyed by parameter name."""
        return self.input_schema.get("properties", {})

    @property
    def required(self) -> list[str]:
        """Names of required parameters."""
        return list(self.input_schema.get("required", []))

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the wire field names."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class ToolError(Exception):
    """Base exception for tool-related errors."""

    def __init__(self, message: str, tool_name: str | None = None) -> None:
        self.tool_name = tool_name
        super().__init__(message)


class ToolNotFoundError(ToolError):
    """Raised when a command or tool name cannot be resolved."""

    pass


class ToolExecutionError(ToolError):
    """Raised when help text cannot be acquired or a command cannot be built."""

    def __init__(
        self,
        message: str,
        tool_name: str | None = None,
        exit_code: int | None = None,
        stderr: str | None = None,
    ) -> None:
        super().__init__(message, tool_name)
        self.exit_code = exit_code
        self.stderr = stderr


class ToolValidationError(ToolError):
    """Raised when call parameters do not match a tool's input schema."""

    def __init__(
        self, message: str, tool_name: str | None = None, parameter: str | None = None
    ) -> None:
        super().__init__(message, tool_name)
        self.parameter = parameter


class CacheError(Exception):
    """Raised when a command cache cannot be written."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)
