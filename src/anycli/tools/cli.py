"""CLI tool wrapper binding a base command to the process runner."""

import shutil
from pathlib import Path

from .base import CommandResult, ToolExecutionError, ToolNotFoundError
from .process import DEFAULT_TIMEOUT, run_process


class CLITool:
    """Wrapper for the external program being exposed as tools.

    Runs commands via subprocess and acquires help text for any
    subcommand path.
    """

    def __init__(
        self,
        command: str,
        help_args: list[str] | None = None,
        working_dir: Path | str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        env: dict[str, str] | None = None,
    ) -> None:
        """Initialize the CLI tool wrapper.

        Args:
            command: Base command to invoke (e.g., "gh", "az")
            help_args: Arguments appended to request help (default: ["--help"])
            working_dir: Directory to run commands from
            timeout: Command timeout in seconds
            env: Additional environment variables for commands
        """
        self._command = command
        self._help_args = help_args if help_args is not None else ["--help"]
        self._working_dir = Path(working_dir) if working_dir else None
        self._timeout = timeout
        self._env = env

    def exists(self) -> bool:
        """Check if the command exists in PATH."""
        return shutil.which(self._command) is not None

    def ensure_exists(self) -> None:
        """Raise ToolNotFoundError if the command is not in PATH."""
        if not self.exists():
            raise ToolNotFoundError(
                f"Command '{self._command}' not found in PATH",
                tool_name=self._command,
            )

    async def run_command(self, args: list[str], timeout: float | None = None) -> CommandResult:
        """Run the base command with the given arguments. Never raises."""
        return await run_process(
            self._command,
            args,
            timeout=timeout if timeout is not None else self._timeout,
            env=self._env,
            working_dir=str(self._working_dir) if self._working_dir else None,
        )

    async def get_help(self, args: list[str] | None = None) -> str:
        """Acquire help text for a subcommand path.

        Args:
            args: Subcommand path below the base command

        Returns:
            Help text (stdout, or stderr when stdout is empty)

        Raises:
            ToolExecutionError: If the process could not be spawned, timed out,
                or produced no output at all
        """
        path = list(args or [])
        result = await self.run_command([*path, *self._help_args])
        # Positive exit codes are common for help output; negative means no process
        if result.exit_code >= 0 and result.output:
            return result.output

        raise ToolExecutionError(
            f"Failed to get help for {' '.join([self._command, *path])}",
            tool_name=self._command,
            exit_code=result.exit_code,
            stderr=result.stderr,
        )

