"""Plain-text formatting of wrapped-program results."""

from anycli.tools.base import CommandResult

EMPTY_OUTPUT_MESSAGE = "Command completed successfully with no output."


def format_command_response(result: CommandResult) -> str:
    """Format a command result as a human-readable text block.

    Layout: stdout, then an "Errors:" section with stderr when present,
    then the exit code when it is non-zero.
    """
    content = result.stdout or ""

    if result.stderr:
        content += ("\n\nErrors:\n" if content else "") + result.stderr

    if result.exit_code != 0:
        content += f"\n\nExit code: {result.exit_code}"

    return content or EMPTY_OUTPUT_MESSAGE


def format_error_response(error: BaseException | str) -> str:
    """Format an unexpected failure while handling a tool call."""
    return f"Error executing command: {error}"
