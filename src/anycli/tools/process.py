"""Subprocess execution that reports every failure as a CommandResult."""

import asyncio
import os
import time

from .base import CommandResult

# Default timeout for help acquisition
DEFAULT_TIMEOUT = 10.0  # seconds


def build_env(extra: dict[str, str] | None = None) -> dict[str, str]:
    """Merge extra variables into the current environment.

    LANG is pinned to C so help text is not localized.
    """
    env = os.environ.copy()
    if extra:
        env.update(extra)
    env["LANG"] = "C"
    return env


async def run_process(
    command: str,
    args: list[str],
    timeout: float = DEFAULT_TIMEOUT,
    env: dict[str, str] | None = None,
    working_dir: str | None = None,
) -> CommandResult:
    """Run a command and capture its output.

    Never raises: spawn failures and timeouts come back as a result with
    ``exit_code=-1`` and a descriptive ``stderr``.

    Args:
        command: Executable to run
        args: Arguments passed to the executable
        timeout: Seconds before the process is killed
        env: Additional environment variables
        working_dir: Directory to run from

    Returns:
        CommandResult with stdout, stderr and exit code
    """
    cmd_str = " ".join([command, *args])
    start_time = time.perf_counter()
    process: asyncio.subprocess.Process | None = None

    try:
        process = await asyncio.create_subprocess_exec(
            command,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=working_dir,
            env=build_env(env),
        )
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(),
            timeout=timeout,
        )
    except TimeoutError:
        if process is not None:
            try:
                process.kill()
                await process.wait()
            except ProcessLookupError:
                pass
        return CommandResult(
            stdout="",
            stderr=f"Timeout after {int(timeout * 1000)}ms for {cmd_str}",
            exit_code=-1,
            command=cmd_str,
            duration_ms=(time.perf_counter() - start_time) * 1000,
        )
    except (OSError, ValueError) as e:
        # FileNotFoundError, PermissionError, or a NUL byte in an argument
        return CommandResult(
            stdout="",
            stderr=str(e),
            exit_code=-1,
            command=cmd_str,
            duration_ms=(time.perf_counter() - start_time) * 1000,
        )

    return CommandResult(
        stdout=stdout_bytes.decode("utf-8", errors="replace"),
        stderr=stderr_bytes.decode("utf-8", errors="replace"),
        exit_code=process.returncode or 0,
        command=cmd_str,
        duration_ms=(time.perf_counter() - start_time) * 1000,
    )
