"""Shared pytest fixtures, sample help texts and a fake help provider."""

import asyncio

import pytest

from anycli.models import CommandNode, Option, PositionalArg
from anycli.tools.base import CommandResult, ToolExecutionError

SIMPLE_HELP = (
    "Usage: mycmd\n"
    "A simple command\n"
    "\n"
    "Commands:\n"
    "  start  Start it\n"
    "  stop   Stop it\n"
    "\n"
    "Options:\n"
    "  -h, --help  Show help"
)

ROOT_HELP = """\
Usage: mytool <command> [flags]
A tool for testing discovery

Commands:
  alpha    Alpha commands
  beta     Beta commands
  broken   Fails to load

Options:
  -h, --help       Show help
  -o, --output string   Output format
"""

ALPHA_HELP = """\
Usage: mytool alpha <command>
Alpha group

Commands:
  one   First alpha
  two   Second alpha

Options:
  -v, --verbose  Verbose output
"""

ALPHA_ONE_HELP = """\
Usage: mytool alpha one <target> [options]
Run the first thing

Arguments:
  <target>   Target name
  [region]   Optional region

Options:
  --dry-run   Do not change anything
"""

ALPHA_TWO_HELP = """\
Usage: mytool alpha two <command>
Second thing

Commands:
  deep   Deeper still
"""

DEEP_HELP = """\
Usage: mytool alpha two deep
The deepest command
"""

BETA_HELP = """\
Beta group

Options:
  -f, --force   Force it
"""

MYTOOL_HELP: dict[tuple[str, ...], str] = {
    (): ROOT_HELP,
    ("alpha",): ALPHA_HELP,
    ("alpha", "one"): ALPHA_ONE_HELP,
    ("alpha", "two"): ALPHA_TWO_HELP,
    ("alpha", "two", "deep"): DEEP_HELP,
    ("beta",): BETA_HELP,
}


class FakeHelpProvider:
    """Serves canned help text and records how it was asked.

    Paths missing from ``texts`` raise ToolExecutionError, like a
    subcommand whose help cannot be acquired.
    """

    def __init__(
        self,
        texts: dict[tuple[str, ...], str],
        delay: float = 0.0,
        delays: dict[tuple[str, ...], float] | None = None,
    ) -> None:
        self.texts = texts
        self.delay = delay
        self.delays = delays or {}
        self.calls: list[tuple[str, ...]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_help(self, args: list[str] | None = None) -> str:
        key = tuple(args or [])
        self.calls.append(key)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(key, self.delay))
            if key not in self.texts:
                raise ToolExecutionError(f"No help for {' '.join(key)}")
            return self.texts[key]
        finally:
            self.in_flight -= 1


class FakeRunner:
    """Stands in for CLITool when executing tool calls."""

    def __init__(self, result: CommandResult | None = None, error: Exception | None = None):
        self.result = result or CommandResult(stdout="ok", stderr="", exit_code=0)
        self.error = error
        self.calls: list[list[str]] = []

    async def run_command(self, args: list[str], timeout: float | None = None) -> CommandResult:
        self.calls.append(list(args))
        if self.error is not None:
            raise self.error
        return self.result


def build_az_tree() -> CommandNode:
    """A small az-like tree: az -> vm -> create/list."""
    create = CommandNode(
        name="create",
        description="Create a virtual machine",
        options=[
            Option(name="--resource-group", short_name="-g", value_required=True),
            Option(name="--generate-ssh-keys", description="Generate SSH keys"),
        ],
        arguments=[PositionalArg(name="name", description="VM name", required=True)],
    )
    list_ = CommandNode(
        name="list",
        description="List virtual machines",
        options=[Option(name="--output", short_name="-o", value_required=True)],
    )
    vm = CommandNode(name="vm", description="Manage VMs", subcommands=[create, list_])
    return CommandNode(
        name="az",
        description="Azure CLI",
        subcommands=[vm],
        options=[Option(name="--help", short_name="-h", description="Show help")],
    )


# --- Pytest Fixtures ---


@pytest.fixture
def help_provider() -> FakeHelpProvider:
    """Provide a fake provider for the mytool tree."""
    return FakeHelpProvider(MYTOOL_HELP)


@pytest.fixture
def az_tree() -> CommandNode:
    """Provide the az-like command tree."""
    return build_az_tree()


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Provide a runner that returns "ok"."""
    return FakeRunner()
