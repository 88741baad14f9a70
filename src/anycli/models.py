"""Data models for discovered command trees and their persisted cache."""

import time

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Base model serialized with camelCase keys (shortName, valueRequired, ...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Option(_CamelModel):
    """A flag accepted by a command."""

    name: str  # Canonical long form, e.g. "--verbose"
    short_name: str | None = None  # e.g. "-v"
    description: str = ""
    value_required: bool = False
    value_name: str | None = None


class PositionalArg(_CamelModel):
    """A positional argument (<required> or [optional])."""

    name: str
    description: str = ""
    required: bool = False


class CommandNode(_CamelModel):
    """One command or subcommand in a discovered tree.

    Subcommands keep the order in which they were first seen in the help text.
    Duplicate names among siblings are kept as separate entries.
    """

    name: str
    description: str = ""
    subcommands: list["CommandNode"] = Field(default_factory=list)
    options: list[Option] = Field(default_factory=list)
    arguments: list[PositionalArg] = Field(default_factory=list)

    @classmethod
    def empty(cls, name: str) -> "CommandNode":
        """Build the default node used when help cannot be acquired or parsed."""
        return cls(name=name)

    def merged_with(self, expanded: "CommandNode") -> "CommandNode":
        """Return a copy of this stub enriched with its own expansion.

        Children, options and arguments come from ``expanded``. The stub keeps
        its name, and keeps its description unless that description is empty.
        """
        return self.model_copy(
            update={
                "subcommands": list(expanded.subcommands),
                "options": list(expanded.options),
                "arguments": list(expanded.arguments),
                "description": self.description or expanded.description,
            }
        )

    def walk(self, depth: int = 0):
        """Yield (node, depth) pairs in pre-order."""
        yield self, depth
        for sub in self.subcommands:
            yield from sub.walk(depth + 1)


def count_commands(node: CommandNode) -> int:
    """Count a node and all of its descendants."""
    return 1 + sum(count_commands(sub) for sub in node.subcommands)


def now_millis() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class CommandCache(BaseModel):
    """A persisted discovery result.

    A missing or non-numeric timestamp makes the cache invalid.
    """

    command: str = Field(min_length=1)
    timestamp: StrictInt | StrictFloat  # epoch millis
    data: CommandNode
