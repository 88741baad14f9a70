"""Rebuild a wrapped program's argument list from a tool call."""

import json
import re
from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from .synthesis import to_kebab_case

# Parameter carrying pre-lexed tokens that replace everything else
RAW_ARGS_KEY = "_raw"

BOOLEAN_PREFIXES: tuple[str, ...] = ("is", "has", "with", "no", "enable", "disable")


@runtime_checkable
class PositionalStrategy(Protocol):
    """Decides whether a valued parameter is passed bare instead of as a flag."""

    def is_positional(self, key: str) -> bool: ...


class HeuristicPositionalStrategy:
    """Pattern-based guess for CLIs whose schema is unknown.

    A key is positional when it does not start with a boolean-ish prefix,
    has no underscore, is longer than one character, is not all upper-case,
    and is a single lower-case word. camelCase keys come from multi-word
    long options such as ``--resource-group`` and stay flags.
    """

    def __init__(self, boolean_prefixes: Iterable[str] = BOOLEAN_PREFIXES) -> None:
        self._prefix = re.compile(
            r"^(" + "|".join(re.escape(p) for p in boolean_prefixes) + r")", re.IGNORECASE
        )

    def is_positional(self, key: str) -> bool:
        return (
            not self._prefix.match(key)
            and "_" not in key
            and len(key) > 1
            and key != key.upper()
            and key == key.lower()
        )


class SchemaPositionalStrategy:
    """Uses the positionals declared in a tool's help, falling back to a heuristic."""

    def __init__(
        self,
        positionals: Iterable[str],
        options: Iterable[str] = (),
        fallback: PositionalStrategy | None = None,
    ) -> None:
        self._positionals = set(positionals)
        self._options = set(options)
        self._fallback = fallback or HeuristicPositionalStrategy()

    def is_positional(self, key: str) -> bool:
        if key in self._positionals:
            return True
        if key in self._options:
            return False
        return self._fallback.is_positional(key)


def _stringify(value: Any) -> str:
    if isinstance(value, list | tuple):
        return ",".join(str(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value)
    return str(value)


def split_tool_name(base_command: str, tool_name: str) -> list[str]:
    """Split a hyphen-joined tool name into subcommand path tokens."""
    parts = [p for p in tool_name.split("-") if p]
    if parts and parts[0] == base_command:
        parts = parts[1:]
    return parts


class ArgumentReconstructor:
    """Maps named tool parameters back onto command-line tokens."""

    def __init__(self, strategy: PositionalStrategy | None = None) -> None:
        self.strategy = strategy or HeuristicPositionalStrategy()

    def reconstruct(
        self,
        base_command: str,
        tool_name: str,
        parameters: Mapping[str, Any],
        path: list[str] | None = None,
        strategy: PositionalStrategy | None = None,
    ) -> list[str]:
        """Build the tokens that follow ``base_command``.

        Args:
            base_command: The wrapped program
            tool_name: Hyphen-joined tool name
            parameters: Parameter values from the call
            path: Exact subcommand path, when known; avoids splitting
                names that contain hyphens
            strategy: Positional strategy overriding the default for this call

        Returns:
            Subcommand path, then flags and positionals in parameter order
        """
        raw = parameters.get(RAW_ARGS_KEY)
        if raw is not None and isinstance(raw, list | tuple):
            return [str(token) for token in raw]

        strategy = strategy or self.strategy
        tokens = list(path) if path is not None else split_tool_name(base_command, tool_name)

        for key, value in parameters.items():
            if value is None or key == RAW_ARGS_KEY:
                continue

            flag = f"-{key}" if len(key) == 1 else f"--{to_kebab_case(key)}"

            if isinstance(value, bool):
                if value:
                    tokens.append(flag)
            elif len(key) == 1 or not strategy.is_positional(key):
                tokens.extend([flag, _stringify(value)])
            else:
                tokens.append(_stringify(value))

        return tokens


def reconstruct_arguments(
    base_command: str, tool_name: str, parameters: Mapping[str, Any]
) -> list[str]:
    """Reconstruct tokens with the default heuristic strategy."""
    return ArgumentReconstructor().reconstruct(base_command, tool_name, parameters)
