"""Flatten a discovered command tree into a list of invocable tools."""

import re
from typing import Any

from anycli.models import CommandNode, Option

from .base import ToolDescriptor

# Runaway-recursion guard on path segments below the base command
MAX_TOOL_DEPTH = 10


def to_camel_case(value: str) -> str:
    """Convert kebab-case to camelCase ("resource-group" -> "resourceGroup")."""
    return re.sub(r"-([a-z])", lambda m: m.group(1).upper(), value)


def to_kebab_case(value: str) -> str:
    """Convert camelCase back to kebab-case ("resourceGroup" -> "resource-group")."""
    return re.sub(r"[A-Z]", lambda m: f"-{m.group(0).lower()}", value)


def _property(type_: str, description: str) -> dict[str, str]:
    return {"type": type_, "description": description}


def option_property_names(option: Option) -> list[str]:
    """Property names an option contributes: camelCase long form, then short alias."""
    names = [to_camel_case(option.name.lstrip("-"))]
    if option.short_name:
        names.append(option.short_name.lstrip("-"))
    return names


def _add_option(properties: dict[str, Any], option: Option) -> None:
    prop_name, *aliases = option_property_names(option)
    type_ = "string" if option.value_required else "boolean"
    properties[prop_name] = _property(type_, option.description)

    for alias in aliases:
        properties[alias] = _property(type_, f"Alias for {prop_name}")


def create_input_schema(command: CommandNode) -> dict[str, Any]:
    """Build a JSON-Schema object from a node's options and positionals.

    Options become ``string`` properties when they take a value, ``boolean``
    otherwise; a short form adds an independent alias property. Positionals
    become ``string`` properties, listed under ``required`` when mandatory.
    """
    properties: dict[str, Any] = {}
    required: list[str] = []

    for option in command.options:
        _add_option(properties, option)

    for arg in command.arguments:
        prop_name = to_camel_case(arg.name)
        properties[prop_name] = _property("string", arg.description)
        if arg.required:
            required.append(prop_name)

    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


class ToolSynthesizer:
    """Walks a CommandNode tree in pre-order and emits unique tools."""

    def __init__(self, base_command: str, max_depth: int = MAX_TOOL_DEPTH) -> None:
        self.base_command = base_command
        self.max_depth = max_depth

    def synthesize(self, root: CommandNode) -> list[ToolDescriptor]:
        """Flatten ``root`` into tools; the first tool with a given name wins."""
        tools = [self._descriptor(self.base_command, root, [])]
        seen = {self.base_command}

        for sub in root.subcommands:
            self._visit(sub, [], tools, seen)

        return tools

    def _descriptor(self, name: str, node: CommandNode, path: list[str]) -> ToolDescriptor:
        return ToolDescriptor(
            name=name,
            description=node.description or f"Execute {name} command",
            input_schema=create_input_schema(node),
            path=list(path),
            positionals=[to_camel_case(arg.name) for arg in node.arguments],
            flags=[n for option in node.options for n in option_property_names(option)],
        )

    def _visit(
        self,
        node: CommandNode,
        parent_path: list[str],
        tools: list[ToolDescriptor],
        seen: set[str],
    ) -> None:
        path = [p for p in [*parent_path, node.name] if p != self.base_command]

        if path:
            name = "-".join(path)
            if name not in seen:
                seen.add(name)
                tools.append(self._descriptor(name, node, path))

        if len(path) < self.max_depth:
            for sub in node.subcommands:
                self._visit(sub, path, tools, seen)


def convert_command_to_tools(root: CommandNode, base_command: str) -> list[ToolDescriptor]:
    """Synthesize the ordered, de-duplicated tool list for a tree."""
    return ToolSynthesizer(base_command).synthesize(root)
