"""Tests for output formatting."""

import json

from rich.console import Console

from anycli.output import (
    EMPTY_OUTPUT_MESSAGE,
    format_command_response,
    format_error_response,
    render_tools_table,
    render_tree,
    tools_to_json,
)
from anycli.tools.base import CommandResult
from anycli.tools.synthesis import convert_command_to_tools


class TestFormatCommandResponse:
    """Test formatting of wrapped-program results."""

    def test_stdout_only(self):
        result = CommandResult(stdout="vm1\nvm2\n", stderr="", exit_code=0)

        assert format_command_response(result) == "vm1\nvm2\n"

    def test_stdout_and_stderr(self):
        result = CommandResult(stdout="partial", stderr="warning: slow", exit_code=0)

        assert format_command_response(result) == "partial\n\nErrors:\nwarning: slow"

    def test_failure_with_stderr(self):
        result = CommandResult(stdout="", stderr="not found", exit_code=3)

        assert format_command_response(result) == "not found\n\nExit code: 3"

    def test_everything(self):
        result = CommandResult(stdout="out", stderr="err", exit_code=1)

        assert format_command_response(result) == "out\n\nErrors:\nerr\n\nExit code: 1"

    def test_empty_success(self):
        result = CommandResult(stdout="", stderr="", exit_code=0)

        assert format_command_response(result) == EMPTY_OUTPUT_MESSAGE

    def test_error_response(self):
        assert format_error_response(RuntimeError("boom")) == "Error executing command: boom"


class TestRichRendering:
    """Test tree and table rendering."""

    def render(self, renderable) -> str:
        console = Console(width=120, record=True)
        with console.capture() as capture:
            console.print(renderable)
        return capture.get()

    def test_render_tree(self, az_tree):
        text = self.render(render_tree(az_tree))

        assert "az" in text
        assert "vm" in text
        assert "create" in text
        assert "Create a virtual machine" in text

    def test_render_tools_table(self, az_tree):
        tools = convert_command_to_tools(az_tree, "az")

        text = self.render(render_tools_table(tools, title="Tools for az"))

        assert "Tools for az" in text
        assert "vm-create" in text

    def test_tools_to_json(self, az_tree):
        tools = convert_command_to_tools(az_tree, "az")

        data = json.loads(tools_to_json(tools))

        assert [t["name"] for t in data] == ["az", "vm", "vm-create", "vm-list"]
        assert data[2]["inputSchema"]["required"] == ["name"]
