"""Output formatting for tool results, command trees and tool listings."""

from .text import EMPTY_OUTPUT_MESSAGE, format_command_response, format_error_response
from .tree import render_tools_table, render_tree, tools_to_json

__all__ = [
    "EMPTY_OUTPUT_MESSAGE",
    "format_command_response",
    "format_error_response",
    "render_tree",
    "render_tools_table",
    "tools_to_json",
]
