"""Discovery, synthesis and execution of tools for a wrapped CLI.

This module provides the pipeline that turns a program's help output into
callable tools:

- Help-text parsing (HelpParser, parse_help_text)
- Recursive discovery (DiscoveryEngine, discover_all_commands)
- Tool synthesis (ToolSynthesizer, convert_command_to_tools)
- Argument reconstruction (ArgumentReconstructor, reconstruct_arguments)
- Process execution (CLITool, run_process)

Example:
    from anycli.tools import convert_command_to_tools, discover_all_commands

    root = await discover_all_commands("gh", max_depth=2)
    tools = convert_command_to_tools(root, "gh")
"""

from .arguments import (
    RAW_ARGS_KEY,
    ArgumentReconstructor,
    HeuristicPositionalStrategy,
    PositionalStrategy,
    SchemaPositionalStrategy,
    reconstruct_arguments,
)
from .base import (
    CacheError,
    CommandResult,
    ToolDescriptor,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolValidationError,
)
from .cli import CLITool
from .discovery import (
    BUILD_MAX_DEPTH,
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_DEPTH,
    DiscoveryEngine,
    HelpProvider,
    discover_all_commands,
)
from .parser import (
    DEFAULT_VOCABULARY,
    HelpParser,
    HelpVocabulary,
    parse_help_text,
    validate_command_name,
)
from .process import run_process
from .synthesis import (
    ToolSynthesizer,
    convert_command_to_tools,
    create_input_schema,
    to_camel_case,
    to_kebab_case,
)

__all__ = [
    # Base types
    "CommandResult",
    "ToolDescriptor",
    # Exceptions
    "ToolError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "ToolValidationError",
    "CacheError",
    # Parsing
    "HelpParser",
    "HelpVocabulary",
    "DEFAULT_VOCABULARY",
    "parse_help_text",
    "validate_command_name",
    # Discovery
    "DiscoveryEngine",
    "HelpProvider",
    "discover_all_commands",
    "DEFAULT_MAX_DEPTH",
    "BUILD_MAX_DEPTH",
    "DEFAULT_BATCH_SIZE",
    # Synthesis
    "ToolSynthesizer",
    "convert_command_to_tools",
    "create_input_schema",
    "to_camel_case",
    "to_kebab_case",
    # Reconstruction
    "ArgumentReconstructor",
    "PositionalStrategy",
    "HeuristicPositionalStrategy",
    "SchemaPositionalStrategy",
    "reconstruct_arguments",
    "RAW_ARGS_KEY",
    # Execution
    "CLITool",
    "run_process",
]
