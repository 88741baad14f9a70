"""Rich renderings of discovered commands and synthesized tools."""

import json

from rich.table import Table
from rich.tree import Tree

from anycli.models import CommandNode
from anycli.tools.base import ToolDescriptor


def _label(node: CommandNode) -> str:
    label = f"[bold cyan]{node.name}[/bold cyan]"
    if node.description:
        label += f" [dim]{node.description}[/dim]"
    if node.options:
        label += f" [green]({len(node.options)} options)[/green]"
    return label


def render_tree(root: CommandNode) -> Tree:
    """Build a rich Tree mirroring the command hierarchy."""
    tree = Tree(_label(root))

    def add(branch: Tree, node: CommandNode) -> None:
        for sub in node.subcommands:
            add(branch.add(_label(sub)), sub)

    add(tree, root)
    return tree


def render_tools_table(tools: list[ToolDescriptor], title: str = "Tools") -> Table:
    """Build a rich Table listing tools with their parameters."""
    table = Table(title=title)
    table.add_column("Tool", style="cyan")
    table.add_column("Parameters", justify="right")
    table.add_column("Required")
    table.add_column("Description")

    for tool in tools:
        table.add_row(
            tool.name,
            str(len(tool.properties)),
            ", ".join(tool.required),
            tool.description,
        )

    return table


def tools_to_json(tools: list[ToolDescriptor]) -> str:
    """Serialize tools using their wire field names."""
    return json.dumps([tool.to_dict() for tool in tools], indent=2)
