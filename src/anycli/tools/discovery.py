"""Recursive discovery of a command tree from help output.

The tree is walked breadth-first per node: a node's subcommand stubs are
split into batches, each batch is expanded concurrently, and the next batch
starts only once every branch of the previous one has settled. A semaphore
sized to the batch caps help acquisitions in flight across nested levels.

Failures are local. If help for a node cannot be acquired or parsed, that
node becomes an empty default and its siblings are still explored.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from anycli.models import CommandNode

from .cli import CLITool
from .parser import HelpParser

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 1  # interactive startup
BUILD_MAX_DEPTH = 3  # explicit cache build
DEFAULT_BATCH_SIZE = 20
DEFAULT_PROGRESS_INTERVAL = 10


@runtime_checkable
class HelpProvider(Protocol):
    """Anything that can produce help text for a subcommand path."""

    async def get_help(self, args: list[str] | None = None) -> str:
        """Return help text for ``<base command> *args``.

        Raises:
            Exception: Any failure; discovery treats it as a local failure
        """
        ...


class DiscoveryEngine:
    """Builds a CommandNode tree by repeatedly acquiring and parsing help."""

    def __init__(
        self,
        base_command: str,
        help_provider: HelpProvider | None = None,
        parser: HelpParser | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
        on_progress: Callable[[int], None] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            base_command: Command whose tree is discovered
            help_provider: Source of help text (default: CLITool for base_command)
            parser: Help parser (default vocabulary if omitted)
            batch_size: Maximum concurrent help acquisitions
            progress_interval: Report progress every N discovered nodes
            on_progress: Optional callback receiving the discovered count
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.base_command = base_command
        self._help = help_provider if help_provider is not None else CLITool(base_command)
        self._parser = parser or HelpParser()
        self._batch_size = batch_size
        self._progress_interval = max(progress_interval, 1)
        self._on_progress = on_progress
        self._memo: dict[str, CommandNode] = {}
        self._discovered = 0
        self._max_depth = DEFAULT_MAX_DEPTH
        self._semaphore = asyncio.Semaphore(batch_size)

    @property
    def discovered_count(self) -> int:
        """Number of nodes whose help was acquired and parsed."""
        return self._discovered

    async def discover(self, max_depth: int = DEFAULT_MAX_DEPTH) -> CommandNode:
        """Discover the full tree below the base command.

        Args:
            max_depth: Deepest path length (root = 0) kept in the result

        Returns:
            The populated root CommandNode
        """
        self._memo = {}
        self._discovered = 0
        self._max_depth = max(max_depth, 0)
        self._semaphore = asyncio.Semaphore(self._batch_size)

        root = await self._expand([], 0)
        logger.info("Total commands discovered: %d", self._discovered)
        return root

    def _key(self, args: list[str]) -> str:
        return " ".join([self.base_command, *args]).strip()

    def _default(self, args: list[str]) -> CommandNode:
        return CommandNode.empty(args[-1] if args else self.base_command)

    async def _expand(self, args: list[str], depth: int) -> CommandNode:
        """Acquire, parse and recursively expand the node at ``args``."""
        key = self._key(args)
        if key in self._memo or depth > self._max_depth:
            return self._memo.get(key) or self._default(args)

        # Placeholder so concurrent or cyclic revisits resolve immediately
        self._memo[key] = self._default(args)

        try:
            async with self._semaphore:
                help_text = await self._help.get_help(args)
            name = args[-1] if args else self.base_command
            node = self._parser.parse(help_text, name)
        except Exception as e:
            logger.debug("Help unavailable for %s: %s", key, e)
            return self._memo[key]

        self._memo[key] = node
        self._record_progress()

        if depth < self._max_depth:
            node = node.model_copy(
                update={"subcommands": await self._expand_children(node, args, depth)}
            )
        elif node.subcommands:
            node = node.model_copy(update={"subcommands": []})

        self._memo[key] = node
        return node

    async def _expand_children(
        self, node: CommandNode, args: list[str], depth: int
    ) -> list[CommandNode]:
        """Expand subcommand stubs batch by batch, preserving parse order."""
        children = list(node.subcommands)

        for start in range(0, len(children), self._batch_size):
            batch = children[start : start + self._batch_size]
            expanded = await asyncio.gather(
                *(self._expand_child(stub, args, depth) for stub in batch)
            )
            for offset, merged in enumerate(expanded):
                children[start + offset] = merged

        return children

    async def _expand_child(
        self, stub: CommandNode, args: list[str], depth: int
    ) -> CommandNode:
        sub_args = [*args, stub.name]
        logger.debug("Discovering: %s", " ".join([self.base_command, *sub_args]))
        try:
            expanded = await self._expand(sub_args, depth + 1)
        except Exception as e:
            logger.debug("Discovery failed for %s: %s", stub.name, e)
            return stub
        return stub.merged_with(expanded)

    def _record_progress(self) -> None:
        self._discovered += 1
        if self._discovered % self._progress_interval == 0:
            logger.info("Progress: %d commands discovered...", self._discovered)
            if self._on_progress is not None:
                self._on_progress(self._discovered)


async def discover_all_commands(
    base_command: str,
    max_depth: int = 2,
    help_provider: HelpProvider | None = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
    parser: HelpParser | None = None,
) -> CommandNode:
    """Discover the command tree for ``base_command``.

    Args:
        base_command: Program to discover
        max_depth: Deepest path length kept in the result
        help_provider: Source of help text (default: subprocess)
        batch_size: Maximum concurrent help acquisitions
        parser: Help parser to use

    Returns:
        Populated root CommandNode
    """
    engine = DiscoveryEngine(
        base_command,
        help_provider=help_provider,
        parser=parser,
        batch_size=batch_size,
    )
    return await engine.discover(max_depth)
