"""Persistence of discovered command trees as JSON cache files."""

import json
import logging
import re
from pathlib import Path

from pydantic import ValidationError

from anycli.models import CommandCache, CommandNode, count_commands, now_millis
from anycli.tools.base import CacheError

logger = logging.getLogger(__name__)


def get_cache_file_name(command: str) -> str:
    """Derive a cache file name from a command string.

    Every character outside ``[a-zA-Z0-9-_]`` becomes ``_``.
    """
    sanitized = re.sub(r"[^a-zA-Z0-9\-_]", "_", command)
    return f"{sanitized}_cache.json"


def is_cache_file_name(value: str) -> bool:
    """Whether a CLI argument looks like a cache file rather than a command."""
    return value.endswith("_cache.json") and not value.startswith("-")


class CacheStorage:
    """Reads and writes CommandCache snapshots.

    Relative paths resolve against ``base_dir`` when one is given, otherwise
    against the current directory.
    """

    def __init__(self, base_dir: Path | None = None):
        self.base_dir = base_dir

    def resolve(self, path: Path | str) -> Path:
        path = Path(path).expanduser()
        if self.base_dir is not None and not path.is_absolute():
            return self.base_dir / path
        return path

    def default_path(self, command: str) -> Path:
        """Default cache location for a command."""
        return self.resolve(get_cache_file_name(command))

    def save_snapshot(self, command: str, tree: CommandNode, path: Path | str) -> Path:
        """Write a snapshot of ``tree`` for ``command``.

        Args:
            command: Base command the tree was discovered from
            tree: Discovered root node
            path: Destination file

        Returns:
            Path to the written file

        Raises:
            CacheError: If the file cannot be written
        """
        target = self.resolve(path)
        cache = CommandCache(command=command, timestamp=now_millis(), data=tree)
        content = json.dumps(cache.model_dump(mode="json", by_alias=True), indent=2)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        except OSError as e:
            logger.error("Failed to save cache: %s", e)
            raise CacheError(f"Failed to save cache to {target}: {e}", path=str(target)) from e

        size_kb = len(content.encode("utf-8")) / 1024
        logger.info("Cache saved to %s", target)
        logger.info("  File size: %.1f KB", size_kb)
        logger.info("  Total commands cached: %d", count_commands(tree))
        return target

    def load_snapshot(self, path: Path | str) -> CommandCache | None:
        """Load a snapshot.

        Returns:
            The cache, or None if the file is missing, malformed or invalid
        """
        target = self.resolve(path)
        if not target.exists():
            return None

        try:
            data = json.loads(target.read_text())
            cache = CommandCache.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Failed to load cache %s: %s", target, e)
            return None

        logger.info("Loaded cache for %s (timestamp %d)", cache.command, cache.timestamp)
        return cache

