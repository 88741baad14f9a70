"""Tests for rebuilding command-line tokens from tool parameters."""

import pytest

from anycli.tools.arguments import (
    RAW_ARGS_KEY,
    ArgumentReconstructor,
    HeuristicPositionalStrategy,
    SchemaPositionalStrategy,
    reconstruct_arguments,
    split_tool_name,
)


class TestReconstructArguments:
    """Test the default reconstruction rules."""

    def test_az_vm_create(self):
        tokens = reconstruct_arguments(
            "az",
            "vm-create",
            {"name": "x", "resourceGroup": "rg1", "generateSshKeys": True},
        )

        assert tokens[:2] == ["vm", "create"]
        assert tokens == ["vm", "create", "x", "--resource-group", "rg1", "--generate-ssh-keys"]

    def test_raw_passthrough(self):
        """Raw tokens replace everything else."""
        tokens = reconstruct_arguments(
            "az", "vm-list", {RAW_ARGS_KEY: ["vm", "list", "--output", "table"], "name": "x"}
        )

        assert tokens == ["vm", "list", "--output", "table"]

    def test_base_command_prefix_dropped(self):
        assert reconstruct_arguments("az", "az-vm-list", {}) == ["vm", "list"]

    def test_root_tool(self):
        """The base-command tool adds no path."""
        assert reconstruct_arguments("az", "az", {"version": True}) == ["--version"]

    def test_single_character_keys(self):
        """One-letter keys always use the short form."""
        tokens = reconstruct_arguments("az", "vm-list", {"g": "rg1", "v": True})

        assert tokens == ["vm", "list", "-g", "rg1", "-v"]

    def test_false_and_none_are_skipped(self):
        tokens = reconstruct_arguments(
            "gh", "pr-list", {"web": False, "state": None, "draft": True}
        )

        assert tokens == ["pr", "list", "--draft"]

    def test_prefixed_keys_stay_flags(self):
        """Boolean-ish prefixes and underscores are never positional."""
        tokens = reconstruct_arguments(
            "tool", "run", {"withImage": "ubuntu", "no_cache": "1", "isDefault": "yes"}
        )

        assert tokens == [
            "run",
            "--with-image",
            "ubuntu",
            "--no_cache",
            "1",
            "--is-default",
            "yes",
        ]

    def test_non_string_values(self):
        """Numbers, lists and objects are stringified."""
        tokens = ArgumentReconstructor().reconstruct(
            "tool",
            "run",
            {"count": 3, "tags": ["a", "b"], "labels": {"env": "dev"}},
            strategy=SchemaPositionalStrategy([], options=["count", "tags", "labels"]),
        )

        assert tokens == ["run", "--count", "3", "--tags", "a,b", "--labels", '{"env": "dev"}']

    def test_explicit_path(self):
        """A known path keeps hyphenated subcommand names intact."""
        tokens = ArgumentReconstructor().reconstruct(
            "kubectl", "set-image", {}, path=["set-image"]
        )

        assert tokens == ["set-image"]


class TestSplitToolName:
    def test_split(self):
        assert split_tool_name("gh", "pr-list") == ["pr", "list"]
        assert split_tool_name("gh", "gh") == []
        assert split_tool_name("gh", "") == []


class TestPositionalStrategies:
    """Test the pluggable positional strategies."""

    @pytest.mark.parametrize("key", ["name", "target", "file"])
    def test_heuristic_positional(self, key: str):
        assert HeuristicPositionalStrategy().is_positional(key) is True

    @pytest.mark.parametrize(
        "key", ["resourceGroup", "isDefault", "hasTag", "my_key", "x", "ID", "enableLogs"]
    )
    def test_heuristic_flag(self, key: str):
        assert HeuristicPositionalStrategy().is_positional(key) is False

    def test_custom_prefixes(self):
        strategy = HeuristicPositionalStrategy(boolean_prefixes=["skip"])

        assert strategy.is_positional("skipped") is False
        assert strategy.is_positional("isolated") is True

    def test_schema_strategy(self):
        """Declared positionals and options override the heuristic."""
        strategy = SchemaPositionalStrategy(["resourceGroup"], options=["name"])

        assert strategy.is_positional("resourceGroup") is True
        assert strategy.is_positional("name") is False
        assert strategy.is_positional("target") is True

    def test_strategy_injection(self):
        """The reconstructor uses its injected strategy."""
        reconstructor = ArgumentReconstructor(SchemaPositionalStrategy([], options=["name"]))

        assert reconstructor.reconstruct("az", "vm-create", {"name": "x"}) == [
            "vm",
            "create",
            "--name",
            "x",
        ]
