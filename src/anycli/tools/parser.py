"""Heuristic parsing of free-form CLI help text into a CommandNode.

There is no grammar for help output, so parsing is line oriented:

1. The first meaningful line becomes the description.
2. Lines matching a section header split the text into named sections.
3. Command-like sections are scanned for ``name  description`` entries,
   with indented continuation lines folded into the description.
4. Argument sections yield ``<required>`` / ``[optional]`` positionals.
5. Flag rows anywhere in the text become options.

Parsing never raises. Whatever was extracted before an internal failure is
returned, so discovery can keep walking sibling commands.
"""

import logging
import re
from dataclasses import dataclass, field

from anycli.models import CommandNode, Option, PositionalArg

logger = logging.getLogger(__name__)

# Headers that open a section of subcommand entries
COMMAND_HEADERS: tuple[str, ...] = (
    r"Commands?",
    r"Subcommands?",
    r"Subgroups",
    r"Available commands?",
    r"CORE COMMANDS",
    r"ACTIONS COMMANDS",
    r"ALIAS COMMANDS",
    r"ADDITIONAL COMMANDS",
    r"GENERAL COMMANDS",
    r"TARGETED COMMANDS",
)

# Headers that close a command section without opening a new one of interest,
# or that open an argument section
SECTION_HEADERS: tuple[str, ...] = (
    r"Arguments?",
    r"Args",
    r"Positional arguments?",
    r"Options?",
    r"Flags?",
    r"Global (?:options|flags)",
    r"Examples?",
    r"Environment(?: variables)?",
    r"See also",
    r"Learn more",
    r"Aliases",
)

# Generic English words and documentation jargon that look like entries
INVALID_COMMAND_NAMES: frozenset[str] = frozenset(
    {
        "of", "the", "and", "or", "to", "from", "for", "with", "by", "in",
        "on", "at", "is", "it", "if", "an", "as", "be", "this", "that",
        "when", "use", "see", "all", "more", "information", "using",
        "values", "server", "service", "machine", "deprecated", "caches",
        "catalog", "format", "cp", "co", "was", "contents", "certificate",
        "command", "subcommand", "option", "flag", "argument", "description",
        "example", "examples", "usage", "help", "version", "note", "default",
    }
)  # fmt: skip

# Lines that are headings rather than a description
GENERIC_HEADERS: frozenset[str] = frozenset({"Group", "Command"})

COMMAND_NAME_PATTERN = re.compile(r"^[a-z][a-zA-Z0-9_-]*$")
COMMAND_ENTRY_PATTERN = re.compile(r"^\s+([a-z][a-zA-Z0-9_-]*)(?:\s*:)?\s+(.+)")
ARGUMENT_ENTRY_PATTERN = re.compile(r"^\s*([<\[])(.+?)[>\]]\s+(.+)")

# "-h, --help", "--output <file>", "-n NAME", "--name=value"
_FLAG_ROW = re.compile(r"^\s*(-{1,2}[a-zA-Z0-9].*)$")
_HEAD_SPLIT = re.compile(r"\s{2,}|\t|\s+:\s+")
_LONG_FLAG = re.compile(r"^--([a-zA-Z0-9][\w.-]*)$")
_SHORT_FLAG = re.compile(r"^-[a-zA-Z0-9?]$")
# Status tags such as "[Required]" or "[Preview]" printed after the flags
_FLAG_MARKER = re.compile(r"^\[[A-Z][a-z]+\]$")

# Cobra leaf listing: a "Command" line, then an indented row of words
_COBRA_COMMAND_ROW = re.compile(r"^Command[ \t]*\n[ \t]+\w+(?:[ \t]+\w+)+\s", re.MULTILINE)

_DESCRIPTION_SKIP_PREFIXES = ("Usage:", "Options:", "Commands:")


@dataclass(frozen=True)
class HelpVocabulary:
    """Static word lists driving the heuristics.

    Attributes:
        command_headers: Regex fragments for headers that open subcommand sections
        section_headers: Regex fragments for other recognised section headers
        invalid_names: Words rejected as subcommand names (compared lower-case)
        generic_headers: Lines skipped when looking for a description
    """

    command_headers: tuple[str, ...] = COMMAND_HEADERS
    section_headers: tuple[str, ...] = SECTION_HEADERS
    invalid_names: frozenset[str] = INVALID_COMMAND_NAMES
    generic_headers: frozenset[str] = GENERIC_HEADERS


DEFAULT_VOCABULARY = HelpVocabulary()


@dataclass
class HelpSection:
    """A named run of non-empty lines following a header."""

    name: str
    lines: list[str] = field(default_factory=list)
    opened_by_command_header: bool = False

    @property
    def is_command_section(self) -> bool:
        return (
            self.opened_by_command_header
            or "command" in self.name
            or "subgroup" in self.name
        )

    @property
    def is_argument_section(self) -> bool:
        return "argument" in self.name or self.name == "args"


def _has_usage_then_flags(help_text: str) -> bool:
    """True when "Flags:" appears on a line after the first "Usage:" line."""
    usage = help_text.find("Usage:")
    if usage < 0:
        return False
    line_end = help_text.find("\n", usage)
    return line_end >= 0 and help_text.find("Flags:", line_end) >= 0


def validate_command_name(
    name: str, invalid_names: frozenset[str] = INVALID_COMMAND_NAMES
) -> bool:
    """Check whether a candidate entry name is plausibly a subcommand.

    Args:
        name: Candidate name captured from an entry line
        invalid_names: Deny-list of generic words

    Returns:
        True if the name should be kept
    """
    if not name or not isinstance(name, str):
        return False
    if len(name) < 2 or len(name) > 50:
        return False
    if any(ch.isspace() for ch in name):
        return False
    if not COMMAND_NAME_PATTERN.match(name):
        return False
    return name.lower() not in invalid_names


def clean_description(description: str) -> str:
    """Strip a leading colon left over from ``name : description`` entries."""
    description = description.strip()
    if description.startswith(":"):
        description = description[1:].strip()
    return description


class HelpParser:
    """Parses help text using an injected HelpVocabulary."""

    def __init__(self, vocabulary: HelpVocabulary = DEFAULT_VOCABULARY) -> None:
        self.vocabulary = vocabulary
        self._command_header = re.compile(
            r"^\s*(" + "|".join(vocabulary.command_headers) + r")\s*(?::\s*)?$",
            re.IGNORECASE,
        )
        self._section_header = re.compile(
            r"^\s*(" + "|".join(vocabulary.section_headers) + r")\s*(?::\s*)?$",
            re.IGNORECASE,
        )

    def parse(self, help_text: str, command_name: str) -> CommandNode:
        """Parse help text into a CommandNode.

        Args:
            help_text: Raw output of ``<command> --help``
            command_name: Token used to reach this command

        Returns:
            CommandNode with description, options, arguments and subcommand stubs.
            Never raises.
        """
        if not help_text or not command_name:
            return CommandNode.empty(command_name or "unknown")

        description = ""
        options: list[Option] = []
        arguments: list[PositionalArg] = []
        subcommands: list[CommandNode] = []

        try:
            description = self.extract_description(help_text, command_name)
            options = self.extract_options(help_text)
            sections = self.split_sections(help_text)
            arguments = self.extract_arguments(sections)
            if not self.is_terminal_command(help_text):
                subcommands = self.extract_subcommands(sections)
        except Exception as e:
            logger.warning("Error parsing help for %s: %s", command_name, e)

        return CommandNode(
            name=command_name,
            description=description,
            subcommands=subcommands,
            options=options,
            arguments=arguments,
        )

    def extract_description(self, help_text: str, command_name: str) -> str:
        """Return the first line that is not a header, usage line or the name."""
        for line in help_text.splitlines():
            stripped = line.strip()
            if not stripped or stripped in self.vocabulary.generic_headers:
                continue
            if stripped == command_name:
                continue
            if stripped.startswith(_DESCRIPTION_SKIP_PREFIXES):
                continue
            return stripped
        return ""

    def is_header(self, line: str) -> bool:
        return bool(self._command_header.match(line) or self._section_header.match(line))

    def split_sections(self, help_text: str) -> list[HelpSection]:
        """Split text into sections keyed by lower-cased header name."""
        sections: list[HelpSection] = []
        current: HelpSection | None = None

        for line in help_text.splitlines():
            command_match = self._command_header.match(line)
            match = command_match or self._section_header.match(line)
            if match:
                current = HelpSection(
                    name=match.group(1).lower(),
                    opened_by_command_header=command_match is not None,
                )
                sections.append(current)
                continue
            if current is not None and line.strip():
                current.lines.append(line)

        return sections

    def is_terminal_command(self, help_text: str) -> bool:
        """Detect leaf commands whose listings must not be read as subcommands."""
        generic = self.vocabulary.generic_headers
        for line in help_text.splitlines():
            # A bare "Command" heading introduces a usage row, not a listing
            if self._command_header.match(line) and line.strip() not in generic:
                return False
        return _has_usage_then_flags(help_text) or bool(_COBRA_COMMAND_ROW.search(help_text))

    def extract_subcommands(self, sections: list[HelpSection]) -> list[CommandNode]:
        """Extract subcommand stubs from command-like sections, in text order."""
        subcommands: list[CommandNode] = []

        for section in sections:
            if not section.is_command_section:
                continue
            lines = section.lines
            i = 0
            while i < len(lines):
                match = COMMAND_ENTRY_PATTERN.match(lines[i])
                if not match or not validate_command_name(
                    match.group(1), self.vocabulary.invalid_names
                ):
                    i += 1
                    continue

                description, end = self._continue_description(
                    lines, i, clean_description(match.group(2))
                )
                subcommands.append(CommandNode(name=match.group(1), description=description))
                i = end + 1

        return subcommands

    def _continue_description(
        self, lines: list[str], start: int, description: str
    ) -> tuple[str, int]:
        """Fold indented continuation lines into an entry's description.

        Returns:
            Tuple of (description, index of the last consumed line)
        """
        i = start + 1
        while i < len(lines):
            line = lines[i]
            stripped = line.strip()
            if not stripped or COMMAND_ENTRY_PATTERN.match(line) or self.is_header(line):
                break
            if not line[:1].isspace():
                break
            description = f"{description} {stripped}" if description else stripped
            i += 1
        return description, i - 1

    def extract_arguments(self, sections: list[HelpSection]) -> list[PositionalArg]:
        """Extract positionals from argument sections."""
        arguments: list[PositionalArg] = []
        for section in sections:
            if not section.is_argument_section:
                continue
            for line in section.lines:
                match = ARGUMENT_ENTRY_PATTERN.match(line)
                if match:
                    arguments.append(
                        PositionalArg(
                            name=match.group(2).strip(),
                            description=match.group(3).strip(),
                            required=match.group(1) == "<",
                        )
                    )
        return arguments

    def extract_options(self, help_text: str) -> list[Option]:
        """Extract flag rows from anywhere in the text.

        The first row declaring a given canonical name wins.
        """
        options: list[Option] = []
        seen: set[str] = set()

        for line in help_text.splitlines():
            option = parse_option_line(line)
            if option is None or option.name in seen:
                continue
            seen.add(option.name)
            options.append(option)

        return options


def parse_option_line(line: str) -> Option | None:
    """Parse one flag row such as ``-o, --output <file>   Write to file``.

    Returns:
        Option, or None if the line is not a flag row
    """
    match = _FLAG_ROW.match(line)
    if not match:
        return None

    parts = _HEAD_SPLIT.split(match.group(1).strip(), maxsplit=1)
    head = parts[0].replace("[=", " [")
    description = parts[1].strip() if len(parts) > 1 else ""

    long_name: str | None = None
    short_name: str | None = None
    value_name: str | None = None

    for token in re.split(r"[\s,=]+", head):
        if not token or _FLAG_MARKER.match(token):
            continue
        if _LONG_FLAG.match(token):
            long_name = long_name or token
        elif _SHORT_FLAG.match(token):
            short_name = short_name or token
        elif token.startswith("-"):
            # Malformed flag like "--[no-]color"
            return None
        elif value_name is None:
            value_name = token.strip("<>[]{}")
        elif token.strip("<>[]{}") == value_name:
            continue
        else:
            # A second bare word means prose rather than a flag row
            return None

    if long_name is None and short_name is None:
        return None
    if long_name is None:
        long_name, short_name = short_name, None

    return Option(
        name=long_name,
        short_name=short_name,
        description=clean_description(description),
        value_required=value_name is not None,
        value_name=value_name or None,
    )


_default_parser = HelpParser()


def parse_help_text(help_text: str, command_name: str) -> CommandNode:
    """Parse help text with the default vocabulary."""
    return _default_parser.parse(help_text, command_name)
