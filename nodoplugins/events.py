"""Event record and command-line helpers shared by the plugins."""

from __future__ import annotations

import enum
from dataclasses import dataclass

VALUE_OFF = 150
VALUE_ON = 151


class CommandError(ValueError):
    """Raised when a command line names a plugin but its arguments are invalid."""


class EventType(enum.Enum):
    """Kind of a Nodo event."""

    EVENT = enum.auto()
    COMMAND = enum.auto()
    PLUGIN_EVENT = enum.auto()
    PLUGIN_COMMAND = enum.auto()


@dataclass
class NodoEvent:
    """A Nodo event with its command number and two parameters."""

    type: EventType | None = None
    command: int = 0
    par1: int = 0
    par2: int = 0
    source_unit: int = 0
    destination_unit: int = 0
    port: str | None = None
    direction: str | None = None


def _is_printable(char: str) -> bool:
    return bool(char) and 33 <= ord(char) <= 126


def _is_skipped(current: str, following: str) -> bool:
    if current == " " and following in (" ", ","):
        return True
    if current == "," and following == " ":
        return True
    return current in (" ", ",") and _is_printable(following)


def get_argv(text: str, index: int, delimiter: str = ",") -> str | None:
    """Return argument number ``index`` (1-based) of a command line.

    Spaces and commas always separate arguments; ``delimiter`` adds one more
    separator character. Returns None when there are fewer arguments.
    """
    separators = (" ", delimiter, ",")
    count = 0
    current: list[str] = []
    pos = 0
    length = len(text)
    while pos < length:
        char = text[pos]
        following = text[pos + 1] if pos + 1 < length else ""
        if not _is_skipped(char, following):
            if char not in separators:
                current.append(char)
            if following == "" or following in separators:
                count += 1
                if count == index:
                    return "".join(current)
                current = []
                pos += 1
        pos += 1
    return None


def parse_int(text: str) -> int:
    """Parse a decimal or ``0x``-prefixed hexadecimal integer."""
    stripped = text.strip()
    if "_" in stripped:
        raise CommandError(f"not a number: {text!r}")
    try:
        if stripped.lower().startswith("0x"):
            return int(stripped[2:], 16)
        return int(stripped, 10)
    except ValueError:
        raise CommandError(f"not a number: {text!r}") from None


def contains_keyword(text: str, keyword: str) -> bool:
    """Tell whether ``keyword`` occurs in ``text``, ignoring case."""
    return keyword.lower() in text.lower()