"""Syslog host selection: ``SysLog <last octet of host address>``."""

from __future__ import annotations

from .events import CommandError, EventType, NodoEvent, get_argv, parse_int

PLUGIN_ID = 31
PLUGIN_NAME = "SysLog"
SYSLOG_PORT = 514


def parse_syslog(text: str) -> NodoEvent | None:
    """Parse a SysLog command line; None if it names another command."""
    name = get_argv(text, 1)
    if name is None or name.lower() != PLUGIN_NAME.lower():
        return None
    argument = get_argv(text, 2)
    if argument is None:
        raise CommandError("SysLog needs a host number")
    host = parse_int(argument)
    if not 0 <= host <= 255:
        raise CommandError(f"host number out of range: {host}")
    return NodoEvent(type=EventType.PLUGIN_COMMAND, command=PLUGIN_ID, par1=host)


def format_syslog(event: NodoEvent) -> str:
    """Render a SysLog event as a command line."""
    return f"{PLUGIN_NAME} {event.par1}"