"""ICMP ping command: ``Ping <result var>,<a.b.c.d>``."""

from __future__ import annotations

from .events import CommandError, EventType, NodoEvent, get_argv, parse_int

PLUGIN_ID = 35
PLUGIN_NAME = "Ping"
PING_TIMEOUT_MS = 1000


def ip_octets(par2: int) -> tuple[int, int, int, int]:
    """Split a packed IPv4 address into its four octets, most significant first."""
    if not 0 <= par2 <= 0xFFFFFFFF:
        raise ValueError(f"not a 32-bit address: {par2}")
    return (
        (par2 >> 24) & 0xFF,
        (par2 >> 16) & 0xFF,
        (par2 >> 8) & 0xFF,
        par2 & 0xFF,
    )


def parse_ping(text: str) -> NodoEvent | None:
    """Parse a Ping command line; None if the line is not a Ping command."""
    name = get_argv(text, 1)
    if name is None or name.lower() != PLUGIN_NAME.lower():
        return None
    variable_text = get_argv(text, 2)
    if variable_text is None:
        raise CommandError("Ping needs a result variable")
    variable = parse_int(variable_text)
    address = 0
    for index in range(3, 7):
        octet_text = get_argv(text, index, ".")
        if octet_text is None:
            raise CommandError("Ping needs a full IPv4 address")
        octet = parse_int(octet_text)
        if not 0 <= octet <= 255:
            raise CommandError(f"address octet out of range: {octet}")
        address = (address << 8) | octet
    return NodoEvent(
        type=EventType.PLUGIN_COMMAND,
        command=PLUGIN_ID,
        par1=variable,
        par2=address,
    )


def format_ping(event: NodoEvent) -> str:
    """Render a Ping event as a command line."""
    address = ".".join(str(octet) for octet in ip_octets(event.par2))
    return f"{PLUGIN_NAME} {event.par1},{address}"