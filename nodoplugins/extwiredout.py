"""PCF8574 I2C output expander: ``ExtWiredOut <port>,<On|Off>``.

Port 1 is pin 1 of the chip at 0x20, port 9 pin 1 of the chip at 0x21 and so
on; outputs are active low, so switching a port on clears its bit.
"""

from __future__ import annotations

from .events import (
    VALUE_OFF,
    VALUE_ON,
    CommandError,
    EventType,
    NodoEvent,
    get_argv,
    parse_int,
)

PLUGIN_ID = 25
PLUGIN_NAME = "ExtWiredOut"
BASE_ADDRESS = 0x20
MAX_PORT = 128


def pcf8574_target(port: int) -> tuple[int, int]:
    """Return the I2C address and bit number that drive output ``port``."""
    if not 1 <= port <= MAX_PORT:
        raise ValueError(f"port out of range: {port}")
    unit = (port - 1) // 8
    address = BASE_ADDRESS + unit
    if unit > 7:
        address += 0x10
    return address, port - unit * 8 - 1


def pcf8574_apply(portvalue: int, bit: int, on: bool) -> int:
    """Return the new register value after switching ``bit`` on or off."""
    if on:
        return portvalue & ~(1 << bit) & 0xFF
    return (portvalue | (1 << bit)) & 0xFF


def _on_off(text: str) -> int:
    word = text.lower()
    if word == "on":
        return VALUE_ON
    if word == "off":
        return VALUE_OFF
    raise CommandError(f"expected On or Off, got {text!r}")


def parse_ext_wired_out(text: str) -> NodoEvent | None:
    """Parse an ExtWiredOut command line; None if it names another command."""
    name = get_argv(text, 1)
    if name is None or name.lower() != PLUGIN_NAME.lower():
        return None
    port_text = get_argv(text, 2)
    state_text = get_argv(text, 3)
    if port_text is None or state_text is None:
        raise CommandError("ExtWiredOut needs a port and On or Off")
    port = parse_int(port_text)
    state = _on_off(state_text)
    if not 0 < port <= MAX_PORT:
        raise CommandError(f"port out of range: {port}")
    return NodoEvent(
        type=EventType.PLUGIN_COMMAND, command=PLUGIN_ID, par1=port, par2=state
    )


def format_ext_wired_out(event: NodoEvent) -> str:
    """Render an ExtWiredOut event as a command line."""
    state = "On" if event.par2 == VALUE_ON else "Off"
    return f"{PLUGIN_NAME} {event.par1},{state}"