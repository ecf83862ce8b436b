"""PCF8574 input expander and PCF8591 analog input expander.

``ExtWiredIn <port>,<On|Off>`` is the event raised when an input of the
PCF8574 at 0x20 changes; ``ExtWiredAnalog <port>,<variable>`` reads an analog
input of a PCF8591 into a user variable. Analog port 1 is input 1 of the chip
at 0x48, port 5 input 1 of the chip at 0x49 and so on.
"""

from __future__ import annotations

from dataclasses import dataclass

from .events import (
    VALUE_OFF,
    VALUE_ON,
    CommandError,
    EventType,
    NodoEvent,
    get_argv,
    parse_int,
)

WIRED_IN_ID = 26
WIRED_IN_NAME = "ExtWiredIn"
WIRED_IN_ADDRESS = 0x20
WIRED_IN_MAX_PORT = 64

ANALOG_ID = 29
ANALOG_NAME = "ExtWiredAnalog"
ANALOG_BASE_ADDRESS = 0x48
ANALOG_MAX_PORT = 32


def pcf8591_target(port: int) -> tuple[int, int]:
    """Return the I2C address and input channel of analog ``port``."""
    if not 1 <= port <= ANALOG_MAX_PORT:
        raise ValueError(f"port out of range: {port}")
    unit = (port - 1) // 4
    return ANALOG_BASE_ADDRESS + unit, port - unit * 4 - 1


@dataclass
class InputExpanderMonitor:
    """Tracks the PCF8574 input byte and reports changed pins as events."""

    value: int = 0

    def update(self, value: int) -> list[NodoEvent]:
        """Take a new input byte; return one event per pin that changed.

        A pin that reads high is reported as Off, a low pin as On.
        """
        if not 0 <= value <= 0xFF:
            raise ValueError(f"not a byte: {value}")
        changed = self.value ^ value
        events = [
            NodoEvent(
                type=EventType.PLUGIN_EVENT,
                command=WIRED_IN_ID,
                par1=bit + 1,
                par2=VALUE_OFF if value & (1 << bit) else VALUE_ON,
            )
            for bit in range(8)
            if changed & (1 << bit)
        ]
        self.value = value
        return events


def _on_off(text: str) -> int:
    word = text.lower()
    if word == "on":
        return VALUE_ON
    if word == "off":
        return VALUE_OFF
    raise CommandError(f"expected On or Off, got {text!r}")


def _two_arguments(text: str, name: str) -> tuple[str, str] | None:
    command = get_argv(text, 1)
    if command is None or command.lower() != name.lower():
        return None
    first = get_argv(text, 2)
    second = get_argv(text, 3)
    if first is None or second is None:
        raise CommandError(f"{name} needs two arguments")
    return first, second


def parse_ext_wired_in(text: str) -> NodoEvent | None:
    """Parse an ExtWiredIn line; None if it names another command."""
    arguments = _two_arguments(text, WIRED_IN_NAME)
    if arguments is None:
        return None
    port = parse_int(arguments[0])
    state = _on_off(arguments[1])
    if not 0 < port <= WIRED_IN_MAX_PORT:
        raise CommandError(f"port out of range: {port}")
    return NodoEvent(
        type=EventType.PLUGIN_EVENT, command=WIRED_IN_ID, par1=port, par2=state
    )


def format_ext_wired_in(event: NodoEvent) -> str:
    """Render an ExtWiredIn event as a command line."""
    state = "On" if event.par2 == VALUE_ON else "Off"
    return f"{WIRED_IN_NAME} {event.par1},{state}"


def parse_ext_wired_analog(text: str, user_variables_max: int) -> NodoEvent | None:
    """Parse an ExtWiredAnalog line; None if it names another command."""
    arguments = _two_arguments(text, ANALOG_NAME)
    if arguments is None:
        return None
    port = parse_int(arguments[0])
    variable = parse_int(arguments[1])
    if not 0 < port <= ANALOG_MAX_PORT:
        raise CommandError(f"port out of range: {port}")
    if not 0 <= variable <= user_variables_max:
        raise CommandError(f"variable out of range: {variable}")
    return NodoEvent(
        type=EventType.PLUGIN_COMMAND, command=ANALOG_ID, par1=port, par2=variable
    )


def format_ext_wired_analog(event: NodoEvent) -> str:
    """Render an ExtWiredAnalog event as a command line."""
    return f"{ANALOG_NAME} {event.par1},{event.par2}"