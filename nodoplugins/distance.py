"""HC-SR04 ultrasonic distance reading: ``HCSR04_Read <variable>``."""

from __future__ import annotations

from .events import CommandError, EventType, NodoEvent, get_argv, parse_int

PLUGIN_ID = 22
PLUGIN_NAME = "HCSR04_Read"
ECHO_US_PER_CM = 58


def echo_to_distance(echo_us: float) -> float:
    """Convert an echo pulse length in microseconds to centimetres."""
    if echo_us < 0:
        raise ValueError(f"echo time cannot be negative: {echo_us}")
    return echo_us / ECHO_US_PER_CM


def parse_distance(
    text: str, variable: int | None, user_variables_max: int
) -> NodoEvent | None:
    """Parse an HCSR04_Read command line; None if it names another command.

    ``variable`` is the target variable number, or None to take it from the
    second argument of the line.
    """
    name = get_argv(text, 1)
    if name is None or name.lower() != PLUGIN_NAME.lower():
        return None
    if variable is None:
        argument = get_argv(text, 2)
        if argument is None:
            raise CommandError("HCSR04_Read needs a variable number")
        variable = parse_int(argument)
    if not 0 < variable <= user_variables_max:
        raise CommandError(f"variable out of range: {variable}")
    return NodoEvent(type=EventType.PLUGIN_COMMAND, command=PLUGIN_ID, par1=variable)


def format_distance(event: NodoEvent) -> str:
    """Render an HCSR04_Read event as a command line."""
    return f"{PLUGIN_NAME} {event.par1}"