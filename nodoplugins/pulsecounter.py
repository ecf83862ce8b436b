"""Four-way pulse counter on the wired inputs: ``Pulse <counter>,<variable>``.

Reading a counter stores its pulse count in the given variable and the time
between the last two pulses, in milliseconds, in the variable after it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

from .events import CommandError, EventType, NodoEvent, get_argv, parse_int

PLUGIN_ID = 28
PLUGIN_NAME = "Pulse"
COUNTERS = 4
PULSE_TIME_MAX = 999999
_MILLIS_MASK = 0xFFFFFFFF


def _elapsed(now_ms: int, since_ms: int) -> int:
    return (now_ms - since_ms) & _MILLIS_MASK


class PulseReading(NamedTuple):
    """Pulses counted since the last read and the latest pulse interval."""

    count: int
    pulse_time: int


def _zeros() -> list[int]:
    return [0] * COUNTERS


@dataclass
class PulseCounter:
    """Counts falling edges on the four low bits of an input port."""

    counts: list[int] = field(default_factory=_zeros)
    timers: list[int] = field(default_factory=_zeros)
    previous: list[int] = field(default_factory=_zeros)
    states: list[int] = field(default_factory=_zeros)

    def on_port_state(self, portstate: int, now_ms: int) -> None:
        """Record a new input port state seen at ``now_ms``."""
        for bit in range(COUNTERS):
            if portstate & (1 << bit):
                self.states[bit] = 1
                continue
            if self.states[bit] == 1:
                self.counts[bit] += 1
                self.timers[bit] = _elapsed(now_ms, self.previous[bit])
                self.previous[bit] = now_ms
            self.states[bit] = 0

    def read(self, counter: int, now_ms: int) -> PulseReading:
        """Read counter 1 to 4 and reset its pulse count."""
        if not 1 <= counter <= COUNTERS:
            raise IndexError(f"counter out of range: {counter}")
        slot = counter - 1
        count = self.counts[slot]
        self.counts[slot] = 0
        since = _elapsed(now_ms, self.previous[slot])
        if since > self.timers[slot]:
            self.timers[slot] = since
        if self.timers[slot] > PULSE_TIME_MAX:
            self.timers[slot] = PULSE_TIME_MAX
        return PulseReading(count, self.timers[slot])


def parse_pulse(text: str, user_variables_max: int) -> NodoEvent | None:
    """Parse a Pulse command line; None if it names another command."""
    name = get_argv(text, 1)
    if name is None or name.lower() != PLUGIN_NAME.lower():
        return None
    counter_text = get_argv(text, 2)
    variable_text = get_argv(text, 3)
    if counter_text is None or variable_text is None:
        raise CommandError("Pulse needs a counter and a variable")
    counter = parse_int(counter_text)
    variable = parse_int(variable_text)
    if not 0 < counter <= COUNTERS:
        raise CommandError(f"counter out of range: {counter}")
    if not 0 < variable <= user_variables_max - 1:
        raise CommandError(f"variable out of range: {variable}")
    return NodoEvent(
        type=EventType.PLUGIN_COMMAND, command=PLUGIN_ID, par1=counter, par2=variable
    )


def format_pulse(event: NodoEvent) -> str:
    """Render a Pulse event as a command line."""
    if event.command != PLUGIN_ID:
        raise ValueError(f"not a Pulse event: command {event.command}")
    return f"{PLUGIN_NAME} {event.par1},{event.par2}"