"""PWM RGB LED dimmer.

Commands: ``RGBLed <R>,<G>,<B>[,FadeOn|FadeOff|VarOn|VarOff]`` drives the local
LED, ``RGBLedSend <unit>,<R>,<G>,<B>[,...]`` asks another unit to do so.
The colour and option bits are packed into ``par2``: red in bits 0-7, green in
8-15, blue in 16-23 and the option flags in 24-31.
"""

from __future__ import annotations

import enum
from collections.abc import MutableMapping
from dataclasses import dataclass, field

from .events import (
    CommandError,
    EventType,
    NodoEvent,
    contains_keyword,
    get_argv,
    parse_int,
)

PLUGIN_ID = 23
COMMAND_NAME = "RGBLedSend"
EVENT_NAME = "RGBLed"
# Command number of the event raised when a user variable changes.
EVENT_VARIABLE = 1
DEFAULT_FADE_MINUTES = 3
LEVEL_MAX = 255


class RGBLedMode(enum.IntFlag):
    """Option bits carried in the top byte of ``par2``."""

    SETRGB = 1
    VARIABLES_ON = 2
    VARIABLES_OFF = 4
    FADE_ON = 8
    FADE_OFF = 16


_KEYWORDS = (
    (RGBLedMode.FADE_ON, "FadeOn"),
    (RGBLedMode.FADE_OFF, "FadeOff"),
    (RGBLedMode.VARIABLES_ON, "VarOn"),
    (RGBLedMode.VARIABLES_OFF, "VarOff"),
)

_ALL_MODES = 0x1F

Levels = tuple[int, int, int]


def _clamp_level(value: float) -> int:
    return int(min(max(value, 0), LEVEL_MAX))


def _mode_of(par2: int) -> RGBLedMode:
    return RGBLedMode((par2 >> 24) & _ALL_MODES)


@dataclass
class RGBLed:
    """State of the local LED: target levels, current output and options.

    ``scan_high_time`` is the interval in milliseconds between calls of
    :meth:`tick` while fading.
    """

    scan_high_time: int
    target: Levels = (0, 0, 0)
    output: Levels = (0, 0, 0)
    fade: bool = False
    use_variables: bool = False
    fading: bool = False
    fade_time_counter: int = 0
    _called: int = field(default=0, init=False, repr=False)
    _variables: MutableMapping[int, float] | None = field(
        default=None, init=False, repr=False
    )

    def fade_step(self) -> bool:
        """Move every output channel one level towards its target.

        Returns True while the output has not yet reached the target.
        """
        self.output = tuple(
            out + 1 if want > out else out - 1 if want < out else out
            for want, out in zip(self.target, self.output)
        )
        if self.use_variables and self._variables is not None:
            for number, level in enumerate(self.output, start=1):
                self._variables[number] = float(level)
        return self.output != self.target

    def fade_counter(
        self, variables: MutableMapping[int, float], scan_high_time: int
    ) -> int:
        """Number of skipped ticks between two fade steps.

        The fade time in minutes is variable 4 when variables are in use,
        otherwise three minutes.
        """
        if scan_high_time <= 0:
            raise ValueError(f"scan interval must be positive: {scan_high_time}")
        if self.use_variables:
            minutes = _clamp_level(variables.get(4, 0.0))
        else:
            minutes = DEFAULT_FADE_MINUTES
        return minutes * 60000 // (scan_high_time * LEVEL_MAX)

    def handle_event(
        self, event: NodoEvent, unit: int, variables: MutableMapping[int, float]
    ) -> bool:
        """React to an incoming event.

        Returns True when new levels were applied at once; when fading is on
        the change is started and :meth:`tick` carries it out.
        """
        self._variables = variables
        changed = False
        if event.type is EventType.EVENT and event.command == EVENT_VARIABLE:
            if self.use_variables and not self.fade:
                self.target = tuple(
                    _clamp_level(variables.get(number, 0.0)) for number in (1, 2, 3)
                )
                changed = True
        elif event.type is EventType.PLUGIN_EVENT and event.command == PLUGIN_ID:
            address = event.par1 & 0x1F
            if address in (0, unit):
                mode = _mode_of(event.par2)
                if mode & RGBLedMode.SETRGB:
                    self.target = (
                        event.par2 & 0xFF,
                        (event.par2 >> 8) & 0xFF,
                        (event.par2 >> 16) & 0xFF,
                    )
                if mode & RGBLedMode.FADE_ON:
                    self.fade = True
                if mode & RGBLedMode.FADE_OFF:
                    self.fade = False
                if mode & RGBLedMode.VARIABLES_ON:
                    self.use_variables = True
                if mode & RGBLedMode.VARIABLES_OFF:
                    self.use_variables = False
                changed = True

        if not changed:
            return False
        if self.fade:
            self.fade_time_counter = self.fade_counter(variables, self.scan_high_time)
            self._called = 0
            self.fading = True
            return False
        while self.fade_step():
            pass
        return True

    def tick(self) -> bool:
        """Advance a running fade by one scan interval; True while fading."""
        if not self.fading:
            return False
        due = self.fade_time_counter == self._called
        self._called += 1
        if due:
            self._called = 0
            if not self.fade_step():
                self.fading = False
        return self.fading


def _try_int(text: str | None) -> int | None:
    if text is None:
        return None
    try:
        return parse_int(text)
    except CommandError:
        return None


def parse_rgbled(text: str) -> NodoEvent | None:
    """Parse an RGBLed or RGBLedSend line; None if it names another command."""
    name = get_argv(text, 1)
    if name is None:
        return None
    lowered = name.lower()
    unit = 0
    index = 2
    if lowered == COMMAND_NAME.lower():
        event_type = EventType.PLUGIN_COMMAND
        unit_text = get_argv(text, 2)
        if unit_text is not None:
            unit = parse_int(unit_text)
            if not 0 <= unit <= 0x1F:
                raise CommandError(f"unit out of range: {unit}")
            index = 3
    elif lowered == EVENT_NAME.lower():
        event_type = EventType.PLUGIN_EVENT
    else:
        return None

    mode = RGBLedMode(0)
    par2 = 0
    colours = [_try_int(get_argv(text, index + offset)) for offset in range(3)]
    if all(value is not None for value in colours):
        for shift, value in zip((0, 8, 16), colours):
            if not 0 <= value <= LEVEL_MAX:
                raise CommandError(f"colour level out of range: {value}")
            par2 |= value << shift
        mode |= RGBLedMode.SETRGB

    for flag, keyword in _KEYWORDS:
        if contains_keyword(text, keyword):
            mode |= flag

    if not mode:
        raise CommandError(f"{name} needs a colour or an option")
    par2 |= int(mode) << 24
    return NodoEvent(type=event_type, command=PLUGIN_ID, par1=unit, par2=par2)


def format_rgbled(event: NodoEvent) -> str:
    """Render an RGBLed or RGBLedSend event as a command line."""
    if event.type is EventType.PLUGIN_COMMAND:
        text = f"{COMMAND_NAME} {event.par1}"
        count = 1
    else:
        text = EVENT_NAME
        count = 0

    mode = _mode_of(event.par2)
    if mode & RGBLedMode.SETRGB:
        text += "," if count else " "
        red = event.par2 & 0xFF
        green = (event.par2 >> 8) & 0xFF
        blue = (event.par2 >> 16) & 0xFF
        text += f"{red},{green},{blue}"
        count += 1

    if count == 0:
        text += " "
    for flag, keyword in _KEYWORDS:
        if mode & flag:
            if count:
                text += ","
            count += 1
            text += keyword
    return text