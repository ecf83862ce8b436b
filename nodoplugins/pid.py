"""PID controller running once a second on user variables.

Command: ``PID <parameter>[,<value>]`` where the parameter is one of kP, kI,
kD, OutputMin, OutputMax, Monitor, VarInput, VarOutput, VarSetpoint, Manual,
Analog or Digital. The value travels in ``par2`` as the bit pattern of a
32-bit float.
"""

from __future__ import annotations

import enum
import math
import struct
from collections.abc import MutableMapping
from dataclasses import dataclass, field

from .events import CommandError, EventType, NodoEvent, contains_keyword, get_argv
from .rgbled import EVENT_VARIABLE

PLUGIN_ID = 36
PLUGIN_NAME = "PID"

DEFAULT_VAR_SETPOINT = 1
DEFAULT_VAR_INPUT = 2
DEFAULT_VAR_OUTPUT = 3

_MILLIS_MASK = 0xFFFFFFFF


def _float_to_bits(value: float) -> int:
    return struct.unpack("<I", struct.pack("<f", value))[0]


def _bits_to_float(bits: int) -> float:
    return struct.unpack("<f", struct.pack("<I", bits & 0xFFFFFFFF))[0]


class PIDMode(enum.Enum):
    """How the controller output is used."""

    MANUAL = 0
    ANALOG = 1
    DIGITAL = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


class PIDParameter(enum.IntEnum):
    """Parameter number carried in ``par1`` of a PID command."""

    KP = 2
    KI = 3
    KD = 4
    OUTPUT_MIN = 5
    OUTPUT_MAX = 6
    MONITOR = 7
    VAR_INPUT = 8
    VAR_OUTPUT = 10
    VAR_SETPOINT = 11
    MANUAL = 12
    ANALOG = 13
    DIGITAL = 14

    @property
    def keyword(self) -> str:
        """Name of the parameter on a command line."""
        return _KEYWORDS[self]

    @property
    def takes_value(self) -> bool:
        """Tell whether the parameter is followed by a value."""
        return self not in _FLAGS


_KEYWORDS = {
    PIDParameter.KP: "kP",
    PIDParameter.KI: "kI",
    PIDParameter.KD: "kD",
    PIDParameter.OUTPUT_MIN: "OutputMin",
    PIDParameter.OUTPUT_MAX: "OutputMax",
    PIDParameter.MONITOR: "Monitor",
    PIDParameter.VAR_INPUT: "VarInput",
    PIDParameter.VAR_OUTPUT: "VarOutput",
    PIDParameter.VAR_SETPOINT: "VarSetpoint",
    PIDParameter.MANUAL: "Manual",
    PIDParameter.ANALOG: "Analog",
    PIDParameter.DIGITAL: "Digital",
}

_FLAGS = frozenset(
    {
        PIDParameter.MONITOR,
        PIDParameter.MANUAL,
        PIDParameter.ANALOG,
        PIDParameter.DIGITAL,
    }
)

# Order in which keywords are looked for on a command line.
_SEARCH_ORDER = (
    PIDParameter.KP,
    PIDParameter.KI,
    PIDParameter.KD,
    PIDParameter.OUTPUT_MIN,
    PIDParameter.OUTPUT_MAX,
    PIDParameter.MONITOR,
    PIDParameter.MANUAL,
    PIDParameter.ANALOG,
    PIDParameter.DIGITAL,
    PIDParameter.VAR_SETPOINT,
    PIDParameter.VAR_OUTPUT,
    PIDParameter.VAR_INPUT,
)

_MODE_OF = {
    PIDParameter.MANUAL: PIDMode.MANUAL,
    PIDParameter.ANALOG: PIDMode.ANALOG,
    PIDParameter.DIGITAL: PIDMode.DIGITAL,
}


@dataclass
class PIDController:
    """A PID controller reading and writing numbered user variables.

    In digital mode the output is the duty cycle, in seconds, of a window
    that is ``out_max`` seconds long.
    """

    kp: float = 1.0
    ki: float = 0.0
    kd: float = 0.0
    out_min: float = 0.0
    out_max: float = 100.0
    mode: PIDMode = PIDMode.ANALOG
    monitor: bool = False
    var_input: int = DEFAULT_VAR_INPUT
    var_output: int = DEFAULT_VAR_OUTPUT
    var_setpoint: int = DEFAULT_VAR_SETPOINT
    unit: int = 0
    setpoint: float = 0.0
    measured: float = 0.0
    output: float = 0.0
    digital_output: bool = False
    window_counter: int = 1
    window_max: int = 0
    last_time: int = 0
    err_sum: float = 0.0
    last_err: float = 0.0
    _digital_previous: bool = field(default=False, init=False, repr=False)

    def compute(self, setpoint: float, measured: float, now_ms: int) -> float:
        """Run one PID step at ``now_ms`` and return the clamped output."""
        elapsed = (now_ms - self.last_time) & _MILLIS_MASK
        if elapsed == 0:
            raise ValueError("no time has passed since the previous step")
        error = setpoint - measured
        self.err_sum += error * elapsed
        derivative = (error - self.last_err) / elapsed
        output = self.kp * error + self.ki * self.err_sum + self.kd * derivative
        if output > self.out_max:
            output = self.out_max
        elif output < self.out_min:
            output = self.out_min
        self.output = output
        self.last_err = error
        self.last_time = now_ms
        return output

    def on_second(
        self, variables: MutableMapping[int, float], now_ms: int
    ) -> NodoEvent | None:
        """Run the once-a-second cycle on the user variables.

        Returns the variable event raised when the digital output switches.
        """
        self.setpoint = variables.get(self.var_setpoint, 0.0)
        self.measured = variables.get(self.var_input, 0.0)
        if self.mode is not PIDMode.MANUAL:
            self.compute(self.setpoint, self.measured, now_ms)

        if self.mode is PIDMode.ANALOG:
            variables[self.var_output] = self.output
            return None
        if self.mode is not PIDMode.DIGITAL:
            return None

        self.digital_output = self.window_counter <= self.output
        variables[self.var_output] = float(self.digital_output)
        event = None
        if self.digital_output != self._digital_previous:
            event = NodoEvent(
                type=EventType.EVENT,
                command=EVENT_VARIABLE,
                par1=self.var_output - 1,
                par2=_float_to_bits(float(self.digital_output)),
                source_unit=self.unit,
                port="Plugin",
                direction="Input",
            )
            self._digital_previous = self.digital_output
        self.window_counter += 1
        if self.window_counter > self.window_max:
            self.window_max = int(self.out_max)
            self.window_counter = 1
        return event

    def apply(
        self, parameter: PIDParameter | int, value: float, user_variables_max: int
    ) -> None:
        """Carry out a PID command. Variable numbers out of range are ignored."""
        parameter = PIDParameter(parameter)
        if parameter is PIDParameter.KP:
            self.kp = value
        elif parameter is PIDParameter.KI:
            self.ki = value
        elif parameter is PIDParameter.KD:
            self.kd = value
        elif parameter is PIDParameter.OUTPUT_MIN:
            self.out_min = value
        elif parameter is PIDParameter.OUTPUT_MAX:
            self.out_max = value
            self.window_max = int(value)
        elif parameter is PIDParameter.MONITOR:
            self.monitor = not self.monitor
        elif parameter in _MODE_OF:
            self.mode = _MODE_OF[parameter]
        elif 1 <= value <= user_variables_max:
            number = int(value)
            if parameter is PIDParameter.VAR_INPUT:
                self.var_input = number
            elif parameter is PIDParameter.VAR_OUTPUT:
                self.var_output = number
            else:
                self.var_setpoint = number

    def _percent(self) -> float:
        whole = int(self.output) * 100
        if self.out_max:
            return whole / self.out_max
        if whole == 0:
            return math.nan
        return math.copysign(math.inf, whole)

    def monitor_line(self) -> str:
        """One line showing every controller setting and the last result."""
        line = (
            f"PID: VarSetpoint={self.var_setpoint}, VarInput={self.var_input}, "
            f"VarOutput={self.var_output}, Mode={self.mode.label}, "
            f"kp={self.kp:.2f}, ki={self.ki:.2f}, kd={self.kd:.2f}, "
            f"OutputMin={self.out_min:.2f}, OutputMax={self.out_max:.2f}, "
            f"Setpoint={self.setpoint:.2f}, Input={self.measured:.2f}, "
            f"Output={self.output:.2f} ({self._percent():.2f}%)"
        )
        if self.mode is PIDMode.DIGITAL:
            line += f", State={int(self.digital_output)}"
        return line


def parse_pid(text: str) -> NodoEvent | None:
    """Parse a PID command line; None if it names another command."""
    name = get_argv(text, 1)
    if name is None or name.lower() != PLUGIN_NAME.lower():
        return None
    parameter = next(
        (p for p in _SEARCH_ORDER if contains_keyword(text, p.keyword)), None
    )
    if parameter is None:
        raise CommandError("PID needs a known parameter")
    par2 = 0
    value_text = get_argv(text, 3)
    if value_text is not None:
        try:
            par2 = _float_to_bits(float(value_text))
        except (ValueError, OverflowError):
            raise CommandError(f"not a number: {value_text!r}") from None
    return NodoEvent(
        type=EventType.PLUGIN_COMMAND,
        command=PLUGIN_ID,
        par1=int(parameter),
        par2=par2,
    )


def format_pid(event: NodoEvent) -> str:
    """Render a PID event as a command line."""
    text = f"{PLUGIN_NAME} "
    try:
        parameter = PIDParameter(event.par1)
    except ValueError:
        return text
    text += parameter.keyword
    if parameter.takes_value:
        text += f",{_bits_to_float(event.par2):.3f}"
    return text