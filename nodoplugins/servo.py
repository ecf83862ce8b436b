"""Hobby servo control: ``Servo <port>,<position>``.

Up to four servos hang on the wired outputs 1 to 4. Positions below the
shortest pulse width are taken as angles in degrees; larger values are pulse
widths in microseconds.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .events import CommandError, EventType, NodoEvent, get_argv, parse_int

PLUGIN_ID = 27
PLUGIN_NAME = "Servo"

MAX_SERVOS = 4
MIN_PULSE_WIDTH = 544
MAX_PULSE_WIDTH = 2400
DEFAULT_PULSE_WIDTH = 1500
REFRESH_INTERVAL = 20000
TRIM_DURATION = 2
PRESCALER = 8
MAX_ANGLE = 180
MAX_PIN = 63


def us_to_ticks(us: int, clock_mhz: int = 16) -> int:
    """Convert microseconds to timer ticks with a prescaler of 8."""
    return clock_mhz * us // PRESCALER


def _map(value: int, in_min: int, in_max: int, out_min: int, out_max: int) -> int:
    scaled = (value - in_min) * (out_max - out_min)
    span = in_max - in_min
    quotient = abs(scaled) // span
    if scaled < 0:
        quotient = -quotient
    return quotient + out_min


@dataclass
class _Servo:
    pin: int = 0
    active: bool = False
    ticks: int = 0
    min_offset: int = 0
    max_offset: int = 0

    @property
    def min_us(self) -> int:
        return MIN_PULSE_WIDTH - self.min_offset * 4

    @property
    def max_us(self) -> int:
        return MAX_PULSE_WIDTH - self.max_offset * 4


@dataclass
class ServoController:
    """Pulse widths of up to four servos sharing one timer."""

    clock_mhz: int = 16
    count: int = 0
    _servos: list[_Servo] = field(
        default_factory=lambda: [_Servo() for _ in range(MAX_SERVOS)], repr=False
    )

    def _servo(self, index: int) -> _Servo:
        if not 0 <= index < MAX_SERVOS:
            raise IndexError(f"servo index out of range: {index}")
        return self._servos[index]

    def init(self, index: int) -> None:
        """Reserve a servo slot and give it the default pulse width."""
        servo = self._servo(index)
        if self.count < MAX_SERVOS:
            self.count += 1
            servo.ticks = us_to_ticks(DEFAULT_PULSE_WIDTH, self.clock_mhz)

    def attach(
        self,
        index: int,
        pin: int,
        min_us: int = MIN_PULSE_WIDTH,
        max_us: int = MAX_PULSE_WIDTH,
    ) -> int:
        """Bind servo ``index`` to an output pin and activate it."""
        servo = self._servo(index)
        if not 0 <= pin <= MAX_PIN:
            raise ValueError(f"pin out of range: {pin}")
        if min_us > max_us:
            raise ValueError(f"minimum {min_us} exceeds maximum {max_us}")
        servo.pin = pin
        servo.min_offset = int((MIN_PULSE_WIDTH - min_us) / 4)
        servo.max_offset = int((MAX_PULSE_WIDTH - max_us) / 4)
        servo.active = True
        return index

    def attached(self, index: int) -> bool:
        """Tell whether servo ``index`` is active."""
        return self._servo(index).active

    def pin(self, index: int) -> int:
        """Output pin of servo ``index``."""
        return self._servo(index).pin

    def write(self, index: int, value: int) -> None:
        """Set an angle in degrees, or a pulse width in microseconds."""
        servo = self._servo(index)
        if value < MIN_PULSE_WIDTH:
            angle = min(max(value, 0), MAX_ANGLE)
            value = _map(angle, 0, MAX_ANGLE, servo.min_us, servo.max_us)
        self.write_microseconds(index, value)

    def write_microseconds(self, index: int, value: int) -> None:
        """Set the pulse width in microseconds, clamped to the servo's range."""
        servo = self._servo(index)
        value = min(max(value, servo.min_us), servo.max_us)
        servo.ticks = us_to_ticks(value - TRIM_DURATION, self.clock_mhz)

    def ticks(self, index: int) -> int:
        """Current pulse width of servo ``index`` in timer ticks."""
        return self._servo(index).ticks


def parse_servo(text: str) -> NodoEvent | None:
    """Parse a Servo command line; None if it names another command."""
    name = get_argv(text, 1)
    if name is None or name.lower() != PLUGIN_NAME.lower():
        return None
    port_text = get_argv(text, 2)
    position_text = get_argv(text, 3)
    if port_text is None or position_text is None:
        raise CommandError("Servo needs a port and a position")
    port = parse_int(port_text)
    position = parse_int(position_text)
    if not 0 < port <= MAX_SERVOS:
        raise CommandError(f"port out of range: {port}")
    if not 0 <= position <= MAX_ANGLE:
        raise CommandError(f"position out of range: {position}")
    return NodoEvent(
        type=EventType.PLUGIN_COMMAND, command=PLUGIN_ID, par1=port, par2=position
    )


def format_servo(event: NodoEvent) -> str:
    """Render a Servo event as a command line."""
    return f"{PLUGIN_NAME} {event.par1},{event.par2}"