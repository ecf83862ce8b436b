"""Wiegand-26 RFID tag reader on the wired inputs: ``RFIDWG <reader>,<tag>``.

Each reader uses two input lines; a short low pulse on line 0 sends a 1 bit,
on line 1 a 0 bit. A complete frame holds a leading parity bit, a 24-bit tag
number and a trailing parity bit.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .events import CommandError, EventType, NodoEvent, get_argv, parse_int

PLUGIN_ID = 30
PLUGIN_NAME = "RFIDWG"
FRAME_BITS = 26
MAX_LINE_LENGTH = 25
_BUFFER_MASK = 0xFFFFFFFF
_TAG_MASK = 0xFFFFFF


@dataclass
class WiegandReader:
    """Collects Wiegand bits from one or two readers and yields tag events.

    ``unit`` is the number of this Nodo, used as the source of the events.
    """

    readers: int = 1
    unit: int = 0
    bit_count: int = 0
    key_buffer: int = 0
    reader: int = 0
    _previous_count: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.readers not in (1, 2):
            raise ValueError(f"one or two readers are supported, not {self.readers}")

    def on_port_state(self, portstate: int) -> None:
        """Record a change of the input lines (bit 0/1 reader 1, bit 2/3 reader 2)."""
        state = portstate & (0x3 if self.readers == 1 else 0xF)
        if state & 0x3 != 0x3:
            self.reader = 1
        if self.readers == 2 and state & 0xC != 0xC:
            state >>= 2
            self.reader = 2
        state &= 0x3
        if state == 1:
            self.key_buffer = ((self.key_buffer << 1) | 1) & _BUFFER_MASK
            self.bit_count = (self.bit_count + 1) & 0xFF
        elif state == 2:
            self.key_buffer = (self.key_buffer << 1) & _BUFFER_MASK
            self.bit_count = (self.bit_count + 1) & 0xFF

    def tick(self) -> NodoEvent | None:
        """Run the once-a-second check; return a tag event when a frame is complete.

        A partial frame that did not grow since the previous check is noise
        and is dropped.
        """
        if self.bit_count != FRAME_BITS and self.bit_count == self._previous_count:
            self.bit_count = 0
            self.key_buffer = 0

        event = None
        if self.bit_count == FRAME_BITS:
            self.bit_count = 0
            tag = (self.key_buffer >> 1) & _TAG_MASK
            event = NodoEvent(
                type=EventType.PLUGIN_EVENT,
                command=PLUGIN_ID,
                par1=self.reader,
                par2=tag,
                source_unit=self.unit,
                port="Wired",
                direction="Input",
            )
            self.key_buffer = 0

        self._previous_count = self.bit_count
        return event


def parse_rfidwg(text: str) -> NodoEvent | None:
    """Parse an RFIDWG line; None if it names another command.

    Only the first 25 characters of the line are considered.
    """
    text = text[:MAX_LINE_LENGTH]
    name = get_argv(text, 1)
    if name is None or name.lower() != PLUGIN_NAME.lower():
        return None
    reader_text = get_argv(text, 2)
    tag_text = get_argv(text, 3)
    if reader_text is None or tag_text is None:
        raise CommandError("RFIDWG needs a reader and a tag number")
    return NodoEvent(
        type=EventType.PLUGIN_EVENT,
        command=PLUGIN_ID,
        par1=parse_int(reader_text),
        par2=parse_int(tag_text),
    )


def format_rfidwg(event: NodoEvent) -> str:
    """Render an RFIDWG event as a command line, the tag in hexadecimal."""
    return f"{PLUGIN_NAME} {event.par1},0x{event.par2:X}"