"""Raw RF pulse trains and decoders for the Nodo and KAKU protocols.

Pulse numbers follow the receiver's convention: the first pulse is number 1.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .events import VALUE_OFF, VALUE_ON

PROTOCOL_NAMES = (
    "Nodo V2",
    "Nodo V1",
    "KAKU V1",
    "KAKU V2",
    "Alecto V1-Temp",
    "Alecto V1-Rain",
    "Alecto V1-Wspeed",
    "Alecto V1-Wdir",
    "Alecto V2",
    "Alecto V3",
    "Oregon V2",
    "Flamengo FA20RF",
    "Home Easy 300EU",
    "Unknown",
)

NODO_PULSE_MID = 1000
NODO_BLOCK_SIZE = 12
CLASSIC_NODO_LENGTH = 66

KAKU_CODE_LENGTH = 12
KAKU_T = 350

NEWKAKU_LENGTH = 132
NEWKAKU_DIM_LENGTH = 148
NEWKAKU_MID_T = 500

_WORD_MASK = 0xFFFFFFFF


@dataclass
class RawSignal:
    """A received pulse train; durations are ``pulse * multiply`` microseconds."""

    pulses: Sequence[int]
    multiply: int = 1

    def __post_init__(self) -> None:
        self.pulses = tuple(self.pulses)
        if self.multiply <= 0:
            raise ValueError(f"multiply must be positive: {self.multiply}")
        if any(pulse < 0 for pulse in self.pulses):
            raise ValueError("pulse lengths cannot be negative")

    @property
    def number(self) -> int:
        """Number of pulses in the train."""
        return len(self.pulses)

    def pulse(self, index: int) -> int:
        """Raw pulse ``index`` (1-based); 0 outside the train."""
        if 1 <= index <= len(self.pulses):
            return self.pulses[index - 1]
        return 0

    def duration(self, index: int) -> int:
        """Length of pulse ``index`` in microseconds."""
        return self.pulse(index) * self.multiply


@dataclass(frozen=True)
class Decoded:
    """A recognised message: its protocol, the report line and its values."""

    protocol: str
    text: str
    fields: dict[str, int | float | str] = field(default_factory=dict)


def alecto_crc8(data: Iterable[int]) -> int:
    """CRC-8 with polynomial 0x31, most significant bit first, initial value 0."""
    crc = 0
    for byte in data:
        inbyte = byte & 0xFF
        for _ in range(8):
            mix = (crc ^ inbyte) & 0x80
            crc = (crc << 1) & 0xFF
            if mix:
                crc ^= 0x31
            inbyte = (inbyte << 1) & 0xFF
    return crc


def _nodo_byte(signal: RawSignal, start: int) -> int:
    return sum(
        1 << bit
        for bit in range(8)
        if signal.duration(start + 2 * bit) > NODO_PULSE_MID
    )


def decode_nodo(signal: RawSignal) -> Decoded | None:
    """Decode a 96-bit Nodo message."""
    if signal.number != 16 * NODO_BLOCK_SIZE + 2:
        return None
    data = bytes(_nodo_byte(signal, 3 + 16 * n) for n in range(NODO_BLOCK_SIZE))
    version, source, _destination, flags, kind, command, par1 = data[:7]
    par2 = int.from_bytes(data[7:11], "little")
    checksum = data[11]
    fields = {
        "version": version,
        "checksum": checksum,
        "home": source >> 5,
        "unit": source & 0x1F,
        "type": kind,
        "flags": flags,
        "command": command,
        "par1": par1,
        "par2": par2,
    }
    text = (
        f"{PROTOCOL_NAMES[0]}, V:{version}, C:{checksum}, Home:{source >> 5}, "
        f"Unit:{source & 0x1F}, Type:{kind}, Flags:{flags}, Cmd:{command}, "
        f"Par1:{par1}, Par2:{par2}"
    )
    return Decoded(PROTOCOL_NAMES[0], text, fields)


def decode_classic_nodo(signal: RawSignal) -> Decoded | None:
    """Decode a 32-bit classic Nodo message."""
    if signal.number != CLASSIC_NODO_LENGTH:
        return None
    bitstream = sum(
        1 << bit
        for bit, index in enumerate(range(3, signal.number + 1, 2))
        if signal.duration(index) > NODO_PULSE_MID
    )
    fields = {
        "unit": (bitstream >> 24) & 0xF,
        "command": (bitstream >> 16) & 0xFF,
        "par1": (bitstream >> 8) & 0xFF,
        "par2": bitstream & 0xFF,
    }
    text = (
        f"{PROTOCOL_NAMES[1]}, Unit:{fields['unit']}, Cmd:{fields['command']}, "
        f"Par1:{fields['par1']}, Par2:{fields['par2']}"
    )
    return Decoded(PROTOCOL_NAMES[1], text, fields)


def decode_kaku(signal: RawSignal) -> Decoded | None:
    """Decode a classic KAKU message with a house letter and unit number."""
    if signal.number != KAKU_CODE_LENGTH * 4 + 2:
        return None
    threshold = (KAKU_T * 2) // signal.multiply
    bitstream = 0
    par1 = 0
    for i in range(KAKU_CODE_LENGTH):
        p1, p2, p3, p4 = (signal.pulse(4 * i + k) for k in range(1, 5))
        if not (p1 < threshold and p2 > threshold):
            return None
        if p3 < threshold and p4 > threshold:
            bitstream >>= 1
        elif p3 > threshold and p4 < threshold:
            bitstream = (bitstream >> 1) | (1 << (KAKU_CODE_LENGTH - 1))
        elif p3 < threshold and p4 < threshold:
            bitstream >>= 1
            par1 = 2
        else:
            return None

    if bitstream & 0x600 != 0x600:
        return None
    par2 = bitstream & 0xFF
    par1 |= (bitstream >> 11) & 0x01
    house = chr(ord("A") + (par2 & 0xF))
    unit = 0 if par1 & 2 else ((par2 & 0xF0) >> 4) + 1
    state = "On" if par1 & 0x01 else "Off"
    text = f"{PROTOCOL_NAMES[2]} Address:{house}{unit}, State:{state}"
    return Decoded(
        PROTOCOL_NAMES[2], text, {"house": house, "unit": unit, "state": state}
    )


def decode_newkaku(signal: RawSignal) -> Decoded | None:
    """Decode a KAKU message with automatic addressing, optionally with a dim level."""
    if signal.number not in (NEWKAKU_LENGTH, NEWKAKU_DIM_LENGTH):
        return None
    mid = NEWKAKU_MID_T
    bitstream = 0
    par1 = 0
    bit = 0
    i = 3
    while True:
        p0, p1, p2, p3 = (signal.duration(i + k) for k in range(4))
        if p0 < mid and p1 < mid and p2 < mid and p3 > mid:
            bit = 0
        elif p0 < mid and p1 > mid and p2 < mid and p3 < mid:
            bit = 1
        elif p0 < mid and p1 < mid and p2 < mid and p3 < mid:
            if signal.number != NEWKAKU_DIM_LENGTH:
                return None
        else:
            return None

        if i < 130:
            bitstream = ((bitstream << 1) | bit) & _WORD_MASK
        else:
            par1 = ((par1 << 1) | bit) & 0xFF
        i += 4
        if i >= signal.number - 2:
            break

    if bitstream > 0xFFFF:
        address = bitstream & 0xFFFFFFCF
    else:
        address = (bitstream >> 6) & 0xFF

    fields: dict[str, int | float | str] = {"address": address}
    text = f"{PROTOCOL_NAMES[3]} Address:{address:X}"
    if i > 140:
        par1 = (par1 + 1) & 0xFF
    else:
        par1 = VALUE_ON if (bitstream >> 4) & 0x01 else VALUE_OFF

    if par1 == VALUE_ON:
        fields["state"] = "On"
        text += ", State:On"
    elif par1 == VALUE_OFF:
        fields["state"] = "Off"
        text += ", State: Off"
    else:
        fields["dim"] = par1
        text += f", Dim:{par1}"
    return Decoded(PROTOCOL_NAMES[3], text, fields)