"""Interactive RF scanner: recognises known RF messages and keeps statistics."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import NamedTuple

from .rfsignal import (
    PROTOCOL_NAMES,
    Decoded,
    RawSignal,
    decode_classic_nodo,
    decode_kaku,
    decode_newkaku,
    decode_nodo,
)
from .rfweather import (
    decode_alecto_v1,
    decode_alecto_v2,
    decode_alecto_v3,
    decode_flamengo_fa20rf,
    decode_homeeasy,
    decode_oregon_v2,
)

PLUGIN_ID = 32
PLUGIN_NAME = "RFScanner"

MODE_NORMAL = 1
MODE_DETAILS = 2
MODE_RATIO = 3

RULE = "*" * 70
MENU = (
    RULE,
    "RF Scanner Plugin V1.0",
    "",
    "Commands:",
    "n - Normal scan mode",
    "p - Normal scan mode with packet details",
    "r - Show Signal Ratio",
    "c - Show Packet Count",
    RULE,
)

SHORTEST_DEFAULT = 999999
_MILLIS_MASK = 0xFFFFFFFF

DECODERS: tuple[Callable[[RawSignal], Decoded | None], ...] = (
    decode_nodo,
    decode_classic_nodo,
    decode_kaku,
    decode_newkaku,
    decode_alecto_v1,
    decode_alecto_v2,
    decode_alecto_v3,
    decode_oregon_v2,
    decode_flamengo_fa20rf,
    decode_homeeasy,
)


class SignalRatio(NamedTuple):
    """Share of time the RF line was high, and the pulse statistics."""

    ratio: int
    pulses: int
    shortest: int
    longest: int

    @property
    def text(self) -> str:
        return (
            f"Signal Ratio:{self.ratio}%, Pulsecount:{self.pulses}, "
            f"Shortest:{self.shortest}uS, Longest:{self.longest}uS"
        )


def signal_ratio(samples: Iterable[tuple[int, int]]) -> SignalRatio:
    """Measure the RF line from ``(time_us, level)`` samples.

    Sampling starts at the first high level; a pulse ends at each falling edge.
    """
    high = low = pulses = longest = 0
    shortest = SHORTEST_DEFAULT
    timer: int | None = None
    previous = 0
    for time_us, level in samples:
        state = 1 if level else 0
        if timer is None:
            if not state:
                continue
            timer = time_us
        if state != previous:
            if state == 0:
                pulses += 1
                duration = time_us - timer
                timer = time_us
                longest = max(longest, duration)
                shortest = min(shortest, duration)
            previous = state
        if state:
            high += 1
        else:
            low += 1
    if timer is None:
        raise ValueError("the RF line never went high")
    return SignalRatio(100 * high // (high + low), pulses, shortest, longest)


def _zeros() -> list[int]:
    return [0] * len(PROTOCOL_NAMES)


@dataclass
class RFScanner:
    """Recognises RF messages and counts them per protocol.

    ``buffer_size`` is the capacity of the receive buffer; a signal that
    filled it completely is taken as overflowed and ignored.
    """

    buffer_size: int | None = None
    timer_ms: int = 0
    started_ms: int = 0
    _counts: list[int] = field(default_factory=_zeros, repr=False)

    @property
    def counts(self) -> dict[str, int]:
        """Number of messages seen per protocol."""
        return dict(zip(PROTOCOL_NAMES, self._counts))

    def analyze(self, signal: RawSignal, mode: int, now_ms: int) -> str | None:
        """Report one received signal; None if it overflowed the buffer.

        Mode 1 names the protocol, mode 2 lists the pulse lengths.
        """
        if mode not in (MODE_NORMAL, MODE_DETAILS):
            raise ValueError(f"unknown scan mode: {mode}")
        if self.buffer_size is not None and signal.number == self.buffer_size:
            return None

        elapsed = (now_ms - self.timer_ms) & _MILLIS_MASK
        self.timer_ms = now_ms
        line = f"+{elapsed} Pulses:{signal.number}"

        if mode == MODE_NORMAL:
            line += " Protocol: "
            for decoder in DECODERS:
                decoded = decoder(signal)
                if decoded is not None:
                    if decoded.protocol in PROTOCOL_NAMES:
                        self._counts[PROTOCOL_NAMES.index(decoded.protocol)] += 1
                    return line + decoded.text
            self._counts[-1] += 1
            return line + "?"

        details = "".join(
            f"{signal.duration(index)}," for index in range(1, signal.number + 1)
        )
        return f"{line} Details: {details}"

    def stats_report(self, now_ms: int) -> str:
        """Counters per protocol and the time spent scanning."""
        seconds = ((now_ms - self.started_ms) & _MILLIS_MASK) // 1000
        lines = ["", RULE, "Counters:"]
        lines += [f"{name}:{count}" for name, count in self.counts.items()]
        lines += [f"Scanning for {seconds} Seconds", RULE]
        return "\n".join(lines)

    def reset(self, now_ms: int) -> None:
        """Clear all counters and start a new scan at ``now_ms``."""
        self._counts = _zeros()
        self.started_ms = now_ms