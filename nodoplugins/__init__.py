"""Command handling, RF signal decoding and control logic for Nodo plugins."""

__version__ = "0.1.0"

__all__ = [
    "distance",
    "events",
    "expanders",
    "extwiredout",
    "pid",
    "ping",
    "pulsecounter",
    "rfscanner",
    "rfsignal",
    "rfweather",
    "rgbled",
    "servo",
    "syslog",
    "wiegand",
]