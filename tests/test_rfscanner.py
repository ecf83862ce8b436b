import pytest

from nodoplugins.rfscanner import RFScanner, signal_ratio
from nodoplugins.rfsignal import RawSignal


def flamengo_signal(ident):
    pulses = [500] * 52
    for i in range(24):
        pulses[4 + 2 * i - 1] = 2500 if (ident >> (23 - i)) & 1 else 1000
    return RawSignal(pulses)


def test_unknown_signal_is_counted():
    scanner = RFScanner()
    line = scanner.analyze(RawSignal([100] * 10), 1, 1500)
    assert line == "+1500 Pulses:10 Protocol: ?"
    assert scanner.counts["Unknown"] == 1


def test_timer_measures_time_between_signals():
    scanner = RFScanner()
    scanner.analyze(RawSignal([100] * 10), 1, 1500)
    line = scanner.analyze(RawSignal([100] * 10), 1, 2000)
    assert line.startswith("+500 Pulses:10")


def test_details_mode_lists_durations():
    scanner = RFScanner()
    line = scanner.analyze(RawSignal([1, 2, 3], multiply=25), 2, 0)
    assert line == "+0 Pulses:3 Details: 25,50,75,"
    assert sum(scanner.counts.values()) == 0


def test_full_buffer_is_ignored():
    scanner = RFScanner(buffer_size=3)
    assert scanner.analyze(RawSignal([1, 2, 3]), 1, 100) is None
    assert scanner.timer_ms == 0


def test_invalid_mode():
    with pytest.raises(ValueError):
        RFScanner().analyze(RawSignal([1, 2]), 3, 0)


def test_recognised_protocol_is_counted():
    scanner = RFScanner()
    line = scanner.analyze(flamengo_signal(0xABCDE), 1, 0)
    assert line.endswith("Protocol: Flamengo FA20RF, ID:ABCDE")
    assert scanner.counts["Flamengo FA20RF"] == 1
    assert scanner.counts["Unknown"] == 0


def test_stats_report_and_reset():
    scanner = RFScanner()
    scanner.reset(1000)
    scanner.analyze(flamengo_signal(0xABCDE), 1, 2000)
    report = scanner.stats_report(6500)
    assert "Flamengo FA20RF:1" in report
    assert "Scanning for 5 Seconds" in report
    scanner.reset(7000)
    assert sum(scanner.counts.values()) == 0
    assert scanner.started_ms == 7000


def test_signal_ratio():
    result = signal_ratio([(0, 0), (5, 1), (10, 1), (25, 0), (30, 0)])
    assert result.ratio == 50
    assert result.pulses == 1
    assert result.shortest == 20
    assert result.longest == 20
    assert result.text == "Signal Ratio:50%, Pulsecount:1, Shortest:20uS, Longest:20uS"


def test_signal_ratio_never_high():
    with pytest.raises(ValueError):
        signal_ratio([(0, 0), (5, 0)])