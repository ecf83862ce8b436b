import pytest

from nodoplugins.events import CommandError, EventType
from nodoplugins.ping import PLUGIN_ID, format_ping, ip_octets, parse_ping

SAMPLE = "Ping 10,8.8.8.8"


def test_parse_sample():
    event = parse_ping(SAMPLE)
    assert event.type is EventType.PLUGIN_COMMAND
    assert event.command == PLUGIN_ID
    assert event.par1 == 10
    assert ip_octets(event.par2) == (8, 8, 8, 8)


def test_sample_round_trip():
    assert format_ping(parse_ping(SAMPLE)) == SAMPLE


@pytest.mark.parametrize(
    "octets", [(192, 168, 1, 20), (0, 0, 0, 0), (255, 255, 255, 255), (10, 0, 200, 1)]
)
def test_octets_round_trip(octets):
    line = "Ping 4," + ".".join(str(o) for o in octets)
    event = parse_ping(line)
    assert ip_octets(event.par2) == octets
    assert format_ping(event) == line


def test_case_insensitive_name():
    event = parse_ping("ping 3,1.2.3.4")
    assert ip_octets(event.par2) == (1, 2, 3, 4)
    assert event.par1 == 3


def test_other_command_is_not_ping():
    assert parse_ping("Servo 1,90") is None


@pytest.mark.parametrize(
    "line", ["Ping", "Ping 10", "Ping 10,8.8.8", "Ping 10,8.8.300.8", "Ping x,8.8.8.8"]
)
def test_invalid_lines(line):
    with pytest.raises(CommandError):
        parse_ping(line)


def test_ip_octets_rejects_out_of_range():
    with pytest.raises(ValueError):
        ip_octets(-1)
    with pytest.raises(ValueError):
        ip_octets(1 << 32)