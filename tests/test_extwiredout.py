import pytest

from nodoplugins.events import VALUE_OFF, VALUE_ON, CommandError, EventType
from nodoplugins.extwiredout import (
    PLUGIN_ID,
    format_ext_wired_out,
    parse_ext_wired_out,
    pcf8574_apply,
    pcf8574_target,
)


@pytest.mark.parametrize("port,address", [(1, 0x20), (9, 0x21), (17, 0x22)])
def test_documented_ports_are_first_pin(port, address):
    assert pcf8574_target(port) == (address, 0)


def test_all_ports_map_to_distinct_pins():
    targets = {pcf8574_target(port) for port in range(1, 129)}
    assert len(targets) == 128
    assert all(0 <= bit <= 7 for _, bit in targets)


def test_upper_chips_use_shifted_addresses():
    low = {pcf8574_target(p)[0] for p in range(1, 65)}
    high = {pcf8574_target(p)[0] for p in range(65, 129)}
    assert low.isdisjoint(high)
    assert min(high) == 0x20 + 8 + 0x10


@pytest.mark.parametrize("port", [0, 129])
def test_port_out_of_range(port):
    with pytest.raises(ValueError):
        pcf8574_target(port)


@pytest.mark.parametrize("value", [0x00, 0xFF, 0x5A])
@pytest.mark.parametrize("bit", range(8))
def test_apply_only_touches_one_bit(value, bit):
    on = pcf8574_apply(value, bit, True)
    off = pcf8574_apply(value, bit, False)
    assert not on & (1 << bit)
    assert off & (1 << bit)
    mask = ~(1 << bit) & 0xFF
    assert on & mask == value & mask
    assert off & mask == value & mask


def test_parse_on():
    event = parse_ext_wired_out("ExtWiredOut 3,On")
    assert event.type is EventType.PLUGIN_COMMAND
    assert event.command == PLUGIN_ID
    assert (event.par1, event.par2) == (3, VALUE_ON)


def test_parse_off_case_insensitive():
    event = parse_ext_wired_out("extwiredout 128, off")
    assert (event.par1, event.par2) == (128, VALUE_OFF)


@pytest.mark.parametrize("line", ["ExtWiredOut 3,On", "ExtWiredOut 128,Off"])
def test_round_trip(line):
    assert format_ext_wired_out(parse_ext_wired_out(line)) == line


@pytest.mark.parametrize(
    "line",
    ["ExtWiredOut 0,On", "ExtWiredOut 129,On", "ExtWiredOut 3,maybe", "ExtWiredOut 3"],
)
def test_invalid(line):
    with pytest.raises(CommandError):
        parse_ext_wired_out(line)


def test_other_command():
    assert parse_ext_wired_out("ExtWiredIn 3,On") is None