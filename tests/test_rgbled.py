import pytest

from nodoplugins.events import CommandError, EventType, NodoEvent
from nodoplugins.rgbled import (
    EVENT_VARIABLE,
    PLUGIN_ID,
    RGBLed,
    RGBLedMode,
    format_rgbled,
    parse_rgbled,
)


def _mode(event):
    return RGBLedMode((event.par2 >> 24) & 0x1F)


def test_parse_event_packs_colours():
    event = parse_rgbled("RGBLed 10,20,30")
    assert event.type is EventType.PLUGIN_EVENT
    assert event.command == PLUGIN_ID
    assert event.par2 & 0xFF == 10
    assert (event.par2 >> 8) & 0xFF == 20
    assert (event.par2 >> 16) & 0xFF == 30
    assert _mode(event) == RGBLedMode.SETRGB


def test_parse_send_command_with_option():
    event = parse_rgbled("RGBLedSend 5,1,2,3,FadeOn")
    assert event.type is EventType.PLUGIN_COMMAND
    assert event.par1 == 5
    assert _mode(event) == RGBLedMode.SETRGB | RGBLedMode.FADE_ON


def test_parse_options_only():
    event = parse_rgbled("RGBLed VarOn,FadeOff")
    assert _mode(event) == RGBLedMode.VARIABLES_ON | RGBLedMode.FADE_OFF
    assert event.par2 & 0xFFFFFF == 0


@pytest.mark.parametrize(
    "line",
    [
        "RGBLed 10,20,30",
        "RGBLed 10,20,30,FadeOn",
        "RGBLed FadeOn",
        "RGBLed FadeOff,VarOff",
        "RGBLedSend 5,10,20,30",
        "RGBLedSend 5,FadeOn,VarOn",
        "RGBLedSend 7,1,2,3,FadeOff",
    ],
)
def test_format_round_trip(line):
    assert format_rgbled(parse_rgbled(line)) == line


def test_parse_other_command_is_none():
    assert parse_rgbled("Servo 1,90") is None


def test_parse_without_colour_or_option_fails():
    with pytest.raises(CommandError):
        parse_rgbled("RGBLed")


def test_parse_level_out_of_range_fails():
    with pytest.raises(CommandError):
        parse_rgbled("RGBLed 300,0,0")


def test_handle_event_applies_levels_at_once():
    led = RGBLed(scan_high_time=1000)
    assert led.handle_event(parse_rgbled("RGBLed 10,20,30"), 1, {}) is True
    assert led.output == (10, 20, 30)
    assert led.target == (10, 20, 30)


def test_handle_event_ignores_other_unit():
    led = RGBLed(scan_high_time=1000)
    event = parse_rgbled("RGBLed 10,20,30")
    event.par1 = 3
    assert led.handle_event(event, 2, {}) is False
    assert led.output == (0, 0, 0)


def test_fade_runs_through_ticks():
    led = RGBLed(scan_high_time=1000)
    assert led.handle_event(parse_rgbled("RGBLed 2,0,0,FadeOn"), 1, {}) is False
    assert led.fading is True
    assert led.fade_time_counter == 0
    while led.tick():
        pass
    assert led.output == (2, 0, 0)
    assert led.fading is False


def test_fade_step_moves_one_level_per_channel():
    led = RGBLed(scan_high_time=1000, target=(5, 0, 3), output=(0, 4, 3))
    still_fading = led.fade_step()
    assert still_fading is True
    for before, after in zip((0, 4, 3), led.output):
        assert abs(after - before) <= 1
    assert led.output[2] == 3


def test_variable_event_clamps_levels():
    led = RGBLed(scan_high_time=1000, use_variables=True)
    variables = {1: 300.0, 2: -5.0, 3: 7.9}
    event = NodoEvent(type=EventType.EVENT, command=EVENT_VARIABLE)
    assert led.handle_event(event, 1, variables) is True
    assert led.output == (255, 0, 7)
    assert variables[1] == 255.0


def test_variable_event_ignored_without_variables_mode():
    led = RGBLed(scan_high_time=1000)
    event = NodoEvent(type=EventType.EVENT, command=EVENT_VARIABLE)
    assert led.handle_event(event, 1, {1: 100.0}) is False
    assert led.output == (0, 0, 0)


def test_option_bits_toggle_state():
    led = RGBLed(scan_high_time=1000)
    led.handle_event(parse_rgbled("RGBLed VarOn"), 1, {})
    assert led.use_variables is True
    led.handle_event(parse_rgbled("RGBLed VarOff"), 1, {})
    assert led.use_variables is False


def test_fade_counter_default_matches_three_minutes_variable():
    plain = RGBLed(scan_high_time=10)
    with_vars = RGBLed(scan_high_time=10, use_variables=True)
    assert plain.fade_counter({}, 10) == with_vars.fade_counter({4: 3.0}, 10)


def test_fade_counter_shrinks_with_longer_scan_interval():
    led = RGBLed(scan_high_time=10)
    assert led.fade_counter({}, 5) >= led.fade_counter({}, 50)


def test_fade_counter_rejects_zero_interval():
    with pytest.raises(ValueError):
        RGBLed(scan_high_time=10).fade_counter({}, 0)