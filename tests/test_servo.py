import pytest

from nodoplugins.events import CommandError, EventType
from nodoplugins.servo import (
    ServoController,
    format_servo,
    parse_servo,
    us_to_ticks,
)


def test_us_to_ticks_pinned():
    assert us_to_ticks(1500, 16) == 3000


def test_init_sets_default_ticks():
    controller = ServoController()
    controller.init(0)
    assert controller.ticks(0) == us_to_ticks(1500, 16)
    assert controller.count == 1


def test_init_stops_counting_at_four():
    controller = ServoController()
    for index in range(4):
        controller.init(index)
    controller.init(0)
    assert controller.count == 4


def test_attach_marks_active():
    controller = ServoController()
    assert not controller.attached(1)
    assert controller.attach(1, 10) == 1
    assert controller.attached(1)
    assert controller.pin(1) == 10


def test_angle_limits_match_pulse_limits():
    controller = ServoController()
    controller.attach(0, 9)
    controller.write(0, 0)
    low = controller.ticks(0)
    controller.write_microseconds(0, 544)
    assert controller.ticks(0) == low
    controller.write(0, 180)
    high = controller.ticks(0)
    controller.write_microseconds(0, 2400)
    assert controller.ticks(0) == high
    assert high > low


def test_angles_are_clamped():
    controller = ServoController()
    controller.write(0, 0)
    zero = controller.ticks(0)
    controller.write(0, -20)
    assert controller.ticks(0) == zero
    controller.write(0, 180)
    full = controller.ticks(0)
    controller.write(0, 500)
    assert controller.ticks(0) == full


def test_microseconds_are_clamped():
    controller = ServoController()
    controller.write_microseconds(0, 544)
    low = controller.ticks(0)
    controller.write_microseconds(0, 600)
    assert controller.ticks(0) > low
    controller.write_microseconds(0, 3000)
    high = controller.ticks(0)
    controller.write_microseconds(0, 2400)
    assert controller.ticks(0) == high


def test_angles_are_monotonic():
    controller = ServoController()
    previous = -1
    for angle in range(0, 181, 15):
        controller.write(2, angle)
        assert controller.ticks(2) >= previous
        previous = controller.ticks(2)


def test_custom_range_narrows_output():
    controller = ServoController()
    controller.attach(3, 12, 1000, 2000)
    controller.write(3, 0)
    narrow_low = controller.ticks(3)
    controller.write_microseconds(3, 1000)
    assert controller.ticks(3) == narrow_low


def test_bad_index_raises():
    controller = ServoController()
    with pytest.raises(IndexError):
        controller.init(4)
    with pytest.raises(IndexError):
        controller.attached(-1)


def test_bad_pin_raises():
    with pytest.raises(ValueError):
        ServoController().attach(0, 64)


def test_parse_and_format_round_trip():
    event = parse_servo("Servo 2,90")
    assert event.type is EventType.PLUGIN_COMMAND
    assert event.command == 27
    assert (event.par1, event.par2) == (2, 90)
    assert format_servo(event) == "Servo 2,90"


def test_parse_other_command():
    assert parse_servo("Pulse 1,2") is None


@pytest.mark.parametrize("line", ["Servo 5,90", "Servo 0,90", "Servo 1,181", "Servo 1"])
def test_parse_invalid(line):
    with pytest.raises(CommandError):
        parse_servo(line)