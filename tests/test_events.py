import pytest

from nodoplugins.events import (
    VALUE_OFF,
    VALUE_ON,
    CommandError,
    EventType,
    NodoEvent,
    contains_keyword,
    get_argv,
    parse_int,
)

SAMPLE = "Ping 10,8.8.8.8"


def test_get_argv_first_and_second():
    assert get_argv(SAMPLE, 1) == "Ping"
    assert get_argv(SAMPLE, 2) == "10"


def test_get_argv_default_keeps_dots():
    assert get_argv(SAMPLE, 3) == "8.8.8.8"
    assert get_argv(SAMPLE, 4) is None


def test_get_argv_with_dot_delimiter():
    assert [get_argv(SAMPLE, i, ".") for i in range(3, 7)] == ["8", "8", "8", "8"]
    assert get_argv(SAMPLE, 7, ".") is None


def test_get_argv_collapses_spaces_and_commas():
    text = "Cmd  1 , 2"
    assert get_argv(text, 1) == "Cmd"
    assert get_argv(text, 2) == "1"
    assert get_argv(text, 3) == "2"


def test_get_argv_empty_and_zero_index():
    assert get_argv("", 1) is None
    assert get_argv("abc", 0) is None


def test_get_argv_single_argument():
    assert get_argv("abc", 1) == "abc"


def test_parse_int_decimal_and_hex():
    assert parse_int("42") == 42
    assert parse_int("0x1F") == 0x1F
    assert parse_int(" 7 ") == 7


@pytest.mark.parametrize("text", ["abc", "", "0x", "1_0", "1.5"])
def test_parse_int_rejects(text):
    with pytest.raises(CommandError):
        parse_int(text)


def test_command_error_is_value_error():
    with pytest.raises(ValueError):
        parse_int("nope")


def test_contains_keyword_ignores_case():
    assert contains_keyword("RGBLed 1,2,3,fadeon", "FadeOn") is True
    assert contains_keyword("RGBLed 1,2,3,fadeon", "VarOn") is False


def test_event_defaults_and_fields():
    event = NodoEvent(type=EventType.PLUGIN_COMMAND, command=25, par1=3, par2=VALUE_ON)
    assert event.type is EventType.PLUGIN_COMMAND
    assert (event.command, event.par1, event.par2) == (25, 3, VALUE_ON)
    assert NodoEvent().type is None
    assert VALUE_ON != VALUE_OFF