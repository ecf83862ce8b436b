"""Decoders for RF weather sensors and remote switches.

Covers Alecto V1, V2 and V3 weather stations, Oregon Scientific V2 sensors,
the Flamengo FA20RF smoke detector and Home Easy 300EU switches.
"""

from __future__ import annotations

from .rfsignal import PROTOCOL_NAMES, Decoded, RawSignal, alecto_crc8

_WORD_MASK = 0xFFFFFFFF

ALECTO_V1_LENGTH = 74
ALECTO_V1_THRESHOLD = 0xA00
ALECTO_V1_NAME = "Alecto V1"

ALECTO_V2_DKW2012_LENGTH = 176
ALECTO_V2_ACH2010_MIN_LENGTH = 160
ALECTO_V2_ACH2010_MAX_LENGTH = 160
ALECTO_THRESHOLD = 0x300

ALECTO_V3_WS1100_LENGTH = 94
ALECTO_V3_WS1200_LENGTH = 126

OREGON_THN132N_ID = 1230
OREGON_THGN123N_ID = 721
OREGON_THGR810_ID = 17039
OREGON_THN132N_LENGTHS = range(196, 207)
OREGON_THGN123N_LENGTHS = range(228, 239)
OREGON_SHORT = 600
OREGON_MIN_SYNC_PULSE = 40
OREGON_DATA_BITS_END = 70

FLAMENGO_LENGTH = 52
HOMEEASY_LENGTH = 116


def decode_alecto_v1(signal: RawSignal) -> Decoded | None:
    """Decode an Alecto V1 (WS3500) temperature, rain or wind message."""
    if signal.number != ALECTO_V1_LENGTH:
        return None

    bitstream = 0
    for index in range(2, 65, 2):
        high = signal.duration(index) > ALECTO_V1_THRESHOLD
        bitstream = (bitstream >> 1) | ((1 << 31) if high else 0)
    checksum = 0
    for index in range(66, 73, 2):
        high = signal.duration(index) > ALECTO_V1_THRESHOLD
        checksum = (checksum >> 1) | (0x8 if high else 0)

    nibbles = [(bitstream >> (4 * k)) & 0xF for k in range(8)]
    total = sum(nibbles)
    weather = (nibbles[2] & 0x6) == 0x6
    # Alecto checksums roll over by design.
    if weather and nibbles[3] == 3:
        expected = (0x7 + total) & 0xF
    else:
        expected = (0xF - total) & 0xF
    if checksum != expected:
        return None

    rc = bitstream & 0xFF
    text = f"{ALECTO_V1_NAME}, ID:{rc}"

    if not weather:
        temperature = (bitstream >> 12) & 0xFFF
        if temperature & 0x800:
            temperature -= 0x1000
        humidity = 10 * nibbles[7] + nibbles[6]
        text += f", Temp:{temperature}, Hum:{humidity}"
        return Decoded(
            PROTOCOL_NAMES[4],
            text,
            {"id": rc, "temperature": temperature, "humidity": humidity},
        )

    if nibbles[3] == 3:
        rain = (bitstream >> 16) & 0xFFFF
        return Decoded(PROTOCOL_NAMES[5], text + f", Rain:{rain}", {"id": rc, "rain": rain})

    if nibbles[3] == 1:
        speed = (bitstream >> 24) & 0xFF
        return Decoded(
            PROTOCOL_NAMES[6],
            text + f", WindSpeed:{speed}",
            {"id": rc, "wind_speed": speed},
        )

    if (nibbles[3] & 0x7) == 0x7:
        direction = ((bitstream >> 15) & 0x1FF) // 45
        gust = (bitstream >> 24) & 0xFF
        return Decoded(
            PROTOCOL_NAMES[7],
            text + f", WindDir:{direction}, WindGust:{gust}",
            {"id": rc, "wind_direction": direction, "wind_gust": gust},
        )

    return Decoded(ALECTO_V1_NAME, text, {"id": rc})


def decode_alecto_v2(signal: RawSignal) -> Decoded | None:
    """Decode an Alecto V2 (ACH2010 or DKW2012) weather station message."""
    number = signal.number
    ach = ALECTO_V2_ACH2010_MIN_LENGTH <= number <= ALECTO_V2_ACH2010_MAX_LENGTH
    if not (ach or number == ALECTO_V2_DKW2012_LENGTH):
        return None

    last = 9 if number > ALECTO_V2_ACH2010_MAX_LENGTH else 8
    data = [0] * (last + 1)
    # The header is rarely received whole, so read the message back to front.
    slot = last
    bits = 0
    for index in range(number, 0, -2):
        rfbit = 0x80 if signal.duration(index - 1) < ALECTO_THRESHOLD else 0
        data[slot] = (data[slot] >> 1) | rfbit
        bits += 1
        if bits == 8:
            if slot == 0:
                break
            bits = 0
            slot -= 1

    if data[last] != alecto_crc8(data[:last]):
        return None

    msgtype = (data[0] >> 4) & 0xF
    rc = ((data[0] << 4) | (data[1] >> 4)) & 0xFF
    if msgtype not in (10, 5):
        return Decoded(
            f"{PROTOCOL_NAMES[8]} type {msgtype}", "", {"id": rc, "type": msgtype}
        )

    temperature = (((data[1] & 0x3) * 256 + data[2]) - 400) / 10
    humidity = float(data[3])
    rain = data[6] * 256 + data[7]
    wind_speed = data[4] * 1.08
    wind_gust = data[5] * 1.08
    fields: dict[str, int | float | str] = {
        "id": rc,
        "temperature": temperature,
        "humidity": humidity,
        "rain": rain,
        "wind_speed": wind_speed,
        "wind_gust": wind_gust,
    }
    text = (
        f"{PROTOCOL_NAMES[8]}, ID:{rc}, Temp:{temperature:.2f}, Hum:{humidity:.2f}, "
        f"Rain:{rain}, WindSpeed:{wind_speed:.2f}, WindGust:{wind_gust:.2f}"
    )
    if number == ALECTO_V2_DKW2012_LENGTH:
        direction = float(data[8] & 0xF)
        fields["wind_direction"] = direction
        text += f", WindDir:{direction:.2f}"
    return Decoded(PROTOCOL_NAMES[8], text, fields)


def _alecto_v3_word(signal: RawSignal, start: int) -> int:
    word = 0
    for index in range(start, start + 63, 2):
        short = signal.duration(index) < ALECTO_THRESHOLD
        word = ((word << 1) | (1 if short else 0)) & _WORD_MASK
    return word


def decode_alecto_v3(signal: RawSignal) -> Decoded | None:
    """Decode an Alecto V3 (WS1100 or WS1200) message."""
    number = signal.number
    if number not in (ALECTO_V3_WS1100_LENGTH, ALECTO_V3_WS1200_LENGTH):
        return None

    first = _alecto_v3_word(signal, 15)
    second = _alecto_v3_word(signal, 79)
    data = list(first.to_bytes(4, "big")) + list(second.to_bytes(4, "big"))[:2]

    if number == ALECTO_V3_WS1200_LENGTH:
        checksum = (second >> 8) & 0xFF
        expected = alecto_crc8(data[:6])
    else:
        checksum = (second >> 24) & 0xFF
        expected = alecto_crc8(data[:4])
    if checksum != expected:
        return None

    rc = (first >> 20) & 0xFF
    temperature = (((first >> 8) & 0x3FF) - 400) / 10
    fields: dict[str, int | float | str] = {"id": rc, "temperature": temperature}
    text = f"{PROTOCOL_NAMES[9]}, ID:{rc}, Temp:{temperature:.2f}"
    if number == ALECTO_V3_WS1200_LENGTH:
        rain = (((second >> 24) & 0xFF) * 256 + (first & 0xFF)) * 0.30
        fields["rain"] = rain
        text += f", Rain:{rain:.2f}"
    else:
        humidity = (first & 0xFF) / 10
        fields["humidity"] = humidity
        text += f", Hum:{humidity:.2f}"
    return Decoded(PROTOCOL_NAMES[9], text, fields)


def decode_oregon_v2(signal: RawSignal) -> Decoded | None:
    """Decode an Oregon Scientific V2 temperature or humidity sensor."""
    number = signal.number
    if number not in OREGON_THN132N_LENGTHS and number not in OREGON_THGN123N_LENGTHS:
        return None

    nibbles = [0] * 17
    phase = 1
    count = 1
    rfbit = 1
    sync = 0
    index = 1
    while index <= number:
        duration = signal.duration(index)
        if duration < OREGON_SHORT:
            rfbit = int(duration < signal.duration(index + 1))
            index += 1
            phase = 2
        if phase % 2 == 1:
            if count == 1:
                # The preamble length differs per sensor; look for the sync nibble.
                sync = ((sync >> 1) | (rfbit << 3)) & 0xF
                if sync == 0xA:
                    count = 2
                    if index < OREGON_MIN_SYNC_PULSE:
                        return None
            else:
                if count < OREGON_DATA_BITS_END:
                    slot = (count - 2) // 4
                    nibbles[slot] = (nibbles[slot] >> 1) | (rfbit << 3)
                count += 1
        phase += 1
        index += 1

    if count == 1:
        return None

    sensor = (nibbles[3] << 16) | (nibbles[2] << 8) | (nibbles[1] << 4) | nibbles[0]
    with_humidity = sensor in (OREGON_THGN123N_ID, OREGON_THGR810_ID)
    if with_humidity:
        expected = sum(nibbles[:15]) & 0xFF
        checksum = (nibbles[16] << 4) | nibbles[15]
    else:
        expected = sum(nibbles[:12]) & 0xFF
        checksum = (nibbles[13] << 4) | nibbles[12]
    if checksum != expected:
        return None

    channel = (nibbles[6] << 4) | nibbles[5]
    fields: dict[str, int | float | str] = {"sensor": sensor, "id": channel}
    text = f"{PROTOCOL_NAMES[10]}, ID:{channel}"
    if with_humidity or sensor == OREGON_THN132N_ID:
        value = 1000 * nibbles[10] + 100 * nibbles[9] + 10 * nibbles[8]
        if nibbles[11] & 0x8:
            value = -value
        temperature = value / 100
        fields["temperature"] = temperature
        text += f", Temp:{temperature:.2f}"
        if with_humidity:
            humidity = (1000 * nibbles[13] + 100 * nibbles[12]) / 100
            fields["humidity"] = humidity
            text += f", Hum:{humidity:.2f}"
    return Decoded(PROTOCOL_NAMES[10], text, fields)


def decode_flamengo_fa20rf(signal: RawSignal) -> Decoded | None:
    """Decode a Flamengo FA20RF smoke detector identifier."""
    if signal.number != FLAMENGO_LENGTH:
        return None
    bitstream = 0
    for index in range(4, 51, 2):
        if signal.duration(index - 1) > 1000:
            return None
        bitstream = (bitstream << 1) | (1 if signal.duration(index) > 1800 else 0)
    if bitstream == 0:
        return None
    return Decoded(
        PROTOCOL_NAMES[11], f"{PROTOCOL_NAMES[11]}, ID:{bitstream:X}", {"id": bitstream}
    )


def decode_homeeasy(signal: RawSignal) -> Decoded | None:
    """Decode a Home Easy 300EU switch message."""
    if signal.number != HOMEEASY_LENGTH:
        return None
    address = 0
    bitstream = 0
    for index in range(1, signal.number + 1, 2):
        rfbit = int(signal.duration(index) < 500 and signal.duration(index + 1) > 500)
        if 23 <= index <= 86:
            address = ((address << 1) | rfbit) & _WORD_MASK
        if 87 <= index <= 114:
            bitstream = ((bitstream << 1) | rfbit) & _WORD_MASK

    state = (bitstream >> 8) & 0x3
    channel = bitstream & 0x3F
    # The channel sits above bit 5, which carries the on/off command.
    address = (address + (channel << 6)) & _WORD_MASK
    if state == 1:
        address &= 0xFFFFFEF
    else:
        address |= 0x00000010

    status = "On" if state == 0 else "Off"
    text = f"{PROTOCOL_NAMES[12]}, Address:{address}, State:{status}"
    return Decoded(PROTOCOL_NAMES[12], text, {"address": address, "state": status})