"""
CRC-16 variants over the standard check string b"123456789".

  CCITT-FALSE  poly 0x1021, init 0xFFFF, no reflection    -> 0x29B1  (payload CRC)
  XMODEM       poly 0x1021, init 0x0000, no reflection    -> 0x31C3
  X-25         poly 0x1021, init 0xFFFF, reflected, ^FFFF -> 0x906E
"""
import pytest

from crc16 import (
    CRC16_CCITT_FALSE,
    CRC16_X25,
    CRC16_XMODEM,
    PAYLOAD_CRC,
    checksum,
    crc16,
    self_test,
)


@pytest.mark.parametrize(
    "algo, expected",
    [
        (CRC16_CCITT_FALSE, 0x29B1),
        (CRC16_XMODEM, 0x31C3),
        (CRC16_X25, 0x906E),
    ],
)
def test_check_values(algo, expected):
    assert crc16(b"123456789", algo) == expected


@pytest.mark.parametrize("name", ["crc-ccitt-false", "xmodem", "x-25"])
def test_self_test(name):
    assert self_test(name)


def test_payload_crc_parameters():
    # crcmod keeps the implicit top bit of the polynomial
    assert PAYLOAD_CRC.poly == 0x11021
    assert PAYLOAD_CRC.initCrc == 0xFFFF
    assert not PAYLOAD_CRC.reverse
    assert PAYLOAD_CRC.xorOut == 0


def test_checksum_renders_four_uppercase_hex_digits():
    assert checksum("123456789") == "29B1"


def test_checksum_zero_pads():
    # empty input leaves the register at init, 0xFFFF; X-25 of empty input is 0x0000
    assert checksum("") == "FFFF"
    assert CRC16_X25.new(b"").hexdigest() == "0000"


def test_presets_are_not_mutated():
    checksum("6304")
    assert PAYLOAD_CRC.crcValue == 0xFFFF
    assert checksum("123456789") == "29B1"


def test_str_and_bytes_agree():
    assert crc16("6304") == crc16(b"6304") == crc16(bytearray(b"6304"))


def test_reference_payload():
    payload = (
        "00020101021129370016A00000067701011101130066891234567"
        "5802TH53037645408000100006304"
    )
    assert checksum(payload) == "319F"


def test_single_bit_change_changes_crc():
    a = "00020101021129370016A000000677010111011300668912345675802TH53037645408000100006304"
    b = a.replace("00010000", "00010001")
    assert checksum(a) != checksum(b)
