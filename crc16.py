# -*- coding: utf-8 -*-
"""
CRC-16 over the PromptPay payload (EMVCo tag 63), on top of crcmod's
predefined algorithms.
"""
from typing import Union

import crcmod.predefined

# Used by PromptPay / EMVCo QR: poly 0x1021, init 0xFFFF, no reflection, no final XOR.
# Often labelled "XMODEM" in PromptPay code even though true XMODEM starts from 0x0000.
CRC16_CCITT_FALSE = crcmod.predefined.Crc("crc-ccitt-false")
CRC16_XMODEM = crcmod.predefined.Crc("xmodem")
CRC16_X25 = crcmod.predefined.Crc("x-25")

PAYLOAD_CRC = CRC16_CCITT_FALSE

# CRC of b"123456789" for each variant
CHECK_VALUES = {
    "crc-ccitt-false": 0x29B1,
    "xmodem": 0x31C3,
    "x-25": 0x906E,
}


def _as_bytes(data: Union[bytes, bytearray, str]) -> bytes:
    if isinstance(data, str):
        return data.encode("ascii")
    return bytes(data)


def crc16(data: Union[bytes, bytearray, str], algo=PAYLOAD_CRC) -> int:
    return algo.new(_as_bytes(data)).crcValue


def self_test(name: str) -> bool:
    return crc16(b"123456789", crcmod.predefined.Crc(name)) == CHECK_VALUES[name]


def checksum(payload: str) -> str:
    """4 uppercase hex digits over everything before the CRC value, '6304' included."""
    return PAYLOAD_CRC.new(_as_bytes(payload)).hexdigest().upper()
