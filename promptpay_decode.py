# -*- coding: utf-8 -*-
"""
Reading a PromptPay payload back: CRC check and extraction of the phone
proxy and amount from the EMVCo tag-length-value fields.
"""
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Tuple

from crc16 import checksum
from errors import InvalidPayload
from promptpay_qr import CRC_PREFIX, PROMPTPAY_AID

_hex4_re = re.compile(r"[0-9A-F]{4}")
_header_re = re.compile(r"[0-9]{4}")
_proxy_re = re.compile(r"0066([0-9]{9})")
_amount_re = re.compile(r"[0-9]{8}")


@dataclass(frozen=True)
class PromptPayPayload:
    """Fields read from a verified payload."""
    phone_id: str       # 9 digits, no country code
    amount_field: str   # 8 digits of satang
    checksum: str

    @property
    def amount(self) -> Decimal:
        return Decimal(int(self.amount_field)) / 100


def split_tlv(data: str) -> List[Tuple[str, str]]:
    """Split 'TTLLvalue...' into [(tag, value), ...]. Tags and lengths are 2 digits each."""
    fields: List[Tuple[str, str]] = []
    i = 0
    while i < len(data):
        header = data[i:i + 4]
        if not _header_re.fullmatch(header):
            raise InvalidPayload(f"Bad TLV header at offset {i}: {header!r}")
        tag, length = header[:2], int(header[2:])
        value = data[i + 4:i + 4 + length]
        if len(value) != length:
            raise InvalidPayload(f"Tag {tag} declares length {length}, only {len(value)} chars left")
        fields.append((tag, value))
        i += 4 + length
    return fields


def verify_checksum(payload: str) -> bool:
    """True if payload ends with '6304' + the matching 4 uppercase hex digits."""
    if not isinstance(payload, str) or len(payload) < 8:
        return False
    body, crc = payload[:-4], payload[-4:]
    if not body.endswith(CRC_PREFIX) or not _hex4_re.fullmatch(crc):
        return False
    try:
        return checksum(body) == crc
    except UnicodeEncodeError:
        return False


def parse_promptpay_payload(payload: str) -> PromptPayPayload:
    """
    Verify the CRC and return phone id and amount field.
    Raises InvalidPayload for anything that is not a PromptPay phone payload with an amount.
    """
    if not isinstance(payload, str):
        raise InvalidPayload("Payload must be a string")
    payload = payload.strip()
    if not verify_checksum(payload):
        raise InvalidPayload("CRC mismatch or missing CRC field")

    items = split_tlv(payload)
    if not items or items[-1] != ("63", payload[-4:]):
        raise InvalidPayload("CRC field is not the last top-level field")
    fields: Dict[str, str] = {}
    for tag, value in items:
        if tag in fields:
            raise InvalidPayload(f"Duplicate tag {tag}")
        fields[tag] = value

    if fields.get("00") != "01":
        raise InvalidPayload("Unsupported payload format indicator")
    if fields.get("58") != "TH" or fields.get("53") != "764":
        raise InvalidPayload("Not a THB / TH payload")
    if "29" not in fields:
        raise InvalidPayload("Missing merchant account information (tag 29)")

    merchant = dict(split_tlv(fields["29"]))
    if merchant.get("00") != PROMPTPAY_AID:
        raise InvalidPayload(f"Unexpected application id: {merchant.get('00')!r}")
    m = _proxy_re.fullmatch(merchant.get("01", ""))
    if not m:
        raise InvalidPayload("Merchant account does not carry a phone proxy")

    amount_field = fields.get("54", "")
    if not _amount_re.fullmatch(amount_field):
        raise InvalidPayload(f"Amount field must be 8 digits, got {amount_field!r}")

    return PromptPayPayload(
        phone_id=m.group(1),
        amount_field=amount_field,
        checksum=fields["63"],
    )
