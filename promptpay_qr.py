# -*- coding: utf-8 -*-
"""
Building the PromptPay QR payload (EMVCo merchant-presented QR, Thai
PromptPay phone proxy) and rendering it with the qrcode library.
"""
import io
import logging
import re
from pathlib import Path
from typing import Optional, Union

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.exceptions import DataOverflowError

from crc16 import checksum
from errors import EncodingCapacityExceeded, InvalidAmount, InvalidPhoneNumber
from promptpay_fields import Amount, encode_amount, normalize_phone

logger = logging.getLogger(__name__)

PROMPTPAY_AID = "A000000677010111"
CRC_PREFIX = "6304"

# 00 payload format 01 | 01 static QR | 29 merchant account: 00 AID, 01 phone proxy 0066+9 digits
# 58 country TH | 53 currency 764 (THB) | 54 amount, 8 digits of satang | 63 CRC, length 4
PAYLOAD_TEMPLATE = (
    "000201"
    "010211"
    "2937"
    "0016" + PROMPTPAY_AID +
    "01130066{phone_id}"
    "5802TH"
    "5303764"
    "5408{amount_field}"
    + CRC_PREFIX
)

EC_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}

_phone_id_re = re.compile(r"[0-9]{9}")
_amount_field_re = re.compile(r"[0-9]{8}")


def assemble_payload(phone_id: str, amount_field: str) -> str:
    """Fill the template; the result ends with the CRC tag and length ('6304') but no CRC value."""
    if not isinstance(phone_id, str) or not _phone_id_re.fullmatch(phone_id):
        raise InvalidPhoneNumber(f"Phone id must be 9 digits, got {phone_id!r}")
    if not isinstance(amount_field, str) or not _amount_field_re.fullmatch(amount_field):
        raise InvalidAmount(f"Amount field must be 8 digits, got {amount_field!r}")
    return PAYLOAD_TEMPLATE.format(phone_id=phone_id, amount_field=amount_field)


def build_promptpay_payload(raw_phone: str, amount: Amount) -> str:
    """
    Full PromptPay payload for a phone number and an amount in baht.
    Raises InvalidPhoneNumber / InvalidAmount; no I/O, same inputs give the same string.
    """
    phone_id = normalize_phone(raw_phone)
    amount_field = encode_amount(amount)
    payload = assemble_payload(phone_id, amount_field)
    final = payload + checksum(payload)
    logger.debug("PromptPay payload: %s", final)
    return final


def _ec_constant(ec_level: str) -> int:
    try:
        return EC_LEVELS[ec_level.upper()]
    except (KeyError, AttributeError):
        raise ValueError(f"Unknown error correction level: {ec_level!r} (expected L, M, Q or H)")


def render_qr(
    payload: str,
    ec_level: str = "L",
    box_size: int = 10,
    border: int = 4,
    version: Optional[int] = None,
):
    """Render payload into a black-on-white PIL image. version=None picks the smallest symbol."""
    error_correction = _ec_constant(ec_level)
    qr = qrcode.QRCode(
        version=version,
        error_correction=error_correction,
        box_size=box_size,
        border=border,
    )
    qr.add_data(payload)
    try:
        qr.make(fit=version is None)
    except (DataOverflowError, ValueError) as e:
        # qrcode 8 reports data beyond version 40 as ValueError("Invalid version ...")
        raise EncodingCapacityExceeded(
            f"Payload of {len(payload)} chars does not fit (version={version}, ec={ec_level}): {e}"
        )
    img = qr.make_image(fill_color="black", back_color="white")
    return img.get_image()


def payload_to_qr_image(payload: str, ec_level: str = "L", box_size: int = 6, border: int = 2) -> bytes:
    """PNG bytes of the QR code."""
    img = render_qr(payload, ec_level=ec_level, box_size=box_size, border=border)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def save_qr_png(
    payload: str,
    output_path: Union[str, Path],
    ec_level: str = "L",
    box_size: int = 10,
    border: int = 4,
) -> Path:
    """Render and write a PNG file, creating parent directories. OSError propagates."""
    img = render_qr(payload, ec_level=ec_level, box_size=box_size, border=border)
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    img.save(path, format="PNG")
    logger.info("QR code saved to %s", path)
    return path
