# -*- coding: utf-8 -*-
"""
Sanitizing the two variable PromptPay fields: the recipient phone number
and the transaction amount.
"""
import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from errors import InvalidAmount, InvalidPhoneNumber

COUNTRY_CODE_PREFIX = "66"
PHONE_ID_LENGTH = 9
AMOUNT_FIELD_LENGTH = 8
MAX_SUBUNITS = 10 ** AMOUNT_FIELD_LENGTH - 1  # 99_999_999 satang

Amount = Union[Decimal, int, float, str]

_phone_id_re = re.compile(r"[0-9]{%d}" % PHONE_ID_LENGTH)


def normalize_phone(raw: str) -> str:
    """
    Canonical 9-digit national number for the PromptPay phone proxy.

    '0891234567', '+66-89-123-4567' and '66891234567' all give '891234567'.
    Only a leading '66' is treated as the country code: '0866912345'
    keeps its inner '66'.
    """
    if not isinstance(raw, str):
        raise InvalidPhoneNumber(f"Phone number must be a string, got {type(raw).__name__}")
    s = raw.strip()
    s = s.replace("-", "").replace("+", "")
    if s.startswith(COUNTRY_CODE_PREFIX):
        s = s[len(COUNTRY_CODE_PREFIX):]
    s = s.lstrip("0")
    if not _phone_id_re.fullmatch(s):
        raise InvalidPhoneNumber(f"Invalid phone number format: {raw!r}")
    return s


def _to_decimal(amount: Amount) -> Decimal:
    # bool is an int subclass; True baht is not an amount
    if isinstance(amount, bool):
        raise InvalidAmount(f"Invalid amount: {amount!r}")
    if isinstance(amount, float):
        if not math.isfinite(amount):
            raise InvalidAmount(f"Invalid amount: {amount!r}")
        # str() keeps the shortest repr, so 1234.5 stays 1234.5 and not 1234.499999...
        amount = str(amount)
    if isinstance(amount, str):
        amount = amount.strip()
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"Invalid amount: {amount!r}")
    if not value.is_finite():
        raise InvalidAmount(f"Invalid amount: {amount!r}")
    return value


def to_subunits(amount: Amount) -> int:
    """Amount in satang, rounded half away from zero. Raises InvalidAmount if out of range."""
    value = _to_decimal(amount)
    if value < 0:
        raise InvalidAmount(f"Amount must not be negative: {amount!r}")
    subunits = int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    if subunits > MAX_SUBUNITS:
        raise InvalidAmount(
            f"Amount {amount!r} does not fit into {AMOUNT_FIELD_LENGTH} digits of satang"
        )
    return subunits


def encode_amount(amount: Amount) -> str:
    """8-digit zero-padded satang field: 100.00 -> '00010000'."""
    return f"{to_subunits(amount):0{AMOUNT_FIELD_LENGTH}d}"
