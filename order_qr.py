# -*- coding: utf-8 -*-
"""
Order flow side of the codec: read the recipient phone from the environment,
build the payload for an order total and store the QR image next to it.

Payload errors (bad phone / amount) raise. Image errors are logged and
swallowed: the order is already saved and must stay saved.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from errors import EncodingCapacityExceeded
from promptpay_fields import Amount
from promptpay_qr import EC_LEVELS, build_promptpay_payload, save_qr_png

logger = logging.getLogger(__name__)

REQUIRED_ENV = ("MY_PHONE_NUMBER",)


@dataclass
class OrderPayment:
    """PromptPay data attached to one order."""
    order_id: int
    amount: Amount
    payload: str = ""
    qr_path: Optional[str] = None  # None if the image was not written


def _env(name: str, default: str = "") -> str:
    v = os.environ.get(name, default).strip()
    if not v and name in REQUIRED_ENV:
        raise RuntimeError(f"Missing required env: {name}")
    return v


def get_config() -> dict:
    ec_level = (_env("QR_EC_LEVEL", "L") or "L").upper()
    if ec_level not in EC_LEVELS:
        raise RuntimeError(f"QR_EC_LEVEL must be one of L, M, Q, H, got {ec_level!r}")
    return {
        "phone_number": _env("MY_PHONE_NUMBER"),
        "output_dir": _env("QR_OUTPUT_DIR", "qrcodes") or "qrcodes",
        "ec_level": ec_level,
    }


def qr_path_for_order(order_id: int, output_dir: Union[str, Path] = "qrcodes") -> Path:
    return Path(output_dir) / f"order_{order_id}_qr.png"


def generate_order_payload(amount: Amount, config: Optional[dict] = None) -> str:
    """Payload for an order total. Config is read on every call unless passed in."""
    if config is None:
        config = get_config()
    return build_promptpay_payload(config["phone_number"], amount)


def render_order_qr(payload: str, output_path: Union[str, Path], ec_level: str = "L") -> Optional[str]:
    """Write the QR image; returns its path, or None after logging the failure."""
    try:
        return str(save_qr_png(payload, output_path, ec_level=ec_level))
    except EncodingCapacityExceeded as e:
        logger.warning("QR code not generated for %s: %s", output_path, e)
    except OSError as e:
        logger.warning("Could not write QR code to %s: %s", output_path, e)
    return None


def attach_payment_qr(order_id: int, amount: Amount, config: Optional[dict] = None) -> OrderPayment:
    """
    Build the payload for a committed order, then try to store its QR image.
    The two steps are independent: a failed image leaves the payload in place.
    """
    if config is None:
        config = get_config()
    payload = generate_order_payload(amount, config)
    order = OrderPayment(order_id=order_id, amount=amount, payload=payload)
    path = qr_path_for_order(order_id, config["output_dir"])
    order.qr_path = render_order_qr(payload, path, ec_level=config["ec_level"])
    if order.qr_path is None:
        logger.warning("Order %s: continuing without QR image", order_id)
    else:
        logger.info("Order %s: QR code saved to %s", order_id, order.qr_path)
    return order
