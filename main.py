#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PromptPay QR: build the payment payload for a phone number and amount,
write it as a PNG, check an existing payload, or build a PDF sheet of
order QR codes from a CSV (order_id,amount).
"""
import argparse
import csv
import logging
import sys
from pathlib import Path
from typing import List

from errors import CodecError, EncodingCapacityExceeded, InvalidPayload
from order_qr import OrderPayment, get_config
from pdf_io import build_payment_sheet_pdf, format_order_register_text
from promptpay_decode import parse_promptpay_payload
from promptpay_qr import EC_LEVELS, build_promptpay_payload, save_qr_png


def read_orders_csv(path: Path) -> List[OrderPayment]:
    """Rows 'order_id,amount'; a header row and blank lines are skipped."""
    orders: List[OrderPayment] = []
    with open(path, newline="", encoding="utf-8") as f:
        for row in csv.reader(f):
            if not row or not "".join(row).strip():
                continue
            if len(row) < 2:
                raise ValueError(f"{path}: expected 'order_id,amount', got {row!r}")
            order_id, amount = row[0].strip(), row[1].strip()
            if not order_id.isdigit():
                if not orders and order_id.lower() in ("order_id", "id", "order"):
                    continue
                raise ValueError(f"{path}: bad order id {order_id!r}")
            orders.append(OrderPayment(order_id=int(order_id), amount=amount))
    return orders


def _cmd_payload(args) -> int:
    print(build_promptpay_payload(args.phone, args.amount))
    return 0


def _cmd_png(args) -> int:
    payload = build_promptpay_payload(args.phone, args.amount)
    path = save_qr_png(payload, args.output, ec_level=args.ec)
    print(payload)
    print(f"Written: {path}")
    return 0


def _cmd_verify(args) -> int:
    try:
        parsed = parse_promptpay_payload(args.payload)
    except InvalidPayload as e:
        print(f"Invalid payload: {e}", file=sys.stderr)
        return 1
    print(f"Phone id: {parsed.phone_id}")
    print(f"Amount: {parsed.amount:.2f} THB")
    print(f"CRC: {parsed.checksum}")
    return 0


def _cmd_sheet(args) -> int:
    input_path = args.orders_csv
    if not input_path.is_file():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        return 1
    phone = args.phone or get_config()["phone_number"]

    output_path = args.output
    if output_path is None:
        output_path = input_path.parent / f"{input_path.stem}_payment_qr.pdf"

    try:
        orders = read_orders_csv(input_path)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    for o in orders:
        o.payload = build_promptpay_payload(phone, o.amount)

    build_payment_sheet_pdf(orders, str(output_path), ec_level=args.ec)
    print(f"Processed: {len(orders)} order(s).")
    print(f"Written: {output_path}")
    if args.debug:
        print(format_order_register_text(orders))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build PromptPay QR payloads (Thai phone proxy, THB) and QR images."
    )
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Debug logging; print the order register for 'sheet'",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("payload", help="Print the payload string")
    p.add_argument("phone", help="Recipient phone number, e.g. 0891234567")
    p.add_argument("amount", help="Amount in THB, e.g. 100.00")
    p.set_defaults(func=_cmd_payload)

    p = sub.add_parser("png", help="Write the QR code as PNG")
    p.add_argument("phone")
    p.add_argument("amount")
    p.add_argument("-o", "--output", type=Path, required=True, help="Output PNG file")
    p.add_argument("--ec", choices=sorted(EC_LEVELS), default="L", help="Error correction level (default: L)")
    p.set_defaults(func=_cmd_png)

    p = sub.add_parser("verify", help="Check CRC and show phone id and amount of a payload")
    p.add_argument("payload")
    p.set_defaults(func=_cmd_verify)

    p = sub.add_parser("sheet", help="PDF with QR codes for orders from a CSV (order_id,amount)")
    p.add_argument("orders_csv", type=Path, help="Input CSV file")
    p.add_argument("-o", "--output", type=Path, default=None, help="Output PDF (default: <csv>_payment_qr.pdf)")
    p.add_argument("--phone", default=None, help="Recipient phone (default: MY_PHONE_NUMBER env)")
    p.add_argument("--ec", choices=sorted(EC_LEVELS), default="M", help="Error correction level (default: M)")
    p.set_defaults(func=_cmd_sheet)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    try:
        return args.func(args)
    except (CodecError, EncodingCapacityExceeded, OSError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
