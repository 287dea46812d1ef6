import io
import re
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest
from PIL import Image

from crc16 import checksum
from errors import EncodingCapacityExceeded, InvalidAmount, InvalidPhoneNumber
from promptpay_qr import (
    assemble_payload,
    build_promptpay_payload,
    payload_to_qr_image,
    render_qr,
    save_qr_png,
)

# Reference payload for 0891234567 / 100.00, CRC-16/CCITT-FALSE = 319F
GOLDEN_100 = (
    "000201"
    "010211"
    "2937" "0016A000000677010111" "01130066891234567"
    "5802TH"
    "5303764"
    "540800010000"
    "6304319F"
)


def test_end_to_end_golden():
    assert build_promptpay_payload("0891234567", 100.00) == GOLDEN_100


def test_end_to_end_golden_fractional_amount():
    payload = build_promptpay_payload("0891234567", 1234.5)
    assert payload.endswith("5408001234506304392C")


def test_inner_66_golden():
    payload = build_promptpay_payload("0866912345", Decimal("0.50"))
    assert "01130066866912345" in payload
    assert payload.endswith("5408000000506304" + "35DA")


def test_equivalent_inputs_give_same_payload():
    a = build_promptpay_payload("0891234567", 100)
    b = build_promptpay_payload("+66-89-123-4567", Decimal("100.00"))
    c = build_promptpay_payload(" 66891234567 ", "100")
    assert a == b == c == GOLDEN_100


def test_deterministic():
    runs = {build_promptpay_payload("0812345678", 59.75) for _ in range(20)}
    assert len(runs) == 1


def test_concurrent_calls_agree():
    inputs = [("0891234567", i / 4) for i in range(200)]
    with ThreadPoolExecutor(max_workers=8) as pool:
        parallel = list(pool.map(lambda a: build_promptpay_payload(*a), inputs))
    assert parallel == [build_promptpay_payload(*a) for a in inputs]


def test_assemble_template_is_fixed_outside_slots():
    a = assemble_payload("891234567", "00010000")
    b = assemble_payload("812345678", "99999999")
    prefix = "00020101021129370016A00000067701011101130066"
    middle = "5802TH53037645408"
    for p in (a, b):
        assert p.startswith(prefix)
        assert p[len(prefix) + 9:len(prefix) + 9 + len(middle)] == middle
        assert p.endswith("6304")
        assert len(p) == 82


def test_final_is_assembled_plus_crc():
    body = assemble_payload("891234567", "00123450")
    final = build_promptpay_payload("0891234567", 1234.5)
    assert len(final) == len(body) + 4
    assert final[:-4] == body
    assert re.fullmatch(r"[0-9A-F]{4}", final[-4:])
    assert final[-4:] == checksum(body)


@pytest.mark.parametrize("phone_id", ["89123456", "8912345678", "89123456a", None])
def test_assemble_rejects_unvalidated_phone(phone_id):
    with pytest.raises(InvalidPhoneNumber):
        assemble_payload(phone_id, "00010000")


@pytest.mark.parametrize("field", ["10000", "000100000", "0001000.", 10000])
def test_assemble_rejects_unvalidated_amount(field):
    with pytest.raises(InvalidAmount):
        assemble_payload("891234567", field)


def test_first_error_wins():
    # bad phone is reported even though the amount is bad too
    with pytest.raises(InvalidPhoneNumber):
        build_promptpay_payload("12", -1)
    with pytest.raises(InvalidAmount):
        build_promptpay_payload("0891234567", -1.00)
    with pytest.raises(InvalidAmount):
        build_promptpay_payload("0891234567", 1_000_000.00)


# ---------------------------------------------------------------------------
# Rendering through qrcode / Pillow
# ---------------------------------------------------------------------------

def test_payload_to_qr_image_is_png():
    data = payload_to_qr_image(GOLDEN_100)
    assert data[:8] == b"\x89PNG\r\n\x1a\n"
    img = Image.open(io.BytesIO(data))
    assert img.width == img.height


@pytest.mark.parametrize("ec_level", ["L", "M", "Q", "H", "q"])
def test_render_all_error_correction_levels(ec_level):
    img = render_qr(GOLDEN_100, ec_level=ec_level)
    assert img.size[0] > 0


def test_higher_ec_level_needs_bigger_symbol():
    low = render_qr(GOLDEN_100, ec_level="L", box_size=1, border=0)
    high = render_qr(GOLDEN_100, ec_level="H", box_size=1, border=0)
    assert high.size[0] > low.size[0]


def test_unknown_ec_level():
    with pytest.raises(ValueError):
        render_qr(GOLDEN_100, ec_level="X")


def test_capacity_exceeded_for_fixed_small_version():
    with pytest.raises(EncodingCapacityExceeded):
        render_qr(GOLDEN_100, ec_level="H", version=1)


def test_capacity_exceeded_for_oversized_data():
    with pytest.raises(EncodingCapacityExceeded):
        render_qr("A" * 5000, ec_level="H")


def test_save_qr_png_creates_directories(tmp_path):
    out = tmp_path / "qrcodes" / "order_7_qr.png"
    path = save_qr_png(GOLDEN_100, out)
    assert path == out
    assert out.read_bytes()[:4] == b"\x89PNG"


def test_save_qr_png_storage_error(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")
    with pytest.raises(OSError):
        save_qr_png(GOLDEN_100, blocker / "order_1_qr.png")
