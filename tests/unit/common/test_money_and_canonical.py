from datetime import date
from decimal import Decimal

from src.core.common.canonical import canonical_json, hash_canonical_payload, short_digest
from src.core.common.money import (
    minor_units_for_currency,
    quantize_amount_for_currency,
    sum_amounts,
)


def test_quantize_respects_currency_minor_units():
    assert quantize_amount_for_currency(Decimal("10.005"), "USD") == Decimal("10.00")
    assert quantize_amount_for_currency(Decimal("1234.4"), "jpy") == Decimal("1234")
    assert quantize_amount_for_currency(Decimal("1.23456"), "KWD") == Decimal("1.235")
    assert minor_units_for_currency("EUR") == 2


def test_sum_amounts_of_nothing_is_decimal_zero():
    total = sum_amounts([])

    assert isinstance(total, Decimal)
    assert total == Decimal("0")
    assert sum_amounts([Decimal("1.10"), Decimal("2.20")]) == Decimal("3.30")


def test_canonical_json_is_key_order_and_scale_independent():
    left = {"b": Decimal("1.50"), "a": date(2026, 1, 1)}
    right = {"a": date(2026, 1, 1), "b": Decimal("1.5")}

    assert canonical_json(left) == '{"a":"2026-01-01","b":"1.5"}'
    assert hash_canonical_payload(left) == hash_canonical_payload(right)
    assert hash_canonical_payload(left).startswith("sha256:")


def test_short_digest_is_stable_and_truncated():
    digest = short_digest("fc_001:2026-01-11")

    assert len(digest) == 12
    assert digest == short_digest("fc_001:2026-01-11")
    assert len(short_digest("x", length=8)) == 8
