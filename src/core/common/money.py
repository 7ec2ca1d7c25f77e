from decimal import Decimal

_CURRENCY_MINOR_UNITS = {
    "BHD": 3,
    "JPY": 0,
    "KRW": 0,
    "KWD": 3,
    "OMR": 3,
    "VND": 0,
}


def minor_units_for_currency(currency: str) -> int:
    return _CURRENCY_MINOR_UNITS.get(currency.upper(), 2)


def quantize_amount_for_currency(amount: Decimal, currency: str) -> Decimal:
    digits = minor_units_for_currency(currency)
    quantum = Decimal("1") if digits == 0 else Decimal(f"1e-{digits}")
    return amount.quantize(quantum)


def sum_amounts(amounts) -> Decimal:
    return sum(amounts, Decimal("0"))
