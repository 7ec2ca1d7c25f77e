"""
FILE: src/core/liquidity/messages.py
Localized text templates and display formatting for liquidity outputs.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

DEFAULT_LOCALE = "en"
SUPPORTED_LOCALES = ("en", "ru", "uk")

_CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥", "CHF": "CHF "}

_DATE_FORMATS = {"en": "%Y-%m-%d", "ru": "%d.%m.%Y", "uk": "%d.%m.%Y"}

SEVERITY_LABELS = {
    "en": {"critical": "CRITICAL", "warning": "WARNING", "info": "INFO"},
    "ru": {"critical": "КРИТИЧНО", "warning": "ВНИМАНИЕ", "info": "ИНФОРМАЦИЯ"},
    "uk": {"critical": "КРИТИЧНО", "warning": "УВАГА", "info": "ІНФОРМАЦІЯ"},
}

_ALERT_TITLE = {
    "en": "{severity}: Deficit {amount} on {date}",
    "ru": "{severity}: Дефицит {amount} на {date}",
    "uk": "{severity}: Дефіцит {amount} на {date}",
}

_ALERT_DESCRIPTION = {
    "en": (
        "Liquidity deficit projected in {days} days. "
        "Minimum balance: {min_balance}. "
        "Shortfall: {shortfall}. "
        "Total deficit days: {deficit_days}."
    ),
    "ru": (
        "Прогнозируется дефицит ликвидности через {days} дней. "
        "Минимальный баланс: {min_balance}. "
        "Недостаток: {shortfall}. "
        "Всего дней с дефицитом: {deficit_days}."
    ),
    "uk": (
        "Прогнозується дефіцит ліквідності через {days} днів. "
        "Мінімальний баланс: {min_balance}. "
        "Нестача: {shortfall}. "
        "Усього днів з дефіцитом: {deficit_days}."
    ),
}

ACTION_DESCRIPTIONS = {
    "en": {
        "delay_payment": "Negotiate a delay of the nearest payments",
        "short_term_financing": "Evaluate short-term financing",
        "sell_liquid_assets": "Liquidate liquid assets",
        "contact_counterparties": "Contact counterparties to confirm timing",
        "review_forecast": "Review whether the forecast is up to date",
    },
    "ru": {
        "delay_payment": "Согласовать перенос ближайших платежей",
        "short_term_financing": "Рассмотреть краткосрочное финансирование",
        "sell_liquid_assets": "Реализовать ликвидные активы",
        "contact_counterparties": "Связаться с контрагентами для уточнения сроков",
        "review_forecast": "Проверить актуальность прогноза",
    },
    "uk": {
        "delay_payment": "Погодити перенесення найближчих платежів",
        "short_term_financing": "Розглянути короткострокове фінансування",
        "sell_liquid_assets": "Реалізувати ліквідні активи",
        "contact_counterparties": "Зв'язатися з контрагентами для уточнення термінів",
        "review_forecast": "Перевірити актуальність прогнозу",
    },
}

SCENARIO_NAMES = {
    "en": {"base": "Base", "conservative": "Conservative", "aggressive": "Aggressive"},
    "ru": {"base": "Базовый", "conservative": "Консервативный", "aggressive": "Агрессивный"},
    "uk": {"base": "Базовий", "conservative": "Консервативний", "aggressive": "Агресивний"},
}

# (positive phrase, negative phrase) per adjustment field.
_ADJUSTMENT_PHRASES = {
    "en": {
        "inflow_haircut_pct": ("inflows reduced by {value}%", "inflows increased by {value}%"),
        "outflow_increase_pct": ("outflows increased by {value}%", "outflows reduced by {value}%"),
        "distribution_delay_days": (
            "distributions delayed by {value} days",
            "distributions accelerated by {value} days",
        ),
        "capital_call_shift_days": (
            "capital calls {value} days earlier",
            "capital calls {value} days later",
        ),
        "rate_shock_bps": ("rates up {value}bp", "rates down {value}bp"),
    },
    "ru": {
        "inflow_haircut_pct": ("снижение притоков на {value}%", "увеличение притоков на {value}%"),
        "outflow_increase_pct": ("рост оттоков на {value}%", "снижение оттоков на {value}%"),
        "distribution_delay_days": (
            "задержка дистрибуций на {value} дней",
            "ускорение дистрибуций на {value} дней",
        ),
        "capital_call_shift_days": (
            "capital calls раньше на {value} дней",
            "capital calls позже на {value} дней",
        ),
        "rate_shock_bps": ("рост ставок на {value}bp", "снижение ставок на {value}bp"),
    },
    "uk": {
        "inflow_haircut_pct": ("зниження притоків на {value}%", "збільшення притоків на {value}%"),
        "outflow_increase_pct": ("зростання відтоків на {value}%", "зниження відтоків на {value}%"),
        "distribution_delay_days": (
            "затримка дистрибуцій на {value} днів",
            "прискорення дистрибуцій на {value} днів",
        ),
        "capital_call_shift_days": (
            "capital calls раніше на {value} днів",
            "capital calls пізніше на {value} днів",
        ),
        "rate_shock_bps": ("зростання ставок на {value}bp", "зниження ставок на {value}bp"),
    },
}

_CUSTOM_RULES_PHRASE = {
    "en": "{count} custom rule(s)",
    "ru": "пользовательских правил: {count}",
    "uk": "користувацьких правил: {count}",
}

_NO_ADJUSTMENTS = {
    "en": "No adjustments",
    "ru": "Без корректировок",
    "uk": "Без коригувань",
}

STRESS_TYPE_LABELS = {
    "en": {
        "market_drawdown": "market drawdown",
        "delayed_distributions": "delayed distributions",
        "tax_spike": "tax spike",
        "debt_rate_shock": "debt rate shock",
        "capital_call_acceleration": "capital call acceleration",
    },
    "ru": {
        "market_drawdown": "рыночный спад",
        "delayed_distributions": "задержка дистрибуций",
        "tax_spike": "скачок налогов",
        "debt_rate_shock": "шок ставок",
        "capital_call_acceleration": "ускорение capital calls",
    },
    "uk": {
        "market_drawdown": "ринковий спад",
        "delayed_distributions": "затримка дистрибуцій",
        "tax_spike": "стрибок податків",
        "debt_rate_shock": "шок ставок",
        "capital_call_acceleration": "прискорення capital calls",
    },
}

STRESS_SEVERITY_LABELS = {
    "en": {"mild": "mild", "moderate": "moderate", "severe": "severe"},
    "ru": {"mild": "мягкий", "moderate": "умеренный", "severe": "жёсткий"},
    "uk": {"mild": "м'який", "moderate": "помірний", "severe": "жорсткий"},
}

_STRESS_IMPACT_BREACH = {
    "en": (
        "Under a {severity} {stress}, cash falls to {min_cash} on {date} "
        "({delta} vs baseline), breaching the threshold on {breaches} day(s) "
        "with a shortfall of {shortfall}."
    ),
    "ru": (
        "Сценарий «{stress}» ({severity}): минимум кэша {min_cash} на {date} "
        "({delta} к базовому), нарушение порога в {breaches} дн., недостаток {shortfall}."
    ),
    "uk": (
        "Сценарій «{stress}» ({severity}): мінімум кешу {min_cash} на {date} "
        "({delta} до базового), порушення порогу в {breaches} дн., нестача {shortfall}."
    ),
}

_STRESS_IMPACT_CLEAR = {
    "en": (
        "Under a {severity} {stress}, cash bottoms at {min_cash} on {date} "
        "({delta} vs baseline) and stays above the threshold."
    ),
    "ru": (
        "Сценарий «{stress}» ({severity}): минимум кэша {min_cash} на {date} "
        "({delta} к базовому), порог не нарушен."
    ),
    "uk": (
        "Сценарій «{stress}» ({severity}): мінімум кешу {min_cash} на {date} "
        "({delta} до базового), поріг не порушено."
    ),
}


def resolve_locale(locale: Optional[str]) -> str:
    if locale is None:
        return DEFAULT_LOCALE
    normalized = locale.strip().lower()
    return normalized if normalized in SUPPORTED_LOCALES else DEFAULT_LOCALE


def format_currency(amount: Decimal, currency: str = "USD") -> str:
    rounded = amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    symbol = _CURRENCY_SYMBOLS.get(currency.upper())
    digits = f"{abs(rounded):,.0f}"
    if symbol is None:
        return f"{sign}{currency.upper()} {digits}"
    return f"{sign}{symbol}{digits}"


def format_signed_currency(amount: Decimal, currency: str = "USD") -> str:
    prefix = "+" if amount > 0 else ""
    return f"{prefix}{format_currency(amount, currency)}"


def format_date(value: date, locale: str = DEFAULT_LOCALE) -> str:
    return value.strftime(_DATE_FORMATS[resolve_locale(locale)])


def _format_number(value: Decimal | int) -> str:
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    return str(value)


def alert_title(*, severity: str, amount: str, when: str, locale: str) -> str:
    locale = resolve_locale(locale)
    return _ALERT_TITLE[locale].format(
        severity=SEVERITY_LABELS[locale][severity], amount=amount, date=when
    )


def alert_description(
    *, days: int, min_balance: str, shortfall: str, deficit_days: int, locale: str
) -> str:
    return _ALERT_DESCRIPTION[resolve_locale(locale)].format(
        days=days, min_balance=min_balance, shortfall=shortfall, deficit_days=deficit_days
    )


def action_description(action: str, locale: str) -> str:
    return ACTION_DESCRIPTIONS[resolve_locale(locale)][action]


def adjustment_phrase(field_name: str, value: Decimal | int, locale: str) -> str:
    positive, negative = _ADJUSTMENT_PHRASES[resolve_locale(locale)][field_name]
    template = positive if value > 0 else negative
    return template.format(value=_format_number(abs(value)))


def custom_rules_phrase(count: int, locale: str) -> str:
    return _CUSTOM_RULES_PHRASE[resolve_locale(locale)].format(count=count)


def no_adjustments(locale: str) -> str:
    return _NO_ADJUSTMENTS[resolve_locale(locale)]


def stress_impact_line(
    *,
    stress_type: str,
    severity: str,
    min_cash: str,
    when: str,
    delta: str,
    breaches: int,
    shortfall: str,
    locale: str,
) -> str:
    locale = resolve_locale(locale)
    templates = _STRESS_IMPACT_BREACH if breaches > 0 else _STRESS_IMPACT_CLEAR
    return templates[locale].format(
        stress=STRESS_TYPE_LABELS[locale][stress_type],
        severity=STRESS_SEVERITY_LABELS[locale][severity],
        min_cash=min_cash,
        date=when,
        delta=delta,
        breaches=breaches,
        shortfall=shortfall,
    )
