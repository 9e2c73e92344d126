"""Locale-aware currency formatting for catalog prices.

Only the locales served by the storefronts are listed; each entry fixes the grouping
and decimal separators and where the symbol goes. Currencies outside the locale's own
use their international symbol.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict


@dataclass(frozen=True)
class LocaleFormat:
    group: str
    decimal: str
    pattern: str
    native_currency: str
    native_symbol: str


LOCALE_FORMATS: Dict[str, LocaleFormat] = {
    "es-AR": LocaleFormat(".", ",", "{symbol}{amount}", "ARS", "$"),
    "es-CL": LocaleFormat(".", ",", "{symbol}{amount}", "CLP", "$"),
    "es-CO": LocaleFormat(".", ",", "{symbol} {amount}", "COP", "$"),
    "es-MX": LocaleFormat(",", ".", "{symbol}{amount}", "MXN", "$"),
    "es-ES": LocaleFormat(".", ",", "{amount} {symbol}", "EUR", "€"),
    "fr-FR": LocaleFormat(" ", ",", "{amount} {symbol}", "EUR", "€"),
    "de-DE": LocaleFormat(".", ",", "{amount} {symbol}", "EUR", "€"),
    "pt-BR": LocaleFormat(".", ",", "{symbol} {amount}", "BRL", "R$"),
    "en-US": LocaleFormat(",", ".", "{symbol}{amount}", "USD", "$"),
}

CURRENCY_SYMBOLS = {
    "ARS": "ARS",
    "BRL": "R$",
    "CLP": "CLP",
    "COP": "COP",
    "EUR": "€",
    "GBP": "£",
    "MXN": "MXN",
    "USD": "US$",
}

# Currencies quoted without minor units.
ZERO_DECIMAL_CURRENCIES = {"CLP", "COP"}


def _group_digits(digits: str, separator: str) -> str:
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return separator.join(groups)


class PriceFormatter:
    """Formats numeric prices for one locale/currency pair."""

    def __init__(self, locale: str, currency: str) -> None:
        """Purpose: Resolve separators, pattern and symbol for the configured pair.
        Inputs/Outputs: Inputs are a locale tag (e.g. "es-AR") and an ISO currency code;
            no return value.
        Side Effects / State: Stores the resolved LocaleFormat and symbol.
        Dependencies: LOCALE_FORMATS, CURRENCY_SYMBOLS.
        Failure Modes: Raises ValueError for an unknown locale.
        If Removed: Product prices cannot be rendered for the storefront's locale.
        Testing Notes: es-AR/ARS renders "$1.234,56"; fr-FR/EUR renders "1 234,56 €".
        """
        # Pick the locale layout and the symbol that locale uses for the currency.
        if locale not in LOCALE_FORMATS:
            raise ValueError(f"Unsupported PRICE_LOCALE {locale!r}; expected one of {sorted(LOCALE_FORMATS)}")
        self.locale = locale
        self.currency = currency.upper()
        self._format = LOCALE_FORMATS[locale]
        if self.currency == self._format.native_currency:
            self._symbol = self._format.native_symbol
        else:
            self._symbol = CURRENCY_SYMBOLS.get(self.currency, self.currency)
        self._decimals = 0 if self.currency in ZERO_DECIMAL_CURRENCIES else 2

    def format(self, amount: float) -> str:
        value = Decimal(str(amount))
        if not value.is_finite():
            raise ValueError(f"Cannot format non-finite price {amount!r}")
        quantum = Decimal(1).scaleb(-self._decimals)
        value = value.quantize(quantum, rounding=ROUND_HALF_UP)
        sign = "-" if value < 0 else ""
        whole, _, fraction = f"{abs(value):f}".partition(".")
        rendered = _group_digits(whole, self._format.group)
        if self._decimals:
            rendered = f"{rendered}{self._format.decimal}{fraction}"
        return sign + self._format.pattern.format(symbol=self._symbol, amount=rendered)
