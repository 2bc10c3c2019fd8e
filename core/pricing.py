"""
Core — Line Pricing

Shared by purchase and sale documents: line total, VAT on vatable
products and document totals. All amounts are rounded half-up to two
decimals.

@file core/pricing.py
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

from core.constants import ZERO

CENT = Decimal('0.01')


def money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LinePrice:
    unit_price: Decimal
    total_price: Decimal
    tax_amount: Decimal


@dataclass(frozen=True)
class DocumentTotals:
    total_amount: Decimal
    tax_amount: Decimal
    grand_total: Decimal


def price_line(product, quantity, unit_price=None, *, default_price_field: str) -> LinePrice:
    """
    unit_price falls back to the product's purchase or selling price
    (default_price_field). VAT_RATE applies to vatable products only.
    """
    if unit_price is None:
        unit_price = getattr(product, default_price_field)
    unit_price = money(unit_price)
    total = money(Decimal(quantity) * unit_price)
    tax = money(total * Decimal(str(settings.VAT_RATE))) if product.is_vatable else ZERO
    return LinePrice(unit_price=unit_price, total_price=total, tax_amount=money(tax))


def document_totals(lines) -> DocumentTotals:
    total = sum((line.total_price for line in lines), ZERO)
    tax = sum((line.tax_amount for line in lines), ZERO)
    return DocumentTotals(total_amount=money(total), tax_amount=money(tax), grand_total=money(total + tax))
