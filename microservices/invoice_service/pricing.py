"""
Invoice Pricing Engine

Turns line items plus a tax policy into subtotal, tax and total.

Rules:
    amount    = (area if area > 0 else quantity) * rate
    subtotal  = sum(amount)
    tax       = subtotal * rate / 100            (invoice mode)
              = sum(amount * item.taxRate / 100)  (per-item mode)
    total     = subtotal + tax

All arithmetic is Decimal and unrounded; rounding to cents happens only in
format_currency. Functions are pure and safe to call from any thread.

Lenient mode (default) turns non-numeric, non-finite, negative or
out-of-range numbers (10**16 and above) into zero and clamps percentages
to 100. Strict mode raises
InvalidLineItemError instead, before any totals are produced.
"""

import logging
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Iterable, List, NamedTuple, Optional, Sequence

from .models import (
    InvoiceTotals,
    InvoiceTotalsDisplay,
    PricedLineItem,
    TaxMode,
    TaxPolicy,
)
from .protocols import InvalidLineItemError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENTS = Decimal("0.01")
DEFAULT_CURRENCY_SYMBOL = "₹"

# Inputs must satisfy value.adjusted() <= MAX_ADJUSTED_EXPONENT, i.e. stay below 10**16
MAX_ADJUSTED_EXPONENT = 15
# Enough digits to keep bounded products and sums exact
ENGINE_PRECISION = 64

# Keys accepted for each number when an item is a plain mapping
_FIELD_KEYS = {
    "quantity": ("quantity",),
    "area": ("area", "sqm"),
    "rate": ("rate",),
    "tax_rate": ("tax_rate", "taxRate", "gstRate", "gst"),
}


class _ItemTerms(NamedTuple):
    """Coerced numbers of one line item"""
    quantity: Decimal
    area: Optional[Decimal]
    rate: Decimal
    tax_rate: Optional[Decimal]

    @property
    def billed_units(self) -> Decimal:
        if self.area is not None and self.area > 0:
            return self.area
        return self.quantity


def _lookup(item: Any, field: str) -> Any:
    """Read a raw number from a LineItem-like object or a mapping"""
    if isinstance(item, dict):
        for key in _FIELD_KEYS[field]:
            if item.get(key) is not None:
                return item[key]
        return None
    return getattr(item, field, None)


def _to_decimal(
    value: Any,
    field: str,
    index: Optional[int],
    strict: bool,
    upper: Optional[Decimal] = None,
) -> Optional[Decimal]:
    """
    Parse one raw number.

    Returns None when the value is absent (None or blank string).
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None

    where = f"item {index}" if index is not None else "invoice"
    number: Optional[Decimal] = None
    if not isinstance(value, bool):
        try:
            number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            number = None

    if number is None or not number.is_finite():
        if strict:
            raise InvalidLineItemError(f"{where}: {field} is not a number: {value!r}", index=index, field=field)
        logger.debug(f"{where}: non-numeric {field} {value!r} treated as 0")
        return ZERO

    if number < 0:
        if strict:
            raise InvalidLineItemError(f"{where}: {field} must not be negative: {value!r}", index=index, field=field)
        logger.debug(f"{where}: negative {field} {value!r} treated as 0")
        return ZERO

    # Drop the sign of -0 (and the exponent of 0E+n)
    if number.is_zero():
        return ZERO

    if upper is not None and number > upper:
        if strict:
            raise InvalidLineItemError(f"{where}: {field} must not exceed {upper}: {value!r}", index=index, field=field)
        return upper

    if number.adjusted() > MAX_ADJUSTED_EXPONENT:
        if strict:
            raise InvalidLineItemError(f"{where}: {field} is too large: {value!r}", index=index, field=field)
        logger.debug(f"{where}: out-of-range {field} {value!r} treated as 0")
        return ZERO

    return number


@contextmanager
def _engine_precision():
    with localcontext() as ctx:
        ctx.prec = ENGINE_PRECISION
        yield


def _item_terms(item: Any, index: Optional[int] = None, strict: bool = False) -> _ItemTerms:
    quantity = _to_decimal(_lookup(item, "quantity"), "quantity", index, strict)
    area = _to_decimal(_lookup(item, "area"), "area", index, strict)
    rate = _to_decimal(_lookup(item, "rate"), "rate", index, strict)
    tax_rate = _to_decimal(_lookup(item, "tax_rate"), "taxRate", index, strict, upper=HUNDRED)
    return _ItemTerms(
        quantity=quantity if quantity is not None else ZERO,
        area=area,
        rate=rate if rate is not None else ZERO,
        tax_rate=tax_rate,
    )


def resolve_tax_rate(policy: TaxPolicy, strict: bool = False) -> Decimal:
    """Invoice-level percentage after coercion (0 when absent)"""
    rate = _to_decimal(policy.rate, "taxRate", None, strict, upper=HUNDRED)
    return rate if rate is not None else ZERO


def _item_description(item: Any) -> str:
    if isinstance(item, dict):
        return str(item.get("description") or "")
    return getattr(item, "description", "") or ""


def _item_hsn(item: Any) -> Optional[str]:
    if isinstance(item, dict):
        return item.get("hsn")
    return getattr(item, "hsn", None)


# ====================
# Public operations
# ====================

def compute_item_amount(item: Any, strict: bool = False) -> Decimal:
    """Amount of one line item: area * rate when area > 0, else quantity * rate."""
    terms = _item_terms(item, strict=strict)
    with _engine_precision():
        return terms.billed_units * terms.rate


def compute_item_tax(item: Any, policy: Optional[TaxPolicy] = None, strict: bool = False) -> Decimal:
    """
    Tax carried by one line item.

    Per-item mode: amount * taxRate / 100. Invoice mode: 0, the tax is
    taken once on the subtotal instead.
    """
    policy = policy or TaxPolicy()
    if policy.mode != TaxMode.PER_ITEM:
        return ZERO
    terms = _item_terms(item, strict=strict)
    with _engine_precision():
        return _terms_tax(terms)


def _terms_tax(terms: _ItemTerms) -> Decimal:
    if terms.tax_rate is None:
        return ZERO
    return terms.billed_units * terms.rate * terms.tax_rate / HUNDRED


def price_line_items(
    items: Iterable[Any],
    policy: Optional[TaxPolicy] = None,
    strict: bool = False,
) -> List[PricedLineItem]:
    """
    Price every line item.

    Every item is validated before any row is built, so strict mode either
    returns all rows or raises for the first bad item.
    """
    policy = policy or TaxPolicy()
    items = list(items)
    all_terms = [_item_terms(item, index, strict) for index, item in enumerate(items)]

    priced = []
    for item, terms in zip(items, all_terms):
        with _engine_precision():
            amount = terms.billed_units * terms.rate
            tax_amount = _terms_tax(terms) if policy.mode == TaxMode.PER_ITEM else ZERO
        priced.append(PricedLineItem(
            description=_item_description(item),
            hsn=_item_hsn(item),
            quantity=terms.quantity,
            area=terms.area,
            rate=terms.rate,
            tax_rate=terms.tax_rate,
            amount=amount,
            tax_amount=tax_amount,
        ))
    return priced


def totals_from_priced(priced: Sequence[PricedLineItem], policy: TaxPolicy, strict: bool = False) -> InvoiceTotals:
    """Aggregate already priced rows"""
    with _engine_precision():
        subtotal = sum((row.amount for row in priced), ZERO)

        if policy.mode == TaxMode.PER_ITEM:
            tax_amount = sum((row.tax_amount for row in priced), ZERO)
        else:
            tax_amount = subtotal * resolve_tax_rate(policy, strict) / HUNDRED

        total = subtotal + tax_amount

    return InvoiceTotals(subtotal=subtotal, tax_amount=tax_amount, total=total)


def compute_invoice_totals(
    items: Iterable[Any],
    policy: Optional[TaxPolicy] = None,
    strict: bool = False,
) -> InvoiceTotals:
    """
    Compute subtotal, tax and total for a list of line items.

    Args:
        items: LineItem models or mappings with quantity/area/rate/taxRate
        policy: Tax mode and invoice-level rate (defaults to invoice mode at 0%)
        strict: Raise InvalidLineItemError instead of coercing bad numbers to 0

    Returns:
        InvoiceTotals with total == subtotal + tax_amount
    """
    policy = policy or TaxPolicy()
    # Validate the invoice rate up front as well, nothing is computed on failure
    if policy.mode == TaxMode.INVOICE:
        resolve_tax_rate(policy, strict)
    priced = price_line_items(items, policy, strict)
    return totals_from_priced(priced, policy, strict)


def format_currency(amount: Any, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """Render an amount with two decimal places and a currency symbol prefix."""
    if amount is None:
        value = ZERO
    elif isinstance(amount, Decimal):
        value = amount
    else:
        value = Decimal(str(amount))
    if not value.is_finite():
        value = ZERO
    with localcontext() as ctx:
        # quantize needs every integer digit plus two decimals
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        value = value.quantize(CENTS, rounding=ROUND_HALF_UP)
        if value.is_zero():
            value = abs(value)
        return f"{symbol}{value:.2f}"


def format_totals(totals: InvoiceTotals, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> InvoiceTotalsDisplay:
    """Display strings for a set of totals"""
    return InvoiceTotalsDisplay(
        subtotal=format_currency(totals.subtotal, symbol),
        tax_amount=format_currency(totals.tax_amount, symbol),
        total=format_currency(totals.total, symbol),
    )


def format_number(value: Optional[Decimal]) -> str:
    """Plain rendering of a quantity, area or percentage (18.00 -> '18')"""
    if value is None:
        return "0"
    return format(value.normalize(), "f")


__all__ = [
    "compute_item_amount",
    "compute_item_tax",
    "compute_invoice_totals",
    "price_line_items",
    "totals_from_priced",
    "resolve_tax_rate",
    "format_currency",
    "format_totals",
    "format_number",
]
