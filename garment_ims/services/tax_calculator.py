"""Garment IMS — Slab-based GST for purchase invoices.

Rates per line:
- AUTO_5_18: 5% below the MRP threshold (2500), 18% at or above it.
- FLAT_5:    5% regardless of MRP.

An invoice-level discount is spread over the lines in proportion to their raw
totals, then each line is taxed at its own rate. Freight is not spread; it is
taxed once at the invoice's selected freight rate and added on top.
"""
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from garment_ims.config import get_settings
from garment_ims.core.errors import ValidationError
from garment_ims.models.batch import GSTLogic
from garment_ims.models.purchase_invoice import SupplyType

RATE_5 = Decimal("0.05")
RATE_18 = Decimal("0.18")
FREIGHT_RATES = {5: RATE_5, 18: RATE_18}

CENT = Decimal("0.01")
ONE = Decimal("1")
ZERO = Decimal("0")


def quantize_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _as_decimal(value, name: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Invalid amount for {name}: {value!r}", field=name)
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{name} must be a non-negative amount", field=name)
    return amount


def gst_rate(gst_logic: GSTLogic | str, mrp: Decimal) -> Decimal:
    """Slab rate for one line, as a fraction (0.05 / 0.18)."""
    logic = GSTLogic(gst_logic)
    if logic is GSTLogic.FLAT_5:
        return RATE_5
    threshold = Decimal(get_settings().GST_MRP_THRESHOLD)
    return RATE_5 if Decimal(str(mrp)) < threshold else RATE_18


def rate_percent(rate: Decimal) -> int:
    return int(rate * 100)


@dataclass(frozen=True)
class TaxableLine:
    """Tax input for one invoice line: cost x quantity, priced by its MRP slab."""

    raw_total: Decimal
    mrp: Decimal
    gst_logic: GSTLogic


@dataclass(frozen=True)
class LineTax:
    raw_total: Decimal
    taxable_value: Decimal
    rate_percent: int
    gst: Decimal


@dataclass(frozen=True)
class GSTSplit:
    cgst: Decimal
    sgst: Decimal
    igst: Decimal


@dataclass(frozen=True)
class InvoiceTaxSummary:
    items_total: Decimal
    discount: Decimal
    taxable_value: Decimal
    lines: list[LineTax]
    items_gst: Decimal
    gst_by_rate: dict[int, Decimal]
    freight: Decimal
    freight_rate_percent: int
    freight_gst: Decimal
    total_gst: Decimal
    split: GSTSplit
    subtotal: Decimal
    round_off: Decimal
    grand_total: Decimal
    supply_type: SupplyType = field(default=SupplyType.CGST_SGST)


def apply_round_off(amount: Decimal) -> tuple[Decimal, Decimal]:
    """Round to the nearest rupee; return (rounded, residual)."""
    rounded = amount.quantize(ONE, rounding=ROUND_HALF_UP)
    return rounded, quantize_money(rounded - amount)


def split_gst(amount: Decimal, supply_type: SupplyType | str) -> GSTSplit:
    """Intra-state supply halves GST into CGST + SGST; inter-state is all IGST."""
    if SupplyType(supply_type) is SupplyType.IGST:
        return GSTSplit(cgst=ZERO, sgst=ZERO, igst=quantize_money(amount))
    half = quantize_money(amount / 2)
    return GSTSplit(cgst=half, sgst=quantize_money(amount - half), igst=ZERO)


def calculate_invoice_tax(
    lines: list[TaxableLine],
    discount: Decimal | int | str = ZERO,
    freight: Decimal | int | str = ZERO,
    freight_rate_percent: int = 5,
    supply_type: SupplyType | str = SupplyType.CGST_SGST,
) -> InvoiceTaxSummary:
    discount = _as_decimal(discount, "discount")
    freight = _as_decimal(freight, "freight")
    if freight_rate_percent not in FREIGHT_RATES:
        raise ValidationError("Freight GST rate must be 5 or 18", field="freight_gst_percent")

    items_total = sum((line.raw_total for line in lines), ZERO)
    if discount > items_total:
        raise ValidationError(
            f"Discount {discount} exceeds items total {items_total}", field="discount"
        )
    taxable_total = items_total - discount

    line_taxes: list[LineTax] = []
    gst_exact_by_rate: dict[int, Decimal] = {}
    items_gst_exact = ZERO
    for line in lines:
        rate = gst_rate(line.gst_logic, line.mrp)
        if items_total > 0:
            line_taxable = line.raw_total / items_total * taxable_total
        else:
            line_taxable = ZERO
        line_gst = line_taxable * rate
        items_gst_exact += line_gst
        pct = rate_percent(rate)
        gst_exact_by_rate[pct] = gst_exact_by_rate.get(pct, ZERO) + line_gst
        line_taxes.append(
            LineTax(
                raw_total=quantize_money(line.raw_total),
                taxable_value=quantize_money(line_taxable),
                rate_percent=pct,
                gst=quantize_money(line_gst),
            )
        )

    items_gst = quantize_money(items_gst_exact)
    freight_gst = quantize_money(freight * FREIGHT_RATES[freight_rate_percent])
    total_gst = items_gst + freight_gst

    gst_by_rate = {pct: quantize_money(amount) for pct, amount in sorted(gst_exact_by_rate.items())}
    gst_by_rate[freight_rate_percent] = gst_by_rate.get(freight_rate_percent, ZERO) + freight_gst

    subtotal = quantize_money(taxable_total + items_gst + freight + freight_gst)
    grand_total, round_off = apply_round_off(subtotal)

    return InvoiceTaxSummary(
        items_total=quantize_money(items_total),
        discount=quantize_money(discount),
        taxable_value=quantize_money(taxable_total),
        lines=line_taxes,
        items_gst=items_gst,
        gst_by_rate=gst_by_rate,
        freight=quantize_money(freight),
        freight_rate_percent=freight_rate_percent,
        freight_gst=freight_gst,
        total_gst=total_gst,
        split=split_gst(total_gst, supply_type),
        subtotal=subtotal,
        round_off=round_off,
        grand_total=grand_total,
        supply_type=SupplyType(supply_type),
    )


def reverse_gst(mrp_inclusive: Decimal, gst_logic: GSTLogic | str) -> tuple[Decimal, Decimal, int]:
    """Split a GST-inclusive MRP into (base price, GST amount, rate percent)."""
    mrp_inclusive = Decimal(str(mrp_inclusive))
    rate = gst_rate(gst_logic, mrp_inclusive)
    base = mrp_inclusive / (ONE + rate)
    return quantize_money(base), quantize_money(mrp_inclusive - base), rate_percent(rate)


def suggest_mrp(cost: Decimal, markup_percent: Decimal, gst_logic: GSTLogic | str) -> Decimal:
    """MRP from cost plus markup, grossed up by the slab the estimate lands in."""
    base = Decimal(str(cost)) * (ONE + Decimal(str(markup_percent)) / 100)
    if GSTLogic(gst_logic) is GSTLogic.FLAT_5:
        return quantize_money(base * (ONE + RATE_5))
    estimated = base * (ONE + RATE_5)
    threshold = Decimal(get_settings().GST_MRP_THRESHOLD)
    multiplier = ONE + (RATE_5 if estimated < threshold else RATE_18)
    return quantize_money(base * multiplier)
