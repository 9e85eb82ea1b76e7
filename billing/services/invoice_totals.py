"""Invoice arithmetic: line roll-ups, charges, tax split and payment status.

Everything here is pure. Amounts are ``Decimal`` quantized to two places with
ROUND_HALF_UP, rounding happens per line before anything is summed.
"""
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import logging
from typing import Any

from ..errors import ValidationError
from ..models.invoice import (
    InvoiceTypeEnum,
    PaymentStatusEnum,
    TaxTypeEnum,
)

logger = logging.getLogger(__name__)

MONEY = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")
DEFAULT_TAX_RATE = Decimal("18")
DEFAULT_QUANTITY = Decimal("1")
MAX_AMOUNT = Decimal("9999999999.99")
MAX_QUANTITY = Decimal("999999999.999")
QUANTITY_STEP = Decimal("0.001")

TYPE_ALIASES = {
    "SALES": InvoiceTypeEnum.SALES.value,
    "SALE": InvoiceTypeEnum.SALES.value,
    "PURCHASE": InvoiceTypeEnum.PURCHASE.value,
    "PURCHASES": InvoiceTypeEnum.PURCHASE.value,
    "BUY": InvoiceTypeEnum.PURCHASE.value,
    "QUOTATION": InvoiceTypeEnum.QUOTATION.value,
    "QUOTE": InvoiceTypeEnum.QUOTATION.value,
}


def safe_number(
    value: Any,
    default: Decimal,
    low: Decimal | None = None,
    high: Decimal | None = None,
) -> Decimal:
    """Coerce ``value`` to a finite Decimal or return ``default``.

    Missing, blank, non-numeric, NaN/Infinity and out-of-range values all
    resolve to the default; nothing non-finite ever leaves this function.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.replace(",", "").strip()
        if not value:
            return default
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default
    if not number.is_finite():
        return default
    if low is not None and number < low:
        return default
    if high is not None and number > high:
        return default
    return number


def round2(value) -> Decimal:
    return Decimal(value).quantize(MONEY, rounding=ROUND_HALF_UP)


def round3(value) -> Decimal:
    return Decimal(value).quantize(QUANTITY_STEP, rounding=ROUND_HALF_UP)


def _representable(value: Decimal) -> bool:
    return value.is_finite() and abs(value) <= MAX_AMOUNT


def line_amounts(
    quantity: Decimal, unit_price: Decimal, tax_rate: Decimal
) -> tuple[Decimal, Decimal, Decimal]:
    line_total = round2(quantity * unit_price)
    tax_amount = round2(line_total * tax_rate / HUNDRED)
    return line_total, tax_amount, round2(line_total + tax_amount)


@dataclass
class TaxConfig:
    tax_type: str = TaxTypeEnum.IGST.value
    tax_rate: Any = None
    default_tax_rate: Decimal = DEFAULT_TAX_RATE

    @property
    def invoice_tax_rate(self) -> Decimal:
        default = safe_number(self.default_tax_rate, DEFAULT_TAX_RATE, ZERO, HUNDRED)
        return round2(safe_number(self.tax_rate, default, ZERO, HUNDRED))


@dataclass
class ComputedLine:
    position: int
    item_id: int | None
    name: str
    description: str
    unit: str
    hsn_code: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal
    line_total: Decimal
    tax_amount: Decimal
    total_amount: Decimal

    def as_fields(self) -> dict:
        return dict(self.__dict__)


@dataclass
class ComputedTotals:
    lines: list[ComputedLine]
    tax_type: str
    tax_rate: Decimal
    subtotal: Decimal
    total_tax_amount: Decimal
    discount_amount: Decimal
    transport_charges: Decimal
    other_charges: Decimal
    rounding_adjustment: Decimal
    final_amount: Decimal
    paid_amount: Decimal
    balance_amount: Decimal
    igst: Decimal
    cgst: Decimal
    sgst: Decimal
    warnings: list[str] = field(default_factory=list)

    def as_invoice_fields(self) -> dict:
        return {
            "tax_type": self.tax_type,
            "tax_rate": self.tax_rate,
            "subtotal": self.subtotal,
            "total_tax_amount": self.total_tax_amount,
            "discount_amount": self.discount_amount,
            "transport_charges": self.transport_charges,
            "other_charges": self.other_charges,
            "rounding_adjustment": self.rounding_adjustment,
            "final_amount": self.final_amount,
            "paid_amount": self.paid_amount,
            "balance_amount": self.balance_amount,
            "igst": self.igst,
            "cgst": self.cgst,
            "sgst": self.sgst,
        }


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _check_required(index: int, raw: Mapping[str, Any]) -> None:
    for key, label in (("quantity", "quantity"), ("unit_price", "unit price")):
        if raw.get(key) is None:
            raise ValidationError(
                f"Line item {index + 1} is missing {label}.",
                field=f"line_items[{index}].{key}",
            )


def compute_line(
    index: int, raw: Mapping[str, Any], invoice_tax_rate: Decimal
) -> ComputedLine:
    # column scale, so a recompute from the saved line is stable
    quantity = round3(
        safe_number(raw.get("quantity"), DEFAULT_QUANTITY, ZERO, MAX_QUANTITY)
    ).min(MAX_QUANTITY)
    unit_price = round2(safe_number(raw.get("unit_price"), ZERO, ZERO, MAX_AMOUNT)).min(
        MAX_AMOUNT
    )
    tax_rate = round2(safe_number(raw.get("tax_rate"), invoice_tax_rate, ZERO, HUNDRED))

    raw_total = quantity * unit_price
    if not _representable(raw_total):
        raise ValidationError(
            f"Line item {index + 1} total exceeds the supported amount.",
            field=f"line_items[{index}]",
        )
    line_total, tax_amount, total_amount = line_amounts(quantity, unit_price, tax_rate)

    name = _text(raw.get("name"))
    description = _text(raw.get("description"))
    fallback_label = f"Item {index + 1}"
    item_id = raw.get("item_id")
    return ComputedLine(
        position=index,
        item_id=int(item_id) if item_id not in (None, "") else None,
        name=name or description or fallback_label,
        description=description or name or fallback_label,
        unit=_text(raw.get("unit")) or "piece",
        hsn_code=_text(raw.get("hsn_code")),
        quantity=quantity,
        unit_price=unit_price,
        tax_rate=tax_rate,
        line_total=line_total,
        tax_amount=tax_amount,
        total_amount=total_amount,
    )


def resolve_discount(
    discount_type: str | None, discount_value: Any, base: Decimal
) -> Decimal:
    value = safe_number(discount_value, ZERO, ZERO, MAX_AMOUNT)
    if (discount_type or "amount").lower() == "percentage":
        return round2(base * min(value, HUNDRED) / HUNDRED)
    return value


def split_tax(
    total_tax_amount: Decimal,
    tax_type: str,
    supplied: Mapping[str, Any] | None = None,
) -> tuple[dict[str, Decimal], bool]:
    """Return the igst/cgst/sgst breakdown and whether a supplied one was kept.

    A supplied non-zero breakdown is kept only when it already matches the
    regime for ``tax_type``; anything else is recomputed.
    """
    if tax_type == TaxTypeEnum.CGST_SGST.value:
        half = round2(total_tax_amount / 2)
        computed = {"igst": ZERO, "cgst": half, "sgst": half}
    else:
        computed = {"igst": round2(total_tax_amount), "cgst": ZERO, "sgst": ZERO}

    if supplied:
        current = {
            key: round2(safe_number(supplied.get(key), ZERO)) for key in computed
        }
        if any(current.values()):
            return computed, current == computed
    return computed, False


def derive_payment_status(
    paid_amount: Decimal, balance_amount: Decimal, current: str | None = None
) -> str:
    if current == PaymentStatusEnum.CANCELLED.value:
        return current
    if balance_amount <= 0:
        return PaymentStatusEnum.PAID.value
    if current == PaymentStatusEnum.OVERDUE.value:
        return current
    if paid_amount > 0:
        return PaymentStatusEnum.PARTIAL.value
    return PaymentStatusEnum.PENDING.value


def resolve_invoice_type(
    invoice_type: str | None, tags: Iterable[str] | None
) -> tuple[str, list[str]]:
    clean_tags = [str(tag).strip() for tag in (tags or []) if str(tag).strip()]
    resolved = None
    if invoice_type:
        resolved = TYPE_ALIASES.get(invoice_type.strip().upper())
        if resolved is None:
            raise ValidationError(
                f"Unknown invoice type: {invoice_type}", field="invoice_type"
            )
    else:
        for tag in clean_tags:
            resolved = TYPE_ALIASES.get(tag.upper())
            if resolved:
                break
    resolved = resolved or InvoiceTypeEnum.SALES.value
    if resolved not in clean_tags:
        clean_tags.insert(0, resolved)
    return resolved, clean_tags


def compute_invoice_totals(
    line_items: Iterable[Mapping[str, Any]],
    charges: Mapping[str, Any] | None = None,
    tax_config: TaxConfig | None = None,
    paid_amount: Any = ZERO,
    tax_breakdown: Mapping[str, Any] | None = None,
    strict: bool = False,
) -> ComputedTotals:
    """Derive every monetary field of an invoice from its lines and charges.

    ``strict`` is used on creation: a line without quantity or unit price
    is rejected instead of defaulted. Fallbacks applied to keep amounts
    finite are reported in ``warnings``.
    """
    charges = charges or {}
    tax_config = tax_config or TaxConfig()
    raw_lines = list(line_items)
    if not raw_lines:
        raise ValidationError("Line items are required.", field="line_items")
    if strict:
        for index, raw in enumerate(raw_lines):
            _check_required(index, raw)

    tax_type = (
        TaxTypeEnum.CGST_SGST.value
        if str(tax_config.tax_type or "").upper() == TaxTypeEnum.CGST_SGST.value
        else TaxTypeEnum.IGST.value
    )
    invoice_tax_rate = tax_config.invoice_tax_rate
    lines = [
        compute_line(index, raw, invoice_tax_rate)
        for index, raw in enumerate(raw_lines)
    ]
    warnings: list[str] = []

    subtotal = sum((line.line_total for line in lines), ZERO)
    total_tax_amount = sum((line.tax_amount for line in lines), ZERO)

    discount_value = charges.get("discount_value")
    if discount_value is None:
        discount_value = charges.get("discount_amount")
    discount_amount = round2(
        resolve_discount(
            charges.get("discount_type"), discount_value, subtotal + total_tax_amount
        )
    )
    transport_charges = round2(
        safe_number(charges.get("transport_charges"), ZERO, ZERO, MAX_AMOUNT)
    )
    other_charges = round2(
        safe_number(charges.get("other_charges"), ZERO, ZERO, MAX_AMOUNT)
    )
    rounding_adjustment = round2(
        safe_number(charges.get("rounding_adjustment"), ZERO, -MAX_AMOUNT, MAX_AMOUNT)
    )
    paid = round2(safe_number(paid_amount, ZERO, ZERO, MAX_AMOUNT))

    final_amount = (
        subtotal
        + total_tax_amount
        - discount_amount
        + transport_charges
        + other_charges
        + rounding_adjustment
    )
    if not _representable(final_amount):
        logger.warning(
            "Final amount %s not representable, falling back to subtotal + tax",
            final_amount,
        )
        warnings.append("final_amount")
        final_amount = subtotal + total_tax_amount
        if not _representable(final_amount):
            raise ValidationError(
                "Invalid calculation: final amount exceeds the supported range.",
                field="final_amount",
            )
    final_amount = round2(final_amount)

    balance_amount = final_amount - paid
    if not _representable(balance_amount):
        logger.warning("Balance amount not representable, using final amount")
        warnings.append("balance_amount")
        balance_amount = final_amount
    balance_amount = round2(balance_amount)

    breakdown, kept = split_tax(total_tax_amount, tax_type, tax_breakdown)
    if tax_breakdown and not kept and any(
        safe_number(tax_breakdown.get(key), ZERO) for key in breakdown
    ):
        logger.warning("Supplied tax breakdown inconsistent with %s, recomputed", tax_type)
        warnings.append("tax_breakdown")

    return ComputedTotals(
        lines=lines,
        tax_type=tax_type,
        tax_rate=invoice_tax_rate,
        subtotal=subtotal,
        total_tax_amount=total_tax_amount,
        discount_amount=discount_amount,
        transport_charges=transport_charges,
        other_charges=other_charges,
        rounding_adjustment=rounding_adjustment,
        final_amount=final_amount,
        paid_amount=paid,
        balance_amount=balance_amount,
        warnings=warnings,
        **breakdown,
    )
