"""Garment IMS — Invoice line items: parsing, validation, and per-SKU quantity maps."""
import uuid
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from garment_ims.core.errors import ValidationError
from garment_ims.models.batch import GSTLogic
from garment_ims.services.reconciliation import SkuKey
from garment_ims.services.tax_calculator import quantize_money


@dataclass(frozen=True)
class SizeQuantity:
    size_id: uuid.UUID
    quantity: int


@dataclass(frozen=True)
class InvoiceLine:
    design_no: str
    product_group_id: uuid.UUID
    color_id: uuid.UUID | None
    sizes: list[SizeQuantity]
    cost_per_item: Decimal
    mrp: Decimal | None
    mrp_markup_percent: Decimal = Decimal("0")
    gst_logic: GSTLogic = GSTLogic.AUTO_5_18
    hsn_code: str | None = None
    description: str | None = None
    order_number: str | None = None
    photos: list[str] = field(default_factory=list)

    @property
    def total_quantity(self) -> int:
        return sum(s.quantity for s in self.sizes)

    @property
    def raw_total(self) -> Decimal:
        return self.cost_per_item * self.total_quantity

    def sku_key(self, size_id: uuid.UUID, vendor_id: uuid.UUID) -> SkuKey:
        return SkuKey.build(self.design_no, self.product_group_id, self.color_id, size_id, vendor_id)


def _required(raw: dict, name: str, path: str) -> Any:
    value = raw.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{name} is required", field=f"{path}.{name}")
    return value


def _uuid(value: Any, path: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(f"Invalid id: {value!r}", field=path)


def _decimal(value: Any, path: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Invalid number: {value!r}", field=path)
    if not amount.is_finite() or amount < 0:
        raise ValidationError("Must be a non-negative number", field=path)
    return amount


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_line_items(raw_items: list[dict]) -> list[InvoiceLine]:
    """
    Validate submitted line items. Size entries with quantity 0 are dropped;
    a line whose sizes add up to nothing is rejected.
    """
    if not raw_items:
        raise ValidationError("At least one line item is required", field="items")

    lines: list[InvoiceLine] = []
    for i, raw in enumerate(raw_items):
        path = f"items[{i}]"
        design_no = str(_required(raw, "design_no", path)).strip()
        product_group_id = _uuid(_required(raw, "product_group_id", path), f"{path}.product_group_id")
        color = raw.get("color_id")
        color_id = _uuid(color, f"{path}.color_id") if color not in (None, "") else None

        raw_sizes = raw.get("sizes") or []
        if not raw_sizes:
            raise ValidationError("At least one size is required", field=f"{path}.sizes")
        sizes: list[SizeQuantity] = []
        for j, raw_size in enumerate(raw_sizes):
            size_path = f"{path}.sizes[{j}]"
            size_id = _uuid(_required(raw_size, "size_id", size_path), f"{size_path}.size_id")
            try:
                quantity = int(raw_size.get("quantity", 0))
            except (TypeError, ValueError):
                raise ValidationError("Quantity must be a whole number", field=f"{size_path}.quantity")
            if quantity < 0:
                raise ValidationError("Quantity cannot be negative", field=f"{size_path}.quantity")
            if quantity:
                sizes.append(SizeQuantity(size_id=size_id, quantity=quantity))
        if not sizes:
            raise ValidationError("Line quantity must be positive", field=f"{path}.sizes")

        # money is stored to the paisa; the barcode cost must match the stored one
        cost = quantize_money(_decimal(_required(raw, "cost_per_item", path), f"{path}.cost_per_item"))
        mrp = raw.get("mrp")
        if mrp is not None:
            mrp = quantize_money(_decimal(mrp, f"{path}.mrp"))
            if mrp == 0:
                raise ValidationError("MRP must be positive", field=f"{path}.mrp")
        markup = _decimal(raw.get("mrp_markup_percent") or 0, f"{path}.mrp_markup_percent")
        try:
            gst_logic = GSTLogic(raw.get("gst_logic") or GSTLogic.AUTO_5_18)
        except ValueError:
            raise ValidationError(f"Unknown GST logic {raw.get('gst_logic')!r}", field=f"{path}.gst_logic")

        lines.append(InvoiceLine(
            design_no=design_no,
            product_group_id=product_group_id,
            color_id=color_id,
            sizes=sizes,
            cost_per_item=cost,
            mrp=mrp,
            mrp_markup_percent=markup,
            gst_logic=gst_logic,
            hsn_code=_optional_text(raw.get("hsn_code")),
            description=_optional_text(raw.get("description")),
            order_number=_optional_text(raw.get("order_number")),
            photos=[p for p in (raw.get("photos") or []) if p],
        ))
    return lines


def quantities_by_sku(lines: list[InvoiceLine], vendor_id: uuid.UUID) -> dict[SkuKey, int]:
    """Sum of submitted quantity per SKU key (the same SKU on two lines is merged)."""
    state: dict[SkuKey, int] = {}
    for line in lines:
        for size in line.sizes:
            key = line.sku_key(size.size_id, vendor_id)
            state[key] = state.get(key, 0) + size.quantity
    return state


def quantities_from_rows(rows, vendor_id: uuid.UUID) -> dict[SkuKey, int]:
    """Per-SKU quantities of an invoice's persisted item rows."""
    state: dict[SkuKey, int] = {}
    for row in rows:
        key = SkuKey.build(row.design_no, row.product_group_id, row.color_id, row.size_id, vendor_id)
        state[key] = state.get(key, 0) + row.quantity
    return state
