"""Garment IMS — Purchase invoice and tax schemas."""
from datetime import date
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from garment_ims.models.batch import GSTLogic
from garment_ims.models.purchase_invoice import SupplyType


class SizeQuantityIn(BaseModel):
    size_id: UUID
    quantity: int = Field(..., ge=0)


class InvoiceLineIn(BaseModel):
    design_no: str = Field(..., min_length=1, max_length=100)
    product_group_id: UUID
    color_id: UUID | None = None
    sizes: list[SizeQuantityIn] = Field(..., min_length=1)
    cost_per_item: Decimal = Field(..., ge=0)
    mrp_markup_percent: Decimal = Field(Decimal("0"), ge=0)
    mrp: Decimal | None = Field(None, gt=0)
    gst_logic: GSTLogic = GSTLogic.AUTO_5_18
    hsn_code: str | None = None
    description: str | None = None
    order_number: str | None = None
    photos: list[str] = Field(default_factory=list)

    @field_validator("color_id", mode="before")
    @classmethod
    def blank_color_is_none(cls, v):
        # "no color selected" has exactly one representation
        if isinstance(v, str) and not v.strip():
            return None
        return v


class InvoiceAdjustments(BaseModel):
    discount: Decimal = Field(Decimal("0"), ge=0)
    freight: Decimal = Field(Decimal("0"), ge=0)
    freight_gst_percent: Literal[5, 18] = 5
    supply_type: SupplyType = SupplyType.CGST_SGST


class PurchaseInvoiceCreate(InvoiceAdjustments):
    vendor_id: UUID
    vendor_invoice_number: str = Field(..., min_length=1, max_length=100)
    order_date: date
    notes: str | None = None
    items: list[InvoiceLineIn] = Field(..., min_length=1)


class PurchaseInvoiceUpdate(PurchaseInvoiceCreate):
    pass


class TaxPreviewRequest(InvoiceAdjustments):
    items: list[InvoiceLineIn] = Field(..., min_length=1)


class LineTaxResponse(BaseModel):
    raw_total: Decimal
    taxable_value: Decimal
    rate_percent: int
    gst: Decimal


class TaxSummaryResponse(BaseModel):
    items_total: Decimal
    discount: Decimal
    taxable_value: Decimal
    lines: list[LineTaxResponse]
    items_gst: Decimal
    gst_by_rate: dict[int, Decimal]
    freight: Decimal
    freight_rate_percent: int
    freight_gst: Decimal
    total_gst: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    subtotal: Decimal
    round_off: Decimal
    grand_total: Decimal


class InvoiceItemResponse(BaseModel):
    id: UUID
    line_no: int
    design_no: str
    product_group_id: UUID
    color_id: UUID | None
    size_id: UUID
    quantity: int
    cost_per_item: Decimal
    mrp: Decimal
    gst_logic: str
    hsn_code: str | None

    class Config:
        from_attributes = True


class BatchMutationResponse(BaseModel):
    kind: str
    design_no: str
    size_id: UUID
    delta: int
    batch_id: UUID
    barcode_alias: str
    barcode_structured: str | None
    total_quantity: int
    available_quantity: int


class PurchaseInvoiceResponse(BaseModel):
    id: UUID
    invoice_number: str
    vendor_id: UUID
    vendor_invoice_number: str
    order_date: date
    supply_type: str
    notes: str | None
    total_items: int
    items_total: Decimal
    discount: Decimal
    taxable_value: Decimal
    items_gst: Decimal
    freight: Decimal
    freight_gst_percent: int
    freight_gst: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    total_gst: Decimal
    round_off: Decimal
    grand_total: Decimal
    items: list[InvoiceItemResponse]
    mutations: list[BatchMutationResponse] = Field(default_factory=list)
