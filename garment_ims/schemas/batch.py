"""Garment IMS — Barcode batch and design schemas."""
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from garment_ims.models.batch import GSTLogic


class BatchResponse(BaseModel):
    id: UUID
    design_no: str
    product_group_id: UUID
    color_id: UUID | None
    size_id: UUID
    vendor_id: UUID
    status: str
    total_quantity: int
    available_quantity: int
    cost_actual: Decimal
    mrp: Decimal
    mrp_markup_percent: Decimal
    gst_logic: str
    hsn_code: str | None
    barcode_alias: str
    barcode_structured: str
    floor_id: UUID | None
    photos: list[str]
    description: str | None
    order_number: str | None
    source_invoice_id: UUID | None

    model_config = {"from_attributes": True}


class LabelResponse(BaseModel):
    """What label rendering needs from a batch."""

    barcode_alias: str
    barcode_structured: str
    design_no: str
    mrp: Decimal
    hsn_code: str | None
    quantity: int


class DesignCreate(BaseModel):
    design_no: str = Field(..., min_length=1, max_length=100)
    vendor_id: UUID
    product_group_id: UUID
    color_id: UUID | None = None
    gst_logic: GSTLogic = GSTLogic.AUTO_5_18
    description: str | None = None


class DesignResponse(BaseModel):
    id: UUID
    design_no: str
    vendor_id: UUID
    product_group_id: UUID
    color_id: UUID | None
    gst_logic: str
    description: str | None

    model_config = {"from_attributes": True}
