"""Garment IMS — PurchaseInvoice and PurchaseInvoiceItem models."""
import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from garment_ims.db.base import Base, utcnow


class SupplyType(str, Enum):
    CGST_SGST = "CGST_SGST"
    IGST = "IGST"


class PurchaseInvoice(Base):
    """Purchase invoice header with its stored tax summary."""

    __tablename__ = "purchase_invoices"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    invoice_number: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    vendor_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("vendors.id", ondelete="RESTRICT"))
    vendor_invoice_number: Mapped[str] = mapped_column(String(100), nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    supply_type: Mapped[str] = mapped_column(String(20), nullable=False, default=SupplyType.CGST_SGST.value)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    total_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    items_total: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    discount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    taxable_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    items_gst: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    freight: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    freight_gst_percent: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    freight_gst: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    cgst_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    sgst_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    igst_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    total_gst: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    round_off: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False, default=Decimal("0"))
    grand_total: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    items: Mapped[list["PurchaseInvoiceItem"]] = relationship(
        "PurchaseInvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PurchaseInvoiceItem.line_no",
    )


class PurchaseInvoiceItem(Base):
    """One (line, size) row of a purchase invoice."""

    __tablename__ = "purchase_invoice_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    invoice_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("purchase_invoices.id", ondelete="CASCADE"))
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    design_no: Mapped[str] = mapped_column(String(100), nullable=False)
    product_group_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("product_groups.id", ondelete="RESTRICT"))
    color_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("colors.id", ondelete="RESTRICT"), nullable=True)
    size_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("sizes.id", ondelete="RESTRICT"))
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    cost_per_item: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    mrp: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    mrp_markup_percent: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0"))
    gst_logic: Mapped[str] = mapped_column(String(20), nullable=False)
    hsn_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    order_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    invoice: Mapped["PurchaseInvoice"] = relationship("PurchaseInvoice", back_populates="items")
