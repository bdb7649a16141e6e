"""Garment IMS — BarcodeBatch model: the persisted stock unit for one SKU key."""
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import JSON, CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from garment_ims.db.base import Base, utcnow


class BatchStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class GSTLogic(str, Enum):
    AUTO_5_18 = "AUTO_5_18"
    FLAT_5 = "FLAT_5"


class BarcodeBatch(Base):
    """
    Stock counters plus barcode identity for one (design, group, color?, size, vendor).
    At most one active row per SKU key. Counters only move through BatchStore.apply_delta.
    """

    __tablename__ = "barcode_batches"
    __table_args__ = (
        Index(
            "ix_barcode_batches_sku_key",
            "design_no", "product_group_id", "color_id", "size_id", "vendor_id", "status",
        ),
        # one active batch per SKU key; colorless keys need their own index since NULLs never collide
        Index(
            "uq_barcode_batches_active_sku",
            "design_no", "product_group_id", "color_id", "size_id", "vendor_id",
            unique=True,
            postgresql_where=text("status = 'active' AND color_id IS NOT NULL"),
            sqlite_where=text("status = 'active' AND color_id IS NOT NULL"),
        ),
        Index(
            "uq_barcode_batches_active_sku_no_color",
            "design_no", "product_group_id", "size_id", "vendor_id",
            unique=True,
            postgresql_where=text("status = 'active' AND color_id IS NULL"),
            sqlite_where=text("status = 'active' AND color_id IS NULL"),
        ),
        CheckConstraint(
            "available_quantity >= 0 AND available_quantity <= total_quantity",
            name="ck_barcode_batches_quantities",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    design_no: Mapped[str] = mapped_column(String(100), nullable=False)
    product_group_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("product_groups.id", ondelete="RESTRICT"))
    color_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("colors.id", ondelete="RESTRICT"), nullable=True)
    size_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("sizes.id", ondelete="RESTRICT"))
    vendor_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("vendors.id", ondelete="RESTRICT"))
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=BatchStatus.ACTIVE.value)

    total_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    available_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    cost_actual: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    mrp: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    mrp_markup_percent: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0"))
    gst_logic: Mapped[str] = mapped_column(String(20), nullable=False, default=GSTLogic.AUTO_5_18.value)
    hsn_code: Mapped[str | None] = mapped_column(String(20), nullable=True)

    barcode_alias: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    barcode_structured: Mapped[str] = mapped_column(String(255), nullable=False)

    floor_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("floors.id", ondelete="SET NULL"), nullable=True)
    photos: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    order_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    source_invoice_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("purchase_invoices.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
