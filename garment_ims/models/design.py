"""Garment IMS — ProductMaster: a design registered once per vendor."""
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from garment_ims.db.base import Base, utcnow
from garment_ims.models.batch import GSTLogic


class ProductMaster(Base):
    __tablename__ = "product_masters"
    __table_args__ = (UniqueConstraint("design_no", "vendor_id", name="uq_product_masters_design_vendor"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    design_no: Mapped[str] = mapped_column(String(100), nullable=False)
    vendor_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("vendors.id", ondelete="RESTRICT"))
    product_group_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("product_groups.id", ondelete="RESTRICT"))
    color_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("colors.id", ondelete="RESTRICT"), nullable=True)
    gst_logic: Mapped[str] = mapped_column(String(20), nullable=False, default=GSTLogic.AUTO_5_18.value)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
