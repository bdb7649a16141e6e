"""Garment IMS — Named counters backing the database sequence allocator."""
from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from garment_ims.db.base import Base


class BarcodeSequence(Base):
    """One row per named sequence. Only ever bumped with UPDATE ... RETURNING."""

    __tablename__ = "barcode_sequences"

    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    current_value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
