"""Garment IMS — BatchStore: read/update contract for barcode batches.

Counters are only ever moved by one conditional UPDATE that adds the delta in
SQL and clamps at zero, so concurrent invoice saves on the same SKU key
cannot lose each other's deltas.
"""
import uuid

from sqlalchemy import case, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from garment_ims.core.errors import ConflictError, PersistenceError
from garment_ims.db.base import utcnow
from garment_ims.models.batch import BarcodeBatch, BatchStatus
from garment_ims.services.reconciliation import SkuKey


def _clamped_add(column, delta: int):
    return case((column + delta < 0, 0), else_=column + delta)


class BatchStore:
    """SQLAlchemy-backed batch store bound to the caller's session (and transaction)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_active_batch(self, key: SkuKey) -> BarcodeBatch | None:
        """Active batch for the key. If several exist, the most recently created wins."""
        color_clause = (
            BarcodeBatch.color_id.is_(None) if key.color_id is None else BarcodeBatch.color_id == key.color_id
        )
        stmt = (
            select(BarcodeBatch)
            .where(
                BarcodeBatch.design_no == key.design_no,
                BarcodeBatch.product_group_id == key.product_group_id,
                color_clause,
                BarcodeBatch.size_id == key.size_id,
                BarcodeBatch.vendor_id == key.vendor_id,
                BarcodeBatch.status == BatchStatus.ACTIVE.value,
            )
            .order_by(BarcodeBatch.created_at.desc(), BarcodeBatch.barcode_alias.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        try:
            return (await self.db.execute(stmt)).scalars().first()
        except SQLAlchemyError as exc:
            raise PersistenceError("Batch lookup failed") from exc

    async def apply_delta(self, batch_id: uuid.UUID, delta: int) -> tuple[int, int]:
        """
        Atomically add delta to total and available (each clamped at 0).
        Returns the new (total, available). ConflictError if the batch is no longer active.
        """
        stmt = (
            update(BarcodeBatch)
            .where(BarcodeBatch.id == batch_id, BarcodeBatch.status == BatchStatus.ACTIVE.value)
            .values(
                total_quantity=_clamped_add(BarcodeBatch.total_quantity, delta),
                available_quantity=_clamped_add(BarcodeBatch.available_quantity, delta),
                updated_at=utcnow(),
            )
            .returning(BarcodeBatch.total_quantity, BarcodeBatch.available_quantity)
            .execution_options(synchronize_session=False)
        )
        try:
            row = (await self.db.execute(stmt)).first()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Counter update failed for batch {batch_id}") from exc
        if row is None:
            raise ConflictError(f"Batch {batch_id} changed concurrently and is no longer active")
        return int(row[0]), int(row[1])

    async def insert_batch(self, batch: BarcodeBatch) -> BarcodeBatch:
        if batch.available_quantity > batch.total_quantity or batch.available_quantity < 0:
            raise ConflictError("A new batch must satisfy 0 <= available <= total")
        self.db.add(batch)
        try:
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not store batch {batch.barcode_alias}") from exc
        return batch

    async def get_by_alias(self, alias: str) -> BarcodeBatch | None:
        """Barcode scan: active batch carrying this 8-digit alias."""
        stmt = (
            select(BarcodeBatch)
            .where(BarcodeBatch.barcode_alias == alias, BarcodeBatch.status == BatchStatus.ACTIVE.value)
            .execution_options(populate_existing=True)
        )
        try:
            return (await self.db.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError("Barcode lookup failed") from exc

    async def list_available(
        self,
        *,
        vendor_id: uuid.UUID | None = None,
        product_group_id: uuid.UUID | None = None,
        design_no: str | None = None,
        order_number: str | None = None,
        floor_id: uuid.UUID | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> list[BarcodeBatch]:
        """Active batches with stock on hand, newest first."""
        q = select(BarcodeBatch).where(
            BarcodeBatch.status == BatchStatus.ACTIVE.value,
            BarcodeBatch.available_quantity > 0,
        )
        if vendor_id:
            q = q.where(BarcodeBatch.vendor_id == vendor_id)
        if product_group_id:
            q = q.where(BarcodeBatch.product_group_id == product_group_id)
        if design_no:
            q = q.where(BarcodeBatch.design_no == design_no)
        if order_number:
            q = q.where(BarcodeBatch.order_number == order_number)
        if floor_id:
            q = q.where(BarcodeBatch.floor_id == floor_id)
        q = (
            q.order_by(BarcodeBatch.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .execution_options(populate_existing=True)
        )
        try:
            return list((await self.db.execute(q)).scalars().all())
        except SQLAlchemyError as exc:
            raise PersistenceError("Batch listing failed") from exc
