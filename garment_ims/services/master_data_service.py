"""Garment IMS — Read-only master-data lookups used when building batches."""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from garment_ims.core.errors import ValidationError
from garment_ims.models.master_data import Color, ProductGroup, Size, Vendor


class MasterDataService:
    """Key -> attributes lookups. Unknown ids are a ValidationError naming the field."""

    @staticmethod
    async def _get(db: AsyncSession, model, id: UUID, field: str):
        row = await db.scalar(select(model).where(model.id == id))
        if row is None:
            raise ValidationError(f"{model.__name__} {id} not found", field=field)
        return row

    @staticmethod
    async def product_group(db: AsyncSession, id: UUID, field: str = "product_group_id") -> ProductGroup:
        return await MasterDataService._get(db, ProductGroup, id, field)

    @staticmethod
    async def color(db: AsyncSession, id: UUID, field: str = "color_id") -> Color:
        return await MasterDataService._get(db, Color, id, field)

    @staticmethod
    async def size(db: AsyncSession, id: UUID, field: str = "size_id") -> Size:
        return await MasterDataService._get(db, Size, id, field)

    @staticmethod
    async def vendor(db: AsyncSession, id: UUID, field: str = "vendor_id") -> Vendor:
        vendor = await MasterDataService._get(db, Vendor, id, field)
        if not vendor.is_active:
            raise ValidationError(f"Vendor {vendor.name} is inactive", field=field)
        return vendor
