"""Garment IMS — DesignService: design numbers registered once per vendor."""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from garment_ims.core.errors import ValidationError
from garment_ims.models.batch import GSTLogic
from garment_ims.models.design import ProductMaster
from garment_ims.services.master_data_service import MasterDataService


class DesignService:

    @staticmethod
    async def get_design(db: AsyncSession, design_no: str, vendor_id: UUID) -> ProductMaster | None:
        return await db.scalar(
            select(ProductMaster).where(
                ProductMaster.design_no == design_no,
                ProductMaster.vendor_id == vendor_id,
            )
        )

    @staticmethod
    async def list_designs(db: AsyncSession, vendor_id: UUID) -> list[ProductMaster]:
        result = await db.execute(
            select(ProductMaster)
            .where(ProductMaster.vendor_id == vendor_id)
            .order_by(ProductMaster.design_no)
        )
        return list(result.scalars().all())

    @staticmethod
    async def register_design(
        db: AsyncSession,
        design_no: str,
        vendor_id: UUID,
        product_group_id: UUID,
        color_id: UUID | None = None,
        gst_logic: GSTLogic | str = GSTLogic.AUTO_5_18,
        description: str | None = None,
    ) -> ProductMaster:
        """Register a design for a vendor. A second registration of the same pair is rejected."""
        design_no = (design_no or "").strip()
        if not design_no:
            raise ValidationError("design_no is required", field="design_no")
        await MasterDataService.vendor(db, vendor_id)
        await MasterDataService.product_group(db, product_group_id)
        if color_id is not None:
            await MasterDataService.color(db, color_id)

        if await DesignService.get_design(db, design_no, vendor_id):
            raise ValidationError(
                f"Design {design_no} is already registered for this vendor", field="design_no"
            )

        design = ProductMaster(
            design_no=design_no,
            vendor_id=vendor_id,
            product_group_id=product_group_id,
            color_id=color_id,
            gst_logic=GSTLogic(gst_logic).value,
            description=description,
        )
        db.add(design)
        try:
            await db.flush()
        except IntegrityError as exc:
            # concurrent registration of the same pair
            raise ValidationError(
                f"Design {design_no} is already registered for this vendor", field="design_no"
            ) from exc
        await db.refresh(design)
        return design
