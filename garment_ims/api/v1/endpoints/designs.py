"""Garment IMS — Design registry (one design number per vendor)."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from garment_ims.api.deps import commit, get_db, http_error
from garment_ims.core.errors import EngineError
from garment_ims.schemas.batch import DesignCreate, DesignResponse
from garment_ims.schemas.common import ApiResponse
from garment_ims.services import audit_service
from garment_ims.services.design_service import DesignService

router = APIRouter()


@router.post("", response_model=ApiResponse[DesignResponse], status_code=status.HTTP_201_CREATED)
async def register_design(
    body: DesignCreate,
    db: AsyncSession = Depends(get_db),
):
    try:
        design = await DesignService.register_design(
            db,
            design_no=body.design_no,
            vendor_id=body.vendor_id,
            product_group_id=body.product_group_id,
            color_id=body.color_id,
            gst_logic=body.gst_logic,
            description=body.description,
        )
    except EngineError as e:
        raise http_error(e)
    await commit(db)
    await audit_service.log_audit(
        audit_service.ACTION_DESIGN_REGISTERED,
        target_type="product_master",
        target_id=design.id,
        payload={"design_no": design.design_no, "vendor_id": str(design.vendor_id)},
    )
    return ApiResponse(data=DesignResponse.model_validate(design))


@router.get("", response_model=ApiResponse[list[DesignResponse]])
async def list_designs(
    vendor_id: UUID = Query(...),
    db: AsyncSession = Depends(get_db),
):
    designs = await DesignService.list_designs(db, vendor_id)
    return ApiResponse(data=[DesignResponse.model_validate(d) for d in designs])
