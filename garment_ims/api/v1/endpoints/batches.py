"""Garment IMS — Barcode batch scan and stock listing."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from garment_ims.api.deps import get_db, http_error
from garment_ims.core.errors import EngineError
from garment_ims.schemas.batch import BatchResponse
from garment_ims.schemas.common import ApiResponse, Meta
from garment_ims.services.batch_store import BatchStore

router = APIRouter()


@router.get("/scan/{alias}", response_model=ApiResponse[BatchResponse])
async def scan_batch(
    alias: str,
    db: AsyncSession = Depends(get_db),
):
    """Resolve a scanned 8-digit alias to its active batch."""
    try:
        batch = await BatchStore(db).get_by_alias(alias.strip())
    except EngineError as e:
        raise http_error(e)
    if not batch:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Barcode not found")
    return ApiResponse(data=BatchResponse.model_validate(batch))


@router.get("", response_model=ApiResponse[list[BatchResponse]])
async def list_batches(
    vendor_id: UUID | None = Query(None),
    product_group_id: UUID | None = Query(None),
    design_no: str | None = Query(None),
    order_number: str | None = Query(None),
    floor_id: UUID | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    """Active batches with stock on hand."""
    try:
        batches = await BatchStore(db).list_available(
            vendor_id=vendor_id,
            product_group_id=product_group_id,
            design_no=design_no,
            order_number=order_number,
            floor_id=floor_id,
            page=page,
            page_size=page_size,
        )
    except EngineError as e:
        raise http_error(e)
    return ApiResponse(
        data=[BatchResponse.model_validate(b) for b in batches],
        meta=Meta(page=page, page_size=page_size),
    )
