"""Garment IMS — API v1 router aggregation."""
from fastapi import APIRouter

from garment_ims.api.v1.endpoints import (
    batches,
    designs,
    purchase_invoices,
    tax,
)

api_router = APIRouter()

api_router.include_router(purchase_invoices.router, prefix="/purchase-invoices", tags=["purchase-invoices"])
api_router.include_router(tax.router, prefix="/tax", tags=["tax"])
api_router.include_router(batches.router, prefix="/batches", tags=["batches"])
api_router.include_router(designs.router, prefix="/designs", tags=["designs"])
