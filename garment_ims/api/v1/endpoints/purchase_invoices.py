"""Garment IMS — Purchase invoice endpoints: create, edit, get, labels."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from garment_ims.api.deps import commit, get_db, http_error
from garment_ims.core.errors import EngineError
from garment_ims.schemas.batch import LabelResponse
from garment_ims.schemas.common import ApiResponse
from garment_ims.schemas.purchase_invoice import (
    BatchMutationResponse,
    InvoiceItemResponse,
    PurchaseInvoiceCreate,
    PurchaseInvoiceResponse,
    PurchaseInvoiceUpdate,
)
from garment_ims.services import audit_service
from garment_ims.services.purchase_invoice_service import PurchaseInvoiceService
from garment_ims.services.reconciliation import AppliedMutation
from garment_ims.tasks.label_tasks import queue_label_print

router = APIRouter()


def _invoice_to_response(invoice, applied: list[AppliedMutation] | None = None) -> PurchaseInvoiceResponse:
    return PurchaseInvoiceResponse(
        id=invoice.id,
        invoice_number=invoice.invoice_number,
        vendor_id=invoice.vendor_id,
        vendor_invoice_number=invoice.vendor_invoice_number,
        order_date=invoice.order_date,
        supply_type=invoice.supply_type,
        notes=invoice.notes,
        total_items=invoice.total_items,
        items_total=invoice.items_total,
        discount=invoice.discount,
        taxable_value=invoice.taxable_value,
        items_gst=invoice.items_gst,
        freight=invoice.freight,
        freight_gst_percent=invoice.freight_gst_percent,
        freight_gst=invoice.freight_gst,
        cgst_amount=invoice.cgst_amount,
        sgst_amount=invoice.sgst_amount,
        igst_amount=invoice.igst_amount,
        total_gst=invoice.total_gst,
        round_off=invoice.round_off,
        grand_total=invoice.grand_total,
        items=[InvoiceItemResponse.model_validate(item) for item in invoice.items],
        mutations=[
            BatchMutationResponse(
                kind=m.kind.value,
                design_no=m.sku_key.design_no,
                size_id=m.sku_key.size_id,
                delta=m.delta,
                batch_id=m.batch_id,
                barcode_alias=m.barcode_alias,
                barcode_structured=m.barcode_structured,
                total_quantity=m.total_quantity,
                available_quantity=m.available_quantity,
            )
            for m in applied or []
        ],
    )


def _invoice_kwargs(body: PurchaseInvoiceCreate) -> dict:
    return dict(
        vendor_id=body.vendor_id,
        vendor_invoice_number=body.vendor_invoice_number,
        order_date=body.order_date,
        items=[line.model_dump() for line in body.items],
        discount=body.discount,
        freight=body.freight,
        freight_gst_percent=body.freight_gst_percent,
        supply_type=body.supply_type,
        notes=body.notes,
    )


@router.post("", response_model=ApiResponse[PurchaseInvoiceResponse], status_code=status.HTTP_201_CREATED)
async def create_purchase_invoice(
    body: PurchaseInvoiceCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Save a purchase invoice. Creates or tops up one barcode batch per SKU,
    minting barcodes for SKUs seen for the first time.
    """
    try:
        invoice, applied = await PurchaseInvoiceService.create_invoice(db, **_invoice_kwargs(body))
    except EngineError as e:
        raise http_error(e)
    await commit(db)
    await audit_service.log_audit(
        audit_service.ACTION_INVOICE_CREATED,
        target_type="purchase_invoice",
        target_id=invoice.id,
        payload={"invoice_number": invoice.invoice_number, "units": invoice.total_items},
    )
    return ApiResponse(data=_invoice_to_response(invoice, applied))


@router.get("/{invoice_id}", response_model=ApiResponse[PurchaseInvoiceResponse])
async def get_purchase_invoice(
    invoice_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get a single purchase invoice with its item rows."""
    invoice = await PurchaseInvoiceService.get_invoice(db, invoice_id)
    if not invoice:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Purchase invoice not found")
    return ApiResponse(data=_invoice_to_response(invoice))


@router.put("/{invoice_id}", response_model=ApiResponse[PurchaseInvoiceResponse])
async def update_purchase_invoice(
    invoice_id: UUID,
    body: PurchaseInvoiceUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Replace the invoice's items; only the per-SKU differences reach the batches."""
    try:
        result = await PurchaseInvoiceService.update_invoice(db, invoice_id, **_invoice_kwargs(body))
    except EngineError as e:
        raise http_error(e)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Purchase invoice not found")
    invoice, applied = result
    await commit(db)
    await audit_service.log_audit(
        audit_service.ACTION_INVOICE_UPDATED,
        target_type="purchase_invoice",
        target_id=invoice.id,
        payload={"invoice_number": invoice.invoice_number, "changed_skus": len(applied)},
    )
    return ApiResponse(data=_invoice_to_response(invoice, applied))


@router.get("/{invoice_id}/labels", response_model=ApiResponse[list[LabelResponse]])
async def get_invoice_labels(
    invoice_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Label data for every batch the invoice stocks. Records a print-log job on the side."""
    invoice = await PurchaseInvoiceService.get_invoice(db, invoice_id)
    if not invoice:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Purchase invoice not found")
    try:
        batches = await PurchaseInvoiceService.invoice_batches(db, invoice)
    except EngineError as e:
        raise http_error(e)

    labels = [
        LabelResponse(
            barcode_alias=b.barcode_alias,
            barcode_structured=b.barcode_structured,
            design_no=b.design_no,
            mrp=b.mrp,
            hsn_code=b.hsn_code,
            quantity=b.available_quantity,
        )
        for b in batches
    ]
    aliases = [label.barcode_alias for label in labels]
    queue_label_print(invoice.id, aliases)
    await audit_service.log_audit(
        audit_service.ACTION_LABELS_REQUESTED,
        target_type="purchase_invoice",
        target_id=invoice.id,
        payload={"aliases": aliases},
    )
    return ApiResponse(data=labels)
