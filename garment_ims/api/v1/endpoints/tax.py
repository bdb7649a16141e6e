"""Garment IMS — Tax preview for an unsaved purchase invoice."""
from fastapi import APIRouter

from garment_ims.api.deps import http_error
from garment_ims.core.errors import EngineError
from garment_ims.schemas.common import ApiResponse
from garment_ims.schemas.purchase_invoice import LineTaxResponse, TaxPreviewRequest, TaxSummaryResponse
from garment_ims.services.line_items import parse_line_items
from garment_ims.services.purchase_invoice_service import PurchaseInvoiceService

router = APIRouter()


@router.post("/preview", response_model=ApiResponse[TaxSummaryResponse])
async def preview_tax(body: TaxPreviewRequest):
    """Same arithmetic the invoice save stores; nothing is written."""
    try:
        lines = PurchaseInvoiceService.resolve_mrp(
            parse_line_items([line.model_dump() for line in body.items])
        )
        summary = PurchaseInvoiceService.compute_tax(
            lines, body.discount, body.freight, body.freight_gst_percent, body.supply_type
        )
    except EngineError as e:
        raise http_error(e)

    return ApiResponse(data=TaxSummaryResponse(
        items_total=summary.items_total,
        discount=summary.discount,
        taxable_value=summary.taxable_value,
        lines=[
            LineTaxResponse(
                raw_total=lt.raw_total,
                taxable_value=lt.taxable_value,
                rate_percent=lt.rate_percent,
                gst=lt.gst,
            )
            for lt in summary.lines
        ],
        items_gst=summary.items_gst,
        gst_by_rate=summary.gst_by_rate,
        freight=summary.freight,
        freight_rate_percent=summary.freight_rate_percent,
        freight_gst=summary.freight_gst,
        total_gst=summary.total_gst,
        cgst=summary.split.cgst,
        sgst=summary.split.sgst,
        igst=summary.split.igst,
        subtotal=summary.subtotal,
        round_off=summary.round_off,
        grand_total=summary.grand_total,
    ))
