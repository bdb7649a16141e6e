"""Garment IMS — PurchaseInvoiceService: save and edit purchase invoices, reconciling stock batches.

Both operations run inside the caller's session transaction. Everything that
can be rejected (line items, master-data references, discount) is validated
before the first write; after that any ConflictError or PersistenceError
leaves the transaction to be rolled back as a whole.
"""
import dataclasses
import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from garment_ims.config import get_settings
from garment_ims.core.errors import PersistenceError
from garment_ims.db.base import utcnow
from garment_ims.models.batch import BarcodeBatch
from garment_ims.models.master_data import Vendor
from garment_ims.models.purchase_invoice import PurchaseInvoice, PurchaseInvoiceItem, SupplyType
from garment_ims.services.barcode_encoder import BarcodeEncoder
from garment_ims.services.batch_store import BatchStore
from garment_ims.services.line_items import (
    InvoiceLine,
    parse_line_items,
    quantities_by_sku,
    quantities_from_rows,
)
from garment_ims.services.master_data_service import MasterDataService
from garment_ims.services.reconciliation import (
    AppliedMutation,
    BatchTemplate,
    ReconciliationService,
    SkuKey,
)
from garment_ims.services.sequence_allocator import get_allocator
from garment_ims.services.tax_calculator import InvoiceTaxSummary, TaxableLine, calculate_invoice_tax, suggest_mrp

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class _PreparedInvoice:
    vendor: Vendor
    lines: list[InvoiceLine]
    hsn_by_line: list[str | None]
    templates: dict[SkuKey, BatchTemplate]
    new_state: dict[SkuKey, int]
    summary: InvoiceTaxSummary


class PurchaseInvoiceService:
    """Purchase invoice save/edit on top of the reconciliation engine."""

    @staticmethod
    def compute_tax(
        lines: list[InvoiceLine],
        discount: Decimal | int | str = 0,
        freight: Decimal | int | str = 0,
        freight_gst_percent: int = 5,
        supply_type: SupplyType | str = SupplyType.CGST_SGST,
    ) -> InvoiceTaxSummary:
        taxable = [
            TaxableLine(raw_total=line.raw_total, mrp=line.mrp, gst_logic=line.gst_logic)
            for line in lines
        ]
        return calculate_invoice_tax(taxable, discount, freight, freight_gst_percent, supply_type)

    @staticmethod
    def resolve_mrp(lines: list[InvoiceLine]) -> list[InvoiceLine]:
        """Lines without an MRP get one suggested from cost, markup and GST slab."""
        return [
            line if line.mrp is not None
            else dataclasses.replace(
                line, mrp=suggest_mrp(line.cost_per_item, line.mrp_markup_percent, line.gst_logic)
            )
            for line in lines
        ]

    @staticmethod
    async def _prepare(
        db: AsyncSession,
        vendor_id: UUID,
        items: list[dict],
        discount,
        freight,
        freight_gst_percent: int,
        supply_type,
    ) -> _PreparedInvoice:
        lines = PurchaseInvoiceService.resolve_mrp(parse_line_items(items))
        vendor = await MasterDataService.vendor(db, vendor_id)

        templates: dict[SkuKey, BatchTemplate] = {}
        hsn_by_line: list[str | None] = []
        for i, line in enumerate(lines):
            group = await MasterDataService.product_group(db, line.product_group_id, f"items[{i}].product_group_id")
            color = (
                await MasterDataService.color(db, line.color_id, f"items[{i}].color_id")
                if line.color_id is not None else None
            )
            hsn_code = line.hsn_code or group.hsn_code
            hsn_by_line.append(hsn_code)
            template = BatchTemplate(
                cost_actual=line.cost_per_item,
                mrp=line.mrp,
                mrp_markup_percent=line.mrp_markup_percent,
                gst_logic=line.gst_logic,
                group_code=group.group_code,
                color_code=color.color_code if color else None,
                vendor_code=vendor.vendor_code,
                vendor_name=vendor.name,
                hsn_code=hsn_code,
                floor_id=group.floor_id,
                description=line.description,
                order_number=line.order_number,
                photos=line.photos,
            )
            for j, size in enumerate(line.sizes):
                await MasterDataService.size(db, size.size_id, f"items[{i}].sizes[{j}].size_id")
                templates.setdefault(line.sku_key(size.size_id, vendor.id), template)

        summary = PurchaseInvoiceService.compute_tax(lines, discount, freight, freight_gst_percent, supply_type)
        return _PreparedInvoice(
            vendor=vendor,
            lines=lines,
            hsn_by_line=hsn_by_line,
            templates=templates,
            new_state=quantities_by_sku(lines, vendor.id),
            summary=summary,
        )

    @staticmethod
    async def _reconciler(db: AsyncSession) -> ReconciliationService:
        settings = get_settings()
        allocator = await get_allocator(db, settings.BARCODE_ALIAS_SEQUENCE)
        return ReconciliationService(BatchStore(db), BarcodeEncoder(allocator))

    @staticmethod
    async def _next_invoice_number(db: AsyncSession, order_date: date) -> str:
        allocator = await get_allocator(db, get_settings().INVOICE_NUMBER_SEQUENCE)
        return f"PI{order_date.year}{await allocator.next_value():06d}"

    @staticmethod
    def _apply_header(invoice: PurchaseInvoice, prepared: _PreparedInvoice) -> None:
        summary = prepared.summary
        invoice.vendor_id = prepared.vendor.id
        invoice.supply_type = summary.supply_type.value
        invoice.total_items = sum(line.total_quantity for line in prepared.lines)
        invoice.items_total = summary.items_total
        invoice.discount = summary.discount
        invoice.taxable_value = summary.taxable_value
        invoice.items_gst = summary.items_gst
        invoice.freight = summary.freight
        invoice.freight_gst_percent = summary.freight_rate_percent
        invoice.freight_gst = summary.freight_gst
        invoice.cgst_amount = summary.split.cgst
        invoice.sgst_amount = summary.split.sgst
        invoice.igst_amount = summary.split.igst
        invoice.total_gst = summary.total_gst
        invoice.round_off = summary.round_off
        invoice.grand_total = summary.grand_total

    @staticmethod
    def _item_rows(prepared: _PreparedInvoice) -> list[PurchaseInvoiceItem]:
        rows: list[PurchaseInvoiceItem] = []
        for line_no, (line, hsn_code) in enumerate(zip(prepared.lines, prepared.hsn_by_line), start=1):
            for size in line.sizes:
                rows.append(PurchaseInvoiceItem(
                    line_no=line_no,
                    design_no=line.design_no,
                    product_group_id=line.product_group_id,
                    color_id=line.color_id,
                    size_id=size.size_id,
                    quantity=size.quantity,
                    cost_per_item=line.cost_per_item,
                    mrp=line.mrp,
                    mrp_markup_percent=line.mrp_markup_percent,
                    gst_logic=line.gst_logic.value,
                    hsn_code=hsn_code,
                    description=line.description,
                    order_number=line.order_number,
                ))
        return rows

    @staticmethod
    async def _flush(db: AsyncSession, what: str) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not save {what}") from exc

    @staticmethod
    async def create_invoice(
        db: AsyncSession,
        *,
        vendor_id: UUID,
        vendor_invoice_number: str,
        order_date: date,
        items: list[dict],
        discount: Decimal | int | str = 0,
        freight: Decimal | int | str = 0,
        freight_gst_percent: int = 5,
        supply_type: SupplyType | str = SupplyType.CGST_SGST,
        notes: str | None = None,
    ) -> tuple[PurchaseInvoice, list[AppliedMutation]]:
        """Save a new invoice: every submitted unit is a positive delta against empty prior state."""
        prepared = await PurchaseInvoiceService._prepare(
            db, vendor_id, items, discount, freight, freight_gst_percent, supply_type
        )

        invoice = PurchaseInvoice(
            invoice_number=await PurchaseInvoiceService._next_invoice_number(db, order_date),
            vendor_invoice_number=vendor_invoice_number,
            order_date=order_date,
            notes=notes,
        )
        PurchaseInvoiceService._apply_header(invoice, prepared)
        invoice.items = PurchaseInvoiceService._item_rows(prepared)
        db.add(invoice)
        await PurchaseInvoiceService._flush(db, "purchase invoice")

        reconciler = await PurchaseInvoiceService._reconciler(db)
        applied = await reconciler.apply({}, prepared.new_state, prepared.templates, source_invoice_id=invoice.id)
        await PurchaseInvoiceService._flush(db, "purchase invoice")
        logger.info(
            "Purchase invoice %s saved: %d units, grand total %s",
            invoice.invoice_number, invoice.total_items, invoice.grand_total,
        )
        return invoice, applied

    @staticmethod
    async def update_invoice(
        db: AsyncSession,
        invoice_id: UUID,
        *,
        vendor_id: UUID,
        vendor_invoice_number: str,
        order_date: date,
        items: list[dict],
        discount: Decimal | int | str = 0,
        freight: Decimal | int | str = 0,
        freight_gst_percent: int = 5,
        supply_type: SupplyType | str = SupplyType.CGST_SGST,
        notes: str | None = None,
    ) -> tuple[PurchaseInvoice, list[AppliedMutation]] | None:
        """
        Replace an invoice's line items. Only the difference between the persisted
        rows and the new submission is applied to the batches.
        """
        invoice = await PurchaseInvoiceService.get_invoice(db, invoice_id)
        if not invoice:
            return None

        prepared = await PurchaseInvoiceService._prepare(
            db, vendor_id, items, discount, freight, freight_gst_percent, supply_type
        )
        old_state = quantities_from_rows(invoice.items, invoice.vendor_id)

        invoice.vendor_invoice_number = vendor_invoice_number
        invoice.order_date = order_date
        invoice.notes = notes
        invoice.updated_at = utcnow()
        PurchaseInvoiceService._apply_header(invoice, prepared)
        invoice.items.clear()
        await PurchaseInvoiceService._flush(db, "purchase invoice")
        invoice.items.extend(PurchaseInvoiceService._item_rows(prepared))
        await PurchaseInvoiceService._flush(db, "purchase invoice")

        reconciler = await PurchaseInvoiceService._reconciler(db)
        applied = await reconciler.apply(
            old_state, prepared.new_state, prepared.templates, source_invoice_id=invoice.id
        )
        await PurchaseInvoiceService._flush(db, "purchase invoice")
        logger.info("Purchase invoice %s updated: %d SKU keys changed", invoice.invoice_number, len(applied))
        return invoice, applied

    @staticmethod
    async def get_invoice(db: AsyncSession, invoice_id: UUID) -> PurchaseInvoice | None:
        """Get single invoice with items (selectin loaded)."""
        result = await db.execute(
            select(PurchaseInvoice)
            .where(PurchaseInvoice.id == invoice_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def invoice_batches(db: AsyncSession, invoice: PurchaseInvoice) -> list[BarcodeBatch]:
        """Active batches holding the invoice's SKU keys, in line order (for label printing)."""
        store = BatchStore(db)
        batches: list[BarcodeBatch] = []
        seen: set[UUID] = set()
        for key in quantities_from_rows(invoice.items, invoice.vendor_id):
            batch = await store.get_active_batch(key)
            if batch is not None and batch.id not in seen:
                seen.add(batch.id)
                batches.append(batch)
        return batches
