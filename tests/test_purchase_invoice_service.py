"""Tests for purchase invoice save and edit, end to end against SQLite."""
import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select, update

from garment_ims.core.errors import ConflictError, ValidationError
from garment_ims.models import BarcodeBatch, BatchStatus, PurchaseInvoiceItem
from garment_ims.services.batch_store import BatchStore
from garment_ims.services.cost_cipher import decode_cost
from garment_ims.services.purchase_invoice_service import PurchaseInvoiceService
from garment_ims.services.reconciliation import MutationKind, SkuKey

ORDER_DATE = date(2026, 3, 14)


def line(master, *, design_no="D100", sizes=None, color_id=None, cost="450", mrp="999", **kw) -> dict:
    sizes = sizes if sizes is not None else {master.size_m_id: 5}
    return {
        "design_no": design_no,
        "product_group_id": master.group_id,
        "color_id": color_id,
        "sizes": [{"size_id": size_id, "quantity": qty} for size_id, qty in sizes.items()],
        "cost_per_item": Decimal(cost),
        "mrp": Decimal(mrp) if mrp is not None else None,
        **kw,
    }


async def create(db, master, items, vendor_id=None, **kw):
    return await PurchaseInvoiceService.create_invoice(
        db,
        vendor_id=vendor_id or master.vendor_id,
        vendor_invoice_number="VINV-1",
        order_date=ORDER_DATE,
        items=items,
        **kw,
    )


async def edit(db, master, invoice, items, **kw):
    return await PurchaseInvoiceService.update_invoice(
        db,
        invoice.id,
        vendor_id=invoice.vendor_id,
        vendor_invoice_number=invoice.vendor_invoice_number,
        order_date=invoice.order_date,
        items=items,
        **kw,
    )


async def batch_for(db, master, design_no="D100", size_id=None, color_id=None):
    key = SkuKey.build(design_no, master.group_id, color_id, size_id or master.size_m_id, master.vendor_id)
    return await BatchStore(db).get_active_batch(key)


async def count(db, model) -> int:
    return await db.scalar(select(func.count()).select_from(model))


# ------------------------------------------------------------------
# Create
# ------------------------------------------------------------------

async def test_create_mints_one_batch_per_sku(db, master):
    invoice, applied = await create(db, master, [
        line(master, color_id=master.red_id, sizes={master.size_s_id: 2, master.size_m_id: 3}),
    ])

    assert invoice.invoice_number == "PI2026000001"
    assert invoice.total_items == 5
    assert [m.kind for m in applied] == [MutationKind.CREATE, MutationKind.CREATE]
    assert [m.barcode_alias for m in applied] == ["00000001", "00000002"]
    assert applied[0].barcode_structured == "SH-D100-RD-SHT-450-00000001"
    assert len(invoice.items) == 2


async def test_create_copies_line_attributes_onto_batch(db, master):
    invoice, _ = await create(db, master, [line(master, order_number="ORD-7", description="Linen")])
    batch = await batch_for(db, master)

    assert batch.source_invoice_id == invoice.id
    assert batch.total_quantity == batch.available_quantity == 5
    assert batch.hsn_code == "6205"
    assert batch.floor_id == master.floor_id
    assert batch.order_number == "ORD-7"
    assert batch.description == "Linen"


async def test_cipher_vendor_gets_encoded_cost(db, master):
    _, applied = await create(db, master, [line(master)], vendor_id=master.cipher_vendor_id)
    assert applied[0].barcode_structured == "SH-D100-CFH-YWC-00000001"


async def test_barcode_cost_matches_stored_cost(db, master):
    _, applied = await create(db, master, [line(master, cost="450.555")], vendor_id=master.cipher_vendor_id)
    batch = await BatchStore(db).get_by_alias(applied[0].barcode_alias)

    encoded = applied[0].barcode_structured.split("-")[-2]
    assert Decimal(decode_cost(encoded)) == batch.cost_actual == Decimal("450.56")


async def test_missing_codes_use_placeholders(db, master):
    item = line(master)
    item["product_group_id"] = master.bare_group_id
    _, applied = await create(db, master, [item], vendor_id=master.bare_vendor_id)
    assert applied[0].barcode_structured == "PG-D100-VND-450-00000001"


async def test_second_invoice_tops_up_existing_batch(db, master):
    await create(db, master, [line(master)])
    _, applied = await create(db, master, [line(master, sizes={master.size_m_id: 4})])

    assert applied[0].kind is MutationKind.ADJUST
    assert applied[0].barcode_alias == "00000001"
    assert (applied[0].total_quantity, applied[0].available_quantity) == (9, 9)
    assert await count(db, BarcodeBatch) == 1


async def test_same_sku_on_two_lines_is_merged(db, master):
    _, applied = await create(db, master, [line(master), line(master, sizes={master.size_m_id: 2})])
    assert len(applied) == 1
    assert applied[0].total_quantity == 7


async def test_create_stores_tax_summary(db, master):
    invoice, _ = await create(
        db, master,
        [line(master, cost="100", mrp="3000", sizes={master.size_m_id: 10})],
        discount=Decimal("100"),
        freight=Decimal("50"),
        freight_gst_percent=5,
    )
    assert invoice.items_gst == Decimal("162.00")
    assert invoice.freight_gst == Decimal("2.50")
    assert invoice.cgst_amount == invoice.sgst_amount == Decimal("82.25")
    assert invoice.grand_total == Decimal("1115")
    assert invoice.round_off == Decimal("0.50")


async def test_missing_mrp_is_suggested(db, master):
    await create(db, master, [line(master, cost="100", mrp=None)])
    batch = await batch_for(db, master)
    assert batch.mrp == Decimal("105.00")


async def test_zero_quantity_sizes_are_dropped(db, master):
    invoice, applied = await create(db, master, [
        line(master, sizes={master.size_s_id: 0, master.size_m_id: 3}),
    ])
    assert len(applied) == 1
    assert [item.size_id for item in invoice.items] == [master.size_m_id]


# ------------------------------------------------------------------
# Validation (nothing written)
# ------------------------------------------------------------------

async def test_unknown_product_group_names_the_field(db, master):
    item = line(master)
    item["product_group_id"] = master.size_s_id
    with pytest.raises(ValidationError) as exc:
        await create(db, master, [item])
    assert exc.value.field == "items[0].product_group_id"
    assert await count(db, BarcodeBatch) == 0


async def test_inactive_vendor_is_rejected(db, master):
    with pytest.raises(ValidationError) as exc:
        await create(db, master, [line(master)], vendor_id=master.inactive_vendor_id)
    assert exc.value.field == "vendor_id"


async def test_line_with_no_quantity_is_rejected(db, master):
    with pytest.raises(ValidationError) as exc:
        await create(db, master, [line(master, sizes={master.size_m_id: 0})])
    assert exc.value.field == "items[0].sizes"


async def test_negative_quantity_is_rejected(db, master):
    with pytest.raises(ValidationError) as exc:
        await create(db, master, [line(master, sizes={master.size_m_id: -1})])
    assert exc.value.field == "items[0].sizes[0].quantity"


async def test_discount_above_items_total_is_rejected(db, master):
    with pytest.raises(ValidationError) as exc:
        await create(db, master, [line(master, cost="10", sizes={master.size_m_id: 1})], discount=Decimal("11"))
    assert exc.value.field == "discount"
    assert await count(db, BarcodeBatch) == 0


# ------------------------------------------------------------------
# Edit
# ------------------------------------------------------------------

async def test_edit_applies_only_the_difference(db, master):
    invoice, _ = await create(db, master, [line(master, sizes={master.size_m_id: 5})])
    invoice, applied = await edit(db, master, invoice, [line(master, sizes={master.size_m_id: 8})])

    assert [(m.kind, m.delta, m.total_quantity) for m in applied] == [(MutationKind.ADJUST, 3, 8)]
    assert (await batch_for(db, master)).total_quantity == 8
    assert [item.quantity for item in invoice.items] == [8]


async def test_edit_adding_a_size_creates_a_batch(db, master):
    invoice, _ = await create(db, master, [line(master)])
    _, applied = await edit(db, master, invoice, [
        line(master, sizes={master.size_m_id: 5, master.size_l_id: 4}),
    ])

    assert [(m.kind, m.delta) for m in applied] == [(MutationKind.CREATE, 4)]
    assert applied[0].barcode_alias == "00000002"


async def test_edit_removing_a_line_takes_stock_back(db, master):
    invoice, _ = await create(db, master, [line(master), line(master, design_no="D200")])
    _, applied = await edit(db, master, invoice, [line(master, design_no="D200")])

    assert [(m.sku_key.design_no, m.delta) for m in applied] == [("D100", -5)]
    assert (await batch_for(db, master)).total_quantity == 0


async def test_resubmitting_unchanged_invoice_is_a_no_op(db, master):
    invoice, _ = await create(db, master, [line(master)])
    _, applied = await edit(db, master, invoice, [line(master)])
    assert applied == []
    assert (await batch_for(db, master)).total_quantity == 5


async def test_edit_on_sold_out_batch_clamps(db, master):
    invoice, _ = await create(db, master, [line(master, sizes={master.size_m_id: 5})])
    batch = await batch_for(db, master)
    await db.execute(
        update(BarcodeBatch)
        .where(BarcodeBatch.id == batch.id)
        .values(available_quantity=1)
        .execution_options(synchronize_session=False)
    )
    _, applied = await edit(db, master, invoice, [line(master, sizes={master.size_m_id: 2})])
    assert (applied[0].total_quantity, applied[0].available_quantity) == (2, 0)


async def test_edit_removing_stock_without_active_batch_conflicts(db, master):
    invoice, _ = await create(db, master, [line(master)])
    await db.execute(
        update(BarcodeBatch)
        .values(status=BatchStatus.INACTIVE.value)
        .execution_options(synchronize_session=False)
    )
    with pytest.raises(ConflictError):
        await edit(db, master, invoice, [line(master, sizes={master.size_m_id: 2})])


async def test_edit_keeps_invoice_number_and_replaces_rows(db, master):
    invoice, _ = await create(db, master, [line(master), line(master, design_no="D200")])
    number = invoice.invoice_number
    invoice, _ = await edit(db, master, invoice, [line(master, design_no="D300")])

    assert invoice.invoice_number == number
    assert await count(db, PurchaseInvoiceItem) == 1
    assert [item.design_no for item in invoice.items] == ["D300"]


async def test_edit_unknown_invoice_returns_none(db, master):
    result = await PurchaseInvoiceService.update_invoice(
        db,
        uuid.uuid4(),
        vendor_id=master.vendor_id,
        vendor_invoice_number="X",
        order_date=ORDER_DATE,
        items=[line(master)],
    )
    assert result is None


async def test_invoice_batches_lists_label_rows(db, master):
    invoice, _ = await create(db, master, [
        line(master, sizes={master.size_s_id: 1, master.size_m_id: 2}),
    ])
    batches = await PurchaseInvoiceService.invoice_batches(db, invoice)
    assert [b.barcode_alias for b in batches] == ["00000001", "00000002"]
