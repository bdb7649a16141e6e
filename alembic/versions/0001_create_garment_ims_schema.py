"""create master data, barcode batches, purchase invoices, sequences, logs

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    # master data
    op.create_table(
        "floors",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("floor_code", sa.String(20), nullable=False),
    )
    op.create_table(
        "product_groups",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("group_code", sa.String(20), nullable=True),
        sa.Column("hsn_code", sa.String(20), nullable=True),
        sa.Column("floor_id", sa.Uuid(), sa.ForeignKey("floors.id", ondelete="SET NULL"), nullable=True),
    )
    op.create_table(
        "colors",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("color_code", sa.String(20), nullable=True),
    )
    op.create_table(
        "sizes",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("size_code", sa.String(20), nullable=False),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
    )
    op.create_table(
        "vendors",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("vendor_code", sa.String(20), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
    )

    # purchase invoices
    op.create_table(
        "purchase_invoices",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("invoice_number", sa.String(30), nullable=False, unique=True),
        sa.Column("vendor_id", sa.Uuid(), sa.ForeignKey("vendors.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("vendor_invoice_number", sa.String(100), nullable=False),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("supply_type", sa.String(20), nullable=False, server_default="CGST_SGST"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("total_items", sa.Integer, nullable=False, server_default="0"),
        sa.Column("items_total", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("discount", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("taxable_value", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("items_gst", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("freight", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("freight_gst_percent", sa.Integer, nullable=False, server_default="5"),
        sa.Column("freight_gst", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("cgst_amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("sgst_amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("igst_amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("total_gst", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("round_off", sa.Numeric(6, 2), nullable=False, server_default="0"),
        sa.Column("grand_total", sa.Numeric(14, 2), nullable=False, server_default="0"),
        *_timestamps(),
        sa.CheckConstraint("freight_gst_percent IN (5, 18)", name="ck_purchase_invoices_freight_rate"),
    )
    op.create_index("ix_purchase_invoices_vendor_id", "purchase_invoices", ["vendor_id"], unique=False)

    op.create_table(
        "purchase_invoice_items",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("invoice_id", sa.Uuid(), sa.ForeignKey("purchase_invoices.id", ondelete="CASCADE"), nullable=False),
        sa.Column("line_no", sa.Integer, nullable=False),
        sa.Column("design_no", sa.String(100), nullable=False),
        sa.Column("product_group_id", sa.Uuid(), sa.ForeignKey("product_groups.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("color_id", sa.Uuid(), sa.ForeignKey("colors.id", ondelete="RESTRICT"), nullable=True),
        sa.Column("size_id", sa.Uuid(), sa.ForeignKey("sizes.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("cost_per_item", sa.Numeric(12, 2), nullable=False),
        sa.Column("mrp", sa.Numeric(12, 2), nullable=False),
        sa.Column("mrp_markup_percent", sa.Numeric(8, 2), nullable=False, server_default="0"),
        sa.Column("gst_logic", sa.String(20), nullable=False),
        sa.Column("hsn_code", sa.String(20), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("order_number", sa.String(50), nullable=True),
        sa.CheckConstraint("quantity > 0", name="ck_purchase_invoice_items_quantity_positive"),
    )
    op.create_index("ix_purchase_invoice_items_invoice_id", "purchase_invoice_items", ["invoice_id"], unique=False)

    # barcode batches
    op.create_table(
        "barcode_batches",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("design_no", sa.String(100), nullable=False),
        sa.Column("product_group_id", sa.Uuid(), sa.ForeignKey("product_groups.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("color_id", sa.Uuid(), sa.ForeignKey("colors.id", ondelete="RESTRICT"), nullable=True),
        sa.Column("size_id", sa.Uuid(), sa.ForeignKey("sizes.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("vendor_id", sa.Uuid(), sa.ForeignKey("vendors.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("total_quantity", sa.Integer, nullable=False, server_default="0"),
        sa.Column("available_quantity", sa.Integer, nullable=False, server_default="0"),
        sa.Column("cost_actual", sa.Numeric(12, 2), nullable=False),
        sa.Column("mrp", sa.Numeric(12, 2), nullable=False),
        sa.Column("mrp_markup_percent", sa.Numeric(8, 2), nullable=False, server_default="0"),
        sa.Column("gst_logic", sa.String(20), nullable=False, server_default="AUTO_5_18"),
        sa.Column("hsn_code", sa.String(20), nullable=True),
        sa.Column("barcode_alias", sa.String(20), nullable=False, unique=True),
        sa.Column("barcode_structured", sa.String(255), nullable=False),
        sa.Column("floor_id", sa.Uuid(), sa.ForeignKey("floors.id", ondelete="SET NULL"), nullable=True),
        sa.Column("photos", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("order_number", sa.String(50), nullable=True),
        sa.Column(
            "source_invoice_id", sa.Uuid(),
            sa.ForeignKey("purchase_invoices.id", ondelete="SET NULL"), nullable=True,
        ),
        *_timestamps(),
        sa.CheckConstraint(
            "available_quantity >= 0 AND available_quantity <= total_quantity",
            name="ck_barcode_batches_quantities",
        ),
    )
    op.create_index(
        "ix_barcode_batches_sku_key",
        "barcode_batches",
        ["design_no", "product_group_id", "color_id", "size_id", "vendor_id", "status"],
        unique=False,
    )
    # one active batch per SKU key; colorless keys get their own index
    op.create_index(
        "uq_barcode_batches_active_sku",
        "barcode_batches",
        ["design_no", "product_group_id", "color_id", "size_id", "vendor_id"],
        unique=True,
        postgresql_where=sa.text("status = 'active' AND color_id IS NOT NULL"),
    )
    op.create_index(
        "uq_barcode_batches_active_sku_no_color",
        "barcode_batches",
        ["design_no", "product_group_id", "size_id", "vendor_id"],
        unique=True,
        postgresql_where=sa.text("status = 'active' AND color_id IS NULL"),
    )

    # design registry
    op.create_table(
        "product_masters",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("design_no", sa.String(100), nullable=False),
        sa.Column("vendor_id", sa.Uuid(), sa.ForeignKey("vendors.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("product_group_id", sa.Uuid(), sa.ForeignKey("product_groups.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("color_id", sa.Uuid(), sa.ForeignKey("colors.id", ondelete="RESTRICT"), nullable=True),
        sa.Column("gst_logic", sa.String(20), nullable=False, server_default="AUTO_5_18"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_unique_constraint("uq_product_masters_design_vendor", "product_masters", ["design_no", "vendor_id"])

    # sequences
    op.create_table(
        "barcode_sequences",
        sa.Column("name", sa.String(50), primary_key=True),
        sa.Column("current_value", sa.BigInteger, nullable=False, server_default="0"),
    )
    op.execute(
        "INSERT INTO barcode_sequences (name, current_value) VALUES "
        "('barcode_alias', 0), ('purchase_invoice', 0)"
    )

    # side records
    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("target_type", sa.String(100), nullable=True),
        sa.Column("target_id", sa.Uuid(), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_audit_log_target", "audit_log", ["target_type", "target_id"], unique=False)
    op.create_table(
        "label_print_log",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("invoice_id", sa.Uuid(), nullable=False),
        sa.Column("barcode_alias", sa.String(20), nullable=False),
        sa.Column("copies", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_label_print_log_invoice_id", "label_print_log", ["invoice_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_label_print_log_invoice_id", table_name="label_print_log")
    op.drop_table("label_print_log")
    op.drop_index("ix_audit_log_target", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_table("barcode_sequences")
    op.drop_constraint("uq_product_masters_design_vendor", "product_masters", type_="unique")
    op.drop_table("product_masters")
    op.drop_index("uq_barcode_batches_active_sku_no_color", table_name="barcode_batches")
    op.drop_index("uq_barcode_batches_active_sku", table_name="barcode_batches")
    op.drop_index("ix_barcode_batches_sku_key", table_name="barcode_batches")
    op.drop_table("barcode_batches")
    op.drop_index("ix_purchase_invoice_items_invoice_id", table_name="purchase_invoice_items")
    op.drop_table("purchase_invoice_items")
    op.drop_index("ix_purchase_invoices_vendor_id", table_name="purchase_invoices")
    op.drop_table("purchase_invoices")
    op.drop_table("vendors")
    op.drop_table("sizes")
    op.drop_table("colors")
    op.drop_table("product_groups")
    op.drop_table("floors")
