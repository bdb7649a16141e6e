"""Garment IMS — Reconciliation engine: invoice quantities in, batch mutations out.

reconcile() is pure: it takes the invoice's previously persisted per-SKU
quantities, the newly submitted ones, and a snapshot of the active batch for
each key, and returns the plan. ReconciliationService loads the snapshots,
runs the plan against the BatchStore and mints barcodes for new batches.

Creating an invoice is reconciling against an empty previous state; editing
is reconciling against the rows it is about to replace. Both go through the
same path.
"""
import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from garment_ims.core.errors import ConflictError, ValidationError
from garment_ims.models.batch import BarcodeBatch, BatchStatus, GSTLogic
from garment_ims.services.barcode_encoder import BarcodeEncoder, SkuAttributes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkuKey:
    """(design_no, product_group, color?, size, vendor). No color is always None, never ''."""

    design_no: str
    product_group_id: uuid.UUID
    color_id: uuid.UUID | None
    size_id: uuid.UUID
    vendor_id: uuid.UUID

    @classmethod
    def build(cls, design_no, product_group_id, color_id, size_id, vendor_id) -> "SkuKey":
        return cls(
            design_no=str(design_no).strip(),
            product_group_id=_as_uuid(product_group_id),
            color_id=_as_uuid(color_id) if color_id not in (None, "") else None,
            size_id=_as_uuid(size_id),
            vendor_id=_as_uuid(vendor_id),
        )

    @classmethod
    def of_batch(cls, batch: BarcodeBatch) -> "SkuKey":
        return cls.build(batch.design_no, batch.product_group_id, batch.color_id, batch.size_id, batch.vendor_id)

    @property
    def sort_key(self) -> tuple[str, str, str, str, str]:
        return (
            self.design_no,
            str(self.product_group_id),
            str(self.color_id) if self.color_id else "",
            str(self.size_id),
            str(self.vendor_id),
        )


def _as_uuid(value) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


@dataclass(frozen=True)
class BatchSnapshot:
    batch_id: uuid.UUID
    total_quantity: int
    available_quantity: int
    barcode_alias: str | None = None

    @classmethod
    def of_batch(cls, batch: BarcodeBatch) -> "BatchSnapshot":
        return cls(batch.id, batch.total_quantity, batch.available_quantity, batch.barcode_alias)


class MutationKind(str, Enum):
    ADJUST = "adjust"
    CREATE = "create"


@dataclass(frozen=True)
class BatchMutation:
    """One planned change. total/available are the counters expected after it applies."""

    kind: MutationKind
    sku_key: SkuKey
    delta: int
    total_quantity: int
    available_quantity: int
    batch_id: uuid.UUID | None = None


def compute_deltas(old_state: Mapping[SkuKey, int], new_state: Mapping[SkuKey, int]) -> dict[SkuKey, int]:
    """new - old for every key in either map; zero deltas dropped. New-state order first."""
    for state in (old_state, new_state):
        for key, qty in state.items():
            if qty < 0:
                raise ValidationError(f"Negative quantity {qty} for design {key.design_no}", field="quantity")

    keys = list(new_state) + [k for k in old_state if k not in new_state]
    deltas: dict[SkuKey, int] = {}
    for key in keys:
        delta = new_state.get(key, 0) - old_state.get(key, 0)
        if delta != 0:
            deltas[key] = delta
    return deltas


def reconcile(
    old_state: Mapping[SkuKey, int],
    new_state: Mapping[SkuKey, int],
    active_batches: Mapping[SkuKey, BatchSnapshot],
) -> list[BatchMutation]:
    """
    Plan the batch mutations that move stock from old_state to new_state.
    Raises ConflictError when stock would be removed from a key with no active batch.
    """
    mutations: list[BatchMutation] = []
    for key, delta in compute_deltas(old_state, new_state).items():
        batch = active_batches.get(key)
        if batch is not None:
            mutations.append(BatchMutation(
                kind=MutationKind.ADJUST,
                sku_key=key,
                delta=delta,
                total_quantity=max(0, batch.total_quantity + delta),
                available_quantity=max(0, batch.available_quantity + delta),
                batch_id=batch.batch_id,
            ))
        elif delta > 0:
            mutations.append(BatchMutation(
                kind=MutationKind.CREATE,
                sku_key=key,
                delta=delta,
                total_quantity=delta,
                available_quantity=delta,
            ))
        else:
            raise ConflictError(
                f"Cannot remove {-delta} units of design {key.design_no}: no active batch holds this SKU"
            )
    return mutations


@dataclass(frozen=True)
class BatchTemplate:
    """Everything needed to create a batch for a key that has none yet."""

    cost_actual: Decimal
    mrp: Decimal
    mrp_markup_percent: Decimal
    gst_logic: GSTLogic
    group_code: str | None = None
    color_code: str | None = None
    vendor_code: str | None = None
    vendor_name: str | None = None
    hsn_code: str | None = None
    floor_id: uuid.UUID | None = None
    description: str | None = None
    order_number: str | None = None
    photos: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AppliedMutation:
    kind: MutationKind
    sku_key: SkuKey
    delta: int
    batch_id: uuid.UUID
    barcode_alias: str
    barcode_structured: str | None
    total_quantity: int
    available_quantity: int


class ReconciliationService:
    """Applies reconcile() plans through a BatchStore. Runs inside the caller's transaction."""

    def __init__(self, store, encoder: BarcodeEncoder):
        self.store = store
        self.encoder = encoder

    async def load_active_batches(self, keys) -> dict[SkuKey, BatchSnapshot]:
        snapshots: dict[SkuKey, BatchSnapshot] = {}
        for key in keys:
            batch = await self.store.get_active_batch(key)
            if batch is not None:
                snapshots[key] = BatchSnapshot.of_batch(batch)
        return snapshots

    async def apply(
        self,
        old_state: Mapping[SkuKey, int],
        new_state: Mapping[SkuKey, int],
        templates: Mapping[SkuKey, BatchTemplate],
        *,
        source_invoice_id: uuid.UUID | None = None,
    ) -> list[AppliedMutation]:
        deltas = compute_deltas(old_state, new_state)
        active = await self.load_active_batches(deltas.keys())
        plan = reconcile(old_state, new_state, active)

        # existing rows are locked in key order so concurrent saves cannot deadlock;
        # new batches follow in submission order so aliases are minted in line order
        adjusts = sorted(
            (i for i, m in enumerate(plan) if m.kind is MutationKind.ADJUST),
            key=lambda i: plan[i].sku_key.sort_key,
        )
        creates = [i for i, m in enumerate(plan) if m.kind is MutationKind.CREATE]

        results: dict[int, AppliedMutation] = {}
        for i in adjusts:
            mutation = plan[i]
            total, available = await self.store.apply_delta(mutation.batch_id, mutation.delta)
            results[i] = AppliedMutation(
                kind=mutation.kind,
                sku_key=mutation.sku_key,
                delta=mutation.delta,
                batch_id=mutation.batch_id,
                barcode_alias=active[mutation.sku_key].barcode_alias,
                barcode_structured=None,
                total_quantity=total,
                available_quantity=available,
            )
        for i in creates:
            mutation = plan[i]
            template = templates.get(mutation.sku_key)
            if template is None:
                raise ValidationError(
                    f"No line item describes design {mutation.sku_key.design_no}", field="items"
                )
            batch = await self._create_batch(mutation, template, source_invoice_id)
            results[i] = AppliedMutation(
                kind=mutation.kind,
                sku_key=mutation.sku_key,
                delta=mutation.delta,
                batch_id=batch.id,
                barcode_alias=batch.barcode_alias,
                barcode_structured=batch.barcode_structured,
                total_quantity=batch.total_quantity,
                available_quantity=batch.available_quantity,
            )
        applied = [results[i] for i in range(len(plan))]

        logger.info(
            "Reconciled %d SKU keys: %d adjusted, %d created",
            len(applied),
            sum(1 for m in applied if m.kind is MutationKind.ADJUST),
            sum(1 for m in applied if m.kind is MutationKind.CREATE),
        )
        return applied

    async def _create_batch(
        self,
        mutation: BatchMutation,
        template: BatchTemplate,
        source_invoice_id: uuid.UUID | None,
    ) -> BarcodeBatch:
        key = mutation.sku_key
        minted = await self.encoder.mint(
            SkuAttributes(design_no=key.design_no, group_code=template.group_code, color_code=template.color_code),
            template.vendor_code,
            template.cost_actual,
            vendor_name=template.vendor_name,
        )
        batch = BarcodeBatch(
            design_no=key.design_no,
            product_group_id=key.product_group_id,
            color_id=key.color_id,
            size_id=key.size_id,
            vendor_id=key.vendor_id,
            status=BatchStatus.ACTIVE.value,
            total_quantity=mutation.total_quantity,
            available_quantity=mutation.available_quantity,
            cost_actual=template.cost_actual,
            mrp=template.mrp,
            mrp_markup_percent=template.mrp_markup_percent,
            gst_logic=GSTLogic(template.gst_logic).value,
            hsn_code=template.hsn_code,
            barcode_alias=minted.alias,
            barcode_structured=minted.structured,
            floor_id=template.floor_id,
            photos=list(template.photos),
            description=template.description,
            order_number=template.order_number,
            source_invoice_id=source_invoice_id,
        )
        return await self.store.insert_batch(batch)
