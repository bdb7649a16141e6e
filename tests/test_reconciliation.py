"""Tests for the reconciliation plan (pure, no database)."""
import uuid
from types import SimpleNamespace

import pytest

from garment_ims.core.errors import ConflictError, ValidationError
from garment_ims.services.reconciliation import (
    BatchSnapshot,
    MutationKind,
    ReconciliationService,
    SkuKey,
    compute_deltas,
    reconcile,
)

GROUP = uuid.uuid4()
SIZE = uuid.uuid4()
VENDOR = uuid.uuid4()


def key(design_no: str, color=None) -> SkuKey:
    return SkuKey.build(design_no, GROUP, color, SIZE, VENDOR)


A = key("A")
B = key("B")


def test_blank_color_and_none_are_the_same_key():
    assert SkuKey.build("A", GROUP, "", SIZE, VENDOR) == SkuKey.build("A", GROUP, None, SIZE, VENDOR)


def test_string_ids_are_normalised():
    assert SkuKey.build(" A ", str(GROUP), None, str(SIZE), str(VENDOR)) == A


def test_increase_on_existing_batch_is_one_adjust():
    batch_id = uuid.uuid4()
    plan = reconcile({A: 5}, {A: 8}, {A: BatchSnapshot(batch_id, 5, 5, "00000001")})
    assert len(plan) == 1
    m = plan[0]
    assert (m.kind, m.delta, m.batch_id) == (MutationKind.ADJUST, 3, batch_id)
    assert (m.total_quantity, m.available_quantity) == (8, 8)


def test_new_key_creates_a_batch():
    plan = reconcile({}, {B: 4}, {})
    assert len(plan) == 1
    m = plan[0]
    assert (m.kind, m.delta, m.total_quantity, m.available_quantity) == (MutationKind.CREATE, 4, 4, 4)
    assert m.batch_id is None


def test_new_key_with_existing_batch_adds_to_it():
    batch_id = uuid.uuid4()
    plan = reconcile({}, {A: 2}, {A: BatchSnapshot(batch_id, 10, 7)})
    assert plan[0].kind is MutationKind.ADJUST
    assert (plan[0].total_quantity, plan[0].available_quantity) == (12, 9)


def test_unchanged_keys_produce_no_mutation():
    assert reconcile({A: 5, B: 1}, {A: 5, B: 1}, {}) == []


def test_removed_key_is_a_negative_adjust():
    batch_id = uuid.uuid4()
    plan = reconcile({A: 5, B: 2}, {B: 2}, {A: BatchSnapshot(batch_id, 5, 5)})
    assert [(m.sku_key, m.delta) for m in plan] == [(A, -5)]
    assert plan[0].total_quantity == 0


def test_decrease_below_zero_clamps_each_counter():
    batch_id = uuid.uuid4()
    # 3 units already sold from this batch
    plan = reconcile({A: 5}, {A: 0}, {A: BatchSnapshot(batch_id, 5, 2)})
    assert (plan[0].total_quantity, plan[0].available_quantity) == (0, 0)


def test_decrease_without_active_batch_is_a_conflict():
    with pytest.raises(ConflictError):
        reconcile({A: 5}, {A: 2}, {})


def test_negative_quantity_is_rejected():
    with pytest.raises(ValidationError):
        compute_deltas({}, {A: -1})


def test_deltas_follow_submission_order_then_removed_keys():
    c = key("C")
    deltas = compute_deltas({A: 1, c: 1}, {B: 2, A: 3})
    assert list(deltas.items()) == [(B, 2), (A, 2), (c, -1)]


def test_color_variants_are_separate_keys():
    red = uuid.uuid4()
    plan = reconcile({}, {A: 1, key("A", red): 1}, {})
    assert [m.kind for m in plan] == [MutationKind.CREATE, MutationKind.CREATE]


# ------------------------------------------------------------------
# Applying a plan
# ------------------------------------------------------------------

class RecordingStore:
    """Active batch for every key; remembers the order counters were touched in."""

    def __init__(self, keys):
        self.batches = {
            k: SimpleNamespace(id=uuid.uuid4(), total_quantity=10, available_quantity=10, barcode_alias=k.design_no)
            for k in keys
        }
        self.touched = []

    async def get_active_batch(self, key):
        return self.batches.get(key)

    async def apply_delta(self, batch_id, delta):
        self.touched.append(next(k.design_no for k, b in self.batches.items() if b.id == batch_id))
        return 10 + delta, 10 + delta


async def test_adjustments_run_in_key_order_whatever_the_submission_order():
    c = key("C")
    forward, backward = RecordingStore([A, B, c]), RecordingStore([A, B, c])

    await ReconciliationService(forward, encoder=None).apply({}, {A: 1, B: 1, c: 1}, {})
    applied = await ReconciliationService(backward, encoder=None).apply({}, {c: 1, B: 1, A: 1}, {})

    assert forward.touched == backward.touched == ["A", "B", "C"]
    # results still come back in submission order
    assert [m.sku_key for m in applied] == [c, B, A]
