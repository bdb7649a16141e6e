"""Tests for invoice line parsing and per-SKU quantity maps."""
import uuid
from decimal import Decimal

import pytest

from garment_ims.core.errors import ValidationError
from garment_ims.models.batch import GSTLogic
from garment_ims.services.line_items import parse_line_items, quantities_by_sku

GROUP = uuid.uuid4()
S, M = uuid.uuid4(), uuid.uuid4()
VENDOR = uuid.uuid4()


def raw(**overrides) -> dict:
    item = {
        "design_no": "D100",
        "product_group_id": str(GROUP),
        "color_id": "",
        "sizes": [{"size_id": str(S), "quantity": 2}, {"size_id": str(M), "quantity": 3}],
        "cost_per_item": "450.50",
    }
    item.update(overrides)
    return item


def test_parses_line_with_defaults():
    (line,) = parse_line_items([raw()])
    assert line.color_id is None
    assert line.mrp is None
    assert line.gst_logic is GSTLogic.AUTO_5_18
    assert line.total_quantity == 5
    assert line.raw_total == Decimal("2252.50")


def test_empty_submission_is_rejected():
    with pytest.raises(ValidationError) as exc:
        parse_line_items([])
    assert exc.value.field == "items"


def test_missing_design_number_names_the_line():
    with pytest.raises(ValidationError) as exc:
        parse_line_items([raw(), raw(design_no=" ")])
    assert exc.value.field == "items[1].design_no"


def test_bad_size_id_names_the_size():
    with pytest.raises(ValidationError) as exc:
        parse_line_items([raw(sizes=[{"size_id": "not-a-uuid", "quantity": 1}])])
    assert exc.value.field == "items[0].sizes[0].size_id"


def test_zero_mrp_is_rejected():
    with pytest.raises(ValidationError) as exc:
        parse_line_items([raw(mrp="0")])
    assert exc.value.field == "items[0].mrp"


def test_unknown_gst_logic_is_rejected():
    with pytest.raises(ValidationError) as exc:
        parse_line_items([raw(gst_logic="GST_12")])
    assert exc.value.field == "items[0].gst_logic"


def test_quantities_merge_repeated_skus():
    lines = parse_line_items([raw(), raw(sizes=[{"size_id": str(S), "quantity": 4}])])
    state = quantities_by_sku(lines, VENDOR)
    assert sorted(state.values()) == [3, 6]


def test_cost_and_mrp_are_rounded_to_paise():
    (line,) = parse_line_items([raw(cost_per_item="450.555", mrp="999.994")])
    assert line.cost_per_item == Decimal("450.56")
    assert line.mrp == Decimal("999.99")
