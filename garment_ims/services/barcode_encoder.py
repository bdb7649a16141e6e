"""Garment IMS — Barcode encoder: 8-digit alias plus the structured, information-bearing barcode."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from garment_ims.config import get_settings
from garment_ims.core.errors import PersistenceError
from garment_ims.services.cost_cipher import encode_cost_for_vendor
from garment_ims.services.sequence_allocator import SequenceAllocator


@dataclass(frozen=True)
class SkuAttributes:
    design_no: str
    group_code: str | None = None
    color_code: str | None = None


@dataclass(frozen=True)
class MintedBarcode:
    alias: str
    structured: str


def format_alias(value: int, width: int = 8) -> str:
    text = str(value)
    if value < 0 or len(text) > width:
        raise PersistenceError(f"Alias {value} does not fit in {width} digits")
    return text.zfill(width)


def compose_structured(
    group_code: str | None,
    design_no: str,
    color_code: str | None,
    vendor_code: str | None,
    cost_token: str,
    alias: str,
    *,
    placeholder_group: str = "PG",
    placeholder_vendor: str = "VND",
) -> str:
    """GROUP-DESIGN[-COLOR]-VENDOR-COST-ALIAS"""
    design_part = f"{design_no}-{color_code}" if color_code else design_no
    return "-".join([
        group_code or placeholder_group,
        design_part,
        vendor_code or placeholder_vendor,
        cost_token,
        alias,
    ])


class BarcodeEncoder:
    """Mints barcodes from SKU attributes, drawing aliases from one sequence allocator."""

    def __init__(
        self,
        allocator: SequenceAllocator,
        *,
        alias_width: int | None = None,
        cipher_markers: Iterable[str] | None = None,
        placeholder_group: str | None = None,
        placeholder_vendor: str | None = None,
    ):
        settings = get_settings()
        self.allocator = allocator
        self.alias_width = alias_width or settings.BARCODE_ALIAS_WIDTH
        self.cipher_markers = list(cipher_markers) if cipher_markers is not None else settings.COST_CIPHER_MARKERS
        self.placeholder_group = placeholder_group or settings.PLACEHOLDER_GROUP_CODE
        self.placeholder_vendor = placeholder_vendor or settings.PLACEHOLDER_VENDOR_CODE

    async def mint(
        self,
        sku: SkuAttributes,
        vendor_code: str | None,
        cost: Decimal,
        *,
        vendor_name: str | None = None,
    ) -> MintedBarcode:
        alias = format_alias(await self.allocator.next_value(), self.alias_width)
        cost_token = encode_cost_for_vendor(cost, vendor_name, self.cipher_markers)
        structured = compose_structured(
            sku.group_code,
            sku.design_no,
            sku.color_code,
            vendor_code,
            cost_token,
            alias,
            placeholder_group=self.placeholder_group,
            placeholder_vendor=self.placeholder_vendor,
        )
        return MintedBarcode(alias=alias, structured=structured)
