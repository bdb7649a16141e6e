"""Garment IMS — Cost cipher: reversible digit substitution hiding unit cost inside a barcode."""
from decimal import Decimal, InvalidOperation
from typing import Iterable

from garment_ims.config import get_settings
from garment_ims.core.errors import ValidationError

ENCODING_MAP: dict[str, str] = {
    "0": "C",
    "1": "R",
    "2": "A",
    "3": "Z",
    "4": "Y",
    "5": "W",
    "6": "O",
    "7": "M",
    "8": "E",
    "9": "N",
    ".": "X",
}

DECODING_MAP: dict[str, str] = {v: k for k, v in ENCODING_MAP.items()}


def format_cost(cost: Decimal | int | float | str) -> str:
    """Plain-notation cost string without trailing zeros: 450, 450.5, 0.75."""
    try:
        value = Decimal(str(cost))
    except InvalidOperation:
        raise ValidationError(f"Invalid cost: {cost!r}", field="cost")
    if not value.is_finite() or value < 0:
        raise ValidationError(f"Invalid cost: {cost!r}", field="cost")
    return format(value.normalize(), "f")


def _translate(text: str, table: dict[str, str]) -> str:
    out = []
    for char in text:
        if char not in table:
            raise ValidationError(f"Character {char!r} cannot be ciphered", field="cost")
        out.append(table[char])
    return "".join(out)


def encode_cost(cost_str: str) -> str:
    return _translate(cost_str, ENCODING_MAP)


def decode_cost(encoded: str) -> str:
    return _translate(encoded, DECODING_MAP)


def vendor_uses_cipher(vendor_name: str | None, markers: Iterable[str] | None = None) -> bool:
    """True when the vendor's display name contains a cipher marker (case-insensitive)."""
    if not vendor_name:
        return False
    if markers is None:
        markers = get_settings().COST_CIPHER_MARKERS
    name = vendor_name.upper()
    return any(marker.upper() in name for marker in markers if marker)


def encode_cost_for_vendor(
    cost: Decimal | int | float | str,
    vendor_name: str | None,
    markers: Iterable[str] | None = None,
) -> str:
    """Cipher the cost for marked vendors; everyone else gets the plain numeric string."""
    cost_str = format_cost(cost)
    if vendor_uses_cipher(vendor_name, markers):
        return encode_cost(cost_str)
    return cost_str
