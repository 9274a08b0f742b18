"""
Fixed-precision codec for coordinate columns.

Clients send coordinates as JSON numbers; the database keeps them as
NUMERIC(p, s). Converting to the column scale is an explicit step here,
so any precision beyond the scale is dropped on write and nowhere else.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Union

Number = Union[int, float, Decimal]


@dataclass(frozen=True)
class ColumnScale:
    """Declared precision (significant digits) and scale (fractional digits) of a NUMERIC column."""
    name: str
    precision: int
    scale: int

    @property
    def quantum(self) -> Decimal:
        return Decimal(1).scaleb(-self.scale)

    def quantize(self, value: Union[Number, str]) -> Decimal:
        """Round ``value`` half away from zero to the column scale."""
        if isinstance(value, Decimal):
            exact = value
        else:
            # str() gives the shortest repr of a float, not its binary expansion
            exact = Decimal(str(value))
        quantized = exact.quantize(self.quantum, rounding=ROUND_HALF_UP)
        if quantized.is_zero():
            quantized = quantized.copy_abs()
        return quantized


LATITUDE = ColumnScale("latitude", precision=10, scale=8)
LONGITUDE = ColumnScale("longitude", precision=11, scale=8)

COORDINATE_COLUMNS: Dict[str, ColumnScale] = {
    LATITUDE.name: LATITUDE,
    LONGITUDE.name: LONGITUDE,
}


def _column(field: Union[str, ColumnScale]) -> ColumnScale:
    if isinstance(field, ColumnScale):
        return field
    try:
        return COORDINATE_COLUMNS[field]
    except KeyError:
        raise ValueError(f"{field!r} is not a fixed-precision column") from None


def to_decimal(value: Number, field: Union[str, ColumnScale]) -> Decimal:
    """Convert a client number to the Decimal bound to the column."""
    return _column(field).quantize(value)


def to_storage(value: Number, field: Union[str, ColumnScale]) -> str:
    """
    Render ``value`` as a decimal string at the column's scale.

    Range is not checked here; that belongs to validation.

    >>> to_storage(12.345678912, "latitude")
    '12.34567891'
    """
    return format(to_decimal(value, field), "f")


def from_storage(value: Union[str, Decimal]) -> float:
    """Inverse of :func:`to_storage` for read paths."""
    return float(Decimal(value))


def render(value: Union[Number, str], field: Union[str, ColumnScale]) -> str:
    """Canonical string form of a value read back from a coordinate column."""
    return format(_column(field).quantize(value), "f")
