from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, fields
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Dict, Iterable, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)

NATIONAL_ABBREVIATION = "US"
VALUE_DECIMALS = 1
FLOAT_MAX_EXPONENT = 308

# Source column -> field name. Snake-case field names come first so they win
# over SODA / camelCase spellings of the same field.
FIELD_ALIASES: Dict[str, str] = {
    "location": "location",
    "location_abbreviation": "location_abbreviation",
    "breakout": "breakout",
    "breakout_id": "breakout_id",
    "breakout_category_id": "breakout_category_id",
    "year": "year",
    "value": "value",
    "low_confidence_limit": "low_confidence_limit",
    "high_confidence_limit": "high_confidence_limit",
    "value_type": "value_type",
    "value_unit": "value_unit",
    "topic": "topic",
    "question": "question",
    # SODA dataset columns
    "locationdesc": "location",
    "locationabbr": "location_abbreviation",
    "break_out": "breakout",
    "breakoutid": "breakout_id",
    "breakoutcategoryid": "breakout_category_id",
    "data_value": "value",
    "data_value_type": "value_type",
    "data_value_unit": "value_unit",
    # camelCase
    "locationAbbreviation": "location_abbreviation",
    "breakoutId": "breakout_id",
    "breakoutCategoryId": "breakout_category_id",
    "lowConfidenceLimit": "low_confidence_limit",
    "highConfidenceLimit": "high_confidence_limit",
    "valueType": "value_type",
    "valueUnit": "value_unit",
}

NUMERIC_FIELDS = ("value", "low_confidence_limit", "high_confidence_limit")


@dataclass(frozen=True)
class RawRow:
    """One observation as received from the data API (every field loosely typed)."""

    location: Optional[str] = None
    location_abbreviation: Optional[str] = None
    breakout: Optional[str] = None
    breakout_id: Optional[str] = None
    breakout_category_id: Optional[str] = None
    year: Optional[str] = None
    value: Optional[str] = None
    low_confidence_limit: Optional[str] = None
    high_confidence_limit: Optional[str] = None
    value_type: Optional[str] = None
    value_unit: Optional[str] = None
    topic: Optional[str] = None
    question: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, object]) -> "RawRow":
        values: Dict[str, object] = {}
        for key, name in FIELD_ALIASES.items():
            if key in record and name not in values:
                values[name] = record[key]
        return cls(**values)  # type: ignore[arg-type]


@dataclass(frozen=True)
class NormalizedRow:
    location: str
    location_abbreviation: str
    breakout: str
    breakout_id: str
    year: int
    value: Optional[float] = None
    low_confidence_limit: Optional[float] = None
    high_confidence_limit: Optional[float] = None
    value_type: str = ""
    value_unit: str = ""
    breakout_category_id: str = ""
    topic: str = ""
    question: str = ""

    @property
    def is_national(self) -> bool:
        return self.location_abbreviation == NATIONAL_ABBREVIATION


RowLike = Union[Mapping[str, object], RawRow, NormalizedRow]


def _as_decimal(value: object) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        dec = value
    elif isinstance(value, (int, float)):
        dec = Decimal(str(value))
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            dec = Decimal(s)
        except InvalidOperation:
            return None
    else:
        return None
    if not dec.is_finite():
        return None
    return dec


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    """Round half away from zero on the decimal text of ``value`` (12.35 -> 12.4, not 12.3)."""
    dec = _as_decimal(value)
    # beyond float range; also keeps the context precision bounded
    if dec is None or dec.adjusted() > FLOAT_MAX_EXPONENT:
        return None
    q = Decimal(10) ** -ndigits
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, dec.adjusted() + ndigits + 2)
        out = float(dec.quantize(q, rounding=ROUND_HALF_UP))
    return out if math.isfinite(out) else None


def parse_year(value: object) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def _as_raw(row: RowLike) -> RawRow:
    if isinstance(row, RawRow):
        return row
    if isinstance(row, NormalizedRow):
        return RawRow.from_record(asdict(row))
    if isinstance(row, Mapping):
        return RawRow.from_record(row)
    raise TypeError(f"Expected a mapping or row record, got {type(row).__name__}")


def normalize_row(row: RowLike) -> Optional[NormalizedRow]:
    raw = _as_raw(row)
    year = parse_year(raw.year)
    if year is None:
        return None
    numeric = {name: round_half_up(getattr(raw, name), VALUE_DECIMALS) for name in NUMERIC_FIELDS}
    text = {
        f.name: _as_text(getattr(raw, f.name))
        for f in fields(RawRow)
        if f.name != "year" and f.name not in NUMERIC_FIELDS
    }
    return NormalizedRow(year=year, **numeric, **text)


def normalize(raw_rows: Iterable[RowLike]) -> List[NormalizedRow]:
    out: List[NormalizedRow] = []
    dropped = 0
    for raw in raw_rows:
        row = normalize_row(raw)
        if row is None:
            dropped += 1
            continue
        out.append(row)
    if dropped:
        logger.debug("normalize dropped %d row(s) with an unparseable year", dropped)
    return out


def latest_year(rows: Iterable[NormalizedRow]) -> Optional[int]:
    years = [row.year for row in rows]
    return max(years) if years else None
