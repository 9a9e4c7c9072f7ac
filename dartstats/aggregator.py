"""Pure aggregation helpers over performance records.

Every function here is total: empty or incomplete input yields a
documented default (``0``, ``{}`` or ``[]``) instead of an exception.
Records may be dataclass instances or plain mappings. A field value counts
only if it is an ``int`` or ``float`` (not ``bool``) and not NaN; anything
else, including a missing attribute, is treated as missing.
"""

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Optional

Number = int | float


@dataclass
class Bucket:
    """Inclusive value range of a distribution."""

    label: str
    min: float
    max: float


@dataclass
class BucketCount:
    """Number of values that fell into a bucket."""

    label: str
    count: int


def value_of(record: Any, field: str) -> Optional[Number]:
    """Return the numeric value of ``field`` or None if it is missing.

    Args:
        record: Dataclass instance, object or mapping.
        field: Attribute or key name.

    Returns:
        The value, or None for missing, non-numeric and NaN values.
    """
    if isinstance(record, Mapping):
        value = record.get(field)
    else:
        value = getattr(record, field, None)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def _valid_values(records: Iterable[Any], field: str) -> list[Number]:
    values = (value_of(r, field) for r in records)
    return [v for v in values if v is not None]


def round_half_away(value: Optional[Number], places: int = 2) -> Number:
    """Round to ``places`` decimals, halves away from zero.

    The decimal representation of the value is rounded, so ``1.005`` gives
    ``1.01`` and repeated rounding is idempotent. Missing and non-finite
    values round to 0.

    Args:
        value: Number to round.
        places: Number of decimal places (0 or more).

    Returns:
        Rounded float, or an int when ``places`` is 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if not math.isfinite(value):
        return 0
    number = Decimal(repr(value))
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # quantize fails once the result has more digits than the context
        ctx.prec = max(ctx.prec, number.adjusted() + places + 2)
        rounded = number.quantize(quantum, rounding=ROUND_HALF_UP)
    if places == 0:
        return int(rounded)
    return float(rounded)


def percentage(fraction: Optional[Number]) -> float:
    """Convert a fraction to a percentage with one decimal.

    Values outside [0, 1] are passed through unclamped.
    """
    if fraction is None:
        return 0.0
    return round_half_away(fraction * 100, 1)


class GroupSummary:
    """Records sharing a group key, with aggregate accessors."""

    def __init__(self, key: Any, records: Iterable[Any]):
        self.key = key
        self.records = tuple(records)

    def __repr__(self) -> str:
        return f'GroupSummary(key={self.key!r}, count={self.count})'

    @property
    def count(self) -> int:
        return len(self.records)

    def values(self, field: str) -> list[Number]:
        """Valid values of ``field`` in record order."""
        return _valid_values(self.records, field)

    def sum(self, field: str) -> Number:
        return sum(self.values(field))

    def mean(self, field: str, places: Optional[int] = 2) -> Number:
        """Mean over valid values, 0 when there are none.

        Args:
            field: Field to average.
            places: Decimal places to round to; None keeps full precision.
        """
        values = self.values(field)
        if not values:
            return 0
        mean = sum(values) / len(values)
        return mean if places is None else round_half_away(mean, places)

    def max(self, field: str) -> Number:
        values = self.values(field)
        return max(values) if values else 0

    def min(self, field: str) -> Number:
        values = self.values(field)
        return min(values) if values else 0

    def ratio(
        self,
        numerator: str,
        denominator: str,
        places: Optional[int] = None,
    ) -> Number:
        """Return ``sum(numerator) / sum(denominator)`` as a fraction.

        The zero guard applies to the summed denominator, so a single
        record with a zero denominator does not matter as long as the group
        total is non-zero.
        """
        total = self.sum(denominator)
        if total == 0:
            return 0
        result = self.sum(numerator) / total
        return result if places is None else round_half_away(result, places)

    def distinct(self, field: str) -> int:
        """Number of distinct non-None values of ``field``."""
        extract = _key_function(field)
        return len({v for v in map(extract, self.records) if v is not None})

    def where(self, field: str, predicate: Callable[[Number], bool]) -> 'GroupSummary':
        """Sub-group of records whose valid ``field`` value satisfies ``predicate``."""
        selected = []
        for record in self.records:
            value = value_of(record, field)
            if value is not None and predicate(value):
                selected.append(record)
        return GroupSummary(self.key, selected)


def _key_function(key: Callable[[Any], Any] | str) -> Callable[[Any], Any]:
    if callable(key):
        return key

    def extract(record):
        if isinstance(record, Mapping):
            return record.get(key)
        return getattr(record, key, None)

    return extract


def aggregate_by_group(
    records: Iterable[Any],
    key: Callable[[Any], Any] | str,
) -> dict[Any, GroupSummary]:
    """Group records by a key.

    Args:
        records: Records to group.
        key: Callable returning the group key, or a field name.

    Returns:
        Mapping of group key to GroupSummary, ordered by first appearance.
        Empty input gives an empty mapping.
    """
    extract = _key_function(key)
    grouped: dict[Any, list] = {}
    for record in records:
        grouped.setdefault(extract(record), []).append(record)
    return {k: GroupSummary(k, v) for k, v in grouped.items()}


def distribution_buckets(
    records: Iterable[Any],
    field: str,
    buckets: Iterable[Bucket],
) -> list[BucketCount]:
    """Count valid field values per inclusive bucket range.

    A value is counted in the first bucket containing it. Values matching
    no bucket, and missing values, are dropped.

    Args:
        records: Records to inspect.
        field: Numeric field to bucket.
        buckets: Ordered bucket definitions.

    Returns:
        One BucketCount per bucket, in bucket order.
    """
    buckets = list(buckets)
    counts = [0] * len(buckets)
    for value in _valid_values(records, field):
        for index, bucket in enumerate(buckets):
            if bucket.min <= value <= bucket.max:
                counts[index] += 1
                break
    return [BucketCount(b.label, c) for b, c in zip(buckets, counts)]


def _descending_key(value: Optional[Number]) -> tuple[bool, Number]:
    # Missing values sort after every present value.
    if value is None:
        return (True, 0)
    return (False, -value)


def _present(value: Any) -> bool:
    return value is not None and not (isinstance(value, float) and math.isnan(value))


def top_n(
    records: Iterable[Any],
    field: str,
    n: int,
    tiebreak: Optional[Callable[[Any], Any] | str] = None,
) -> list[Any]:
    """Return the ``n`` records with the highest ``field`` value.

    The sort is stable: without a tiebreak, equal values keep their input
    order. A tiebreak field or callable orders ties descending as well; it
    may return any mutually comparable values (numbers, strings). Records
    with a missing primary or tiebreak value come last within their rank.

    Args:
        records: Records to rank.
        field: Primary numeric field.
        n: Maximum number of records; 0 or less gives an empty list.
        tiebreak: Secondary field name or callable.

    Returns:
        Ranked list of at most ``n`` records.
    """
    if n <= 0:
        return []

    records = list(records)
    if tiebreak is not None:
        extract = tiebreak if callable(tiebreak) else _key_function(tiebreak)
        present = [r for r in records if _present(extract(r))]
        missing = [r for r in records if not _present(extract(r))]
        records = sorted(present, key=extract, reverse=True) + missing

    return sorted(records, key=lambda r: _descending_key(value_of(r, field)))[:n]

