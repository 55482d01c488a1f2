"""
Query engine for list views.

``run_query`` turns a snapshot of records into the page a client asked
for: optionally sorted by one declared field, then offset, then
truncated to ``count`` items.  It is a pure function: no I/O, no
state, and the input list is never modified.

Ordering rules
--------------
* Numeric fields compare as numbers, every other declared field as
  text.
* Records that lack the sort field (or hold ``null`` in it) come after
  all records that have it.
* The sort is stable, so records with equal values keep the order in
  which the store listed them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Union

from student_registry.app.core.db import Record
from student_registry.app.core.errors import ValidationError
from student_registry.app.schemas.student import FIELD_KINDS, NUMERIC


@dataclass(frozen=True)
class QueryConfig:
    """Recognised list options; ``None`` means "not given"."""

    sort_by: Optional[str] = None
    count: Optional[int] = None
    offset: Optional[int] = None


@dataclass
class QueryResult:
    items: List[Record] = field(default_factory=list)
    total: int = 0


def _numeric_key(field_name: str) -> Callable[[Record], Tuple[int, float]]:
    def key(record: Record) -> Tuple[int, float]:
        value = record.get(field_name)
        if value is None:
            return (1, 0.0)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(
                f"sortBy: field {field_name!r} holds non-numeric value {value!r}"
            )
        if isinstance(value, float) and not math.isfinite(value):
            raise ValidationError(
                f"sortBy: field {field_name!r} holds non-finite value {value!r}"
            )
        return (0, float(value))
    return key


def _text_key(field_name: str) -> Callable[[Record], Tuple[int, str]]:
    def key(record: Record) -> Tuple[int, str]:
        value = record.get(field_name)
        if value is None:
            return (1, "")
        return (0, str(value))
    return key


def _check_bound(name: str, value: Optional[int]) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name}: must be an integer, got {value!r}")
    if value < 0:
        raise ValidationError(f"{name}: must not be negative, got {value}")


def run_query(
    records: Sequence[Record],
    config: QueryConfig,
    schema: Mapping[str, str] = FIELD_KINDS,
) -> QueryResult:
    """Sort, offset and truncate ``records`` according to ``config``.

    Parameters
    ----------
    records : Sequence[Record]
        Snapshot returned by the repository's ``all()``.
    config : QueryConfig
        Requested ``sort_by``, ``count`` and ``offset``.
    schema : Mapping[str, str]
        Declared fields and their kind (``"numeric"`` or ``"text"``).

    Returns
    -------
    QueryResult
        The selected records and the size of the unfiltered collection.

    Raises
    ------
    ValidationError
        If ``sort_by`` names an undeclared field or meets a non-numeric
        value in a numeric field, or if ``count``/``offset`` is
        negative.
    """
    _check_bound("offset", config.offset)
    _check_bound("count", config.count)

    items: List[Record] = list(records)
    if config.sort_by is not None:
        kind = schema.get(config.sort_by)
        if kind is None:
            raise ValidationError(f"sortBy: unknown field {config.sort_by!r}")
        key: Callable[[Record], Any] = (
            _numeric_key(config.sort_by) if kind == NUMERIC else _text_key(config.sort_by)
        )
        items.sort(key=key)

    if config.offset:
        items = items[config.offset:]
    if config.count is not None:
        items = items[: config.count]
    return QueryResult(items=items, total=len(records))


def _parse_bound(name: str, raw: Union[int, str, None]) -> Any:
    if not isinstance(raw, str):
        return raw
    text = raw.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        raise ValidationError(f"{name}: must be an integer, got {raw!r}") from None


def query_from_params(
    sort_by: Optional[str] = None,
    count: Union[int, str, None] = None,
    offset: Union[int, str, None] = None,
) -> QueryConfig:
    """Build a ``QueryConfig`` from request parameters.

    ``count`` and ``offset`` may arrive as the raw query strings; they
    are parsed here so a value like ``"abc"`` fails with the same
    ``ValidationError`` as a negative one.  Empty strings mean absent,
    which is what ``?sortBy=`` or ``?count=`` means on the wire.
    """
    return QueryConfig(
        sort_by=sort_by or None,
        count=_parse_bound("count", count),
        offset=_parse_bound("offset", offset),
    )
