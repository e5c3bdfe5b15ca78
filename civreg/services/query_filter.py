"""
Translate list-endpoint query parameters into a filter, sort and page descriptor.

ListQuery is an immutable value: every combinator returns a new instance, and
a parameter that is absent or empty adds no constraint at all. Resources map
the logical field names used here (e.g. "firstName", "identifications.cardType")
to columns via a FieldMap, and apply_list_query turns the descriptor into a
SQLAlchemy statement.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, time
from typing import Any, Literal

from sqlalchemy import Select, and_, or_
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.sql.elements import ColumnElement

from civreg.core.errors import ValidationError

Operator = Literal["eq", "gte", "lte", "icontains"]

DEFAULT_SORT_FIELD = "createdAt"
TRUE_VALUES = frozenset({"true", "1", "yes"})
FALSE_VALUES = frozenset({"false", "0", "no"})


@dataclass(frozen=True)
class Condition:
    field: str
    op: Operator
    value: Any


@dataclass(frozen=True)
class AnyOf:
    """OR group of conditions (used by free-text search)."""

    conditions: tuple[Condition, ...]


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool


Filter = Condition | AnyOf


def _absent(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _positive_int(raw: Any, default: int) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def split_csv(raw: str | None) -> tuple[str, ...]:
    """'a, b,,c' -> ('a', 'b', 'c')."""
    if _absent(raw):
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def parse_sort(raw: str | None) -> tuple[SortKey, ...]:
    """
    Parse 'field:direction,...'. Only 'asc' sorts ascending; any other or
    missing direction sorts descending. Absent input sorts newest first.
    """
    keys: list[SortKey] = []
    for rule in split_csv(raw):
        name, _, direction = rule.partition(":")
        name = name.strip()
        if not name:
            continue
        keys.append(SortKey(name, direction.strip() != "asc"))
    if not keys:
        return (SortKey(DEFAULT_SORT_FIELD, True),)
    return tuple(keys)


def parse_bool(raw: str, name: str) -> bool:
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ValidationError(f"{name} must be true or false", error={name: raw})


def parse_datetime(raw: str, name: str, end_of_day: bool = False) -> datetime:
    """
    Parse an ISO date or datetime. A bare date used as an upper bound covers
    the whole day. Naive values are taken as UTC.
    """
    value = raw.strip()
    try:
        if len(value) == 10:
            day = date.fromisoformat(value)
            moment = datetime.combine(day, time.max if end_of_day else time.min)
        else:
            moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"{name} must be an ISO 8601 date", error={name: raw}) from e
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment


@dataclass(frozen=True)
class ListQuery:
    filters: tuple[Filter, ...] = ()
    sort: tuple[SortKey, ...] = (SortKey(DEFAULT_SORT_FIELD, True),)
    page: int = 1
    limit: int = 10
    select: tuple[str, ...] | None = None
    populate: tuple[str, ...] | None = None
    params: Mapping[str, str] = field(default_factory=dict, compare=False, repr=False)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, str],
        default_limit: int = 10,
        max_limit: int = 100,
    ) -> ListQuery:
        """Parse the shared parameters: page, limit, sort, select, populate."""
        limit = min(_positive_int(params.get("limit"), default_limit), max_limit)
        select = split_csv(params.get("select"))
        populate_raw = params.get("populate")
        return cls(
            sort=parse_sort(params.get("sort")),
            page=_positive_int(params.get("page"), 1),
            limit=limit,
            select=select or None,
            populate=None if populate_raw is None else split_csv(populate_raw),
            params=dict(params),
        )

    def param(self, name: str) -> str | None:
        value = self.params.get(name)
        return None if _absent(value) else value.strip()

    def with_condition(self, condition: Filter) -> ListQuery:
        return replace(self, filters=self.filters + (condition,))

    def with_equals(self, field_name: str, value: Any) -> ListQuery:
        if _absent(value):
            return self
        return self.with_condition(Condition(field_name, "eq", value))

    def with_int(self, field_name: str, raw: str | None, name: str | None = None) -> ListQuery:
        if _absent(raw):
            return self
        try:
            value = int(raw.strip())
        except ValueError as e:
            label = name or field_name
            raise ValidationError(f"{label} must be an integer", error={label: raw}) from e
        return self.with_condition(Condition(field_name, "eq", value))

    def with_flag(self, field_name: str, raw: str | None, name: str | None = None) -> ListQuery:
        if _absent(raw):
            return self
        return self.with_condition(Condition(field_name, "eq", parse_bool(raw, name or field_name)))

    def with_date_range(
        self,
        field_name: str,
        start: str | None,
        end: str | None,
        upper_field: str | None = None,
    ) -> ListQuery:
        """
        `field >= start` and `upper_field <= end` (upper_field defaults to field);
        each bound applies on its own.
        """
        query = self
        if not _absent(start):
            query = query.with_condition(
                Condition(field_name, "gte", parse_datetime(start, "startDate"))
            )
        if not _absent(end):
            query = query.with_condition(
                Condition(upper_field or field_name, "lte", parse_datetime(end, "endDate", end_of_day=True))
            )
        return query

    def with_text_search(self, fields: Iterable[str], term: str | None) -> ListQuery:
        if _absent(term):
            return self
        needle = term.strip()
        return self.with_condition(
            AnyOf(tuple(Condition(name, "icontains", needle) for name in fields))
        )


# --- SQLAlchemy translation ---------------------------------------------------


@dataclass(frozen=True)
class Related:
    """
    A field reached through a relationship: `via.has(...)` for a scalar
    relationship, `via.any(...)` for a collection. `target` may itself be Related.
    """

    via: InstrumentedAttribute
    target: Any
    many: bool = False


FieldMap = Mapping[str, Any]


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _compare(column: Any, op: Operator, value: Any) -> ColumnElement[bool]:
    if isinstance(column, Related):
        inner = _compare(column.target, op, value)
        return column.via.any(inner) if column.many else column.via.has(inner)
    if op == "eq":
        return column == value
    if op == "gte":
        return column >= _coerce_bound(column, value)
    if op == "lte":
        return column <= _coerce_bound(column, value)
    return column.ilike(f"%{_escape_like(str(value))}%", escape="\\")


def _coerce_bound(column: Any, value: Any) -> Any:
    # Date columns compare against the calendar day of a datetime bound.
    python_type = getattr(getattr(column, "type", None), "python_type", None)
    if python_type is date and isinstance(value, datetime):
        return value.date()
    return value


def _resolve(fields: FieldMap, name: str) -> Any:
    try:
        return fields[name]
    except KeyError:
        raise ValidationError(f"Unknown filter field: {name}") from None


def to_clause(item: Filter, fields: FieldMap) -> ColumnElement[bool]:
    if isinstance(item, AnyOf):
        return or_(*(to_clause(c, fields) for c in item.conditions))
    return _compare(_resolve(fields, item.field), item.op, item.value)


def where_clause(query: ListQuery, fields: FieldMap) -> ColumnElement[bool] | None:
    clauses = [to_clause(item, fields) for item in query.filters]
    if not clauses:
        return None
    return and_(*clauses)


def order_by_clauses(query: ListQuery, fields: FieldMap, tiebreaker: Any) -> list[Any]:
    """ORDER BY for the sort keys, plus the primary key in the first key's direction."""
    clauses = []
    for key in query.sort:
        column = fields.get(key.field)
        if column is None or isinstance(column, Related):
            raise ValidationError(f"Cannot sort by field: {key.field}", error={"sort": key.field})
        clauses.append(column.desc() if key.descending else column.asc())
    first_descending = query.sort[0].descending if query.sort else True
    clauses.append(tiebreaker.desc() if first_descending else tiebreaker.asc())
    return clauses


def apply_list_query(stmt: Select, query: ListQuery, fields: FieldMap, tiebreaker: Any) -> Select:
    """Apply filters, ordering and the page window to a select() statement."""
    clause = where_clause(query, fields)
    if clause is not None:
        stmt = stmt.where(clause)
    return (
        stmt.order_by(*order_by_clauses(query, fields, tiebreaker))
        .offset(query.skip)
        .limit(query.limit)
    )


def project(item: dict[str, Any], select: tuple[str, ...] | None) -> dict[str, Any]:
    """Keep only selected keys (always keeping `id`); unknown names are ignored."""
    if not select:
        return item
    keep = set(select) | {"id"}
    return {key: value for key, value in item.items() if key in keep}
