"""
Shared create/list/get/update/delete behaviour for one ORM entity.

Each resource service declares its model, the fields its list endpoint may
filter and sort on, the relations `populate` can expand, and its delete
policy. Subclasses add entity-specific validation and write logic.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql.elements import ColumnElement

from civreg.core.config import Settings, get_settings
from civreg.core.errors import AppError, DuplicateError, NotFoundError, ServerError
from civreg.services.query_filter import FieldMap, ListQuery, apply_list_query, project, where_clause

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


@dataclass(frozen=True)
class HardDelete:
    """Remove the row."""


@dataclass(frozen=True)
class SoftDelete:
    """Set `flag` to `value` (e.g. deleted=True, is_active=False) and keep the row."""

    flag: str
    value: bool


DeletePolicy = HardDelete | SoftDelete


@dataclass(frozen=True)
class Relation:
    """
    A relation the list/get output can expand.

    Unexpanded, the output carries the related id (or list of ids); expanded via
    `populate`, it carries `dump(related)` for each related object.
    """

    attr: str
    dump: Callable[[Any], Any]
    id_attr: str | None = None
    many: bool = False


@dataclass
class Page:
    items: list[dict[str, Any]]
    total: int
    page: int
    limit: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "items": self.items,
            "total": self.total,
            "page": self.page,
            "pageSize": len(self.items),
            "limit": self.limit,
            "totalPages": math.ceil(self.total / self.limit) if self.limit else 0,
        }


class ResourceService(Generic[ModelT]):
    model: ClassVar[type]
    label: ClassVar[str]
    read_schema: ClassVar[type[BaseModel]]
    delete_policy: ClassVar[DeletePolicy] = HardDelete()
    relations: ClassVar[Mapping[str, Relation]] = {}
    default_populate: ClassVar[tuple[str, ...]] = ()
    search_fields: ClassVar[tuple[str, ...]] = ()
    # Allow updates to reach soft-deleted rows (e.g. reactivating a branch).
    update_hidden: ClassVar[bool] = False

    def __init__(self, session: Session, settings: Settings | None = None) -> None:
        self.session = session
        self.settings = settings or get_settings()

    # --- field and visibility configuration ---

    def fields(self) -> FieldMap:
        """Logical field name -> column (or Related) for filtering and sorting."""
        return {
            "id": self.model.id,
            "createdAt": self.model.created_at,
            "updatedAt": self.model.updated_at,
        }

    def visible(self) -> ColumnElement[bool] | None:
        """Criterion for rows list endpoints show; soft-deleted rows are excluded."""
        policy = self.delete_policy
        if isinstance(policy, SoftDelete):
            return getattr(self.model, policy.flag) != policy.value
        return None

    def build_query(self, params: Mapping[str, str]) -> ListQuery:
        query = ListQuery.from_params(
            params,
            default_limit=self.settings.DEFAULT_PAGE_SIZE,
            max_limit=self.settings.MAX_PAGE_SIZE,
        )
        return query.with_text_search(self.search_fields, query.param("search"))

    # --- backing-store boundary ---

    @contextmanager
    def store_errors(self, action: str) -> Iterator[None]:
        """Roll back and translate database failures into typed errors."""
        try:
            yield
        except AppError:
            self.session.rollback()
            raise
        except IntegrityError as e:
            self.session.rollback()
            logger.warning("%s %s violated a constraint: %s", action, self.label, e.orig)
            raise DuplicateError(f"{self.label} conflicts with an existing record", error=str(e.orig)) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to %s %s", action, self.label)
            raise ServerError(f"Failed to {action} {self.label.lower()}", error=str(e)) from e

    # --- reads ---

    def _load_options(self, populate: tuple[str, ...]) -> list[Any]:
        options = []
        for name in populate:
            relation = self.relations.get(name)
            if relation is not None:
                options.append(selectinload(getattr(self.model, relation.attr)))
        return options

    def list(self, query: ListQuery) -> Page:
        fields = self.fields()
        populate = self.resolve_populate(query.populate)
        stmt = select(self.model).options(*self._load_options(populate))
        count_stmt = select(func.count()).select_from(self.model)
        base = self.visible()
        if base is not None:
            stmt = stmt.where(base)
            count_stmt = count_stmt.where(base)
        clause = where_clause(query, fields)
        if clause is not None:
            count_stmt = count_stmt.where(clause)
        stmt = apply_list_query(stmt, query, fields, tiebreaker=self.model.id)
        with self.store_errors("list"):
            rows = self.session.scalars(stmt).all()
            total = self.session.scalar(count_stmt) or 0
            items = [project(self.serialize(row, populate), query.select) for row in rows]
        return Page(items=items, total=total, page=query.page, limit=query.limit)

    def get(self, entity_id: int, include_hidden: bool = False) -> ModelT:
        with self.store_errors("load"):
            obj = self.session.get(self.model, entity_id)
        if obj is None or (not include_hidden and self.is_hidden(obj)):
            raise NotFoundError(f"{self.label} not found")
        return obj

    def is_hidden(self, obj: ModelT) -> bool:
        policy = self.delete_policy
        if isinstance(policy, SoftDelete):
            return getattr(obj, policy.flag) == policy.value
        return False

    # --- writes ---

    def create(self, payload: BaseModel, actor_id: int | None = None) -> ModelT:
        self.check_unique(payload)
        obj = self.model(**self.values_for_create(payload, actor_id))
        with self.store_errors("create"):
            self.session.add(obj)
            self.session.commit()
            self.session.refresh(obj)
        logger.info("%s created", self.label, extra={"entity_id": obj.id, "actor_id": actor_id})
        return obj

    def update(self, entity_id: int, patch: BaseModel, actor_id: int | None = None) -> ModelT:
        obj = self.get(entity_id, include_hidden=self.update_hidden)
        self.check_unique(patch, exclude_id=entity_id)
        with self.store_errors("update"):
            self.apply_patch(obj, patch, actor_id)
            self.session.commit()
            self.session.refresh(obj)
        logger.info("%s updated", self.label, extra={"entity_id": entity_id, "actor_id": actor_id})
        return obj

    def delete(self, entity_id: int, actor_id: int | None = None) -> None:
        obj = self.get(entity_id)
        self.before_delete(obj)
        policy = self.delete_policy
        with self.store_errors("delete"):
            if isinstance(policy, SoftDelete):
                setattr(obj, policy.flag, policy.value)
                if actor_id is not None and hasattr(obj, "updated_by_id"):
                    obj.updated_by_id = actor_id
            else:
                self.session.delete(obj)
            self.session.commit()
        logger.info(
            "%s deleted",
            self.label,
            extra={"entity_id": entity_id, "actor_id": actor_id, "soft": isinstance(policy, SoftDelete)},
        )

    # --- hooks for subclasses ---

    def check_unique(self, payload: BaseModel, exclude_id: int | None = None) -> None:
        """Query-then-check for unique fields; raise DuplicateError."""

    def values_for_create(self, payload: BaseModel, actor_id: int | None) -> dict[str, Any]:
        values = payload.model_dump()
        if actor_id is not None and hasattr(self.model, "created_by_id"):
            values["created_by_id"] = actor_id
        return values

    def assign(self, obj: ModelT, values: Mapping[str, Any]) -> None:
        """Set attributes from a patch; null is ignored for NOT NULL columns."""
        columns = self.model.__table__.columns
        for key, value in values.items():
            column = columns.get(key)
            if value is None and column is not None and not column.nullable:
                continue
            setattr(obj, key, value)

    def apply_patch(self, obj: ModelT, patch: BaseModel, actor_id: int | None) -> None:
        self.assign(obj, patch.model_dump(exclude_unset=True))
        if actor_id is not None and hasattr(obj, "updated_by_id"):
            obj.updated_by_id = actor_id

    def before_delete(self, obj: ModelT) -> None:
        """Runs before the row is removed or flagged (e.g. attachment cleanup)."""

    def exists_where(self, *criteria: Any, exclude_id: int | None = None) -> bool:
        stmt = select(self.model.id).where(*criteria)
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        with self.store_errors("check"):
            return self.session.scalar(stmt.limit(1)) is not None

    # --- output ---

    def resolve_populate(self, requested: tuple[str, ...] | None) -> tuple[str, ...]:
        if requested is None:
            return self.default_populate
        return tuple(name for name in requested if name in self.relations)

    def serialize(self, obj: ModelT, populate: tuple[str, ...] | None = None) -> dict[str, Any]:
        populate = self.resolve_populate(populate)
        data = self.read_schema.model_validate(obj).model_dump(by_alias=True, mode="json")
        for name, relation in self.relations.items():
            if name in populate:
                related = getattr(obj, relation.attr)
                if relation.many:
                    data[name] = [relation.dump(item) for item in related]
                else:
                    data[name] = relation.dump(related) if related is not None else None
            elif relation.many:
                data[name] = [item.id for item in getattr(obj, relation.attr)]
            elif relation.id_attr:
                data[name] = getattr(obj, relation.id_attr)
            else:
                related = getattr(obj, relation.attr)
                data[name] = related.id if related is not None else None
        return data
