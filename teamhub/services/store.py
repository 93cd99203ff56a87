"""Document-style storage over the relational schema.

Collections are addressed by name and records by camelCase field names, the
same shape the entities serialize to. Every record read or written passes
through its pydantic entity, so callers only ever see validated data.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Callable, Dict, List, Mapping, Type
from uuid import uuid4

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.core.errors import CollaboratorError, NotFoundError, ValidationError
from teamhub.core.logging import logger
from teamhub.models import Base, Milestone, Task, TaskComment, Team, User
from teamhub.schemas.milestones import MilestoneRead
from teamhub.schemas.tasks import CommentRead, TaskRead
from teamhub.schemas.teams import TeamRead
from teamhub.schemas.users import UserRead

from .events import EventHub


@dataclass(frozen=True)
class Collection:
    name: str
    model: Type[Base]
    schema: Type[BaseModel]
    key: str
    order_by: str = "created_at"

    def field_name(self, field: str) -> str:
        """Map a document or attribute field name to the model attribute."""

        for name, info in self.schema.model_fields.items():
            if field in (name, info.alias):
                return name
        raise ValidationError("error_unknown_field", f"Unknown field {field!r} on {self.name}", field=field)


COLLECTIONS: Dict[str, Collection] = {
    "users": Collection("users", User, UserRead, key="uid"),
    "tasks": Collection("tasks", Task, TaskRead, key="id"),
    "milestones": Collection("milestones", Milestone, MilestoneRead, key="id"),
    "teams": Collection("teams", Team, TeamRead, key="id"),
    "comments": Collection("comments", TaskComment, CommentRead, key="id", order_by="timestamp"),
}

_OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda column, value: column.in_(value),
}


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple, set)):
        return [_plain(item) for item in value]
    return value


class DocumentStore:
    def __init__(self, session: AsyncSession, hub: EventHub | None = None) -> None:
        self.session = session
        self.hub = hub or EventHub()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------
    async def create(self, collection: str, record: Mapping[str, Any], id: str | None = None) -> Any:
        spec = _collection(collection)
        data = self._columns(spec, record)
        data[spec.key] = id or data.get(spec.key) or uuid4().hex
        entity = self._validate(spec, data)
        row = spec.model(**entity.to_columns())
        self.session.add(row)
        await self._commit(f"{collection}.create")
        logger.debug("store.created", collection=collection, key=data[spec.key])
        await self._notify(spec)
        return entity

    async def get(self, collection: str, id: str) -> Any | None:
        spec = _collection(collection)
        try:
            row = await self.session.get(spec.model, id, populate_existing=True)
        except SQLAlchemyError as exc:
            raise CollaboratorError("error_storage", f"{collection}.get failed: {exc}") from exc
        if row is None:
            return None
        return self._validate(spec, row)

    async def list(self, collection: str) -> List[Any]:
        spec = _collection(collection)
        stmt = select(spec.model).order_by(getattr(spec.model, spec.order_by))
        return await self._fetch(spec, stmt)

    async def query(self, collection: str, field: str, op: str, value: Any) -> List[Any]:
        """Filter a collection on one field.

        ``array-contains`` matches list fields holding ``value`` and is
        evaluated after loading since list columns are stored as JSON.
        """

        spec = _collection(collection)
        name = spec.field_name(field)
        if op == "array-contains":
            entities = await self.list(collection)
            return [entity for entity in entities if value in (getattr(entity, name) or [])]
        compare = _OPERATORS.get(op)
        if compare is None:
            raise ValidationError("error_unknown_operator", f"Unsupported query operator {op!r}", field=field)
        column = getattr(spec.model, name)
        stmt = (
            select(spec.model)
            .where(compare(column, _plain(value)))
            .order_by(getattr(spec.model, spec.order_by))
        )
        return await self._fetch(spec, stmt)

    async def update(self, collection: str, id: str, partial: Mapping[str, Any]) -> Any:
        spec = _collection(collection)
        row = await self._require_row(spec, id)
        current = self._validate(spec, row).to_columns()
        changes = self._columns(spec, partial)
        changes.pop(spec.key, None)
        entity = self._validate(spec, {**current, **changes})
        columns = entity.to_columns()
        for name in changes:
            setattr(row, name, columns[name])
        await self._commit(f"{collection}.update")
        logger.debug("store.updated", collection=collection, key=id, fields=sorted(changes))
        await self._notify(spec)
        return entity

    async def remove(self, collection: str, id: str) -> None:
        spec = _collection(collection)
        row = await self._require_row(spec, id)
        await self.session.delete(row)
        await self._commit(f"{collection}.remove")
        logger.debug("store.removed", collection=collection, key=id)
        await self._notify(spec)

    # ------------------------------------------------------------------
    # Live views
    # ------------------------------------------------------------------
    async def subscribe(self, collection: str) -> AsyncIterator[List[Any]]:
        """Yield the current snapshot, then a fresh one after every write."""

        _collection(collection)
        async with self.hub.subscription(collection) as queue:
            yield await self.list(collection)
            while True:
                yield await queue.get()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _columns(spec: Collection, record: Mapping[str, Any]) -> Dict[str, Any]:
        return {spec.field_name(field): _plain(value) for field, value in record.items()}

    @staticmethod
    def _validate(spec: Collection, data: Any) -> Any:
        try:
            return spec.schema.model_validate(data)
        except SchemaError as exc:
            raise ValidationError(
                "error_invalid_record", f"Invalid {spec.name} record: {exc.errors()[0]['msg']}"
            ) from exc

    async def _require_row(self, spec: Collection, id: str) -> Base:
        try:
            row = await self.session.get(spec.model, id)
        except SQLAlchemyError as exc:
            raise CollaboratorError("error_storage", f"{spec.name} lookup failed: {exc}") from exc
        if row is None:
            raise NotFoundError(f"error_{spec.name}_not_found", f"{spec.name} {id} not found")
        return row

    async def _fetch(self, spec: Collection, stmt: Any) -> List[Any]:
        try:
            result = await self.session.execute(stmt.execution_options(populate_existing=True))
        except SQLAlchemyError as exc:
            raise CollaboratorError("error_storage", f"{spec.name} read failed: {exc}") from exc
        return [self._validate(spec, row) for row in result.scalars().all()]

    async def _commit(self, operation: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("store.write_failed", operation=operation, error=str(exc))
            raise CollaboratorError("error_storage", f"{operation} failed: {exc}") from exc

    async def _notify(self, spec: Collection) -> None:
        if self.hub.has_subscribers(spec.name):
            self.hub.publish(spec.name, await self.list(spec.name))


def _collection(name: str) -> Collection:
    try:
        return COLLECTIONS[name]
    except KeyError:
        raise ValidationError("error_unknown_collection", f"Unknown collection {name!r}") from None
