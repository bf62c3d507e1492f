"""Interfaces the services need from the persistence and object storage layers."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol, TypeVar

from sqlmodel import SQLModel

ModelT = TypeVar("ModelT", bound=SQLModel)

# Filter values: a scalar means equality, a list/tuple/set means membership
Filters = Mapping[str, Any]


@dataclass(frozen=True)
class StoredObject:
    """One object in a storage listing. ``name`` is relative to the listed prefix."""

    name: str
    created_at: datetime


class Store(Protocol):
    """Row-level persistence with equality filters, ordering and paging."""

    async def select(
        self,
        model: type[ModelT],
        filters: Filters | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ModelT]: ...

    async def count(self, model: type[SQLModel], filters: Filters | None = None) -> int: ...

    async def insert(self, record: ModelT) -> ModelT:
        """Persist a new row. Raises UniqueViolation on a unique constraint hit."""
        ...

    async def update(
        self, model: type[ModelT], filters: Filters, patch: Mapping[str, Any]
    ) -> list[ModelT]: ...

    async def delete(self, model: type[SQLModel], filters: Filters) -> int: ...


class ObjectStorage(Protocol):
    """Blob storage bound to a single bucket."""

    async def put_object(
        self, key: str, data: bytes, *, content_type: str, overwrite: bool = False
    ) -> None:
        """Write bytes at ``key``. Raises ObjectExists when not overwriting an existing key."""
        ...

    async def list_objects(self, prefix: str, *, limit: int = 100) -> list[StoredObject]:
        """List objects under ``prefix``, newest first."""
        ...

    async def remove_objects(self, keys: Sequence[str]) -> None: ...

    def get_public_url(self, key: str) -> str: ...
