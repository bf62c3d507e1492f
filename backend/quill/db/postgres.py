"""PostgreSQL database connection, session management and the SQL-backed Store."""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from quill.config import get_settings
from quill.db.base import Filters, ModelT
from quill.exceptions import StoreError, UniqueViolation

logger = logging.getLogger(__name__)

settings = get_settings()

# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    future=True,
)

# Create async session factory
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Initialize database tables."""
    import quill.models  # noqa: F401  (registers tables on the metadata)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


def _apply_filters(stmt, model: type[SQLModel], filters: Filters | None):
    for name, value in (filters or {}).items():
        column = getattr(model, name)
        if isinstance(value, (list, tuple, set, frozenset)):
            stmt = stmt.where(column.in_(list(value)))
        elif value is None:
            stmt = stmt.where(column.is_(None))
        else:
            stmt = stmt.where(column == value)
    return stmt


def _is_unique_violation(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "unique" in message or "duplicate key" in message


class SQLStore:
    """Store implementation over SQLModel tables, one session per call."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = async_session):
        self.session_factory = session_factory

    async def select(
        self,
        model: type[ModelT],
        filters: Filters | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ModelT]:
        stmt = _apply_filters(select(model), model, filters)
        if order_by:
            column = getattr(model, order_by)
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreError(f"Query on {model.__tablename__} failed: {e}") from e

    async def count(self, model: type[SQLModel], filters: Filters | None = None) -> int:
        stmt = _apply_filters(select(func.count()).select_from(model), model, filters)
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return result.scalar() or 0
        except SQLAlchemyError as e:
            raise StoreError(f"Count on {model.__tablename__} failed: {e}") from e

    async def insert(self, record: ModelT) -> ModelT:
        table = type(record).__tablename__
        async with self.session_factory() as session:
            session.add(record)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                if _is_unique_violation(e):
                    raise UniqueViolation(f"Duplicate value in {table}: {e.orig}") from e
                raise StoreError(f"Insert into {table} failed: {e.orig}") from e
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreError(f"Insert into {table} failed: {e}") from e
            await session.refresh(record)
            return record

    async def update(
        self, model: type[ModelT], filters: Filters, patch: Mapping[str, Any]
    ) -> list[ModelT]:
        stmt = _apply_filters(select(model), model, filters)
        async with self.session_factory() as session:
            try:
                result = await session.execute(stmt)
                rows = list(result.scalars().all())
                for row in rows:
                    for name, value in patch.items():
                        setattr(row, name, value)
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                if _is_unique_violation(e):
                    raise UniqueViolation(f"Duplicate value in {model.__tablename__}: {e.orig}") from e
                raise StoreError(f"Update of {model.__tablename__} failed: {e.orig}") from e
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreError(f"Update of {model.__tablename__} failed: {e}") from e
            for row in rows:
                await session.refresh(row)
            return rows

    async def delete(self, model: type[SQLModel], filters: Filters) -> int:
        stmt = _apply_filters(delete(model), model, filters)
        async with self.session_factory() as session:
            try:
                result = await session.execute(stmt)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreError(f"Delete from {model.__tablename__} failed: {e}") from e
            return result.rowcount or 0
