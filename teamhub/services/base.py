from __future__ import annotations

from typing import TYPE_CHECKING, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from teamhub.core.settings import settings

if TYPE_CHECKING:  # pragma: no cover
    from .identity import IdentityProvider
    from .store import DocumentStore

_engine = create_async_engine(settings.database_dsn, echo=False, future=True)
SessionLocal = async_sessionmaker(bind=_engine, expire_on_commit=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    async with SessionLocal() as session:
        yield session


class ServiceBase:
    def __init__(self, store: "DocumentStore", identity: "IdentityProvider | None" = None) -> None:
        self.store = store
        self.identity = identity
