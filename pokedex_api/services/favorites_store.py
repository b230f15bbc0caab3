from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from pokedex_api.db import Favorite
from pokedex_api.exceptions import NotFound

logger = logging.getLogger(__name__)


class FavoritesStore:
    """Persisted set of favorite Pokemon names.

    ``add`` is idempotent, ``remove`` is not: removing a name that is not
    stored raises NotFound. Both return the full list re-read from storage.
    """

    def __init__(self, session_factory: async_sessionmaker, case_sensitive: bool = False):
        self._session_factory = session_factory
        self._case_sensitive = case_sensitive

    def _normalize(self, name: str) -> str:
        return name if self._case_sensitive else name.lower()

    async def list(self) -> list[str]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Favorite.name).order_by(Favorite.created_at, Favorite.name)
            )
            return list(result.scalars().all())

    async def add(self, name: str) -> list[str]:
        key = self._normalize(name)

        async with self._session_factory() as session:
            existing = await session.get(Favorite, key)
            if existing is None:
                session.add(Favorite(name=key))
                try:
                    await session.commit()
                    logger.info(f"Added favorite '{key}'")
                except IntegrityError:
                    # A concurrent request stored the same name first
                    await session.rollback()

        return await self.list()

    async def remove(self, name: str) -> list[str]:
        key = self._normalize(name)

        async with self._session_factory() as session:
            result = await session.execute(delete(Favorite).where(Favorite.name == key))
            await session.commit()

        if result.rowcount == 0:
            raise NotFound(f"Favorite '{name}' not found")

        logger.info(f"Removed favorite '{key}'")
        return await self.list()
