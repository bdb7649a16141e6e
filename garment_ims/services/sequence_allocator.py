"""Garment IMS — Sequence allocators: the single authority for barcode aliases and invoice numbers.

Every allocator hands out values with one atomic storage operation; there is no
read-then-write in application code and no process-local counter.
"""
import logging
from typing import Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from garment_ims.config import get_settings
from garment_ims.core.errors import PersistenceError
from garment_ims.core.redis import get_redis, sequence_key
from garment_ims.models.sequence import BarcodeSequence

logger = logging.getLogger(__name__)


class SequenceAllocator(Protocol):
    async def next_value(self) -> int: ...


class DatabaseSequenceAllocator:
    """
    Counter row bumped with UPDATE ... RETURNING.
    The bump joins the caller's transaction: a rolled-back invoice save releases
    its numbers together with the rows that used them.
    """

    def __init__(self, db: AsyncSession, name: str):
        self.db = db
        self.name = name

    async def next_value(self) -> int:
        stmt = (
            update(BarcodeSequence)
            .where(BarcodeSequence.name == self.name)
            .values(current_value=BarcodeSequence.current_value + 1)
            .returning(BarcodeSequence.current_value)
            .execution_options(synchronize_session=False)
        )
        try:
            value = (await self.db.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Sequence '{self.name}' could not be advanced") from exc
        if value is None:
            raise PersistenceError(f"Sequence '{self.name}' is not initialised")
        return int(value)


class RedisSequenceAllocator:
    """Redis INCR on one key. Values are never handed out twice, even across rollbacks."""

    def __init__(self, client: redis.Redis, name: str):
        self.client = client
        self.name = name

    async def next_value(self) -> int:
        try:
            return int(await self.client.incr(sequence_key(self.name)))
        except RedisError as exc:
            raise PersistenceError(f"Sequence '{self.name}' could not be advanced") from exc


async def ensure_sequence(db: AsyncSession, name: str, start: int = 0) -> None:
    """Create the counter row if missing. Run from migrations/seeding, not per request."""
    existing = await db.scalar(select(BarcodeSequence).where(BarcodeSequence.name == name))
    if existing is None:
        db.add(BarcodeSequence(name=name, current_value=start))
        await db.flush()


async def get_allocator(db: AsyncSession, name: str) -> SequenceAllocator:
    """Allocator for the configured backend (SEQUENCE_BACKEND)."""
    backend = get_settings().SEQUENCE_BACKEND
    if backend == "redis":
        return RedisSequenceAllocator(await get_redis(), name)
    if backend != "database":
        logger.warning("Unknown SEQUENCE_BACKEND %r, falling back to database", backend)
    return DatabaseSequenceAllocator(db, name)
