"""Tests for the database and Redis sequence allocators."""
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from garment_ims.core.errors import PersistenceError
from garment_ims.services.sequence_allocator import (
    DatabaseSequenceAllocator,
    RedisSequenceAllocator,
    ensure_sequence,
)


class FakeRedis:
    def __init__(self):
        self.counters: dict[str, int] = {}

    async def incr(self, key: str) -> int:
        self.counters[key] = self.counters.get(key, 0) + 1
        return self.counters[key]


class DownRedis:
    async def incr(self, key: str) -> int:
        raise RedisConnectionError("connection refused")


async def test_database_sequence_increments(db):
    allocator = DatabaseSequenceAllocator(db, "barcode_alias")
    assert [await allocator.next_value() for _ in range(3)] == [1, 2, 3]


async def test_database_sequences_are_independent(db):
    aliases = DatabaseSequenceAllocator(db, "barcode_alias")
    invoices = DatabaseSequenceAllocator(db, "purchase_invoice")
    await aliases.next_value()
    await aliases.next_value()
    assert await invoices.next_value() == 1


async def test_two_sessions_never_share_a_value(session_maker, master):
    async with session_maker() as s1:
        first = await DatabaseSequenceAllocator(s1, "barcode_alias").next_value()
        await s1.commit()
    async with session_maker() as s2:
        second = await DatabaseSequenceAllocator(s2, "barcode_alias").next_value()
        await s2.commit()
    assert first != second


async def test_rolled_back_value_is_released(session_maker, master):
    async with session_maker() as s1:
        await DatabaseSequenceAllocator(s1, "barcode_alias").next_value()
        await s1.rollback()
    async with session_maker() as s2:
        assert await DatabaseSequenceAllocator(s2, "barcode_alias").next_value() == 1


async def test_missing_sequence_is_a_persistence_error(db):
    with pytest.raises(PersistenceError):
        await DatabaseSequenceAllocator(db, "nope").next_value()


async def test_ensure_sequence_is_idempotent(db):
    await ensure_sequence(db, "barcode_alias", start=500)
    assert await DatabaseSequenceAllocator(db, "barcode_alias").next_value() == 1

    await ensure_sequence(db, "labels", start=500)
    assert await DatabaseSequenceAllocator(db, "labels").next_value() == 501


async def test_redis_sequence_uses_incr():
    client = FakeRedis()
    allocator = RedisSequenceAllocator(client, "barcode_alias")
    assert await allocator.next_value() == 1
    assert await allocator.next_value() == 2
    assert client.counters == {"seq:barcode_alias": 2}


async def test_redis_failure_is_a_persistence_error():
    with pytest.raises(PersistenceError):
        await RedisSequenceAllocator(DownRedis(), "barcode_alias").next_value()
