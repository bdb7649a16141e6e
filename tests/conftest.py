import os

# settings are cached on first use; point them at SQLite before anything imports them
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SEQUENCE_BACKEND", "database")

import dataclasses
import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from garment_ims.db import session as db_session
from garment_ims.db.base import Base
from garment_ims.models import Color, Floor, ProductGroup, Size, Vendor
from garment_ims.services.sequence_allocator import ensure_sequence


@dataclasses.dataclass
class MasterData:
    floor_id: uuid.UUID
    group_id: uuid.UUID
    bare_group_id: uuid.UUID
    red_id: uuid.UUID
    size_s_id: uuid.UUID
    size_m_id: uuid.UUID
    size_l_id: uuid.UUID
    vendor_id: uuid.UUID
    cipher_vendor_id: uuid.UUID
    bare_vendor_id: uuid.UUID
    inactive_vendor_id: uuid.UUID


@pytest.fixture
async def session_maker(tmp_path, monkeypatch):
    """Fresh file-backed SQLite database per test; two sessions can interleave on it."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'garment_ims.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    # get_db, audit logging and print logging all open sessions through this name
    monkeypatch.setattr(db_session, "async_session_maker", maker)

    async with maker() as db:
        await ensure_sequence(db, "barcode_alias")
        await ensure_sequence(db, "purchase_invoice")
        await db.commit()

    yield maker
    await engine.dispose()


@pytest.fixture
async def master(session_maker) -> MasterData:
    floor = Floor(name="Ground", floor_code="GF")
    group = ProductGroup(name="Shirts", group_code="SH", hsn_code="6205")
    bare_group = ProductGroup(name="Misc", group_code=None, hsn_code=None)
    red = Color(name="Red", color_code="RD")
    sizes = [
        Size(name="Small", size_code="S", sort_order=1),
        Size(name="Medium", size_code="M", sort_order=2),
        Size(name="Large", size_code="L", sort_order=3),
    ]
    vendor = Vendor(name="Sharma Textiles", vendor_code="SHT")
    cipher_vendor = Vendor(name="Crazy Fashion House", vendor_code="CFH")
    bare_vendor = Vendor(name="Local Supplier", vendor_code=None)
    inactive_vendor = Vendor(name="Closed Mills", vendor_code="CLM", is_active=False)

    async with session_maker() as db:
        db.add(floor)
        await db.flush()
        group.floor_id = floor.id
        db.add_all([group, bare_group, red, *sizes, vendor, cipher_vendor, bare_vendor, inactive_vendor])
        await db.commit()

    return MasterData(
        floor_id=floor.id,
        group_id=group.id,
        bare_group_id=bare_group.id,
        red_id=red.id,
        size_s_id=sizes[0].id,
        size_m_id=sizes[1].id,
        size_l_id=sizes[2].id,
        vendor_id=vendor.id,
        cipher_vendor_id=cipher_vendor.id,
        bare_vendor_id=bare_vendor.id,
        inactive_vendor_id=inactive_vendor.id,
    )


@pytest.fixture
async def db(session_maker, master):
    async with session_maker() as session:
        yield session
