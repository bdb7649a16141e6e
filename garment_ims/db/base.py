"""Garment IMS — Declarative base for all ORM models."""
from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    """Python-side timestamp default (microsecond precision on every backend)."""
    return datetime.now(timezone.utc)
