"""Garment IMS — Celery tasks for label printing side records.

Print logging is a side effect of an already-committed invoice. Nothing here
may fail the invoice save: queueing errors are logged and swallowed, and the
task itself retries on its own.
"""
import asyncio
import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from garment_ims.db import session as db_session
from garment_ims.models.audit import LabelPrintLog
from garment_ims.worker import celery_app

logger = logging.getLogger(__name__)


async def write_print_log(invoice_id: str, aliases: list[str], copies: int = 1) -> int:
    """Insert one print-log row per barcode alias. Returns rows written."""
    async with db_session.async_session_maker() as db:
        for alias in aliases:
            db.add(LabelPrintLog(invoice_id=UUID(invoice_id), barcode_alias=alias, copies=copies))
        await db.commit()
    return len(aliases)


@celery_app.task(bind=True, max_retries=3)
def record_label_print(self, invoice_id: str, aliases: list[str], copies: int = 1) -> int:
    try:
        return asyncio.run(write_print_log(invoice_id, aliases, copies))
    except SQLAlchemyError as exc:
        delay = (2 ** self.request.retries) * 5
        logger.warning("Print log for invoice %s failed, retrying in %ss: %s", invoice_id, delay, exc)
        raise self.retry(exc=exc, countdown=delay)


def queue_label_print(invoice_id: UUID, aliases: list[str], copies: int = 1) -> bool:
    """Best-effort dispatch. Returns False (and logs) when the broker is unreachable."""
    if not aliases:
        return False
    try:
        record_label_print.delay(str(invoice_id), aliases, copies)
        return True
    except Exception as exc:
        logger.warning("Could not queue label print log for invoice %s: %s", invoice_id, exc)
        return False
