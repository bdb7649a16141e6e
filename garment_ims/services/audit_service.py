"""Garment IMS — AuditService: best-effort audit trail written after the main commit."""
import logging
from uuid import UUID

from garment_ims.db import session as db_session
from garment_ims.models.audit import AuditLog

logger = logging.getLogger(__name__)

# ── Audit action constants ────────────────────────────────────────────────────
ACTION_INVOICE_CREATED = "purchase_invoice.created"
ACTION_INVOICE_UPDATED = "purchase_invoice.updated"
ACTION_DESIGN_REGISTERED = "design.registered"
ACTION_LABELS_REQUESTED = "labels.requested"


async def log_audit(
    action: str,
    target_type: str | None = None,
    target_id: UUID | None = None,
    payload: dict | None = None,
) -> None:
    """
    Write an audit log entry in its own session. Call after the main transaction
    has committed: a failure here is logged and never reaches the caller.
    """
    try:
        async with db_session.async_session_maker() as db:
            db.add(AuditLog(
                action=action,
                target_type=target_type,
                target_id=target_id,
                payload=payload,
            ))
            await db.commit()
    except Exception as exc:
        logger.error("Audit log write failed: %s", exc, exc_info=True)
