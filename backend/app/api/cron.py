"""Scheduled task endpoints, called by the system cron or a job scheduler."""

import logging
import threading
import time

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from backend.app.core.time import utc_now
from backend.app.crud.stores import build_recurring_processor
from backend.app.db.session import get_db
from backend.app.services.recurring import RecurringInvoiceProcessor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"])

_STARTED_AT = time.monotonic()

# Two overlapping runs would both see the same pre-advance next_invoice_date.
_batch_lock = threading.Lock()
_last_run: dict = {"finished_at": None, "success": None, "processed": None}


def get_recurring_processor(db: Session = Depends(get_db)) -> RecurringInvoiceProcessor:
    return build_recurring_processor(db)


def _error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "timestamp": utc_now().isoformat()},
    )


@router.post("/recurring-invoices")
def process_recurring_invoices(processor: RecurringInvoiceProcessor = Depends(get_recurring_processor)):
    logger.info("Cron job triggered: Processing recurring invoices")
    if not _batch_lock.acquire(blocking=False):
        logger.warning("Recurring invoice run already in progress; rejecting trigger")
        return _error_response(status.HTTP_409_CONFLICT, "Recurring invoice processing already in progress")

    try:
        result = processor.run_batch()
        _last_run.update(
            finished_at=utc_now().isoformat(),
            success=result.success,
            processed=result.processed,
        )
    finally:
        _batch_lock.release()

    if not result.success:
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, result.error or "Unknown error occurred")

    return {
        "success": True,
        "data": {"processed": result.processed, "timestamp": utc_now().isoformat()},
        "message": result.message or "Recurring invoices processed successfully",
    }


@router.get("/health")
def cron_health_check():
    return {
        "success": True,
        "data": {
            "status": "healthy",
            "timestamp": utc_now().isoformat(),
            "uptime_seconds": round(time.monotonic() - _STARTED_AT, 3),
        },
        "message": "Cron service is running",
    }


@router.get("/status")
def get_cron_status(processor: RecurringInvoiceProcessor = Depends(get_recurring_processor)):
    try:
        stats = processor.processing_stats()
    except Exception as exc:
        logger.exception("Could not compute recurring invoice statistics")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or exc.__class__.__name__)

    return {
        "success": True,
        "data": {
            **stats.model_dump(mode="json"),
            "running": _batch_lock.locked(),
            "last_run": dict(_last_run),
            "timestamp": utc_now().isoformat(),
        },
        "message": "Cron status retrieved successfully",
    }
