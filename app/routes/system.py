import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database.connection import get_db
from app.models.batch import Batch
from app.models.product import Product
from app.schemas.system import HealthCheckResponse, SystemMetricsResponse
from app.services.batch_service import get_expiring_soon
from app.services.pricing_service.pricing_service import get_active_rules
from app.services.product_service import get_low_stock

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])


def _uptime_seconds(request: Request, now: datetime) -> float:
    start_time = getattr(request.app.state, "start_time", now)
    return (now - start_time).total_seconds()


@router.get("/health", response_model=HealthCheckResponse)
def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Lightweight public health check.
    Returns ok + DB connectivity check (SELECT 1).
    """
    now = datetime.utcnow()

    db_ok = True
    extra = {}
    try:
        db.execute(select(1))
    except Exception as e:
        logger.exception("health check query failed")
        db_ok = False
        extra["db_error"] = str(e)

    return HealthCheckResponse(
        status="ok" if db_ok else "degraded",
        now=now,
        uptime_seconds=_uptime_seconds(request, now),
        db_ok=db_ok,
        extra=extra or None,
    )


@router.get("/metrics", response_model=SystemMetricsResponse)
def system_metrics(request: Request, db: Session = Depends(get_db)):
    """
    In-process request counters plus current stock figures.
    """
    now = datetime.utcnow()

    metrics = getattr(request.app.state, "metrics", None) or {}
    requests_count = int(metrics.get("requests", 0))
    total_response_ms = float(metrics.get("total_response_ms", 0.0))
    avg_response_ms = (total_response_ms / requests_count) if requests_count > 0 else None

    products = db.query(func.count()).select_from(Product).scalar() or 0
    batches = db.query(func.count()).select_from(Batch).scalar() or 0

    return SystemMetricsResponse(
        uptime_seconds=_uptime_seconds(request, now),
        now=now,
        requests_count=requests_count,
        errors_count=int(metrics.get("errors", 0)),
        avg_response_ms=avg_response_ms,
        products=int(products),
        batches=int(batches),
        low_stock_products=len(get_low_stock(db)),
        expiring_batches=len(get_expiring_soon(db, settings.EXPIRY_WARNING_DAYS)),
        active_pricing_rules=len(get_active_rules(db)),
    )
