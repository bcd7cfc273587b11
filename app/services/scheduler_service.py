import asyncio
import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.database.connection import SessionLocal
from app.services.batch_service import get_expiring_soon
from app.services.product_service import check_reorder_points

logger = logging.getLogger(__name__)


def get_db_session() -> Session:
    return SessionLocal()


# ---------- STOCK ALERT SCHEDULER ----------

async def stock_alert_scheduler_loop():
    """
    Loop that runs stock_alert_scan every STOCK_ALERT_INTERVAL_SECONDS.
    """
    while True:
        try:
            await stock_alert_scan()
        except Exception:
            logger.exception("stock alert scan failed")
        await asyncio.sleep(settings.STOCK_ALERT_INTERVAL_SECONDS)


async def stock_alert_scan() -> dict:
    """
    Logs batches close to expiry and products at or below their reorder level.
    """
    db = get_db_session()
    try:
        expiring = get_expiring_soon(db, settings.EXPIRY_WARNING_DAYS)
        reorders = check_reorder_points(db)

        for batch in expiring:
            if batch.days_to_expiry < 0:
                logger.warning(
                    "Batch %s of %s expired %d day(s) ago (qty=%s)",
                    batch.batch_number, batch.product_name, -batch.days_to_expiry, batch.quantity,
                )
            else:
                logger.info(
                    "Batch %s of %s expires in %d day(s) (qty=%s)",
                    batch.batch_number, batch.product_name, batch.days_to_expiry, batch.quantity,
                )

        for product in reorders:
            logger.info(
                "Reorder %s: stock %s <= level %s, suggest %s",
                product.name, product.current_stock, product.reorder_level,
                product.suggested_order_quantity,
            )

        return {"expiring_batches": len(expiring), "reorder_products": len(reorders)}
    finally:
        db.close()
