import asyncio
import logging
from datetime import datetime

from fastapi import FastAPI

from app.core.config import settings
from app.core.logging_setup import setup_logging
from app.database.connection import Base, SessionLocal, engine, reset_database
from app.middleware.metrics import MetricsMiddleware, new_metrics
from app.models import batch, pricing_rule, product  # noqa: F401  (register tables)
from app.routes import system
from app.routes.batches import router as batches_router
from app.routes.inventory import router as inventory_router
from app.routes.pricing.calculate_price import router as calculate_price_router
from app.routes.pricing.pricing_route import router as pricing_router
from app.routes.products import router as product_router
from app.services.scheduler_service import stock_alert_scheduler_loop
from app.services.seed_service import seed_database

setup_logging(settings)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.APP_NAME)

app.add_middleware(MetricsMiddleware, latency_ms=settings.SIMULATED_LATENCY_MS)


app.include_router(product_router)
app.include_router(batches_router)
app.include_router(inventory_router)
app.include_router(pricing_router)
app.include_router(calculate_price_router)
app.include_router(system.router)

@app.on_event("startup")
async def startup_event():
    if settings.RESET_DB_ON_STARTUP:
        reset_database()
        logger.info("Database reset at %s", engine.url)
    if settings.SEED_ON_STARTUP:
        db = SessionLocal()
        try:
            seed_database(db, settings.FIXTURES_DIR)
        finally:
            db.close()
    if settings.STOCK_ALERT_INTERVAL_SECONDS > 0:
        asyncio.create_task(stock_alert_scheduler_loop())
    app.state.start_time = datetime.utcnow()
    app.state.metrics = new_metrics()
    logger.info("%s started", settings.APP_NAME)
