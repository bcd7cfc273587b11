from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import datetime


class HealthCheckResponse(BaseModel):
    status: str
    now: datetime
    uptime_seconds: float
    db_ok: bool
    extra: Optional[Dict[str, Any]] = None


class SystemMetricsResponse(BaseModel):
    uptime_seconds: float
    now: datetime

    # middleware counters
    requests_count: int
    errors_count: int
    avg_response_ms: Optional[float] = None

    # stock figures
    products: int
    batches: int
    low_stock_products: int
    expiring_batches: int
    active_pricing_rules: int
