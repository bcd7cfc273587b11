import tempfile
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Stock & Pricing Engine"

    # DB: a scratch SQLite file, wiped on every start so nothing survives a restart.
    # "sqlite://" shares one connection between sessions, single-threaded tests only.
    DATABASE_URL: str = f"sqlite:///{Path(tempfile.gettempdir()) / 'stock_pricing.db'}"
    RESET_DB_ON_STARTUP: bool = True
    # seconds a connection waits on a locked SQLite file
    SQLITE_BUSY_TIMEOUT: float = 15.0

    # Seed data
    SEED_ON_STARTUP: bool = True
    FIXTURES_DIR: Path = Path(__file__).resolve().parents[1] / "fixtures"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Artificial per-request delay, 0 disables it
    SIMULATED_LATENCY_MS: int = 0

    CURRENCY_SYMBOL: str = "₹"

    # Stock alerts
    EXPIRY_WARNING_DAYS: int = 30
    STOCK_ALERT_INTERVAL_SECONDS: int = 60 * 60

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
