import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(settings) -> logging.Logger:
    """Configure console logging for the app and the uvicorn/fastapi loggers."""
    level = getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(level)

    logger = logging.getLogger()  # root
    logger.setLevel(level)
    # avoid duplicate handlers on reload
    if not any(getattr(h, "_stock_pricing", False) for h in logger.handlers):
        handler._stock_pricing = True
        logger.addHandler(handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        logging.getLogger(name).setLevel(level)

    return logger
