import logging

LOG_FORMAT = "[%(levelname)s] %(asctime)s - %(name)s: %(message)s"


def configure_logging(level: str | int = logging.INFO, name: str = "clinical_daily") -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if logger.handlers:
        return logger
    ch = logging.StreamHandler()
    ch.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(ch)
    return logger
