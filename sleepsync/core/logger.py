import os
import logging
from logging.handlers import TimedRotatingFileHandler

LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()

_formatter = logging.Formatter(
    "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
    "%Y-%m-%d %H:%M:%S"
)


def get_logger(name: str = "sleepsync"):
    logger = logging.getLogger(name)
    logger.setLevel(LOG_LEVEL)

    # Console + daily rotating file, attached once per named logger
    if not logger.handlers:
        console = logging.StreamHandler()
        console.setLevel(LOG_LEVEL)
        console.setFormatter(_formatter)
        logger.addHandler(console)

        if LOG_DIR:
            os.makedirs(LOG_DIR, exist_ok=True)
            file_handler = TimedRotatingFileHandler(
                filename=os.path.join(LOG_DIR, f"{name}.log"),
                when="midnight",
                interval=1,
                backupCount=7,
                encoding="utf-8",
            )
            file_handler.suffix = "%Y-%m-%d"
            file_handler.setLevel(LOG_LEVEL)
            file_handler.setFormatter(_formatter)
            logger.addHandler(file_handler)

    return logger
