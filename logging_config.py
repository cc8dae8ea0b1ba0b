# logging_config.py
import logging
from logging.handlers import RotatingFileHandler
import os

FORMAT = "%(asctime)s | %(levelname)8s | %(name)s : %(message)s"


def setup_logging(level="INFO", log_dir="logs"):
    os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    fmt = logging.Formatter(FORMAT)

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    fh = RotatingFileHandler(os.path.join(log_dir, "bot.log"), maxBytes=10*1024*1024, backupCount=5)
    fh.setFormatter(fmt)
    logger.addHandler(fh)

    eh = RotatingFileHandler(os.path.join(log_dir, "errors.log"), maxBytes=5*1024*1024, backupCount=3)
    eh.setLevel(logging.ERROR)
    eh.setFormatter(fmt)
    logging.getLogger("dripcoin_bot").addHandler(eh)

    logger.info("Logging configured (level=%s)", level)
