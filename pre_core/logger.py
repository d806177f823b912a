import logging, json, sys, time, os

from .config import get_settings


def get_logger(name="PRE", level=None, to_file=None):
    """Unified structured logger for all pre_core modules."""
    settings = get_settings()
    logger = logging.getLogger(name)
    logger.setLevel(level if level is not None else settings.log_level)
    to_file = to_file or settings.log_file

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt=json.dumps({
                "ts": "%(asctime)s",
                "level": "%(levelname)s",
                "name": "%(name)s",
                "msg": "%(message)s"
            }),
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
        formatter.converter = time.gmtime  # Use UTC timestamps
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if to_file:
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
