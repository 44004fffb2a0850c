import logging
import os
import sys


def setup_logger(level: int = logging.INFO, name: str = "xgify") -> logging.Logger:
    """Create or update the project logger.

    XGIFY_LOG_LEVEL and XGIFY_LOG_CATS are read on every call. The base logger
    keeps exactly one stderr handler.
    """
    logger = logging.getLogger(name)

    env_level = (os.getenv("XGIFY_LOG_LEVEL") or "").strip().lower()
    if env_level:
        level_map = {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR,
            "critical": logging.CRITICAL,
        }
        level = level_map.get(env_level, level)
    logger.setLevel(level)

    stream_handler: logging.StreamHandler | None = None
    for h in list(logger.handlers):
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr:
            stream_handler = h

    if stream_handler is None:
        stream_handler = logging.StreamHandler(stream=sys.stderr)
        logger.addHandler(stream_handler)

    fmt = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    stream_handler.setFormatter(fmt)

    # Category filter: XGIFY_LOG_CATS=buffer_exec,pipeline
    stream_handler.filters.clear()
    cats = (os.getenv("XGIFY_LOG_CATS") or "").strip()
    if cats:
        allowed = {c.strip() for c in cats.split(",") if c.strip()}

        class _CategoryFilter(logging.Filter):
            def filter(self, record: logging.LogRecord) -> bool:
                # record.name like: xgify.buffer_exec, xgify.pipeline
                parts = (record.name or "").split(".")
                suffix = parts[-1] if parts else record.name
                return suffix in allowed

        stream_handler.addFilter(_CategoryFilter())

    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = setup_logger()
    return base if not name else base.getChild(name)
