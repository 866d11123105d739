"""
Application logger.

Modules either import ``logger`` from here or call
``logging.getLogger(__name__)``; both end up under the ``legal_diary``
hierarchy configured below.
"""
import logging
import sys

from legal_diary.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = settings.LOG_LEVEL) -> logging.Logger:
    root = logging.getLogger("legal_diary")
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(getattr(logging, level, logging.INFO))
    return root


logger = configure_logging()
