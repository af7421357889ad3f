"""Shared logger for the catalog service."""

import logging

from config import LOG_LEVEL

logger = logging.getLogger("query_catalog")

if not logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s [%(module)s] %(message)s")
    )
    logger.addHandler(_handler)

logger.setLevel(LOG_LEVEL.upper())
