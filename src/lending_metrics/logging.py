"""
Package logger. Modules log through `from lending_metrics.logging import logger`.
"""

import logging

logger = logging.getLogger("lending_metrics")
logger.propagate = False
logger.setLevel(logging.INFO)

_handler = logging.StreamHandler()
_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
logger.addHandler(_handler)
