"""
Centralized logging setup for the codeplay backend.

Usage:
    import logging

    logger = logging.getLogger(__name__)
    logger.info("Playground %s created", playground.id)
"""

import logging
import os
import sys

_configured = False


def setup_logging(level: str = "") -> None:
    """Configure root logging. Call once at startup (main.py); later calls are no-ops."""
    global _configured
    if _configured:
        return

    level = level or os.getenv("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    _configured = True
