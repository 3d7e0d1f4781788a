#!/usr/bin/env python3
"""Utility functions for SADP.

This module provides helper functions for:
- Configuring logging
- Forwarding progress to an optional callback without letting it fail a run
"""

import logging
from typing import Callable, Optional

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


def configure_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag.

    Args:
        verbose: If True, set logging level to INFO. Otherwise, set to WARNING.
    """
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, force=True)


def report_progress(
    callback: Optional[ProgressCallback], percentage: float
) -> None:
    """Send ``percentage`` (0-100) to ``callback`` if one is set.

    Exceptions raised by the callback are logged and dropped.
    """
    if callback is None:
        return
    try:
        callback(min(percentage, 100.0))
    except Exception as e:
        LOGGER.warning(f"Progress callback failed at {percentage:.1f}%: {e}")
