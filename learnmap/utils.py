"""
Utility helpers for the Learning Map Engine.

Provides:
- Structured logging configuration with timestamps.
- Wall-clock timing of pipeline stages.
- Numeric module-id parsing for the layout jitter.
"""

import contextlib
import logging
import re
import time
from typing import Generator, Optional

logger = logging.getLogger(__name__)

_NUMERIC_ID = re.compile(r"\s*[+-]?[0-9]+\s*")


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def setup_logging(
    level: int = logging.INFO,
    fmt: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt: str = "%Y-%m-%dT%H:%M:%S%z",
) -> None:
    """Configure the root logger with timestamped structured output."""
    logging.basicConfig(level=level, format=fmt, datefmt=datefmt, force=True)


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------


@contextlib.contextmanager
def timed(label: str) -> Generator[None, None, None]:
    """Context manager that logs elapsed wall-clock time for *label*."""
    t0 = time.monotonic()
    yield
    elapsed = time.monotonic() - t0
    logger.info("%s completed in %.4fs.", label, elapsed)


# ---------------------------------------------------------------------------
# Module ids
# ---------------------------------------------------------------------------


def parse_numeric_id(module_id: str) -> Optional[int]:
    """Return *module_id* as an ``int``, or ``None`` if it is not numeric.

    Only an optionally signed run of ASCII digits counts, with surrounding
    whitespace tolerated.  Ids such as ``"3a"``, ``"1.5"`` or ``"1_0"`` are
    not numeric, and neither is an id too large to convert to a float.
    """
    if not isinstance(module_id, str) or not _NUMERIC_ID.fullmatch(module_id):
        return None
    value = int(module_id)
    try:
        float(value)
    except OverflowError:
        return None
    return value
