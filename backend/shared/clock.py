"""
Clock helpers.

Services take a ``Clock`` callable so tests can pin "now" without patching
the datetime module.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
