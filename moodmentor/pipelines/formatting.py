"""
Small helpers shared by the pipeline formatters.
"""

from datetime import datetime
from typing import Any, Optional


def iso(value: Any) -> Optional[str]:
    """ISO-8601 string for datetimes, None passes through."""
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def str_id(value: Any) -> Optional[str]:
    return str(value) if value is not None else None
