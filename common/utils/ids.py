"""
ObjectId parsing helpers.

Path parameters and token subjects arrive as strings; converting them
with ``ObjectId(value)`` directly turns a typo into a 500. These helpers
turn it into a 400 instead.
"""

from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

from common.utils.exceptions import BadRequestException


def to_object_id(value: Any, field: str = "id") -> ObjectId:
    """
    Convert a string (or ObjectId) into an ObjectId.

    Raises:
        BadRequestException: If the value is not a valid 24-char hex id
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise BadRequestException(
            message=f"Invalid {field}",
            code="INVALID_ID",
            details={"field": field},
        )


def is_object_id(value: Any) -> bool:
    """Return True if value can be used as an ObjectId."""
    return isinstance(value, ObjectId) or ObjectId.is_valid(str(value))
