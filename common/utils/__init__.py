"""
Utilities module - Common helpers for API responses, exceptions, and ids.
"""

from common.utils.responses import success_response, paginated_response
from common.utils.exceptions import (
    APIException,
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    ConflictException,
    ValidationException,
)
from common.utils.ids import to_object_id, is_object_id

__all__ = [
    "success_response",
    "paginated_response",
    "APIException",
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "ConflictException",
    "ValidationException",
    "to_object_id",
    "is_object_id",
]
