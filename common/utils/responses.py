"""
Standard API response helpers.

Provides consistent response formatting for single and paginated results.

Example:
    from common.utils import success_response

    @router.get("/mood-entries/summary")
    async def get_summary(...):
        summary = await analytics.get_mood_summary(user_id)
        return success_response(summary)
"""

from typing import Any, Optional, Dict


def success_response(
    data: Any = None,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a standard success response.

    Args:
        data: The response data (can be dict, list, or any serializable type)
        message: Optional success message

    Returns:
        Dictionary with success=True and optional data/message
    """
    response: Dict[str, Any] = {"success": True}

    if data is not None:
        response["data"] = data

    if message:
        response["message"] = message

    return response


def paginated_response(
    items: list,
    total: int,
    limit: int,
    offset: int = 0,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create an offset-paginated success response.

    Args:
        items: Items for the current window
        total: Total number of items across all windows
        limit: Window size requested
        offset: Items skipped before this window
        message: Optional success message

    Returns:
        Dictionary with success=True, the items and pagination metadata
    """
    response: Dict[str, Any] = {
        "success": True,
        "data": items,
        "pagination": {
            "total": total,
            "limit": limit,
            "offset": offset,
            "hasMore": (offset + len(items)) < total,
        },
    }

    if message:
        response["message"] = message

    return response
