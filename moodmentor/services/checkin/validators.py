"""
Check-in input validation.

Validates scores and free-text fields against allowed ranges before
anything is written.
"""

from typing import Any, Dict, Iterable, Optional, Tuple


class CheckInValidator:
    """
    Validates check-in values against allowed ranges.
    """

    SCORE_RANGES: Dict[str, Tuple[float, float]] = {
        "mood": (1, 10),
        "stress": (0, 10),
    }

    MAX_LIST_ITEMS = 20
    MAX_LIST_ITEM_LENGTH = 100

    @classmethod
    def validate_score(cls, kind: str, score: Any) -> Tuple[bool, Optional[str]]:
        """
        Validate a numeric score for a check-in kind.

        Args:
            kind: "mood" or "stress"
            score: value to check

        Returns:
            tuple of (is_valid, error_message)
        """
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            return False, "Field 'score' must be a number"

        min_val, max_val = cls.SCORE_RANGES[kind]
        if score < min_val or score > max_val:
            return False, f"Field 'score' must be between {min_val} and {max_val}"

        return True, None

    @classmethod
    def validate_text(
        cls,
        field: str,
        value: Optional[str],
        max_length: int,
        required: bool = False,
    ) -> Tuple[bool, Optional[str]]:
        """
        Validate an optional (or required) text field.

        Rules:
            - Must be a string
            - Trimmed length within max_length
            - Non-empty when required
        """
        if value is None:
            if required:
                return False, f"Missing required field: {field}"
            return True, None

        if not isinstance(value, str):
            return False, f"Field '{field}' must be a string"

        trimmed = value.strip()
        if required and not trimmed:
            return False, f"Field '{field}' cannot be empty"

        if len(trimmed) > max_length:
            return False, f"Field '{field}' cannot exceed {max_length} characters"

        return True, None

    @classmethod
    def validate_labels(cls, field: str, values: Optional[Iterable[Any]]) -> Tuple[bool, Optional[str]]:
        """Validate symptom/trigger/factor/tag lists."""
        if values is None:
            return True, None

        items = list(values)
        if len(items) > cls.MAX_LIST_ITEMS:
            return False, f"Field '{field}' cannot have more than {cls.MAX_LIST_ITEMS} items"

        for item in items:
            if not isinstance(item, str) or not item.strip():
                return False, f"Field '{field}' must contain non-empty strings"
            if len(item) > cls.MAX_LIST_ITEM_LENGTH:
                return False, f"Items in '{field}' cannot exceed {cls.MAX_LIST_ITEM_LENGTH} characters"

        return True, None


def clean_labels(values: Optional[Iterable[str]]) -> list:
    """Trim labels and drop duplicates, keeping first-seen order."""
    seen = []
    for value in values or []:
        label = value.strip()
        if label and label not in seen:
            seen.append(label)
    return seen
