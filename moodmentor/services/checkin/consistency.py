"""
Check-in consistency metrics.

Pure functions that derive streak, average and trend figures from one
patient's check-in history (mood entries, stress assessments, journal
entries). Nothing here touches the database: callers fetch documents,
wrap them in ``CheckIn`` and pass the sequence in.

Calendar days are always taken in a single, explicit time zone so that
a check-in at 23:30 and another at 00:30 land on the days the patient
expects no matter which server handles the request.
"""

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import pytz

logger = logging.getLogger(__name__)

TREND_IMPROVING = "improving"
TREND_DECLINING = "declining"
TREND_STABLE = "stable"

CONSISTENCY_POINTS_PER_ENTRY = 5
CONSISTENCY_MAX = 100

TimezoneLike = Union[str, tzinfo, None]


class InvalidCheckInInput(TypeError):
    """Raised when the check-in history passed in is not a sequence."""


@dataclass(frozen=True)
class CheckIn:
    """A single timestamped score for one subject."""

    subject_id: Optional[str]
    timestamp: Optional[datetime]
    value: float = 0.0

    @classmethod
    def from_document(
        cls,
        doc: Mapping,
        value_field: str = "score",
        timestamp_field: str = "createdAt",
        subject_field: str = "userId",
    ) -> "CheckIn":
        """Build a CheckIn from a stored document, tolerating missing fields."""
        subject = doc.get(subject_field)
        return cls(
            subject_id=str(subject) if subject is not None else None,
            timestamp=_coerce_timestamp(doc.get(timestamp_field)),
            value=_coerce_value(doc.get(value_field)),
        )


@dataclass(frozen=True)
class ConsistencyMetrics:
    """Read-only projection over a subject's check-ins."""

    total_entries: int = 0
    average_score: float = 0
    last_entry_timestamp: Optional[datetime] = None
    streak_days: int = 0
    trend: str = TREND_STABLE

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys used by the API."""
        return {
            "totalEntries": self.total_entries,
            "averageScore": self.average_score,
            "lastEntryTimestamp": self.last_entry_timestamp,
            "streakDays": self.streak_days,
            "trend": self.trend,
        }


def calculate_consistency(
    checkins: Sequence,
    today: Optional[date] = None,
    tz: TimezoneLike = None,
    higher_is_better: bool = True,
) -> ConsistencyMetrics:
    """
    Compute consistency metrics for one subject's check-ins.

    Args:
        checkins: Sequence of CheckIn (or mappings with ``timestamp`` and
            ``value`` keys) in any order. Not mutated.
        today: Reference day for the streak; defaults to the current day in ``tz``
        tz: Time zone used to turn timestamps into calendar days (default UTC)
        higher_is_better: When False (stress scores), a falling value is
            reported as ``improving``

    Returns:
        ConsistencyMetrics; the all-zero default for an empty history

    Raises:
        InvalidCheckInInput: If ``checkins`` is not a sequence
    """
    if (
        isinstance(checkins, (str, bytes, bytearray, Mapping))
        or not isinstance(checkins, Sequence)
    ):
        raise InvalidCheckInInput(
            f"Expected a sequence of check-ins, got {type(checkins).__name__}"
        )

    zone = resolve_timezone(tz)

    dated: List[Tuple[datetime, float]] = []
    for item in checkins:
        timestamp = _coerce_timestamp(_read(item, "timestamp"))
        if timestamp is None:
            logger.debug("Ignoring check-in without a usable timestamp")
            continue
        dated.append((timestamp, _coerce_value(_read(item, "value"))))

    if not dated:
        return ConsistencyMetrics()

    # Value breaks timestamp ties so shuffled input gives the same trend
    dated.sort(reverse=True)
    values = [value for _, value in dated]

    reference_day = _as_day(today, zone) if today is not None else datetime.now(zone).date()
    days = [to_calendar_day(timestamp, zone) for timestamp, _ in dated]

    return ConsistencyMetrics(
        total_entries=len(dated),
        average_score=sum(values) / len(values),
        last_entry_timestamp=dated[0][0],
        streak_days=calculate_streak(days, reference_day),
        trend=calculate_trend(values, higher_is_better=higher_is_better),
    )


def calculate_streak(days: Iterable[date], today: date) -> int:
    """
    Count consecutive calendar days with a check-in, ending today or yesterday.

    Days after ``today`` are ignored. Several check-ins on one day count once.
    """
    distinct = sorted({day for day in days if day <= today}, reverse=True)

    if not distinct or (today - distinct[0]).days > 1:
        return 0

    streak = 1
    for newer, older in zip(distinct, distinct[1:]):
        if (newer - older).days != 1:
            break
        streak += 1

    return streak


def calculate_trend(values: Sequence[float], higher_is_better: bool = True) -> str:
    """
    Compare the newest value with the one before it.

    ``values`` must be ordered newest first. Ties count as improving.
    """
    if len(values) < 2:
        return TREND_STABLE

    newest, previous = values[0], values[1]
    if not higher_is_better:
        newest, previous = -newest, -previous

    return TREND_IMPROVING if newest >= previous else TREND_DECLINING


def consistency_score(total_entries: int) -> int:
    """Check-in frequency score: 5 points per entry, capped at 100."""
    if total_entries <= 0:
        return 0
    return min(CONSISTENCY_MAX, total_entries * CONSISTENCY_POINTS_PER_ENTRY)


def resolve_timezone(tz: TimezoneLike) -> tzinfo:
    """Accept an IANA name, a tzinfo or None (UTC)."""
    if tz is None:
        return pytz.utc
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def to_calendar_day(timestamp: datetime, tz: TimezoneLike = None) -> date:
    """Calendar day of a timestamp in the given zone; naive values are UTC."""
    return _ensure_aware(timestamp).astimezone(resolve_timezone(tz)).date()


def _as_day(value: date, zone: tzinfo) -> date:
    if isinstance(value, datetime):
        return to_calendar_day(value, zone)
    return value


def _read(item: Any, key: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None)


def _ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _coerce_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return _ensure_aware(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return _ensure_aware(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def _coerce_value(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) or math.isinf(number) else number
