"""
Pydantic models for mood entries, stress assessments and journal entries.
"""

from typing import Optional, List, Dict, Any

from pydantic import BaseModel, Field


# =============================================================================
# Mood entries
# =============================================================================

class MoodEntryRequest(BaseModel):
    """POST /api/mood-entries"""
    score: float = Field(..., ge=1, le=10, description="1-10 scale")
    mood: Optional[str] = Field(None, max_length=50, description="Label, e.g. 'Happy'")
    assessmentResult: Optional[str] = Field(None, max_length=500)
    factors: Optional[List[str]] = None
    notes: Optional[str] = None


class MoodEntryUpdateRequest(BaseModel):
    """PATCH /api/mood-entries/{entry_id}"""
    score: Optional[float] = Field(None, ge=1, le=10)
    mood: Optional[str] = Field(None, max_length=50)
    assessmentResult: Optional[str] = Field(None, max_length=500)
    factors: Optional[List[str]] = None
    notes: Optional[str] = None


# =============================================================================
# Stress assessments
# =============================================================================

class StressAssessmentRequest(BaseModel):
    """POST /api/stress-assessments"""
    score: float = Field(..., ge=0, le=10, description="0-10 scale")
    symptoms: Optional[List[str]] = None
    triggers: Optional[List[str]] = None
    notes: Optional[str] = None
    responses: Optional[Dict[str, Any]] = None


# =============================================================================
# Journal entries
# =============================================================================

class JournalEntryRequest(BaseModel):
    """POST /api/journal-entries"""
    content: str = Field(..., min_length=1)
    title: Optional[str] = None
    moodId: Optional[str] = None
    tags: Optional[List[str]] = None
    private: bool = True


class JournalEntryUpdateRequest(BaseModel):
    """PATCH /api/journal-entries/{entry_id}"""
    content: Optional[str] = None
    title: Optional[str] = None
    moodId: Optional[str] = None
    tags: Optional[List[str]] = None
    private: Optional[bool] = None
