"""
Pydantic models for offline sync.
"""

from datetime import datetime
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, Field


class OfflineAssessment(BaseModel):
    """One stress assessment recorded while the client was offline."""
    score: float = Field(..., ge=0, le=10, description="0-10 scale")
    symptoms: Optional[List[str]] = None
    triggers: Optional[List[str]] = None
    notes: Optional[str] = None
    responses: Optional[Dict[str, Any]] = None
    recordedAt: Optional[datetime] = Field(None, description="When the assessment was taken")


class OfflineAssessmentsRequest(BaseModel):
    """POST /api/sync/stress-assessments"""
    assessments: List[OfflineAssessment] = Field(..., max_length=100)
    syncNow: bool = True
