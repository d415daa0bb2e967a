"""
Pydantic models for notification preferences.
"""

from pydantic import BaseModel


class NotificationPreferencesRequest(BaseModel):
    """PUT /api/notifications/preferences"""
    emailNotifications: bool
    appointmentReminders: bool
    patientUpdates: bool
    groupNotifications: bool
    marketingCommunications: bool
