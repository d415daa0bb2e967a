"""
MoodMentor backend.

Mood, stress and journal check-ins, mentor bookings, messaging and
in-app notifications on FastAPI and MongoDB.
"""
