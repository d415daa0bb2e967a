"""
MoodMentor Pipelines.

Business logic orchestration functions.
"""
