"""
Database module - async MongoDB connection via Motor.
"""

from common.database.mongodb import MongoDB, mask_uri

__all__ = ["MongoDB", "mask_uri"]
