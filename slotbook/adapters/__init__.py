"""
Adapters layer - Storage integrations.
"""

from .json_store import JsonBookingStore

__all__ = ["JsonBookingStore"]
