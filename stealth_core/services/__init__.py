"""
StealthCore - Services Layer
"""

from stealth_core.services.stealth_service import StealthService

__all__ = ["StealthService"]
