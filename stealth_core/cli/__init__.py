"""
StealthCore - CLI
"""

from stealth_core.cli.main import app

__all__ = ["app"]
