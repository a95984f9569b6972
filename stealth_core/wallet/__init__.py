"""
StealthCore - Wallet Layer
============================
Generazione e scansione stealth address.
"""

from stealth_core.wallet.stealth_address import (
    compute_shared_point,
    StealthAddressGenerator,
    StealthAddressScanner,
)

__all__ = [
    "compute_shared_point",
    "StealthAddressGenerator",
    "StealthAddressScanner",
]
