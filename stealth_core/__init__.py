"""
StealthCore - ERC-5564 Stealth Addresses
==========================================
Core crittografico stealth address su BN254, BLS12-381 e BLS12-377.

Version: 0.1.0
Author: StealthCore Team
License: MIT
"""

__version__ = "0.1.0"
__author__ = "StealthCore Team"
__license__ = "MIT"

# Domain
from stealth_core.domain.curves import (
    CurveBackend,
    CurvePoint,
    WeierstrassBackend,
    get_curve_backend,
)
from stealth_core.domain.hashing import HashToScalar
from stealth_core.domain.keys import (
    KeyPair,
    MetaAddress,
    MetaKeyPair,
    generate_keypair,
    generate_meta_keypair,
    build_meta_address,
)
from stealth_core.domain.models import (
    Announcement,
    GeneratedStealthAddress,
    StealthMatch,
)

# Wallet
from stealth_core.wallet.stealth_address import (
    StealthAddressGenerator,
    StealthAddressScanner,
)

# Services
from stealth_core.services.stealth_service import StealthService

# Config
from stealth_core.config import StealthSettings, get_settings

# Constants
from stealth_core.constants import CurveId

__all__ = [
    # Version
    "__version__",

    # Domain
    "CurvePoint",
    "CurveBackend",
    "WeierstrassBackend",
    "get_curve_backend",
    "HashToScalar",
    "KeyPair",
    "MetaAddress",
    "MetaKeyPair",
    "generate_keypair",
    "generate_meta_keypair",
    "build_meta_address",
    "Announcement",
    "GeneratedStealthAddress",
    "StealthMatch",

    # Wallet
    "StealthAddressGenerator",
    "StealthAddressScanner",

    # Services
    "StealthService",

    # Config
    "StealthSettings",
    "get_settings",

    # Constants
    "CurveId",
]
