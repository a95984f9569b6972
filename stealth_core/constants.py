"""
StealthCore - Core Constants
==============================
Costanti immutabili del protocollo stealth address (ERC-5564).

Security Level: CRITICAL
Last Updated: 2026-10-17
Version: 0.1.0

IMPORTANTE: encoding, hash e view tag sono un confine di compatibilità
tra implementazioni. Ogni modifica qui è un breaking change.
"""

from enum import Enum
from typing import Final


# ============================================================================
# IDENTIFICAZIONE PROGETTO
# ============================================================================

PROJECT_NAME: Final[str] = "StealthCore"
PROTOCOL_NAME: Final[str] = "ERC-5564"


# ============================================================================
# CURVE SUPPORTATE
# ============================================================================

class CurveId(str, Enum):
    """
    Curve supportate per il backend aritmetico.

    Una sola curva è attiva per istanza di backend.
    """
    BN254 = "bn254"
    BLS12_381 = "bls12_381"
    BLS12_377 = "bls12_377"

    @classmethod
    def parse(cls, value: "str | CurveId") -> "CurveId":
        """
        Normalizza nome curva (case-insensitive, '-' == '_').

        Raises:
            ValueError: Se la curva non è supportata
        """
        if isinstance(value, CurveId):
            return value

        normalized = str(value).strip().lower().replace("-", "_")
        aliases = {
            "bn128": "bn254",
            "alt_bn128": "bn254",
        }
        normalized = aliases.get(normalized, normalized)

        for curve in cls:
            if curve.value == normalized:
                return curve

        raise ValueError(f"Unsupported curve: {value}")


# ============================================================================
# BLS12-377 PARAMETERS (G1, y^2 = x^3 + 1)
# ============================================================================

BLS12_377_FIELD_MODULUS: Final[int] = int(
    "01ae3a4617c510eac63b05c06ca1493b1a22d9f300f5138f1ef3622fba094800"
    "170b5d44300000008508c00000000001",
    16,
)

BLS12_377_CURVE_ORDER: Final[int] = int(
    "12ab655e9a2ca55660b44d1e5c37b00159aa76fed00000010a11800000000001",
    16,
)

BLS12_377_G1_X: Final[int] = int(
    "008848defe740a67c8fc6225bf87ff5485951e2caa9d41bb188282c8bd37cb5c"
    "d5481512ffcd394eeab9b16eb21be9ef",
    16,
)

BLS12_377_G1_Y: Final[int] = int(
    "01914a69c5102eff1f674f5d30afeec4bd7fb348ca3e52d96d182ad44fb82305"
    "c2fe3d3634a9591afd82de55559c8ea6",
    16,
)

BLS12_377_B: Final[int] = 1


# ============================================================================
# ENCODING
# ============================================================================

# Flag bits (most significant bits of the last byte, little-endian x)
SW_FLAG_Y_NEGATIVE: Final[int] = 0x80
SW_FLAG_INFINITY: Final[int] = 0x40

# ZCash flags (BLS12-381, first byte, big-endian x)
ZCASH_FLAG_COMPRESSED: Final[int] = 0x80
ZCASH_FLAG_INFINITY: Final[int] = 0x40
ZCASH_FLAG_SIGN: Final[int] = 0x20


# ============================================================================
# HASHING / ADDRESSES
# ============================================================================

KECCAK256_DIGEST_SIZE: Final[int] = 32

# Account-model chains (Ethereum): 20 bytes
DEFAULT_ADDRESS_LENGTH: Final[int] = 20
MIN_ADDRESS_LENGTH: Final[int] = 1
MAX_ADDRESS_LENGTH: Final[int] = KECCAK256_DIGEST_SIZE

# ============================================================================
# META-ADDRESS FORMAT
# ============================================================================

# st:<chain>:0x<spending_public_key><viewing_public_key>
META_ADDRESS_PREFIX: Final[str] = "st"
DEFAULT_CHAIN_PREFIX: Final[str] = "eth"


# ============================================================================
# SCANNING
# ============================================================================

DEFAULT_SCAN_WORKERS: Final[int] = 1
MAX_SCAN_WORKERS: Final[int] = 64


__all__ = [
    "PROJECT_NAME",
    "PROTOCOL_NAME",
    "CurveId",
    "BLS12_377_FIELD_MODULUS",
    "BLS12_377_CURVE_ORDER",
    "BLS12_377_G1_X",
    "BLS12_377_G1_Y",
    "BLS12_377_B",
    "SW_FLAG_Y_NEGATIVE",
    "SW_FLAG_INFINITY",
    "ZCASH_FLAG_COMPRESSED",
    "ZCASH_FLAG_INFINITY",
    "ZCASH_FLAG_SIGN",
    "KECCAK256_DIGEST_SIZE",
    "DEFAULT_ADDRESS_LENGTH",
    "MIN_ADDRESS_LENGTH",
    "MAX_ADDRESS_LENGTH",
    "META_ADDRESS_PREFIX",
    "DEFAULT_CHAIN_PREFIX",
    "DEFAULT_SCAN_WORKERS",
    "MAX_SCAN_WORKERS",
]
