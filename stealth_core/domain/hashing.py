"""
StealthCore - Hashing Layer
=============================
Keccak-256, hash-to-scalar, view tag e derivazione AddressBytes.

Security Level: CRITICAL
Last Updated: 2026-10-17
Version: 0.1.0

SECURITY NOTICE:
hash-to-scalar lega lo shared point DH al campo scalare usato per il
blinding della spending key. Endianness, ordine dei byte in input e
troncamento del digest sono parte del protocollo.

Conventions:
- derive(S, tag) = keccak256(serialize(S) || tag) mod r  (big-endian)
- view_tag(S)    = keccak256(serialize(S))[0]
- address(P)     = keccak256(serialize(P))[-address_length:]

Dependencies:
- pycryptodome (Keccak-256, pre-NIST padding)
- hmac (stdlib, constant-time compare)
"""

import hmac
from typing import Optional

from Crypto.Hash import keccak

from stealth_core.constants import (
    DEFAULT_ADDRESS_LENGTH,
    KECCAK256_DIGEST_SIZE,
    MIN_ADDRESS_LENGTH,
    MAX_ADDRESS_LENGTH,
)
from stealth_core.domain.curves import CurveBackend, CurvePoint, Scalar
from stealth_core.errors import CryptoError


# ============================================================================
# HASH FUNCTIONS
# ============================================================================

def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 (Ethereum variant, non SHA3-256).

    Args:
        data: Input data da hashare

    Returns:
        bytes: 32-byte digest

    Examples:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    if not isinstance(data, (bytes, bytearray)):
        raise CryptoError(
            f"keccak256 requires bytes, got {type(data).__name__}",
            code="INVALID_INPUT_TYPE"
        )

    hasher = keccak.new(digest_bytes=KECCAK256_DIGEST_SIZE)
    hasher.update(bytes(data))
    return hasher.digest()


def constant_time_equal(a: bytes, b: bytes) -> bool:
    """
    Confronto constant-time (prevent timing attacks).

    Lunghezze diverse danno False.
    """
    return hmac.compare_digest(bytes(a), bytes(b))


def _shared_point_bytes(backend: CurveBackend, shared_point: CurvePoint) -> bytes:
    if shared_point.is_infinity():
        raise CryptoError("Shared point is the point at infinity", code="DEGENERATE_SHARED_POINT")
    return backend.serialize_point(shared_point)


# ============================================================================
# HASH TO SCALAR
# ============================================================================

class HashToScalar:
    """
    Derivazione deterministica di uno scalare da uno shared point.

    Attributes:
        backend: Curve backend (serializzazione e modulo r)
        domain_tag: Tag di default appeso all'input (None = nessuno)

    Examples:
        >>> h = HashToScalar(backend)
        >>> h.derive(shared) == h.derive(shared)
        True
    """

    def __init__(
        self,
        backend: CurveBackend,
        domain_tag: Optional[bytes] = None
    ):
        if domain_tag is not None and not isinstance(domain_tag, (bytes, bytearray)):
            raise CryptoError(
                f"domain_tag must be bytes, got {type(domain_tag).__name__}",
                code="INVALID_INPUT_TYPE"
            )
        self.backend = backend
        self.domain_tag = bytes(domain_tag) if domain_tag else None

    def derive(
        self,
        shared_point: CurvePoint,
        domain_tag: Optional[bytes] = None
    ) -> Scalar:
        """
        keccak256(serialize(S) || tag) ridotto mod r.

        Args:
            shared_point: Shared point DH
            domain_tag: Override del tag di istanza

        Returns:
            int: Scalare in [0, r)

        Raises:
            CryptoError: Se S è il punto all'infinito
        """
        tag = domain_tag if domain_tag is not None else self.domain_tag
        data = _shared_point_bytes(self.backend, shared_point)
        if tag:
            data += bytes(tag)
        return self.backend.scalar_from_bytes(keccak256(data))

    def hash_bytes(self, data: bytes) -> Scalar:
        """Hash-to-field su bytes arbitrari"""
        return self.backend.scalar_from_bytes(keccak256(data))

    def __repr__(self) -> str:
        return f"HashToScalar({self.backend.name}, tagged={self.domain_tag is not None})"


# ============================================================================
# VIEW TAG / ADDRESS
# ============================================================================

def compute_view_tag(backend: CurveBackend, shared_point: CurvePoint) -> int:
    """
    View tag: primo byte di keccak256(serialize(S)).

    Filtro economico a 1 byte, non prova di ownership.
    """
    return keccak256(_shared_point_bytes(backend, shared_point))[0]


def validate_address_length(address_length: int) -> int:
    if isinstance(address_length, bool) or not isinstance(address_length, int):
        raise CryptoError("address_length must be int", code="INVALID_INPUT_TYPE")
    if not MIN_ADDRESS_LENGTH <= address_length <= MAX_ADDRESS_LENGTH:
        raise CryptoError(
            f"address_length must be in [{MIN_ADDRESS_LENGTH}, {MAX_ADDRESS_LENGTH}]",
            code="INVALID_ADDRESS_LENGTH",
            details={"address_length": address_length}
        )
    return address_length


def point_to_address(
    backend: CurveBackend,
    point: CurvePoint,
    address_length: int = DEFAULT_ADDRESS_LENGTH
) -> bytes:
    """
    AddressBytes di una stealth public key.

    Ultimi address_length bytes di keccak256(serialize(P)).

    Raises:
        CryptoError: Se P è il punto all'infinito
    """
    validate_address_length(address_length)
    if point.is_infinity():
        raise CryptoError("Cannot derive an address from the point at infinity")
    return keccak256(backend.serialize_point(point))[-address_length:]


def address_to_hex(address: bytes) -> str:
    """AddressBytes come stringa 0x-prefixed"""
    return "0x" + address.hex()


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "keccak256",
    "constant_time_equal",
    "HashToScalar",
    "compute_view_tag",
    "validate_address_length",
    "point_to_address",
    "address_to_hex",
]
