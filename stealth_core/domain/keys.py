"""
StealthCore - Key Pairs & Meta-Addresses
==========================================
Generazione chiavi e assemblaggio meta-address (spending + viewing).

Security Level: CRITICAL
Last Updated: 2026-10-17
Version: 0.1.0

Due keypair indipendenti: la viewing key può essere delegata a uno
scanner senza cedere la spending authority.

Meta-address string format (ERC-5564):
    st:<chain>:0x<spending_public_key><viewing_public_key>
"""

from dataclasses import dataclass, field
from typing import Dict

from stealth_core.constants import META_ADDRESS_PREFIX, DEFAULT_CHAIN_PREFIX
from stealth_core.domain.curves import CurveBackend, CurvePoint, Scalar
from stealth_core.errors import (
    CryptoError,
    DecodeError,
    InvalidKeyError,
    InvalidMetaAddressError,
)
from stealth_core.logging_setup import get_logger, short_hex


logger = get_logger("keys")


# ============================================================================
# KEY DERIVATION
# ============================================================================

def derive_public_key(backend: CurveBackend, private_key: Scalar) -> CurvePoint:
    """
    Public key = private_key * G.

    Raises:
        InvalidKeyError: Se private_key non è in [1, r-1]
    """
    backend.validate_private_key(private_key)
    return backend.scalar_mul(backend.base_point(), private_key)


# ============================================================================
# KEY PAIR
# ============================================================================

@dataclass(frozen=True)
class KeyPair:
    """
    Coppia (private, public) con public = private * G.

    La chiave privata non compare mai in repr.
    """
    private_key: Scalar = field(repr=False)
    public_key: CurvePoint

    @classmethod
    def from_private_key(cls, backend: CurveBackend, private_key: Scalar) -> "KeyPair":
        """Ricostruisce la keypair da una chiave privata"""
        return cls(private_key=private_key, public_key=derive_public_key(backend, private_key))

    def is_consistent(self, backend: CurveBackend) -> bool:
        """Check public == private * G"""
        try:
            return derive_public_key(backend, self.private_key) == self.public_key
        except CryptoError:
            return False


def generate_keypair(backend: CurveBackend) -> KeyPair:
    """
    Genera keypair con scalare uniforme da CSPRNG.

    Examples:
        >>> kp = generate_keypair(backend)
        >>> backend.scalar_mul(backend.base_point(), kp.private_key) == kp.public_key
        True
    """
    private_key = backend.random_scalar()
    return KeyPair(
        private_key=private_key,
        public_key=backend.scalar_mul(backend.base_point(), private_key),
    )


# ============================================================================
# META-ADDRESS
# ============================================================================

@dataclass(frozen=True)
class MetaAddress:
    """
    Meta-address pubblico del destinatario.

    Attributes:
        spending_public_key: Chiave pubblica di spesa
        viewing_public_key: Chiave pubblica di scansione
    """
    spending_public_key: CurvePoint
    viewing_public_key: CurvePoint

    def to_bytes(self, backend: CurveBackend) -> bytes:
        """spending || viewing, encoding compresso"""
        return (
            backend.serialize_point(self.spending_public_key)
            + backend.serialize_point(self.viewing_public_key)
        )

    @classmethod
    def from_bytes(cls, backend: CurveBackend, data: bytes) -> "MetaAddress":
        """
        Decodifica spending || viewing.

        Raises:
            InvalidMetaAddressError: Lunghezza errata o chiavi non valide
        """
        size = backend.point_size
        if len(data) != 2 * size:
            raise InvalidMetaAddressError(
                f"Invalid meta-address length: {len(data)} (expected {2 * size})",
                details={"curve": backend.name}
            )

        keys = {}
        for name, chunk in (
            ("spending_public_key", data[:size]),
            ("viewing_public_key", data[size:]),
        ):
            try:
                keys[name] = backend.deserialize_point(chunk)
            except DecodeError as e:
                raise InvalidMetaAddressError(
                    f"Invalid {name}: {e.message}",
                    details={"field": name, "curve": backend.name}
                ) from e

        return cls(**keys)

    def encode(self, backend: CurveBackend, chain: str = DEFAULT_CHAIN_PREFIX) -> str:
        """
        Formato stringa st:<chain>:0x<spend><view>.

        Example:
            >>> meta.encode(backend)
            'st:eth:0x01...'
        """
        return f"{META_ADDRESS_PREFIX}:{chain}:0x{self.to_bytes(backend).hex()}"

    @classmethod
    def decode(cls, backend: CurveBackend, text: str) -> "MetaAddress":
        """
        Parsing stringa meta-address.

        Raises:
            InvalidMetaAddressError: Formato o chiavi non validi
        """
        parts = text.strip().split(":")
        if len(parts) != 3 or parts[0] != META_ADDRESS_PREFIX or not parts[1]:
            raise InvalidMetaAddressError(
                "Invalid stealth meta-address format (expected st:<chain>:0x<keys>)"
            )

        payload = parts[2]
        if payload.startswith(("0x", "0X")):
            payload = payload[2:]

        try:
            data = bytes.fromhex(payload)
        except ValueError as e:
            raise InvalidMetaAddressError("Meta-address payload is not hex") from e

        return cls.from_bytes(backend, data)

    @staticmethod
    def chain_of(text: str) -> str:
        """Prefisso chain di una stringa meta-address"""
        parts = text.strip().split(":")
        if len(parts) != 3 or parts[0] != META_ADDRESS_PREFIX:
            raise InvalidMetaAddressError("Invalid stealth meta-address format")
        return parts[1]


def validate_meta_address(backend: CurveBackend, meta: MetaAddress) -> MetaAddress:
    """
    Verifica entrambe le chiavi pubbliche (curva, sottogruppo, non infinito).

    Raises:
        InvalidMetaAddressError: details["field"] indica la chiave invalida
    """
    for name in ("spending_public_key", "viewing_public_key"):
        point = getattr(meta, name)
        try:
            if not isinstance(point, CurvePoint):
                raise CryptoError(f"{name} is not a CurvePoint")
            backend.validate_point(point)
        except CryptoError as e:
            raise InvalidMetaAddressError(
                f"Invalid {name}: {e.message}",
                details={"field": name, "curve": backend.name}
            ) from e

        if point.is_infinity():
            raise InvalidMetaAddressError(
                f"Invalid {name}: point at infinity",
                details={"field": name, "curve": backend.name}
            )
    return meta


def build_meta_address(spending: KeyPair, viewing: KeyPair) -> MetaAddress:
    """
    Accoppia le due chiavi pubbliche. Nessun altro calcolo.

    Raises:
        InvalidMetaAddressError: Se le chiavi sono su curve diverse
    """
    if spending.public_key.curve != viewing.public_key.curve:
        raise InvalidMetaAddressError(
            "Spending and viewing keys belong to different curves",
            details={
                "spending_curve": spending.public_key.curve.value,
                "viewing_curve": viewing.public_key.curve.value,
            }
        )
    return MetaAddress(
        spending_public_key=spending.public_key,
        viewing_public_key=viewing.public_key,
    )


# ============================================================================
# META KEY PAIR (private, recipient only)
# ============================================================================

@dataclass(frozen=True)
class MetaKeyPair:
    """
    Chiavi private del destinatario (spending + viewing).
    """
    spending: KeyPair
    viewing: KeyPair

    @property
    def spending_private_key(self) -> Scalar:
        return self.spending.private_key

    @property
    def viewing_private_key(self) -> Scalar:
        return self.viewing.private_key

    @property
    def meta_address(self) -> MetaAddress:
        return build_meta_address(self.spending, self.viewing)

    def export_keys(self, backend: CurveBackend) -> Dict[str, str]:
        """
        Esporta chiavi (hex big-endian).

        La persistenza sicura è responsabilità del chiamante.
        """
        return {
            "curve": backend.name,
            "spending_private_key": backend.scalar_to_bytes(self.spending_private_key).hex(),
            "viewing_private_key": backend.scalar_to_bytes(self.viewing_private_key).hex(),
            "spending_public_key": backend.serialize_point(self.spending.public_key).hex(),
            "viewing_public_key": backend.serialize_point(self.viewing.public_key).hex(),
        }

    @classmethod
    def from_keys(
        cls,
        backend: CurveBackend,
        spending_private_key: str,
        viewing_private_key: str
    ) -> "MetaKeyPair":
        """
        Importa da chiavi private hex.

        Raises:
            InvalidKeyError: Se una chiave non è uno scalare valido non nullo
        """
        scalars = []
        for name, value in (
            ("spending_private_key", spending_private_key),
            ("viewing_private_key", viewing_private_key),
        ):
            text = value.strip()
            if text.startswith(("0x", "0X")):
                text = text[2:]
            try:
                scalar = backend.scalar_from_canonical_bytes(bytes.fromhex(text))
            except (ValueError, DecodeError) as e:
                raise InvalidKeyError(
                    f"Invalid {name}",
                    details={"field": name, "curve": backend.name}
                ) from e
            scalars.append(backend.validate_private_key(scalar))

        return cls(
            spending=KeyPair.from_private_key(backend, scalars[0]),
            viewing=KeyPair.from_private_key(backend, scalars[1]),
        )


def generate_meta_keypair(backend: CurveBackend) -> MetaKeyPair:
    """
    Genera identità stealth completa (due keypair indipendenti).
    """
    meta_keys = MetaKeyPair(
        spending=generate_keypair(backend),
        viewing=generate_keypair(backend),
    )
    logger.info(
        "Stealth meta key pair created",
        extra_data={
            "curve": backend.name,
            "spending_pub": short_hex(backend.serialize_point(meta_keys.spending.public_key)),
            "viewing_pub": short_hex(backend.serialize_point(meta_keys.viewing.public_key)),
        }
    )
    return meta_keys


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "KeyPair",
    "MetaAddress",
    "MetaKeyPair",
    "derive_public_key",
    "generate_keypair",
    "generate_meta_keypair",
    "build_meta_address",
    "validate_meta_address",
]
