"""
StealthCore - Domain Models
=============================
Announcement pubblici e risultati di generazione/scansione.

Security Level: HIGH
Last Updated: 2026-10-17
Version: 0.1.0
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator

from stealth_core.constants import CurveId
from stealth_core.domain.curves import CurveBackend, CurvePoint, Scalar
from stealth_core.domain.hashing import address_to_hex
from stealth_core.errors import InvalidAnnouncementError


# ============================================================================
# ANNOUNCEMENT
# ============================================================================

@dataclass(frozen=True)
class Announcement:
    """
    Record pubblico pubblicato dal mittente per ogni trasferimento.

    Attributes:
        ephemeral_public_key: R = r * G
        stealth_address: AddressBytes della stealth public key
        view_tag: Primo byte di keccak256(serialize(S))
    """
    ephemeral_public_key: CurvePoint
    stealth_address: bytes
    view_tag: int

    def __post_init__(self):
        if not isinstance(self.ephemeral_public_key, CurvePoint):
            raise InvalidAnnouncementError(
                "ephemeral_public_key must be a CurvePoint",
                details={"field": "ephemeral_public_key"}
            )
        if not isinstance(self.stealth_address, (bytes, bytearray)) or not self.stealth_address:
            raise InvalidAnnouncementError(
                "stealth_address must be non-empty bytes",
                details={"field": "stealth_address"}
            )
        if isinstance(self.view_tag, bool) or not isinstance(self.view_tag, int) \
                or not 0 <= self.view_tag <= 0xFF:
            raise InvalidAnnouncementError(
                "view_tag must be a single byte (0-255)",
                details={"field": "view_tag", "value": self.view_tag}
            )
        if isinstance(self.stealth_address, bytearray):
            object.__setattr__(self, "stealth_address", bytes(self.stealth_address))

    @property
    def curve(self):
        return self.ephemeral_public_key.curve

    def to_dict(self, backend: CurveBackend) -> Dict[str, Any]:
        """
        Serializza in dict (hex).

        Returns:
            dict: {curve, ephemeral_public_key, stealth_address, view_tag}
        """
        return {
            "curve": backend.name,
            "ephemeral_public_key": backend.serialize_point(self.ephemeral_public_key).hex(),
            "stealth_address": address_to_hex(self.stealth_address),
            "view_tag": self.view_tag,
        }

    @classmethod
    def from_dict(cls, backend: CurveBackend, data: Dict[str, Any]) -> "Announcement":
        """
        Deserializza da dict.

        Raises:
            InvalidAnnouncementError: Campi mancanti, hex invalido o curva diversa
            DecodeError: Ephemeral public key non decodificabile
        """
        try:
            ephemeral_hex = data["ephemeral_public_key"]
            address_hex = data["stealth_address"]
            view_tag = data["view_tag"]
        except (KeyError, TypeError) as e:
            raise InvalidAnnouncementError(f"Missing announcement field: {e}") from e

        curve = data.get("curve")
        if curve is not None:
            try:
                curve_id = CurveId.parse(curve)
            except ValueError as e:
                raise InvalidAnnouncementError(
                    f"Unsupported announcement curve: {curve}",
                    details={"field": "curve"}
                ) from e
            if curve_id != backend.curve_id:
                raise InvalidAnnouncementError(
                    f"Announcement is for curve {curve_id.value}, backend is {backend.name}",
                    details={"field": "curve"}
                )

        try:
            ephemeral_bytes = bytes.fromhex(_strip_0x(ephemeral_hex))
            address = bytes.fromhex(_strip_0x(address_hex))
        except (ValueError, AttributeError) as e:
            raise InvalidAnnouncementError(f"Invalid hex field: {e}") from e

        if isinstance(view_tag, str):
            try:
                view_tag = int(view_tag, 0)
            except ValueError as e:
                raise InvalidAnnouncementError(
                    "Invalid view_tag",
                    details={"field": "view_tag"}
                ) from e

        return cls(
            ephemeral_public_key=backend.deserialize_point(ephemeral_bytes),
            stealth_address=address,
            view_tag=view_tag,
        )


def _strip_0x(value: str) -> str:
    if value.startswith(("0x", "0X")):
        return value[2:]
    return value


# ============================================================================
# GENERATION RESULT
# ============================================================================

@dataclass(frozen=True)
class GeneratedStealthAddress:
    """
    Output lato mittente.

    Unpackable come (announcement, ephemeral_private_key). La chiave
    effimera va scartata dopo la pubblicazione.
    """
    announcement: Announcement
    ephemeral_private_key: Scalar = field(repr=False)
    stealth_public_key: CurvePoint

    @property
    def stealth_address(self) -> bytes:
        return self.announcement.stealth_address

    def __iter__(self) -> Iterator:
        yield self.announcement
        yield self.ephemeral_private_key


# ============================================================================
# SCAN RESULT
# ============================================================================

@dataclass(frozen=True)
class StealthMatch:
    """
    Announcement riconosciuto dal destinatario.

    Attributes:
        announcement: Announcement di origine
        stealth_address: AddressBytes (uguale a announcement.stealth_address)
        stealth_private_key: spending_sk + s (mod r)
        stealth_public_key: stealth_private_key * G
    """
    announcement: Announcement
    stealth_address: bytes
    stealth_private_key: Scalar = field(repr=False)
    stealth_public_key: CurvePoint

    def verify(self, backend: CurveBackend) -> bool:
        """Check stealth_private_key * G == stealth_public_key"""
        derived = backend.scalar_mul(backend.base_point(), self.stealth_private_key)
        return derived == self.stealth_public_key


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "Announcement",
    "GeneratedStealthAddress",
    "StealthMatch",
]
