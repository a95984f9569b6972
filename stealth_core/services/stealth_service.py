"""
StealthCore - Stealth Address Service
=======================================
Composition root: curva, hasher, generator e scanner da configurazione.

Security Level: HIGH
Last Updated: 2026-10-17
Version: 0.1.0
"""

from typing import Any, Dict, Iterable, List, Optional
import json
from pathlib import Path

from stealth_core.config import StealthSettings, get_settings
from stealth_core.domain.curves import CurveBackend, backend_from_settings, Scalar
from stealth_core.domain.hashing import HashToScalar, address_to_hex
from stealth_core.domain.keys import MetaAddress, MetaKeyPair, generate_meta_keypair
from stealth_core.domain.models import Announcement, GeneratedStealthAddress, StealthMatch
from stealth_core.errors import CryptoError, InvalidAnnouncementError
from stealth_core.logging_setup import get_logger
from stealth_core.wallet.stealth_address import (
    StealthAddressGenerator,
    StealthAddressScanner,
)


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("services.stealth")


# ============================================================================
# STEALTH SERVICE
# ============================================================================

class StealthService:
    """
    Service per gestione stealth addresses.

    Features:
    - Selezione curva una sola volta (fail fast se mancante)
    - Meta key pair e meta-address string
    - Generazione announcement
    - Scansione e recovery chiavi

    Attributes:
        config: StealthSettings
        backend: Curve backend attivo
        generator: StealthAddressGenerator
        scanner: StealthAddressScanner

    Examples:
        >>> service = StealthService(override_settings(curve="bn254"))
        >>> keys = service.create_meta_keypair()
        >>> generated = service.send_to(service.encode_meta_address(keys.meta_address))
    """

    def __init__(
        self,
        config: Optional[StealthSettings] = None,
        backend: Optional[CurveBackend] = None
    ):
        """
        Initialize stealth service.

        Args:
            config: Configurazione (default: get_settings())
            backend: Backend esplicito (default: dalla curva in config)

        Raises:
            ConfigurationError: Se nessuna curva è selezionata
        """
        self.config = config if config is not None else get_settings()
        self.backend = backend if backend is not None else backend_from_settings(self.config)

        self.hasher = HashToScalar(self.backend, self.config.domain_tag_bytes)
        self.generator = StealthAddressGenerator(
            self.backend,
            hasher=self.hasher,
            address_length=self.config.address_length,
        )
        self.scanner = StealthAddressScanner(
            self.backend,
            hasher=self.hasher,
            address_length=self.config.address_length,
            max_workers=self.config.scan_workers,
        )

        logger.info(
            "Stealth address service initialized",
            extra_data={
                "curve": self.backend.name,
                "address_length": self.config.address_length,
                "scan_workers": self.config.scan_workers,
            }
        )

    # ========================================================================
    # KEY MANAGEMENT
    # ========================================================================

    def create_meta_keypair(self) -> MetaKeyPair:
        """Nuova identità stealth (spending + viewing)"""
        return generate_meta_keypair(self.backend)

    def import_meta_keypair(self, spending_private_key: str, viewing_private_key: str) -> MetaKeyPair:
        """Importa identità da chiavi private hex"""
        return MetaKeyPair.from_keys(self.backend, spending_private_key, viewing_private_key)

    def encode_meta_address(self, meta: MetaAddress) -> str:
        """Meta-address in formato st:<chain>:0x..."""
        return meta.encode(self.backend, self.config.chain_prefix)

    def parse_meta_address(self, text: str) -> MetaAddress:
        """
        Parsing meta-address string.

        Raises:
            InvalidMetaAddressError: Formato o chiavi non validi
        """
        chain = MetaAddress.chain_of(text)
        if chain != self.config.chain_prefix:
            logger.warning(
                "Meta-address chain prefix differs from configuration",
                extra_data={"chain": chain, "configured": self.config.chain_prefix}
            )
        return MetaAddress.decode(self.backend, text)

    # ========================================================================
    # SENDER
    # ========================================================================

    def send_to(self, meta_address: "MetaAddress | str") -> GeneratedStealthAddress:
        """
        Genera announcement per un destinatario.

        Args:
            meta_address: MetaAddress o stringa st:<chain>:0x...

        Returns:
            GeneratedStealthAddress: Announcement e chiave effimera
        """
        if isinstance(meta_address, str):
            meta_address = self.parse_meta_address(meta_address)
        return self.generator.generate(meta_address)

    # ========================================================================
    # RECIPIENT
    # ========================================================================

    def check(self, announcement: Announcement, viewing_private_key: Scalar) -> bool:
        """View tag filter"""
        return self.scanner.fast_check(announcement, viewing_private_key)

    def recover(self, announcement: Announcement, keys: MetaKeyPair) -> Optional[StealthMatch]:
        """Recovery completa per un announcement"""
        return self.scanner.recover(
            announcement,
            keys.spending_private_key,
            keys.viewing_private_key,
        )

    def scan(self, announcements: Iterable[Announcement], keys: MetaKeyPair) -> List[StealthMatch]:
        """Scansione batch con le chiavi del destinatario"""
        return self.scanner.scan(
            announcements,
            keys.spending_private_key,
            keys.viewing_private_key,
        )

    def scan_view_tags(
        self,
        announcements: Iterable[Announcement],
        viewing_private_key: Scalar
    ) -> List[Announcement]:
        """Scansione delegata (solo viewing key)"""
        return self.scanner.scan_view_tags(announcements, viewing_private_key)

    # ========================================================================
    # ANNOUNCEMENT I/O
    # ========================================================================

    def announcement_to_dict(self, announcement: Announcement) -> Dict[str, Any]:
        return announcement.to_dict(self.backend)

    def announcement_from_dict(self, data: Dict[str, Any]) -> Announcement:
        return Announcement.from_dict(self.backend, data)

    def load_announcements(self, path: Path) -> List[Announcement]:
        """
        Carica announcement da file JSON.

        Il file contiene un oggetto o una lista di oggetti
        {ephemeral_public_key, stealth_address, view_tag}.

        Raises:
            InvalidAnnouncementError: JSON malformato
            DecodeError: Ephemeral key non decodificabile
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidAnnouncementError(
                f"Invalid announcements file: {e}",
                details={"path": str(path)}
            ) from e

        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise InvalidAnnouncementError(
                "Announcements file must contain an object or a list",
                details={"path": str(path)}
            )

        return [self.announcement_from_dict(item) for item in data]

    def dump_announcements(self, announcements: Iterable[Announcement], path: Path) -> int:
        """
        Salva announcement su file JSON.

        Returns:
            int: Numero di announcement scritti
        """
        items = [self.announcement_to_dict(ann) for ann in announcements]
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(items, f, indent=2)

        logger.debug("Announcements saved", extra_data={"path": str(path), "count": len(items)})
        return len(items)

    def match_to_dict(self, match: StealthMatch) -> Dict[str, Any]:
        """Match serializzato (include la chiave privata: solo output locale)"""
        backend = self.backend
        if not match.verify(backend):
            raise CryptoError("Recovered key does not match stealth public key")
        return {
            "stealth_address": address_to_hex(match.stealth_address),
            "stealth_public_key": backend.serialize_point(match.stealth_public_key).hex(),
            "stealth_private_key": backend.scalar_to_bytes(match.stealth_private_key).hex(),
            "announcement": self.announcement_to_dict(match.announcement),
        }


# ============================================================================
# EXPORT
# ============================================================================

__all__ = ["StealthService"]
