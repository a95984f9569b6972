"""
StealthCore - Stealth Addresses
=================================
Derivazione lato mittente e scansione lato destinatario (ERC-5564).

Implementazione completa con ECDH dual-key system, generica sulla curva.

Security Level: CRITICAL
Last Updated: 2026-10-17
Version: 0.1.0

Protocol:
    Mittente (meta-address K_spend, K_view):
        r <- random, R = r*G
        S = r * K_view
        s = H(S)
        P = K_spend + s*G
        announcement = (R, address(P), view_tag(S))

    Destinatario (k_spend, k_view):
        S = k_view * R               (== r * K_view)
        view_tag(S) == tag ?         (filtro, 1/256 falsi positivi)
        address((k_spend + s)*G) == address ?   (prova di ownership)
        stealth_sk = k_spend + s mod n
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, TypeVar

from stealth_core.constants import DEFAULT_ADDRESS_LENGTH, MAX_SCAN_WORKERS
from stealth_core.domain.curves import CurveBackend, CurvePoint, Scalar
from stealth_core.domain.hashing import (
    HashToScalar,
    compute_view_tag,
    constant_time_equal,
    point_to_address,
    validate_address_length,
)
from stealth_core.domain.keys import MetaAddress, validate_meta_address
from stealth_core.domain.models import (
    Announcement,
    GeneratedStealthAddress,
    StealthMatch,
)
from stealth_core.errors import (
    ConfigurationError,
    CryptoError,
    DecodeError,
    InvalidMetaAddressError,
)
from stealth_core.logging_setup import PerformanceLogger, get_logger, short_hex


logger = get_logger("stealth")

T = TypeVar("T")


# ============================================================================
# ECDH
# ============================================================================

def compute_shared_point(
    backend: CurveBackend,
    private_key: Scalar,
    public_key: CurvePoint
) -> CurvePoint:
    """
    Shared point Diffie-Hellman S = private_key * public_key.

    Args:
        backend: Curve backend
        private_key: Scalare in [1, r-1]
        public_key: Punto G1 valido, non infinito

    Returns:
        CurvePoint: Shared point

    Raises:
        InvalidKeyError: Chiave privata fuori range
        DecodeError: Chiave pubblica non valida o infinito
    """
    backend.validate_private_key(private_key)

    try:
        backend.validate_point(public_key)
    except DecodeError:
        raise
    except CryptoError as e:
        raise DecodeError(e.message, details=e.details) from e

    if public_key.is_infinity():
        raise DecodeError(
            "Public key is the point at infinity",
            details={"curve": backend.name}
        )

    return backend.scalar_mul(public_key, private_key)


def _view_tag_matches(candidate: int, expected: int) -> bool:
    return constant_time_equal(bytes([candidate]), bytes([expected & 0xFF]))


# ============================================================================
# GENERATOR (sender side)
# ============================================================================

class StealthAddressGenerator:
    """
    Genera stealth address one-time per un meta-address.

    Examples:
        >>> generator = StealthAddressGenerator(backend)
        >>> announcement, ephemeral_sk = generator.generate(meta)
    """

    def __init__(
        self,
        backend: CurveBackend,
        hasher: Optional[HashToScalar] = None,
        address_length: int = DEFAULT_ADDRESS_LENGTH
    ):
        self.backend = backend
        self.hasher = hasher or HashToScalar(backend)
        self.address_length = validate_address_length(address_length)

        if self.hasher.backend.curve_id != backend.curve_id:
            raise CryptoError(
                "HashToScalar and generator use different curves",
                code="CURVE_MISMATCH"
            )

    def _validate_meta(self, meta: MetaAddress) -> MetaAddress:
        if not isinstance(meta, MetaAddress):
            raise InvalidMetaAddressError(
                f"Expected MetaAddress, got {type(meta).__name__}"
            )
        return validate_meta_address(self.backend, meta)

    def generate(self, meta: MetaAddress) -> GeneratedStealthAddress:
        """
        Genera announcement per destinatario.

        Args:
            meta: Meta-address pubblico del destinatario

        Returns:
            GeneratedStealthAddress: (announcement, ephemeral_private_key, ...)

        Raises:
            InvalidMetaAddressError: Se una chiave pubblica non è valida
        """
        return self.generate_with_ephemeral(meta, self.backend.random_scalar())

    def generate_with_ephemeral(
        self,
        meta: MetaAddress,
        ephemeral_private_key: Scalar
    ) -> GeneratedStealthAddress:
        """
        Derivazione deterministica con chiave effimera fornita.

        Args:
            meta: Meta-address pubblico del destinatario
            ephemeral_private_key: r in [1, n-1]

        Returns:
            GeneratedStealthAddress: Announcement, r e stealth public key

        Raises:
            InvalidMetaAddressError: Se una chiave pubblica non è valida
            InvalidKeyError: Se r non è una chiave privata valida
        """
        backend = self.backend
        self._validate_meta(meta)
        backend.validate_private_key(ephemeral_private_key)

        # R = r * G
        ephemeral_public_key = backend.scalar_mul(backend.base_point(), ephemeral_private_key)

        # S = r * K_view
        shared_point = backend.scalar_mul(meta.viewing_public_key, ephemeral_private_key)

        # P = K_spend + H(S) * G
        shared_scalar = self.hasher.derive(shared_point)
        stealth_public_key = backend.point_add(
            meta.spending_public_key,
            backend.scalar_mul(backend.base_point(), shared_scalar)
        )

        announcement = Announcement(
            ephemeral_public_key=ephemeral_public_key,
            stealth_address=point_to_address(backend, stealth_public_key, self.address_length),
            view_tag=compute_view_tag(backend, shared_point),
        )

        logger.debug(
            "Stealth address generated",
            extra_data={
                "curve": backend.name,
                "address": short_hex(announcement.stealth_address),
                "view_tag": announcement.view_tag,
            }
        )

        return GeneratedStealthAddress(
            announcement=announcement,
            ephemeral_private_key=ephemeral_private_key,
            stealth_public_key=stealth_public_key,
        )


# ============================================================================
# SCANNER (recipient side)
# ============================================================================

class StealthAddressScanner:
    """
    Scansione announcement con la viewing key.

    Nessuno stato mutabile: un'istanza può servire più thread.

    Examples:
        >>> scanner = StealthAddressScanner(backend, max_workers=4)
        >>> matches = scanner.scan(announcements, spend_sk, view_sk)
    """

    def __init__(
        self,
        backend: CurveBackend,
        hasher: Optional[HashToScalar] = None,
        address_length: int = DEFAULT_ADDRESS_LENGTH,
        max_workers: Optional[int] = None
    ):
        self.backend = backend
        self.hasher = hasher or HashToScalar(backend)
        self.address_length = validate_address_length(address_length)

        if self.hasher.backend.curve_id != backend.curve_id:
            raise CryptoError(
                "HashToScalar and scanner use different curves",
                code="CURVE_MISMATCH"
            )

        if max_workers is not None and not 1 <= max_workers <= MAX_SCAN_WORKERS:
            raise ConfigurationError(
                f"max_workers must be in [1, {MAX_SCAN_WORKERS}]",
                details={"max_workers": max_workers}
            )
        self.max_workers = max_workers or 1

    # ========================================================================
    # SINGLE ANNOUNCEMENT
    # ========================================================================

    def _shared_point(self, announcement: Announcement, viewing_private_key: Scalar) -> CurvePoint:
        # S' = k_view * R
        return compute_shared_point(
            self.backend,
            viewing_private_key,
            announcement.ephemeral_public_key
        )

    def fast_check(self, announcement: Announcement, viewing_private_key: Scalar) -> bool:
        """
        Filtro view tag.

        False esclude con certezza; True è solo un candidato
        (1/256 di falsi positivi), non una prova di ownership.

        Raises:
            DecodeError: Ephemeral public key non valida o infinito
        """
        shared_point = self._shared_point(announcement, viewing_private_key)
        return _view_tag_matches(
            compute_view_tag(self.backend, shared_point),
            announcement.view_tag
        )

    def recover(
        self,
        announcement: Announcement,
        spending_private_key: Scalar,
        viewing_private_key: Scalar
    ) -> Optional[StealthMatch]:
        """
        Recupera stealth private key se l'announcement è nostro.

        Args:
            announcement: Announcement pubblicato
            spending_private_key: k_spend
            viewing_private_key: k_view

        Returns:
            Optional[StealthMatch]: Match con chiave privata, None se non nostro

        Raises:
            DecodeError: Ephemeral public key non valida o infinito
            InvalidKeyError: Chiavi private fuori range
        """
        backend = self.backend
        backend.validate_private_key(spending_private_key)

        shared_point = self._shared_point(announcement, viewing_private_key)

        if not _view_tag_matches(compute_view_tag(backend, shared_point), announcement.view_tag):
            return None

        shared_scalar = self.hasher.derive(shared_point)

        # K_spend + s*G == (k_spend + s) * G
        stealth_private_key = backend.scalar_add(spending_private_key, shared_scalar)
        stealth_public_key = backend.scalar_mul(backend.base_point(), stealth_private_key)
        if stealth_public_key.is_infinity():
            return None

        computed_address = point_to_address(backend, stealth_public_key, self.address_length)
        if not constant_time_equal(computed_address, announcement.stealth_address):
            logger.debug(
                "View tag matched but address differs",
                extra_data={"address": short_hex(announcement.stealth_address)}
            )
            return None

        logger.info(
            "Stealth payment found",
            extra_data={
                "curve": backend.name,
                "address": short_hex(computed_address),
            }
        )

        return StealthMatch(
            announcement=announcement,
            stealth_address=computed_address,
            stealth_private_key=stealth_private_key,
            stealth_public_key=stealth_public_key,
        )

    def derive_stealth_private_key(
        self,
        ephemeral_public_key: CurvePoint,
        viewing_private_key: Scalar,
        spending_private_key: Scalar,
        expected_view_tag: int
    ) -> Optional[Scalar]:
        """
        Stealth private key k_spend + H(k_view * R), gated dal view tag.

        Non confronta l'indirizzo: un risultato non nullo è ancora
        soggetto al tasso 1/256 di falsi positivi del tag.

        Returns:
            Optional[int]: Chiave privata, None se il tag non corrisponde

        Raises:
            DecodeError: Ephemeral public key non valida o infinito
        """
        backend = self.backend
        backend.validate_private_key(spending_private_key)

        shared_point = compute_shared_point(backend, viewing_private_key, ephemeral_public_key)
        if not _view_tag_matches(compute_view_tag(backend, shared_point), expected_view_tag):
            return None

        return backend.scalar_add(spending_private_key, self.hasher.derive(shared_point))

    # ========================================================================
    # BATCH SCANNING
    # ========================================================================

    def _run_batch(self, func: Callable[[Announcement], T], items: List[Announcement]) -> List[T]:
        # Executor.map preserves input order
        if self.max_workers <= 1 or len(items) <= 1:
            return [func(item) for item in items]
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(func, items))

    def _skip_invalid(self, func: Callable[[Announcement], T]) -> Callable[[Announcement], Optional[T]]:
        def wrapper(announcement: Announcement) -> Optional[T]:
            try:
                return func(announcement)
            except DecodeError as e:
                logger.debug(
                    "Skipping invalid announcement",
                    extra_data={"error": e.code, "reason": e.message}
                )
                return None
        return wrapper

    def scan(
        self,
        announcements: Iterable[Announcement],
        spending_private_key: Scalar,
        viewing_private_key: Scalar
    ) -> List[StealthMatch]:
        """
        Scansiona batch di announcement.

        Announcement con ephemeral key invalida vengono saltati.

        Args:
            announcements: Announcement da scansionare
            spending_private_key: k_spend
            viewing_private_key: k_view

        Returns:
            List[StealthMatch]: Match nell'ordine di input

        Raises:
            InvalidKeyError: Chiavi private fuori range
        """
        self.backend.validate_private_key(spending_private_key)
        self.backend.validate_private_key(viewing_private_key)
        items = list(announcements)

        check = self._skip_invalid(
            lambda ann: self.recover(ann, spending_private_key, viewing_private_key)
        )

        with PerformanceLogger(
            logger,
            "scan",
            extra_data={"curve": self.backend.name, "count": len(items)}
        ):
            results = self._run_batch(check, items)

        matches = [match for match in results if match is not None]

        logger.info(
            "Scan completed",
            extra_data={
                "curve": self.backend.name,
                "scanned": len(items),
                "found": len(matches),
                "workers": self.max_workers,
            }
        )

        return matches

    def scan_view_tags(
        self,
        announcements: Iterable[Announcement],
        viewing_private_key: Scalar
    ) -> List[Announcement]:
        """
        Solo filtro view tag (delegabile: serve solo la viewing key).

        Returns:
            List[Announcement]: Candidati nell'ordine di input
        """
        self.backend.validate_private_key(viewing_private_key)
        items = list(announcements)

        check = self._skip_invalid(lambda ann: self.fast_check(ann, viewing_private_key))

        with PerformanceLogger(
            logger,
            "scan_view_tags",
            extra_data={"curve": self.backend.name, "count": len(items)}
        ):
            flags = self._run_batch(check, items)

        candidates = [ann for ann, ok in zip(items, flags) if ok]

        logger.debug(
            "View tag scan completed",
            extra_data={"scanned": len(items), "candidates": len(candidates)}
        )

        return candidates


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "compute_shared_point",
    "StealthAddressGenerator",
    "StealthAddressScanner",
]
