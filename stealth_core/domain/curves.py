"""
StealthCore - Curve Backends
==============================
Aritmetica di scalari e punti G1 per BN254, BLS12-381 e BLS12-377.

Security Level: CRITICAL
Last Updated: 2026-10-17
Version: 0.1.0

SECURITY NOTICE:
Questo modulo implementa primitive crittografiche critiche.
Encoding dei punti e riduzione degli scalari sono un confine di
compatibilità: ogni modifica rompe l'interoperabilità.

Curves (G1, short Weierstrass y^2 = x^3 + b):
- BN254:     py_ecc.optimized_bn128, encoding compresso little-endian + flag
- BLS12-381: py_ecc.optimized_bls12_381, encoding compresso ZCash
- BLS12-377: campo py_ecc generico + formule Jacobiane a=0 di py_ecc,
             encoding compresso little-endian + flag

Dependencies:
- py_ecc (>=6.0.0)
- secrets (stdlib, CSPRNG)
"""

import secrets
from dataclasses import dataclass
from functools import lru_cache
from types import ModuleType
from typing import Callable, Optional, Protocol, Tuple, Union, runtime_checkable

from py_ecc import optimized_bn128, optimized_bls12_381
from py_ecc.bls.point_compression import compress_G1, decompress_G1
from py_ecc.fields import optimized_bn128_FQ, optimized_bls12_381_FQ
from py_ecc.fields.optimized_field_elements import FQ as OptimizedFQ

from stealth_core.constants import (
    CurveId,
    BLS12_377_FIELD_MODULUS,
    BLS12_377_CURVE_ORDER,
    BLS12_377_G1_X,
    BLS12_377_G1_Y,
    BLS12_377_B,
    SW_FLAG_Y_NEGATIVE,
    SW_FLAG_INFINITY,
    ZCASH_FLAG_COMPRESSED,
    ZCASH_FLAG_INFINITY,
    ZCASH_FLAG_SIGN,
)
from stealth_core.errors import (
    ConfigurationError,
    CryptoError,
    DecodeError,
    InvalidKeyError,
)
from stealth_core.logging_setup import get_logger


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("curves")


Scalar = int
JacobianPoint = Tuple[OptimizedFQ, OptimizedFQ, OptimizedFQ]


# ============================================================================
# FIELD DEFINITIONS
# ============================================================================

class optimized_bls12_377_FQ(OptimizedFQ):
    """Campo base BLS12-377 (377 bit)"""
    field_modulus = BLS12_377_FIELD_MODULUS


# ============================================================================
# POINT
# ============================================================================

@dataclass(frozen=True)
class CurvePoint:
    """
    Punto G1 in coordinate affini.

    Il punto all'infinito ha x = y = None: è rappresentabile
    esplicitamente ma non è mai un input valido per un indirizzo.

    I punti vanno ottenuti dal backend (base_point, scalar_mul,
    deserialize_point): il costruttore non valida nulla.
    """
    curve: CurveId
    x: Optional[int]
    y: Optional[int]

    def is_infinity(self) -> bool:
        """Check se punto all'infinito"""
        return self.x is None and self.y is None

    def __repr__(self) -> str:
        if self.is_infinity():
            return f"CurvePoint({self.curve.value}, INF)"
        return f"CurvePoint({self.curve.value}, {hex(self.x)[:12]}..., {hex(self.y)[:12]}...)"


# ============================================================================
# MODULAR SQUARE ROOT
# ============================================================================

def sqrt_mod(a: int, p: int) -> Optional[int]:
    """
    Radice quadrata modulo primo p (Tonelli-Shanks).

    Args:
        a: Valore (ridotto mod p)
        p: Modulo primo dispari

    Returns:
        Optional[int]: Una radice, None se a non è un residuo quadratico
    """
    a %= p
    if a == 0:
        return 0
    if pow(a, (p - 1) // 2, p) != 1:
        return None

    if p % 4 == 3:
        return pow(a, (p + 1) // 4, p)

    # p - 1 = q * 2^s
    q, s = p - 1, 0
    while q % 2 == 0:
        q //= 2
        s += 1

    z = 2
    while pow(z, (p - 1) // 2, p) != p - 1:
        z += 1

    m = s
    c = pow(z, q, p)
    t = pow(a, q, p)
    r = pow(a, (q + 1) // 2, p)

    while t != 1:
        i, t2 = 0, t
        while t2 != 1:
            t2 = t2 * t2 % p
            i += 1
        b = pow(c, 1 << (m - i - 1), p)
        m = i
        c = b * b % p
        t = t * c % p
        r = r * b % p

    return r


# ============================================================================
# CURVE PARAMETERS
# ============================================================================

@dataclass(frozen=True)
class CurveParams:
    """
    Parametri di una curva G1.

    Attributes:
        curve_id: Identificativo curva
        field_modulus: Primo p del campo base
        curve_order: Ordine primo r del sottogruppo G1 (campo scalare)
        b: Coefficiente y^2 = x^3 + b
        generator: Generatore G1 affine (x, y)
        cofactor_is_one: True se ogni punto sulla curva è in G1
        field_class: Classe elemento di campo py_ecc
        ops: Modulo py_ecc con add/multiply Jacobiani per a = 0
        encoding: "sw_flags" (little-endian) o "zcash" (big-endian)
    """
    curve_id: CurveId
    field_modulus: int
    curve_order: int
    b: int
    generator: Tuple[int, int]
    cofactor_is_one: bool
    field_class: type
    ops: ModuleType
    encoding: str

    @property
    def point_size(self) -> int:
        """Bytes per punto compresso (x + 2 bit di flag)"""
        if self.encoding == "zcash":
            return 48
        return (self.field_modulus.bit_length() + 2 + 7) // 8

    @property
    def scalar_size(self) -> int:
        return (self.curve_order.bit_length() + 7) // 8


def _affine_ints(pt) -> Tuple[int, int]:
    """Converte punto Jacobiano py_ecc in interi affini"""
    x, y, z = pt
    return ((x / z).n, (y / z).n)


@lru_cache(maxsize=None)
def get_curve_params(curve: CurveId) -> CurveParams:
    """
    Parametri per curva.

    Raises:
        ConfigurationError: Se curva non supportata
    """
    if curve == CurveId.BN254:
        return CurveParams(
            curve_id=curve,
            field_modulus=optimized_bn128.field_modulus,
            curve_order=optimized_bn128.curve_order,
            b=3,
            generator=_affine_ints(optimized_bn128.G1),
            cofactor_is_one=True,
            field_class=optimized_bn128_FQ,
            ops=optimized_bn128,
            encoding="sw_flags",
        )

    if curve == CurveId.BLS12_381:
        return CurveParams(
            curve_id=curve,
            field_modulus=optimized_bls12_381.field_modulus,
            curve_order=optimized_bls12_381.curve_order,
            b=4,
            generator=_affine_ints(optimized_bls12_381.G1),
            cofactor_is_one=False,
            field_class=optimized_bls12_381_FQ,
            ops=optimized_bls12_381,
            encoding="zcash",
        )

    if curve == CurveId.BLS12_377:
        # Same a = 0 Jacobian formulas, different base field
        return CurveParams(
            curve_id=curve,
            field_modulus=BLS12_377_FIELD_MODULUS,
            curve_order=BLS12_377_CURVE_ORDER,
            b=BLS12_377_B,
            generator=(BLS12_377_G1_X, BLS12_377_G1_Y),
            cofactor_is_one=False,
            field_class=optimized_bls12_377_FQ,
            ops=optimized_bls12_381,
            encoding="sw_flags",
        )

    raise ConfigurationError(
        f"Unsupported curve: {curve}",
        details={"supported": [c.value for c in CurveId]}
    )


# ============================================================================
# CURVE BACKEND PROTOCOL
# ============================================================================

@runtime_checkable
class CurveBackend(Protocol):
    """
    Capability set per una curva.

    Generator, scanner, hasher e helper delle chiavi dipendono solo da
    questo protocollo: la curva concreta viene scelta una volta alla
    composition root e passata esplicitamente ai costruttori.
    """

    @property
    def curve_id(self) -> CurveId: ...

    @property
    def name(self) -> str: ...

    @property
    def field_modulus(self) -> int: ...

    @property
    def curve_order(self) -> int: ...

    @property
    def point_size(self) -> int: ...

    @property
    def scalar_size(self) -> int: ...

    # --- scalars ---

    def random_scalar(self) -> Scalar: ...

    def scalar_from_bytes(self, data: bytes) -> Scalar: ...

    def scalar_to_bytes(self, scalar: Scalar) -> bytes: ...

    def scalar_from_canonical_bytes(self, data: bytes) -> Scalar: ...

    def scalar_add(self, a: Scalar, b: Scalar) -> Scalar: ...

    def validate_scalar(self, scalar: Scalar) -> Scalar: ...

    def validate_private_key(self, scalar: Scalar) -> Scalar: ...

    # --- group ---

    def base_point(self) -> CurvePoint: ...

    def scalar_mul(self, point: CurvePoint, scalar: Scalar) -> CurvePoint: ...

    def point_add(self, p1: CurvePoint, p2: CurvePoint) -> CurvePoint: ...

    def validate_point(self, point: CurvePoint) -> CurvePoint: ...

    def serialize_point(self, point: CurvePoint) -> bytes: ...

    def deserialize_point(self, data: bytes) -> CurvePoint: ...


# ============================================================================
# WEIERSTRASS BACKEND (py_ecc)
# ============================================================================

class WeierstrassBackend:
    """
    Backend G1 per curve y^2 = x^3 + b su py_ecc.

    Un'istanza per curva; non ha stato mutabile, quindi è
    condivisibile tra thread.

    Examples:
        >>> backend = get_curve_backend("bn254")
        >>> g = backend.base_point()
        >>> backend.deserialize_point(backend.serialize_point(g)) == g
        True
    """

    def __init__(self, params: CurveParams):
        self.params = params
        self._fq = params.field_class
        self._ops = params.ops
        self._generator = CurvePoint(params.curve_id, *params.generator)
        self._identity = CurvePoint(params.curve_id, None, None)

        if params.encoding == "zcash":
            self._encode: Callable[[CurvePoint], bytes] = self._encode_zcash
            self._decode: Callable[[bytes], CurvePoint] = self._decode_zcash
        else:
            self._encode = self._encode_sw_flags
            self._decode = self._decode_sw_flags

    # ========================================================================
    # PROPERTIES
    # ========================================================================

    @property
    def curve_id(self) -> CurveId:
        return self.params.curve_id

    @property
    def name(self) -> str:
        return self.params.curve_id.value

    @property
    def field_modulus(self) -> int:
        return self.params.field_modulus

    @property
    def curve_order(self) -> int:
        return self.params.curve_order

    @property
    def point_size(self) -> int:
        return self.params.point_size

    @property
    def scalar_size(self) -> int:
        return self.params.scalar_size

    def __repr__(self) -> str:
        return f"WeierstrassBackend({self.name})"

    # ========================================================================
    # INTERNAL CONVERSIONS
    # ========================================================================

    def _check_curve(self, point: CurvePoint) -> None:
        if not isinstance(point, CurvePoint):
            raise CryptoError(
                f"Expected CurvePoint, got {type(point).__name__}",
                code="INVALID_INPUT_TYPE"
            )
        if point.curve != self.curve_id:
            raise CryptoError(
                f"Point belongs to {point.curve.value}, backend is {self.name}",
                code="CURVE_MISMATCH"
            )

    def _to_jacobian(self, point: CurvePoint) -> JacobianPoint:
        fq = self._fq
        if point.is_infinity():
            return (fq.one(), fq.one(), fq.zero())
        return (fq(point.x), fq(point.y), fq.one())

    def _from_jacobian(self, pt: JacobianPoint) -> CurvePoint:
        if pt[2].n == 0:
            return self._identity
        return CurvePoint(self.curve_id, *_affine_ints(pt))

    def _is_on_curve(self, x: int, y: int) -> bool:
        p = self.field_modulus
        return (y * y - x * x * x - self.params.b) % p == 0

    def _in_subgroup(self, point: CurvePoint) -> bool:
        if self.params.cofactor_is_one:
            return True
        return self.scalar_mul_unreduced(point, self.curve_order).is_infinity()

    def _y_from_x(self, x: int) -> Optional[int]:
        p = self.field_modulus
        return sqrt_mod((pow(x, 3, p) + self.params.b) % p, p)

    # ========================================================================
    # SCALARS
    # ========================================================================

    def random_scalar(self) -> Scalar:
        """
        Scalare uniforme in [1, r-1] da CSPRNG.

        Returns:
            int: Scalare non nullo
        """
        return secrets.randbelow(self.curve_order - 1) + 1

    def scalar_from_bytes(self, data: bytes) -> Scalar:
        """
        Riduce bytes big-endian modulo r.

        Args:
            data: Bytes arbitrari (tipicamente un digest)

        Returns:
            int: Scalare in [0, r)
        """
        if not isinstance(data, (bytes, bytearray)):
            raise CryptoError(
                f"scalar_from_bytes requires bytes, got {type(data).__name__}",
                code="INVALID_INPUT_TYPE"
            )
        return int.from_bytes(data, 'big') % self.curve_order

    def scalar_to_bytes(self, scalar: Scalar) -> bytes:
        """Scalare canonico in big-endian a larghezza fissa"""
        return self.validate_scalar(scalar).to_bytes(self.scalar_size, 'big')

    def scalar_from_canonical_bytes(self, data: bytes) -> Scalar:
        """
        Decodifica stretta di uno scalare (larghezza fissa, < r).

        Raises:
            DecodeError: Se lunghezza errata o valore non ridotto
        """
        if len(data) != self.scalar_size:
            raise DecodeError(
                f"Invalid scalar length: {len(data)} (expected {self.scalar_size})",
                details={"curve": self.name}
            )
        value = int.from_bytes(data, 'big')
        if value >= self.curve_order:
            raise DecodeError(
                "Scalar is not reduced modulo the group order",
                details={"curve": self.name}
            )
        return value

    def scalar_add(self, a: Scalar, b: Scalar) -> Scalar:
        return (a + b) % self.curve_order

    def validate_scalar(self, scalar: Scalar) -> Scalar:
        """
        Verifica che lo scalare sia canonico ([0, r)).

        Raises:
            InvalidKeyError: Se fuori range o tipo errato
        """
        if isinstance(scalar, bool) or not isinstance(scalar, int):
            raise InvalidKeyError(
                f"Scalar must be int, got {type(scalar).__name__}"
            )
        if not 0 <= scalar < self.curve_order:
            raise InvalidKeyError(
                "Scalar out of range [0, r)",
                details={"curve": self.name}
            )
        return scalar

    def validate_private_key(self, scalar: Scalar) -> Scalar:
        """
        Verifica chiave privata in [1, r-1].

        Raises:
            InvalidKeyError: Se zero o fuori range
        """
        self.validate_scalar(scalar)
        if scalar == 0:
            raise InvalidKeyError("Private key cannot be zero")
        return scalar

    # ========================================================================
    # GROUP OPERATIONS
    # ========================================================================

    def base_point(self) -> CurvePoint:
        """Generatore G di G1"""
        return self._generator

    def identity(self) -> CurvePoint:
        """Punto all'infinito"""
        return self._identity

    def is_identity(self, point: CurvePoint) -> bool:
        self._check_curve(point)
        return point.is_infinity()

    def scalar_mul(self, point: CurvePoint, scalar: Scalar) -> CurvePoint:
        """
        Moltiplicazione scalare k * P (k ridotto mod r).

        Args:
            point: Punto G1
            scalar: Scalare

        Returns:
            CurvePoint: k * P
        """
        self.validate_scalar(scalar)
        return self.scalar_mul_unreduced(point, scalar)

    def scalar_mul_unreduced(self, point: CurvePoint, scalar: int) -> CurvePoint:
        """k * P senza riduzione di k (usato per il check di sottogruppo)"""
        self._check_curve(point)
        if scalar == 0 or point.is_infinity():
            return self._identity
        result = self._ops.multiply(self._to_jacobian(point), scalar)
        return self._from_jacobian(result)

    def point_add(self, p1: CurvePoint, p2: CurvePoint) -> CurvePoint:
        """Addizione di punti P1 + P2"""
        self._check_curve(p1)
        self._check_curve(p2)
        if p1.is_infinity():
            return p2
        if p2.is_infinity():
            return p1
        result = self._ops.add(self._to_jacobian(p1), self._to_jacobian(p2))
        return self._from_jacobian(result)

    def point_neg(self, point: CurvePoint) -> CurvePoint:
        """Opposto -P"""
        self._check_curve(point)
        if point.is_infinity():
            return point
        return CurvePoint(self.curve_id, point.x, (-point.y) % self.field_modulus)

    # ========================================================================
    # VALIDATION
    # ========================================================================

    def validate_point(self, point: CurvePoint) -> CurvePoint:
        """
        Verifica punto: sulla curva e nel sottogruppo primo.

        Il punto all'infinito è un elemento valido del gruppo; chi
        richiede una chiave utilizzabile deve rifiutarlo a parte.

        Raises:
            DecodeError: Se fuori curva o fuori sottogruppo
        """
        self._check_curve(point)
        if point.is_infinity():
            return point

        p = self.field_modulus
        if not (0 <= point.x < p and 0 <= point.y < p):
            raise DecodeError(
                "Point coordinates not reduced",
                details={"curve": self.name}
            )
        if not self._is_on_curve(point.x, point.y):
            raise DecodeError(
                "Point is not on the curve",
                details={"curve": self.name}
            )
        if not self._in_subgroup(point):
            raise DecodeError(
                "Point is not in the prime-order subgroup",
                details={"curve": self.name}
            )
        return point

    def is_valid_point(self, point: CurvePoint) -> bool:
        try:
            self.validate_point(point)
        except (DecodeError, CryptoError):
            return False
        return True

    # ========================================================================
    # SERIALIZATION
    # ========================================================================

    def serialize_point(self, point: CurvePoint) -> bytes:
        """
        Encoding compresso canonico del punto.

        Returns:
            bytes: point_size bytes
        """
        self._check_curve(point)
        return self._encode(point)

    def deserialize_point(self, data: bytes) -> CurvePoint:
        """
        Decodifica punto compresso con validazione completa.

        Args:
            data: Encoding compresso

        Returns:
            CurvePoint: Punto valido in G1 (o infinito)

        Raises:
            DecodeError: Lunghezza, flag, coordinata, curva o sottogruppo invalidi
        """
        if not isinstance(data, (bytes, bytearray)):
            raise DecodeError(
                f"Point encoding must be bytes, got {type(data).__name__}"
            )
        data = bytes(data)
        if len(data) != self.point_size:
            raise DecodeError(
                f"Invalid point length: {len(data)} (expected {self.point_size})",
                details={"curve": self.name}
            )

        point = self._decode(data)
        if not point.is_infinity() and not self._in_subgroup(point):
            raise DecodeError(
                "Point is not in the prime-order subgroup",
                details={"curve": self.name}
            )
        return point

    # --- little-endian x, flags in the top bits of the last byte ---

    def _encode_sw_flags(self, point: CurvePoint) -> bytes:
        size = self.point_size
        if point.is_infinity():
            out = bytearray(size)
            out[-1] |= SW_FLAG_INFINITY
            return bytes(out)

        out = bytearray(point.x.to_bytes(size, 'little'))
        if point.y > (self.field_modulus - 1) // 2:
            out[-1] |= SW_FLAG_Y_NEGATIVE
        return bytes(out)

    def _decode_sw_flags(self, data: bytes) -> CurvePoint:
        flags = data[-1] & (SW_FLAG_Y_NEGATIVE | SW_FLAG_INFINITY)
        body = bytearray(data)
        body[-1] &= 0xFF ^ (SW_FLAG_Y_NEGATIVE | SW_FLAG_INFINITY)
        x = int.from_bytes(bytes(body), 'little')

        if flags == SW_FLAG_Y_NEGATIVE | SW_FLAG_INFINITY:
            raise DecodeError("Invalid flag combination", details={"curve": self.name})

        if flags == SW_FLAG_INFINITY:
            if x != 0:
                raise DecodeError(
                    "Non-zero coordinate with infinity flag",
                    details={"curve": self.name}
                )
            return self._identity

        if x >= self.field_modulus:
            raise DecodeError("x coordinate not reduced", details={"curve": self.name})

        y = self._y_from_x(x)
        if y is None:
            raise DecodeError("Point is not on the curve", details={"curve": self.name})

        y_negative = y > (self.field_modulus - 1) // 2
        if y_negative != bool(flags & SW_FLAG_Y_NEGATIVE):
            y = (-y) % self.field_modulus

        return CurvePoint(self.curve_id, x, y)

    # --- ZCash big-endian format (BLS12-381) ---

    def _encode_zcash(self, point: CurvePoint) -> bytes:
        z = compress_G1(self._to_jacobian(point))
        return int(z).to_bytes(self.point_size, 'big')

    def _decode_zcash(self, data: bytes) -> CurvePoint:
        flags = data[0]
        if not flags & ZCASH_FLAG_COMPRESSED:
            raise DecodeError(
                "Missing compression flag",
                details={"curve": self.name}
            )
        if flags & ZCASH_FLAG_INFINITY:
            if flags != ZCASH_FLAG_COMPRESSED | ZCASH_FLAG_INFINITY or any(data[1:]):
                raise DecodeError(
                    "Invalid infinity encoding",
                    details={"curve": self.name, "sign_flag": bool(flags & ZCASH_FLAG_SIGN)}
                )
            return self._identity

        try:
            pt = decompress_G1(int.from_bytes(data, 'big'))
        except (ValueError, TypeError) as e:
            raise DecodeError(
                f"Invalid compressed point: {e}",
                details={"curve": self.name}
            ) from e

        point = self._from_jacobian(pt)
        if not point.is_infinity() and not self._is_on_curve(point.x, point.y):
            raise DecodeError("Point is not on the curve", details={"curve": self.name})

        # Reject non-canonical encodings (stray bits, unreduced x)
        if self._encode_zcash(point) != data:
            raise DecodeError(
                "Non-canonical point encoding",
                details={"curve": self.name}
            )
        return point


# ============================================================================
# BACKEND FACTORY
# ============================================================================

@lru_cache(maxsize=None)
def _backend_for(curve: CurveId) -> WeierstrassBackend:
    backend = WeierstrassBackend(get_curve_params(curve))
    logger.debug(
        "Curve backend initialized",
        extra_data={"curve": curve.value, "point_size": backend.point_size}
    )
    return backend


def get_curve_backend(curve: Union[str, CurveId, None]) -> WeierstrassBackend:
    """
    Factory per ottenere il backend di una curva.

    Args:
        curve: CurveId o nome ("bn254", "bls12_381", "bls12_377")

    Returns:
        WeierstrassBackend: Backend immutabile (condiviso per curva)

    Raises:
        ConfigurationError: Se curva assente o non supportata

    Examples:
        >>> get_curve_backend("BLS12-381").name
        'bls12_381'
    """
    if curve is None or curve == "":
        raise ConfigurationError(
            "No curve backend selected",
            details={"supported": [c.value for c in CurveId]}
        )

    try:
        curve_id = CurveId.parse(curve)
    except ValueError as e:
        raise ConfigurationError(
            f"Unsupported curve: {curve}",
            details={"supported": [c.value for c in CurveId]}
        ) from e

    return _backend_for(curve_id)


def backend_from_settings(settings) -> WeierstrassBackend:
    """
    Backend dalla configurazione (fail fast se curva mancante).

    Args:
        settings: StealthSettings

    Raises:
        ConfigurationError: Se settings.curve non è impostata
    """
    return get_curve_backend(settings.require_curve())


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "Scalar",
    "CurvePoint",
    "CurveParams",
    "CurveBackend",
    "WeierstrassBackend",
    "sqrt_mod",
    "get_curve_params",
    "get_curve_backend",
    "backend_from_settings",
]
