"""
StealthCore - Domain Layer
============================
Curve backends, hashing, chiavi e modelli.
"""

from stealth_core.domain.curves import (
    Scalar,
    CurvePoint,
    CurveParams,
    CurveBackend,
    WeierstrassBackend,
    get_curve_params,
    get_curve_backend,
    backend_from_settings,
)
from stealth_core.domain.hashing import (
    keccak256,
    constant_time_equal,
    HashToScalar,
    compute_view_tag,
    point_to_address,
)
from stealth_core.domain.keys import (
    KeyPair,
    MetaAddress,
    MetaKeyPair,
    derive_public_key,
    generate_keypair,
    generate_meta_keypair,
    build_meta_address,
    validate_meta_address,
)
from stealth_core.domain.models import (
    Announcement,
    GeneratedStealthAddress,
    StealthMatch,
)

__all__ = [
    "Scalar",
    "CurvePoint",
    "CurveParams",
    "CurveBackend",
    "WeierstrassBackend",
    "get_curve_params",
    "get_curve_backend",
    "backend_from_settings",
    "keccak256",
    "constant_time_equal",
    "HashToScalar",
    "compute_view_tag",
    "point_to_address",
    "KeyPair",
    "MetaAddress",
    "MetaKeyPair",
    "derive_public_key",
    "generate_keypair",
    "generate_meta_keypair",
    "build_meta_address",
    "validate_meta_address",
    "Announcement",
    "GeneratedStealthAddress",
    "StealthMatch",
]
