"""
StealthCore - Curve Backend Tests
===================================
Unit tests for scalar/point arithmetic and point encodings.
"""

import pytest

from stealth_core.constants import (
    CurveId,
    ZCASH_FLAG_COMPRESSED,
    ZCASH_FLAG_INFINITY,
    ZCASH_FLAG_SIGN,
)
from stealth_core.domain.curves import (
    CurveBackend,
    CurvePoint,
    get_curve_backend,
    get_curve_params,
    sqrt_mod,
)
from stealth_core.errors import (
    ConfigurationError,
    CryptoError,
    DecodeError,
    InvalidKeyError,
)


GENERATOR_ENCODINGS = {
    "bn254": "01" + "00" * 31,
    "bls12_381": (
        "97f1d3a73197d7942695638c4fa9ac0fc3688c4f9774b905"
        "a14e3a3f171bac586c55e83ff97a1aeffb3af00adb22c6bb"
    ),
    "bls12_377": (
        "efe91bb26eb1b9ea4e39cdff121548d55ccb37bdc8828218"
        "bb419daa2c1e958554ff87bf2562fcc8670a74fede488880"
    ),
}

DOUBLE_GENERATOR_ENCODINGS = {
    "bn254": "d3cf876dc108c2d3a81c8716a91678d9851518685b04859b021a132ee7440603",
    "bls12_377": (
        "9063416a6ded7a8590dc816765610688551930a2c9970ee9"
        "7e4b2addf3f7617eed52544b5adb6e05919e93413145ed00"
    ),
}


class TestBackendFactory:
    """Test curve selection"""

    def test_known_curves(self):
        """Test all supported curves resolve"""
        for curve in CurveId:
            assert get_curve_backend(curve).curve_id == curve
            assert get_curve_backend(curve.value).curve_id == curve

    def test_name_normalisation(self):
        """Test case-insensitive names and aliases"""
        assert get_curve_backend("BLS12-381").curve_id == CurveId.BLS12_381
        assert get_curve_backend("alt_bn128").curve_id == CurveId.BN254

    def test_missing_curve(self):
        """Test no curve fails fast"""
        with pytest.raises(ConfigurationError):
            get_curve_backend(None)
        with pytest.raises(ConfigurationError):
            get_curve_backend("")

    def test_unknown_curve(self):
        """Test unsupported curve"""
        with pytest.raises(ConfigurationError) as exc_info:
            get_curve_backend("secp256k1")
        assert "supported" in exc_info.value.details

    def test_curves_coexist(self):
        """Test multiple backends in one process"""
        bn = get_curve_backend("bn254")
        bls = get_curve_backend("bls12_381")
        assert bn.point_size == 32
        assert bls.point_size == 48
        assert bn.base_point() != bls.base_point()

    def test_backends_satisfy_protocol(self):
        """Test concrete backends expose the full CurveBackend surface"""
        members = [
            name for name in vars(CurveBackend)
            if not name.startswith("_")
        ]
        assert "validate_private_key" in members
        for curve in CurveId:
            backend = get_curve_backend(curve)
            assert isinstance(backend, CurveBackend)
            for name in members:
                assert hasattr(backend, name), name

    def test_params(self):
        """Test curve parameter sizes"""
        assert get_curve_params(CurveId.BN254).field_modulus.bit_length() == 254
        assert get_curve_params(CurveId.BLS12_381).field_modulus.bit_length() == 381
        assert get_curve_params(CurveId.BLS12_377).field_modulus.bit_length() == 377
        assert get_curve_backend("bls12_377").point_size == 48


class TestScalars:
    """Test scalar operations"""

    def test_random_scalar_range(self, backend):
        """Test random scalars are in [1, r-1]"""
        for _ in range(20):
            k = backend.random_scalar()
            assert 1 <= k < backend.curve_order

    def test_random_scalars_differ(self, backend):
        """Test CSPRNG output differs"""
        assert backend.random_scalar() != backend.random_scalar()

    def test_scalar_from_bytes_big_endian(self, backend):
        """Test big-endian interpretation"""
        assert backend.scalar_from_bytes(b"\x01\x00") == 256
        assert backend.scalar_from_bytes(b"") == 0

    def test_scalar_from_bytes_reduces(self, backend):
        """Test reduction modulo r"""
        r = backend.curve_order
        data = (r + 5).to_bytes(64, "big")
        assert backend.scalar_from_bytes(data) == 5
        assert backend.scalar_from_bytes(b"\xff" * 32) == int.from_bytes(b"\xff" * 32, "big") % r

    def test_scalar_from_bytes_type(self, backend):
        """Test non-bytes input rejected"""
        with pytest.raises(CryptoError):
            backend.scalar_from_bytes("00")

    def test_scalar_canonical_roundtrip(self, backend):
        """Test fixed-width scalar encoding"""
        k = backend.random_scalar()
        data = backend.scalar_to_bytes(k)
        assert len(data) == backend.scalar_size
        assert backend.scalar_from_canonical_bytes(data) == k

    def test_scalar_canonical_rejects_unreduced(self, backend):
        """Test strict decoding rejects values >= r"""
        data = backend.curve_order.to_bytes(backend.scalar_size, "big")
        with pytest.raises(DecodeError):
            backend.scalar_from_canonical_bytes(data)
        with pytest.raises(DecodeError):
            backend.scalar_from_canonical_bytes(b"\x01")

    def test_scalar_add_wraps(self, backend):
        """Test modular addition"""
        r = backend.curve_order
        assert backend.scalar_add(r - 1, 2) == 1

    def test_validate_private_key(self, backend):
        """Test private key range checks"""
        with pytest.raises(InvalidKeyError):
            backend.validate_private_key(0)
        with pytest.raises(InvalidKeyError):
            backend.validate_private_key(backend.curve_order)
        with pytest.raises(InvalidKeyError):
            backend.validate_private_key(-1)
        with pytest.raises(InvalidKeyError):
            backend.validate_private_key(True)
        assert backend.validate_private_key(1) == 1


class TestGroupOperations:
    """Test point arithmetic"""

    def test_base_point_valid(self, backend):
        """Test generator is a valid group element"""
        g = backend.base_point()
        assert backend.is_valid_point(g)
        assert not g.is_infinity()

    def test_order_annihilates_generator(self, backend):
        """Test r * G = O"""
        g = backend.base_point()
        assert backend.scalar_mul_unreduced(g, backend.curve_order).is_infinity()

    def test_scalar_mul_matches_addition(self, backend):
        """Test 3G = G + G + G"""
        g = backend.base_point()
        three_g = backend.scalar_mul(g, 3)
        assert three_g == backend.point_add(backend.point_add(g, g), g)

    def test_distributivity(self, backend):
        """Test (a + b)G = aG + bG"""
        g = backend.base_point()
        a = backend.random_scalar()
        b = backend.random_scalar()
        left = backend.scalar_mul(g, backend.scalar_add(a, b))
        right = backend.point_add(backend.scalar_mul(g, a), backend.scalar_mul(g, b))
        assert left == right

    def test_identity(self, backend):
        """Test identity behaviour"""
        g = backend.base_point()
        o = backend.identity()
        assert o.is_infinity()
        assert backend.is_identity(o)
        assert backend.point_add(g, o) == g
        assert backend.point_add(o, g) == g
        assert backend.scalar_mul(g, 0).is_infinity()

    def test_negation(self, backend):
        """Test P + (-P) = O"""
        p = backend.scalar_mul(backend.base_point(), backend.random_scalar())
        assert backend.point_add(p, backend.point_neg(p)).is_infinity()

    def test_scalar_mul_rejects_unreduced(self, backend):
        """Test scalar_mul requires canonical scalars"""
        with pytest.raises(InvalidKeyError):
            backend.scalar_mul(backend.base_point(), backend.curve_order)

    def test_curve_mismatch(self):
        """Test points from another curve rejected"""
        bn = get_curve_backend("bn254")
        bls = get_curve_backend("bls12_381")
        with pytest.raises(CryptoError):
            bn.point_add(bn.base_point(), bls.base_point())


class TestSerialization:
    """Test compressed point encodings"""

    @pytest.mark.parametrize("curve", sorted(GENERATOR_ENCODINGS))
    def test_generator_vectors(self, curve):
        """Test pinned generator encodings"""
        backend = get_curve_backend(curve)
        encoded = backend.serialize_point(backend.base_point())
        assert encoded.hex() == GENERATOR_ENCODINGS[curve]
        assert backend.deserialize_point(encoded) == backend.base_point()

    @pytest.mark.parametrize("curve", sorted(DOUBLE_GENERATOR_ENCODINGS))
    def test_double_generator_vectors(self, curve):
        """Test pinned 2G encodings"""
        backend = get_curve_backend(curve)
        two_g = backend.scalar_mul(backend.base_point(), 2)
        assert backend.serialize_point(two_g).hex() == DOUBLE_GENERATOR_ENCODINGS[curve]

    def test_negated_generator_flag(self):
        """Test sign flag of -G"""
        bn = get_curve_backend("bn254")
        encoded = bn.serialize_point(bn.point_neg(bn.base_point()))
        assert encoded.hex() == "01" + "00" * 30 + "80"

        bls = get_curve_backend("bls12_381")
        encoded = bls.serialize_point(bls.point_neg(bls.base_point()))
        assert encoded[0] == 0x97 | ZCASH_FLAG_SIGN

    def test_roundtrip(self, backend):
        """Test deserialize(serialize(P)) == P"""
        for _ in range(5):
            p = backend.scalar_mul(backend.base_point(), backend.random_scalar())
            encoded = backend.serialize_point(p)
            assert len(encoded) == backend.point_size
            assert backend.deserialize_point(encoded) == p

    def test_roundtrip_both_signs(self, backend):
        """Test both y roots round-trip"""
        p = backend.scalar_mul(backend.base_point(), backend.random_scalar())
        for point in (p, backend.point_neg(p)):
            assert backend.deserialize_point(backend.serialize_point(point)) == point

    def test_infinity_roundtrip(self, backend):
        """Test identity encodes and decodes explicitly"""
        encoded = backend.serialize_point(backend.identity())
        assert len(encoded) == backend.point_size
        assert backend.deserialize_point(encoded).is_infinity()

    def test_zcash_infinity_encoding(self):
        """Test BLS12-381 identity uses compressed + infinity flags"""
        bls = get_curve_backend("bls12_381")
        encoded = bls.serialize_point(bls.identity())
        assert encoded[0] == ZCASH_FLAG_COMPRESSED | ZCASH_FLAG_INFINITY
        assert encoded[1:] == b"\x00" * 47

    def test_zcash_infinity_with_stray_bits(self):
        """Test BLS12-381 infinity flag with sign bit or payload rejected"""
        bls = get_curve_backend("bls12_381")
        flags = ZCASH_FLAG_COMPRESSED | ZCASH_FLAG_INFINITY
        with pytest.raises(DecodeError) as exc_info:
            bls.deserialize_point(bytes([flags | ZCASH_FLAG_SIGN]) + b"\x00" * 47)
        assert exc_info.value.details["sign_flag"] is True
        with pytest.raises(DecodeError):
            bls.deserialize_point(bytes([flags]) + b"\x00" * 46 + b"\x01")

    def test_wrong_length(self, backend):
        """Test length check"""
        encoded = backend.serialize_point(backend.base_point())
        with pytest.raises(DecodeError):
            backend.deserialize_point(encoded[:-1])
        with pytest.raises(DecodeError):
            backend.deserialize_point(encoded + b"\x00")
        with pytest.raises(DecodeError):
            backend.deserialize_point(b"")

    def test_not_bytes(self, backend):
        """Test non-bytes input"""
        with pytest.raises(DecodeError):
            backend.deserialize_point("00" * backend.point_size)

    def test_off_curve_rejected(self, backend):
        """Test x without a curve point is rejected"""
        rejected = 0
        for x in range(2, 40):
            if sqrt_mod(pow(x, 3, backend.field_modulus) + backend.params.b, backend.field_modulus) is not None:
                continue
            if backend.params.encoding == "zcash":
                data = (x | (1 << 383)).to_bytes(48, "big")
            else:
                data = x.to_bytes(backend.point_size, "little")
            with pytest.raises(DecodeError):
                backend.deserialize_point(data)
            rejected += 1
        assert rejected > 0

    def test_unreduced_x_rejected(self):
        """Test x >= p rejected"""
        bn = get_curve_backend("bn254")
        data = (bn.field_modulus + 1).to_bytes(32, "little")
        with pytest.raises(DecodeError):
            bn.deserialize_point(data)

    def test_invalid_flags(self):
        """Test flag combinations"""
        bn = get_curve_backend("bn254")
        with pytest.raises(DecodeError):
            bn.deserialize_point(b"\x00" * 31 + b"\xc0")
        with pytest.raises(DecodeError):
            bn.deserialize_point(b"\x01" + b"\x00" * 30 + b"\x40")

    def test_zcash_missing_compression_flag(self):
        """Test BLS12-381 uncompressed flag rejected"""
        bls = get_curve_backend("bls12_381")
        encoded = bytearray(bls.serialize_point(bls.base_point()))
        encoded[0] &= 0xFF ^ ZCASH_FLAG_COMPRESSED
        with pytest.raises(DecodeError):
            bls.deserialize_point(bytes(encoded))

    @pytest.mark.parametrize("curve", ["bls12_381", "bls12_377"])
    def test_subgroup_check(self, curve):
        """Test on-curve points outside G1 rejected"""
        backend = get_curve_backend(curve)
        p = backend.field_modulus
        for x in range(1, 200):
            y = sqrt_mod(pow(x, 3, p) + backend.params.b, p)
            if y is None:
                continue
            point = CurvePoint(backend.curve_id, x, y)
            if backend.scalar_mul_unreduced(point, backend.curve_order).is_infinity():
                continue
            with pytest.raises(DecodeError):
                backend.validate_point(point)
            with pytest.raises(DecodeError):
                backend.deserialize_point(backend.serialize_point(point))
            return
        pytest.fail("no point outside the subgroup found")

    def test_validate_point_off_curve(self, backend):
        """Test validate_point detects invalid coordinates"""
        g = backend.base_point()
        with pytest.raises(DecodeError):
            backend.validate_point(CurvePoint(backend.curve_id, g.x, g.y + 1))
        assert not backend.is_valid_point(CurvePoint(backend.curve_id, g.x, g.y + 1))


class TestSqrtMod:
    """Test modular square root"""

    def test_tonelli_shanks_p_1_mod_4(self):
        """Test BLS12-377 field (p = 1 mod 4)"""
        backend = get_curve_backend("bls12_377")
        p = backend.field_modulus
        assert p % 4 == 1
        for a in (4, 9, 12345 ** 2):
            root = sqrt_mod(a, p)
            assert root is not None
            assert root * root % p == a % p

    def test_non_residue(self):
        """Test non-residue returns None"""
        assert sqrt_mod(3, 7) is None
        assert sqrt_mod(0, 7) == 0
