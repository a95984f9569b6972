"""
StealthCore - Scenario Tests
==============================
End-to-end scanning of a mixed announcement batch on BN254.
"""

import random

import pytest

from stealth_core.domain.curves import get_curve_backend
from stealth_core.domain.keys import generate_meta_keypair
from stealth_core.wallet.stealth_address import (
    StealthAddressGenerator,
    StealthAddressScanner,
)


TRUE_COUNT = 1000
NOISE_COUNT = 1000


@pytest.mark.slow
class TestMixedBatchScenario:
    """1000 owned announcements interleaved with 1000 for other recipients"""

    def test_full_scan(self):
        """Test no false negatives and exact recovery"""
        backend = get_curve_backend("bn254")
        generator = StealthAddressGenerator(backend)
        scanner = StealthAddressScanner(backend, max_workers=4)

        recipient = generate_meta_keypair(backend)
        strangers = [generate_meta_keypair(backend) for _ in range(10)]

        owned = [generator.generate(recipient.meta_address) for _ in range(TRUE_COUNT)]
        noise = [
            generator.generate(random.choice(strangers).meta_address).announcement
            for _ in range(NOISE_COUNT)
        ]

        batch = []
        for generated, other in zip(owned, noise):
            batch.append(generated.announcement)
            batch.append(other)

        owned_announcements = [g.announcement for g in owned]

        # View tag filter: every owned announcement survives
        candidates = scanner.scan_view_tags(batch, recipient.viewing_private_key)
        candidate_set = {id(ann) for ann in candidates}
        assert all(id(ann) in candidate_set for ann in owned_announcements)
        assert len(candidates) >= TRUE_COUNT
        # Noise passes at ~1/256: about 4 expected out of 1000
        assert len(candidates) <= TRUE_COUNT + 40

        # Full recovery: exactly the owned ones, in order
        matches = scanner.scan(
            batch,
            recipient.spending_private_key,
            recipient.viewing_private_key,
        )
        assert len(matches) == TRUE_COUNT
        assert [m.announcement for m in matches] == owned_announcements

        for match, generated in zip(matches, owned):
            assert match.stealth_public_key == generated.stealth_public_key
            assert backend.scalar_mul(backend.base_point(), match.stealth_private_key) \
                == match.stealth_public_key
