"""
StealthCore - Pytest Configuration
====================================
Fixtures e configurazione per testing.

Last Updated: 2026-10-17
Version: 0.1.0
"""

import pytest
from pathlib import Path
import tempfile
import shutil

# Internal imports
from stealth_core.config import get_settings, override_settings
from stealth_core.constants import CurveId
from stealth_core.domain.curves import get_curve_backend
from stealth_core.domain.hashing import HashToScalar
from stealth_core.domain.keys import generate_meta_keypair
from stealth_core.wallet.stealth_address import (
    StealthAddressGenerator,
    StealthAddressScanner,
)


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: long-running scenario tests")


# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================

@pytest.fixture
def test_config():
    """Test configuration (BN254, nessun file di log)"""
    return override_settings(
        curve="bn254",
        log_to_file=False,
        enable_console_log=False,
    )


@pytest.fixture
def temp_data_dir():
    """Temporary data directory"""
    temp_dir = Path(tempfile.mkdtemp())
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isola i test dalle variabili STEALTH_* dell'ambiente"""
    import os
    for key in list(os.environ):
        if key.startswith("STEALTH_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tempfile.gettempdir())
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ============================================================================
# CURVE FIXTURES
# ============================================================================

@pytest.fixture(params=[c.value for c in CurveId])
def backend(request):
    """Backend parametrizzato su tutte le curve"""
    return get_curve_backend(request.param)


@pytest.fixture
def bn254():
    """Backend BN254"""
    return get_curve_backend(CurveId.BN254)


# ============================================================================
# STEALTH FIXTURES
# ============================================================================

@pytest.fixture
def recipient(backend):
    """Meta key pair destinatario"""
    return generate_meta_keypair(backend)


@pytest.fixture
def generator(backend):
    """Generator per curva"""
    return StealthAddressGenerator(backend, HashToScalar(backend))


@pytest.fixture
def scanner(backend):
    """Scanner per curva"""
    return StealthAddressScanner(backend, HashToScalar(backend))
