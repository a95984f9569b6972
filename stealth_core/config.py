"""
StealthCore - Configuration Management
=======================================
Gestione centralizzata configurazione con Pydantic Settings.
Supporta environment variables, file .env, override runtime.

Security Level: HIGH
Last Updated: 2026-10-17
Version: 0.1.0

Features:
- Validazione automatica tipi
- Environment variables con prefisso STEALTH_
- File .env support
- Curva obbligatoria: nessun default silenzioso
"""

from pathlib import Path
from typing import Optional
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from stealth_core.constants import (
    CurveId,
    DEFAULT_ADDRESS_LENGTH,
    MIN_ADDRESS_LENGTH,
    MAX_ADDRESS_LENGTH,
    DEFAULT_CHAIN_PREFIX,
    DEFAULT_SCAN_WORKERS,
    MAX_SCAN_WORKERS,
)
from stealth_core.errors import ConfigurationError


# ============================================================================
# MAIN CONFIGURATION CLASS
# ============================================================================

class StealthSettings(BaseSettings):
    """
    Configurazione principale StealthCore.

    Supporta:
    - Caricamento da environment variables (STEALTH_*)
    - Caricamento da file .env
    - Override programmatici
    - Validazione automatica

    Example:
        # Da environment
        export STEALTH_CURVE=bn254
        export STEALTH_SCAN_WORKERS=4

        # Da codice
        config = StealthSettings(curve="bls12_381")
    """

    model_config = SettingsConfigDict(
        env_prefix='STEALTH_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # ========================================================================
    # CURVE SELECTION
    # ========================================================================

    curve: Optional[CurveId] = Field(
        default=None,
        description="Curva attiva: bn254, bls12_381, bls12_377 (obbligatoria)"
    )

    # ========================================================================
    # PROTOCOL PARAMETERS
    # ========================================================================

    address_length: int = Field(
        default=DEFAULT_ADDRESS_LENGTH,
        ge=MIN_ADDRESS_LENGTH,
        le=MAX_ADDRESS_LENGTH,
        description="Larghezza AddressBytes (20 = account-model chains)"
    )

    hash_domain_tag: str = Field(
        default="",
        description="Domain tag appeso all'input di hash-to-scalar (UTF-8)"
    )

    chain_prefix: str = Field(
        default=DEFAULT_CHAIN_PREFIX,
        min_length=1,
        description="Prefisso chain per meta-address (st:<chain>:0x...)"
    )

    # ========================================================================
    # SCANNING
    # ========================================================================

    scan_workers: int = Field(
        default=DEFAULT_SCAN_WORKERS,
        ge=1,
        le=MAX_SCAN_WORKERS,
        description="Thread per batch scanning (1 = sequenziale)"
    )

    # ========================================================================
    # LOGGING
    # ========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )

    log_format: str = Field(
        default="text",
        description="Formato log: json, text"
    )

    log_to_file: bool = Field(
        default=False,
        description="Salva log su file"
    )

    log_dir: Path = Field(
        default=Path("./logs"),
        description="Directory log files"
    )

    enable_console_log: bool = Field(
        default=True,
        description="Log su console (stderr)"
    )

    # ========================================================================
    # VALIDATORS
    # ========================================================================

    @field_validator('curve', mode='before')
    @classmethod
    def validate_curve(cls, v):
        if v is None or v == "":
            return None
        try:
            return CurveId.parse(v)
        except ValueError as e:
            raise ValueError(
                f"curve must be one of {[c.value for c in CurveId]}"
            ) from e

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid:
            raise ValueError(f"log_level must be one of {valid}")
        return v_upper

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v_lower

    @field_validator('chain_prefix')
    @classmethod
    def validate_chain_prefix(cls, v: str) -> str:
        if ":" in v or not v.strip():
            raise ValueError("chain_prefix cannot be empty or contain ':'")
        return v.strip().lower()

    # ========================================================================
    # HELPER METHODS
    # ========================================================================

    def require_curve(self) -> CurveId:
        """
        Curva attiva, o errore se non configurata.

        Raises:
            ConfigurationError: Se nessuna curva è selezionata
        """
        if self.curve is None:
            raise ConfigurationError(
                "No curve backend selected; set STEALTH_CURVE or pass curve=",
                details={"supported": [c.value for c in CurveId]}
            )
        return self.curve

    @property
    def domain_tag_bytes(self) -> Optional[bytes]:
        """Domain tag come bytes (None se vuoto)"""
        if not self.hash_domain_tag:
            return None
        return self.hash_domain_tag.encode("utf-8")

    def to_dict(self) -> dict:
        """Converti a dictionary"""
        return self.model_dump(mode="json")

    def __repr__(self) -> str:
        curve = self.curve.value if self.curve else None
        return (
            f"StealthSettings("
            f"curve={curve}, "
            f"address_length={self.address_length}, "
            f"scan_workers={self.scan_workers})"
        )


# ============================================================================
# GLOBAL SETTINGS INSTANCE
# ============================================================================

@lru_cache()
def get_settings() -> StealthSettings:
    """
    Ottieni istanza settings (cached).

    Returns:
        StealthSettings: Configurazione da environment/.env
    """
    return StealthSettings()


def reload_settings() -> StealthSettings:
    """
    Ricarica settings (invalida cache).

    Returns:
        StealthSettings: Nuova istanza
    """
    get_settings.cache_clear()
    return get_settings()


def override_settings(**kwargs) -> StealthSettings:
    """
    Crea settings con valori custom (non tocca la cache globale).

    Utile per testing.

    Example:
        >>> test_config = override_settings(curve="bn254", scan_workers=2)
    """
    return StealthSettings(**kwargs)


# ============================================================================
# CONFIGURATION VALIDATION
# ============================================================================

def validate_config(config: StealthSettings) -> tuple[bool, list[str]]:
    """
    Valida configurazione completa.

    Args:
        config: StealthSettings da validare

    Returns:
        tuple: (is_valid, errors_list)

    Example:
        >>> is_valid, errors = validate_config(StealthSettings())
        >>> is_valid
        False
    """
    errors = []

    if config.curve is None:
        errors.append("curve is required (bn254, bls12_381, bls12_377)")

    if config.log_to_file and config.log_dir.exists() and not config.log_dir.is_dir():
        errors.append(f"log_dir is not a directory: {config.log_dir}")

    try:
        config.hash_domain_tag.encode("utf-8")
    except UnicodeEncodeError:
        errors.append("hash_domain_tag must be valid UTF-8")

    return (len(errors) == 0, errors)


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "StealthSettings",
    "get_settings",
    "reload_settings",
    "override_settings",
    "validate_config",
]
