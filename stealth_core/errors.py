"""
StealthCore - Custom Exceptions
=================================
Gerarchia completa di eccezioni per gestione errori granulare.

Security Level: HIGH
Last Updated: 2026-10-17
Version: 0.1.0
"""

from typing import Optional


# ============================================================================
# BASE EXCEPTION
# ============================================================================

class StealthCoreException(Exception):
    """
    Eccezione base per tutte le eccezioni StealthCore.

    Attributes:
        message (str): Messaggio errore
        code (str): Codice errore (es. "DECODE_ERROR")
        details (dict): Dettagli aggiuntivi
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.message = message
        self.code = code or error_code_for_class(type(self))
        self.details = details or {}

        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Serializza eccezione per CLI/logging"""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.details:
            return f"[{self.code}] {self.message} | Details: {self.details}"
        return f"[{self.code}] {self.message}"


# ============================================================================
# CONFIGURATION ERRORS
# ============================================================================

class ConfigError(StealthCoreException):
    """Errore configurazione sistema"""
    pass


class ConfigurationError(ConfigError):
    """Nessuna curva selezionata o combinazione non supportata"""
    pass


# ============================================================================
# CRYPTOGRAPHY ERRORS
# ============================================================================

class CryptoError(StealthCoreException):
    """Errore crittografia"""
    pass


class DecodeError(CryptoError):
    """Bytes non decodificabili in elemento di campo/gruppo valido"""
    pass


class InvalidKeyError(CryptoError):
    """Chiave crittografica invalida"""
    pass


# ============================================================================
# STEALTH ADDRESS ERRORS
# ============================================================================

class StealthAddressError(StealthCoreException):
    """Errore stealth address"""
    pass


class InvalidMetaAddressError(StealthAddressError):
    """Meta-address con chiavi pubbliche non valide"""
    pass


class InvalidAnnouncementError(StealthAddressError):
    """Announcement malformato"""
    pass


# Nome usato nella documentazione del protocollo
InvalidMetaAddress = InvalidMetaAddressError


# ============================================================================
# STABLE ERROR CODES
# ============================================================================

ERROR_CODES = {
    "ConfigError": "CONFIG_ERROR",
    "ConfigurationError": "CONFIGURATION_ERROR",
    "CryptoError": "CRYPTO_ERROR",
    "DecodeError": "DECODE_ERROR",
    "InvalidKeyError": "INVALID_KEY",
    "StealthAddressError": "STEALTH_ERROR",
    "InvalidMetaAddressError": "INVALID_META_ADDRESS",
    "InvalidAnnouncementError": "INVALID_ANNOUNCEMENT",
}


def error_code_for_class(cls: type) -> str:
    """
    Codice stabile per una classe di eccezione.

    Risale la MRO fino alla prima classe con codice registrato.
    """
    for klass in cls.__mro__:
        code = ERROR_CODES.get(klass.__name__)
        if code:
            return code
    return "INTERNAL_ERROR"


def error_code_for(exc: BaseException) -> str:
    """
    Codice stabile per un'eccezione qualsiasi.

    Example:
        >>> error_code_for(DecodeError("bad point"))
        'DECODE_ERROR'
        >>> error_code_for(KeyError("x"))
        'INTERNAL_ERROR'
    """
    if isinstance(exc, StealthCoreException):
        return exc.code
    return error_code_for_class(type(exc))


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    # Base
    "StealthCoreException",

    # Config
    "ConfigError",
    "ConfigurationError",

    # Crypto
    "CryptoError",
    "DecodeError",
    "InvalidKeyError",

    # Stealth
    "StealthAddressError",
    "InvalidMetaAddressError",
    "InvalidMetaAddress",
    "InvalidAnnouncementError",

    # Helpers
    "ERROR_CODES",
    "error_code_for",
    "error_code_for_class",
]
