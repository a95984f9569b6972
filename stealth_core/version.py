"""
StealthCore - Version Management
==================================
Gestione versioning semantico e build info.

Security Level: MEDIUM
Last Updated: 2026-10-17
Version: 0.1.0
"""

from typing import NamedTuple


# ============================================================================
# VERSION INFO
# ============================================================================

class VersionInfo(NamedTuple):
    """Version information structure"""
    major: int
    minor: int
    patch: int
    prerelease: str = ""
    build: str = ""


# Current version (Semantic Versioning)
VERSION = VersionInfo(
    major=0,
    minor=1,
    patch=0,
    prerelease="",  # alpha, beta, rc1, etc.
    build=""  # Build metadata
)


def get_version_string() -> str:
    """
    Get version as string.

    Returns:
        str: Version (e.g., "0.1.0", "0.1.0-beta", "0.1.0+build123")

    Example:
        >>> get_version_string()
        '0.1.0'
    """
    version_str = f"{VERSION.major}.{VERSION.minor}.{VERSION.patch}"

    if VERSION.prerelease:
        version_str += f"-{VERSION.prerelease}"

    if VERSION.build:
        version_str += f"+{VERSION.build}"

    return version_str


def get_version_tuple() -> tuple:
    """Get version as tuple"""
    return (VERSION.major, VERSION.minor, VERSION.patch)


def is_compatible(other_version: str) -> bool:
    """
    Check encoding compatibility with another version.

    Point encodings, hash-to-scalar and view tags are frozen per minor
    version while the major version is 0.

    Args:
        other_version: Version string to check

    Returns:
        bool: True if compatible
    """
    try:
        parts = [int(p) for p in other_version.split('-')[0].split('.')[:2]]
    except ValueError:
        return False

    if len(parts) < 2:
        return False

    if VERSION.major == 0:
        return parts == [VERSION.major, VERSION.minor]
    return parts[0] == VERSION.major


def get_build_info() -> dict:
    """
    Get complete build information.

    Returns:
        dict: Build metadata
    """
    from stealth_core.constants import CurveId, PROJECT_NAME, PROTOCOL_NAME

    return {
        "project": PROJECT_NAME,
        "protocol": PROTOCOL_NAME,
        "version": get_version_string(),
        "version_tuple": get_version_tuple(),
        "supported_curves": [c.value for c in CurveId],
    }


# ============================================================================
# EXPORT
# ============================================================================

__version__ = get_version_string()
__version_info__ = VERSION

__all__ = [
    "__version__",
    "__version_info__",
    "VERSION",
    "get_version_string",
    "get_version_tuple",
    "is_compatible",
    "get_build_info",
]
