"""Platform detection and mapping."""
import platform
from typing import NamedTuple, Optional


class PlatformMapping(NamedTuple):
    """Platform-specific values."""
    archive_platform: str
    executable_suffix: str


# Chromedriver publishes a single build per OS
PLATFORM_MAPPINGS = {
    "Linux": PlatformMapping(archive_platform="linux64", executable_suffix=""),
    "Darwin": PlatformMapping(archive_platform="mac64", executable_suffix=""),
    "Windows": PlatformMapping(archive_platform="win32", executable_suffix=".exe"),
}


def get_platform_mapping(system: Optional[str] = None) -> PlatformMapping:
    """Get the mapping for the given (or current) operating system."""
    if system is None:
        system = platform.system()

    if system not in PLATFORM_MAPPINGS:
        raise RuntimeError(f"Unsupported operating system: {system}")

    return PLATFORM_MAPPINGS[system]


def get_archive_platform(system: Optional[str] = None) -> str:
    """Get the platform component of the chromedriver archive name."""
    return get_platform_mapping(system).archive_platform


def get_executable_name(name: str, system: Optional[str] = None) -> str:
    """Get the executable file name for a binary on the given platform."""
    return f"{name}{get_platform_mapping(system).executable_suffix}"


def is_platform_supported() -> bool:
    """Check if current platform is supported."""
    try:
        get_platform_mapping()
        return True
    except RuntimeError:
        return False
