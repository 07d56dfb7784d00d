"""Core type definitions"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from embedded_chromedriver.binaries.platforms import (
    get_archive_platform,
    get_executable_name,
)

DOWNLOAD_BASE = "https://chromedriver.storage.googleapis.com"
BINARY_BASE = "chromedriver"
DEFAULT_VERSION = "2.27"
DEFAULT_SETTLE_INTERVAL = 0.5

InstallStatus = Enum("InstallStatus", ["UNINITIALIZED", "INSTALLING", "INSTALLED", "FAILED"])


@dataclass(frozen=True)
class DriverConfig:
    """Resolved chromedriver configuration"""
    cache_dir: Path
    version: str = DEFAULT_VERSION
    verbose: bool = False
    port: int = 0
    settle_interval: float = DEFAULT_SETTLE_INTERVAL


@dataclass(frozen=True)
class InstallTarget:
    """Where a chromedriver version is fetched from and installed to"""
    cache_dir: Path
    version: str
    binary_path: Path
    download_url: str
    entry_name: str

    @classmethod
    def from_config(cls, config: DriverConfig, system: Optional[str] = None) -> "InstallTarget":
        cache_dir = Path(config.cache_dir)
        file_name = get_executable_name(f"{BINARY_BASE}-{config.version}", system)
        archive = f"{BINARY_BASE}_{get_archive_platform(system)}.zip"
        return cls(
            cache_dir=cache_dir,
            version=config.version,
            binary_path=cache_dir / file_name,
            download_url=f"{DOWNLOAD_BASE}/{config.version}/{archive}",
            entry_name=get_executable_name(BINARY_BASE, system),
        )
