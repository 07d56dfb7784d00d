"""Install-on-demand chromedriver, run as a supervised background server."""

from embedded_chromedriver.types import (
    DriverConfig,
    InstallStatus,
    InstallTarget,
)
from embedded_chromedriver.config import load_config
from embedded_chromedriver.binaries.provisioner import InstallState, Provisioner
from embedded_chromedriver.supervisor import (
    ProcessHandle,
    Supervisor,
    get_default_supervisor,
    start,
)
from embedded_chromedriver.errors import (
    ChromedriverError,
    ConfigError,
    InstallError,
    InstallAborted,
    FetchFailed,
    EntryNotFound,
    DirectoryCreateFailed,
    FileCreateFailed,
    PermissionSetFailed,
    StartError,
    InstallFailed,
    PortAllocationFailed,
    SpawnFailed,
    StopError,
    KillFailed,
)

__version__ = "0.1.0"

__all__ = [
    # Configuration types
    "DriverConfig",
    "InstallTarget",
    "InstallStatus",
    "load_config",

    # Provisioning
    "InstallState",
    "Provisioner",

    # Supervision
    "ProcessHandle",
    "Supervisor",
    "get_default_supervisor",
    "start",

    # Error types
    "ChromedriverError",
    "ConfigError",
    "InstallError",
    "InstallAborted",
    "FetchFailed",
    "EntryNotFound",
    "DirectoryCreateFailed",
    "FileCreateFailed",
    "PermissionSetFailed",
    "StartError",
    "InstallFailed",
    "PortAllocationFailed",
    "SpawnFailed",
    "StopError",
    "KillFailed",
]
