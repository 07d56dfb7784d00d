"""Error handling for chromedriver provisioning and supervision."""
from typing import Any, Dict, Optional

from embedded_chromedriver.logging import get_logger


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    logger=None,
) -> None:
    """Log an error with context."""
    logger = logger or get_logger(__name__)

    error_info: Dict[str, Any] = {
        "error_type": error.__class__.__name__,
        "error_message": str(error),
    }
    if context:
        error_info["context"] = context
    if isinstance(error, ChromedriverError):
        error_info["details"] = error.details

    logger.error("chromedriver_error", **error_info)


class ChromedriverError(Exception):
    """Base error class for embedded chromedriver."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigError(ChromedriverError):
    """Invalid configuration value."""

    def __init__(self, name: str, value: Any, reason: str):
        super().__init__(
            f"Invalid value {value!r} for {name}: {reason}",
            details={"name": name, "value": value},
        )


class InstallError(ChromedriverError):
    """Provisioning failed. Never retried within the process."""


class FetchFailed(InstallError):
    def __init__(self, url: str, cause: BaseException):
        super().__init__(
            f"Reading zip content from {url} failed: {cause}",
            details={"url": url, "cause": str(cause)},
        )
        self.url = url
        self.cause = cause


class EntryNotFound(InstallError):
    def __init__(self, name: str, url: str):
        super().__init__(
            f"Could not find file {name} in the zip file at {url}",
            details={"name": name, "url": url},
        )
        self.name = name
        self.url = url


class InstallAborted(InstallError):
    def __init__(self, url: str, cause: BaseException):
        super().__init__(
            f"Install from {url} was interrupted before it finished: {cause!r}",
            details={"url": url, "cause": repr(cause)},
        )
        self.url = url
        self.cause = cause


class _PathError(InstallError):
    template = "{path}: {cause}"

    def __init__(self, path, cause: BaseException):
        super().__init__(
            self.template.format(path=path, cause=cause),
            details={"path": str(path), "cause": str(cause)},
        )
        self.path = path
        self.cause = cause


class DirectoryCreateFailed(_PathError):
    template = "Creating directory {path} to store binary failed: {cause}"


class FileCreateFailed(_PathError):
    template = "Error creating output file {path}: {cause}"


class PermissionSetFailed(_PathError):
    template = "Error setting executable bit on file {path}: {cause}"


class StartError(ChromedriverError):
    """Starting a chromedriver server failed."""


class InstallFailed(StartError):
    def __init__(self, cause: InstallError):
        super().__init__(
            f"Chromedriver install failed: {cause}",
            details=dict(cause.details),
        )
        self.cause = cause


class PortAllocationFailed(StartError):
    def __init__(self, cause: BaseException):
        super().__init__(
            f"Failed to find a free port: {cause}",
            details={"cause": str(cause)},
        )
        self.cause = cause


class SpawnFailed(StartError):
    def __init__(self, path, cause: BaseException):
        super().__init__(
            f"Failed to start binary {path}: {cause}",
            details={"path": str(path), "cause": str(cause)},
        )
        self.path = path
        self.cause = cause


class StopError(ChromedriverError):
    """Stopping a chromedriver server failed."""


class KillFailed(StopError):
    def __init__(self, pid: int, cause: BaseException):
        super().__init__(
            f"Failed to kill chromedriver (pid {pid}): {cause}",
            details={"pid": pid, "cause": str(cause)},
        )
        self.pid = pid
        self.cause = cause
