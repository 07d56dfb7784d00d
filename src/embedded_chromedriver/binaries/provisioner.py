"""Install-on-demand of the chromedriver binary."""
import asyncio
import concurrent.futures
import shutil
import tempfile
import threading
import zipfile
from pathlib import Path
from typing import Awaitable, Callable, Optional, Tuple

from embedded_chromedriver.errors import (
    DirectoryCreateFailed,
    EntryNotFound,
    FetchFailed,
    FileCreateFailed,
    InstallAborted,
    PermissionSetFailed,
)
from embedded_chromedriver.logging import get_logger
from embedded_chromedriver.types import InstallStatus, InstallTarget
from embedded_chromedriver.utils.fetching import download_url, find_entry, open_archive

logger = get_logger(__name__)

BINARY_MODE = 0o777

Fetcher = Callable[[str, Path], Awaitable[None]]


class InstallState:
    """Single-assignment outcome of the one install attempt.

    The first caller of claim() owns the attempt; every other caller, from
    any thread or event loop, waits on the same future. Never reset.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcome: Optional[concurrent.futures.Future] = None
        self._status = InstallStatus.UNINITIALIZED

    @property
    def status(self) -> InstallStatus:
        with self._lock:
            return self._status

    def claim(self) -> Tuple[concurrent.futures.Future, bool]:
        """Return the shared outcome and whether the caller must install."""
        with self._lock:
            if self._outcome is not None:
                return self._outcome, False
            self._outcome = concurrent.futures.Future()
            # a running future cannot be cancelled by a waiter going away
            self._outcome.set_running_or_notify_cancel()
            self._status = InstallStatus.INSTALLING
            return self._outcome, True

    def succeed(self, path: Path) -> None:
        with self._lock:
            self._status = InstallStatus.INSTALLED
        self._outcome.set_result(path)

    def fail(self, error: BaseException) -> None:
        with self._lock:
            self._status = InstallStatus.FAILED
        self._outcome.set_exception(error)


class Provisioner:
    """Ensures one chromedriver version is present in the local cache."""

    def __init__(self, target: InstallTarget, fetch: Fetcher = download_url):
        self.target = target
        self.state = InstallState()
        self._fetch = fetch
        self._install_task: Optional[asyncio.Task] = None

    @property
    def status(self) -> InstallStatus:
        return self.state.status

    async def ensure_installed(self) -> Path:
        """Install the binary if necessary and return its path.

        Only the first call does any work. Concurrent and later calls get
        the recorded path, or the original error raised again. The install
        runs in its own task, so a caller that times out or is cancelled
        leaves it running for everyone else.
        """
        outcome, owner = self.state.claim()
        if owner:
            self._install_task = asyncio.ensure_future(self._run_install())
        return await asyncio.wrap_future(outcome)

    async def _run_install(self) -> None:
        try:
            path = await self._install()
        except Exception as e:
            self.state.fail(e)
        except BaseException as e:
            # the install's event loop is going away
            logger.error("install_aborted", url=self.target.download_url, error=repr(e))
            self.state.fail(InstallAborted(self.target.download_url, e))
            raise
        else:
            self.state.succeed(path)

    async def _install(self) -> Path:
        target = self.target
        if target.binary_path.exists():
            logger.debug("binary_cached", path=str(target.binary_path))
            return target.binary_path

        logger.info(
            "installing_binary", version=target.version, url=target.download_url
        )

        with tempfile.TemporaryDirectory(prefix="chromedriver-") as tmpdir:
            archive_path = Path(tmpdir) / target.download_url.rsplit("/", 1)[-1]
            try:
                await self._fetch(target.download_url, archive_path)
                archive = open_archive(archive_path)
            except Exception as e:
                logger.error(
                    "archive_fetch_failed", url=target.download_url, error=str(e)
                )
                raise FetchFailed(target.download_url, e) from e

            with archive:
                entry = find_entry(archive, target.entry_name)
                if entry is None:
                    logger.error(
                        "binary_not_found",
                        name=target.entry_name,
                        url=target.download_url,
                    )
                    raise EntryNotFound(target.entry_name, target.download_url)
                self._write_binary(archive, entry)

        logger.info(
            "binary_installed", version=target.version, path=str(target.binary_path)
        )
        return target.binary_path

    def _write_binary(self, archive: zipfile.ZipFile, entry: zipfile.ZipInfo) -> None:
        path = self.target.binary_path

        try:
            path.parent.mkdir(mode=BINARY_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreateFailed(path.parent, e) from e

        try:
            binary = open(path, "wb")
        except OSError as e:
            raise FileCreateFailed(path, e) from e

        try:
            with binary, archive.open(entry) as source:
                try:
                    path.chmod(BINARY_MODE)
                except OSError as e:
                    raise PermissionSetFailed(path, e) from e
                try:
                    shutil.copyfileobj(source, binary)
                except (OSError, zipfile.BadZipFile) as e:
                    raise FileCreateFailed(path, e) from e
        except BaseException:
            # the cache path only ever holds a complete binary
            path.unlink(missing_ok=True)
            raise
