"""Chromedriver server process supervision."""
import asyncio
import codecs
import sys
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TextIO

from embedded_chromedriver.binaries.provisioner import Provisioner
from embedded_chromedriver.config import load_config
from embedded_chromedriver.errors import (
    InstallError,
    InstallFailed,
    KillFailed,
    PortAllocationFailed,
    SpawnFailed,
    StopError,
)
from embedded_chromedriver.logging import get_logger
from embedded_chromedriver.types import DriverConfig, InstallTarget
from embedded_chromedriver.utils.net import LOOPBACK_HOST, get_free_port, wait_for_port

logger = get_logger(__name__)

PORT_FLAG = "--port"
MIRROR_CHUNK_SIZE = 8192


async def mirror_stream(source: asyncio.StreamReader, sink: TextIO) -> None:
    """Copy a child's output into sink until the pipe closes."""
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while chunk := await source.read(MIRROR_CHUNK_SIZE):
        sink.write(decoder.decode(chunk))
        sink.flush()
    if tail := decoder.decode(b"", final=True):
        sink.write(tail)
        sink.flush()


@dataclass
class ProcessHandle:
    """A running chromedriver server.

    The caller owns the handle and must call stop() (or stop_or_fatal());
    nothing kills the process when the handle is dropped.
    """
    port: int
    process: asyncio.subprocess.Process
    mirrors: List[asyncio.Task] = field(default_factory=list)
    _stopped: bool = field(default=False, init=False, repr=False)

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def stdout(self) -> Optional[asyncio.StreamReader]:
        return self.process.stdout

    @property
    def stderr(self) -> Optional[asyncio.StreamReader]:
        return self.process.stderr

    @property
    def url(self) -> str:
        """The webdriver server URL."""
        return f"http://{LOOPBACK_HOST}:{self.port}"

    def stop(self) -> None:
        """Kill the server. Does not wait for it to exit."""
        if self._stopped:
            raise KillFailed(self.pid, ProcessLookupError("process was already stopped"))
        if self.process.returncode is not None:
            raise KillFailed(
                self.pid,
                ProcessLookupError(
                    f"process already exited with code {self.process.returncode}"
                ),
            )

        try:
            self.process.kill()
        except OSError as e:
            raise KillFailed(self.pid, e) from e

        self._stopped = True
        logger.info("chromedriver_stopped", pid=self.pid, port=self.port)

    def stop_or_fatal(self) -> None:
        """Stop the server, exiting the program if it can't be stopped."""
        try:
            self.stop()
        except StopError as e:
            logger.critical("chromedriver_kill_failed", error=str(e), pid=self.pid)
            sys.exit(1)

    async def wait(self) -> int:
        """Reap the process and let any mirrored output drain."""
        returncode = await self.process.wait()
        if self.mirrors:
            await asyncio.gather(*self.mirrors)
        return returncode


class Supervisor:
    """Starts chromedriver servers from one installed binary."""

    def __init__(
        self,
        config: DriverConfig,
        provisioner: Optional[Provisioner] = None,
        allocate_port: Callable[[], int] = get_free_port,
    ):
        self.config = config
        self.provisioner = provisioner or Provisioner(InstallTarget.from_config(config))
        self._allocate_port = allocate_port

    @property
    def target(self) -> InstallTarget:
        return self.provisioner.target

    def _pick_port(self) -> int:
        if self.config.port:
            return self.config.port
        try:
            return self._allocate_port()
        except OSError as e:
            raise PortAllocationFailed(e) from e

    async def start(self) -> ProcessHandle:
        """Start a new chromedriver server, installing it if necessary."""
        try:
            binary = await self.provisioner.ensure_installed()
        except InstallError as e:
            raise InstallFailed(e) from e

        port = self._pick_port()

        try:
            process = await asyncio.create_subprocess_exec(
                str(binary),
                f"{PORT_FLAG}={port}",
                cwd=self.target.cache_dir,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("chromedriver_spawn_failed", binary=str(binary), error=str(e))
            raise SpawnFailed(binary, e) from e

        handle = ProcessHandle(port=port, process=process)
        logger.info(
            "chromedriver_started", pid=process.pid, port=port, binary=str(binary)
        )

        if self.config.verbose:
            handle.mirrors = [
                asyncio.create_task(mirror_stream(process.stdout, sys.stdout)),
                asyncio.create_task(mirror_stream(process.stderr, sys.stderr)),
            ]

        if not await wait_for_port(port, self.config.settle_interval):
            logger.warning(
                "chromedriver_not_listening",
                port=port,
                settle_interval=self.config.settle_interval,
            )
        return handle


_default_supervisor: Optional[Supervisor] = None
_default_lock = threading.Lock()


def get_default_supervisor() -> Supervisor:
    """The process-wide supervisor, configured from the environment."""
    global _default_supervisor
    with _default_lock:
        if _default_supervisor is None:
            _default_supervisor = Supervisor(load_config())
        return _default_supervisor


async def start() -> ProcessHandle:
    """Start a chromedriver server bound to the configured or a free port."""
    return await get_default_supervisor().start()
