import asyncio
import socket

from embedded_chromedriver.logging import get_logger

logger = get_logger(__name__)

LOOPBACK_HOST = "127.0.0.1"
PROBE_INTERVAL = 0.05


def get_free_port() -> int:
    """Ask the OS for a currently unbound loopback TCP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((LOOPBACK_HOST, 0))
        return s.getsockname()[1]


async def is_port_open(port: int, host: str = LOOPBACK_HOST) -> bool:
    """Check if something is listening on host:port."""
    try:
        _, writer = await asyncio.open_connection(host, port)
    except OSError:
        return False
    writer.close()
    return True


async def wait_for_port(port: int, timeout: float, host: str = LOOPBACK_HOST) -> bool:
    """Poll host:port until it accepts a connection or timeout elapses."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        if await is_port_open(port, host):
            return True
        remaining = deadline - loop.time()
        if remaining <= 0:
            logger.debug("port_not_ready", host=host, port=port, timeout=timeout)
            return False
        await asyncio.sleep(min(PROBE_INTERVAL, remaining))
