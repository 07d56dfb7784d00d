"""Command line entry point."""
import argparse
import asyncio
from pathlib import Path
from typing import List, Optional

from embedded_chromedriver.binaries.platforms import is_platform_supported
from embedded_chromedriver.binaries.provisioner import Provisioner
from embedded_chromedriver.config import load_config
from embedded_chromedriver.errors import ChromedriverError, ConfigError, log_error
from embedded_chromedriver.logging import configure_logging, get_logger
from embedded_chromedriver.supervisor import Supervisor
from embedded_chromedriver.types import DriverConfig, InstallTarget

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="embedded-chromedriver",
        description="Install and run a cached chromedriver server",
    )
    parser.add_argument("command", choices=["install", "serve"])
    parser.add_argument(
        "--driver-version", help="chromedriver binary version to use"
    )
    parser.add_argument(
        "--cache-dir", type=Path, help="location to store or load the binary from"
    )
    parser.add_argument(
        "--port", type=int, help="port to bind the server to (0 picks a free one)"
    )
    parser.add_argument(
        "--verbose", action="store_true", default=None,
        help="show chromedriver server logs",
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    return parser


async def install(config: DriverConfig) -> Path:
    return await Provisioner(InstallTarget.from_config(config)).ensure_installed()


async def serve(config: DriverConfig) -> int:
    """Run one server until it exits or the program is interrupted."""
    handle = await Supervisor(config).start()
    print(handle.url, flush=True)
    try:
        return await handle.wait()
    finally:
        if handle.process.returncode is None:
            handle.stop()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if not is_platform_supported():
        parser.error("chromedriver is not published for this operating system")

    try:
        config = load_config(
            version=args.driver_version,
            cache_dir=args.cache_dir,
            port=args.port,
            verbose=args.verbose,
        )
    except ConfigError as e:
        parser.error(str(e))

    try:
        if args.command == "install":
            print(asyncio.run(install(config)))
            return 0
        return asyncio.run(serve(config))
    except ChromedriverError as e:
        log_error(e, {"command": args.command}, logger)
        return 1
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 130
