"""Configuration resolved from the process environment."""
import os
import re
from pathlib import Path
from typing import Mapping, Optional

import appdirs

from embedded_chromedriver.errors import ConfigError
from embedded_chromedriver.types import (
    DEFAULT_SETTLE_INTERVAL,
    DEFAULT_VERSION,
    DriverConfig,
)

APP_NAME = "embedded-chromedriver"

ENV_VERSION = "CHROMEDRIVER_VERSION"
ENV_CACHE_DIR = "CHROMEDRIVER_CACHE_DIR"
ENV_VERBOSE = "CHROMEDRIVER_VERBOSE"
ENV_PORT = "CHROMEDRIVER_PORT"
ENV_SETTLE_INTERVAL = "CHROMEDRIVER_SETTLE_INTERVAL"

# Interpolated into both the cache file name and the download URL
VERSION_PATTERN = re.compile(r"^[0-9A-Za-z][0-9A-Za-z._-]*$")
TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"", "0", "false", "no", "off"}


def default_cache_dir() -> Path:
    return Path(appdirs.user_cache_dir(APP_NAME))


def validate_version(version: str) -> str:
    if not VERSION_PATTERN.match(version):
        raise ConfigError(ENV_VERSION, version, "expected a release number such as 2.27")
    return version


def validate_port(port: int) -> int:
    if not 0 <= port <= 65535:
        raise ConfigError(ENV_PORT, port, "must be between 0 and 65535")
    return port


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigError(name, raw, "expected a boolean")


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(name, raw, "expected an integer") from e


def _parse_float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(name, raw, "expected a number of seconds") from e
    if value < 0:
        raise ConfigError(name, raw, "must not be negative")
    return value


def load_config(environ: Optional[Mapping[str, str]] = None, **overrides) -> DriverConfig:
    """Build a DriverConfig from CHROMEDRIVER_* variables.

    Keyword overrides that are not None win over the environment, which is
    how the command line layers its flags on top.
    """
    env = os.environ if environ is None else environ

    values = {
        "version": env.get(ENV_VERSION, DEFAULT_VERSION),
        "cache_dir": Path(env[ENV_CACHE_DIR]).expanduser()
        if env.get(ENV_CACHE_DIR)
        else default_cache_dir(),
        "verbose": _parse_bool(ENV_VERBOSE, env.get(ENV_VERBOSE, "")),
        "port": _parse_int(ENV_PORT, env.get(ENV_PORT, "0")),
        "settle_interval": _parse_float(
            ENV_SETTLE_INTERVAL, env.get(ENV_SETTLE_INTERVAL, str(DEFAULT_SETTLE_INTERVAL))
        ),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})

    return DriverConfig(
        cache_dir=Path(values["cache_dir"]),
        version=validate_version(values["version"]),
        verbose=bool(values["verbose"]),
        port=validate_port(values["port"]),
        settle_interval=values["settle_interval"],
    )
