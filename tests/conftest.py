import asyncio
import io
import sys
import zipfile
from pathlib import Path

import pytest
import pytest_asyncio

from embedded_chromedriver.binaries.provisioner import Provisioner
from embedded_chromedriver.types import DriverConfig, InstallTarget

FIXTURES = Path(__file__).parent.parent / "fixtures_data" / "chromedriver"

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs a shebang script")


def build_archive(entries: dict) -> bytes:
    """Build zip bytes from a name -> content mapping."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buffer.getvalue()


class FakeFetcher:
    """Stands in for the HTTP download, writing a prepared archive."""

    def __init__(self, payload: bytes = b"", error: Exception = None, delay: float = 0.05):
        self.payload = payload
        self.error = error
        self.delay = delay
        self.urls = []

    @property
    def calls(self) -> int:
        return len(self.urls)

    async def __call__(self, url: str, dest: Path) -> None:
        self.urls.append(url)
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        dest.write_bytes(self.payload)


@pytest.fixture
def fixture_path() -> Path:
    return FIXTURES


@pytest.fixture
def fake_chromedriver(fixture_path) -> bytes:
    """A runnable stand-in for chromedriver that serves HTTP on --port."""
    source = (fixture_path / "fake_chromedriver.py").read_text()
    return f"#!{sys.executable}\n{source}".encode()


@pytest.fixture
def chromedriver_archive(fake_chromedriver) -> bytes:
    return build_archive({"chromedriver": fake_chromedriver})


@pytest.fixture
def cache_dir(tmp_path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def config(cache_dir) -> DriverConfig:
    return DriverConfig(cache_dir=cache_dir, version="2.27", settle_interval=2.0)


@pytest.fixture
def target(config) -> InstallTarget:
    return InstallTarget.from_config(config, system="Linux")


@pytest.fixture
def fetcher(chromedriver_archive) -> FakeFetcher:
    return FakeFetcher(chromedriver_archive)


@pytest.fixture
def provisioner(target, fetcher) -> Provisioner:
    return Provisioner(target, fetch=fetcher)


@pytest_asyncio.fixture
async def handles():
    """Collects started handles and kills whatever is still running."""
    started = []
    try:
        yield started
    finally:
        for handle in started:
            if handle.process.returncode is None:
                handle.process.kill()
            await handle.wait()
