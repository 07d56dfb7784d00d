import zipfile
from pathlib import Path, PurePosixPath
from typing import Optional

import aiohttp

from embedded_chromedriver.logging import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 8192


async def download_url(url: str, dest: Path) -> None:
    """Stream the body at url into dest."""
    logger.info("archive_download_started", url=url, destination=str(dest))
    downloaded = 0
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(url) as response:
                if response.status != 200:
                    raise RuntimeError(
                        f"Download failed with status {response.status} {response.reason}"
                    )

                with open(dest, "wb") as f:
                    while chunk := await response.content.read(CHUNK_SIZE):
                        f.write(chunk)
                        downloaded += len(chunk)

    except Exception:
        if dest.exists():
            dest.unlink()
        raise

    logger.info("archive_download_complete", url=url, size=downloaded)


def open_archive(archive_path: Path) -> zipfile.ZipFile:
    """Open a downloaded zip archive for reading."""
    return zipfile.ZipFile(archive_path)


def find_entry(archive: zipfile.ZipFile, name: str) -> Optional[zipfile.ZipInfo]:
    """Find the file entry whose bare name is name."""
    for info in archive.infolist():
        if not info.is_dir() and PurePosixPath(info.filename).name == name:
            return info

    logger.debug(
        "archive_entry_missing", name=name, available_files=archive.namelist()
    )
    return None
