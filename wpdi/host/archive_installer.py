"""Artifact installer - downloads a zip archive and unpacks it as a plugin."""

import asyncio
import logging
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Optional

import aiohttp

from wpdi.installer.collaborators import OperationResult
from wpdi.installer.errors import InstallError
from wpdi.installer.manifest import slug_directory

logger = logging.getLogger(__name__)

# Entries archivers add next to the real content.
IGNORED_ARCHIVE_ENTRIES = {"__MACOSX"}


class ZipArchiveInstaller:
    """Installs plugins from zip archives into the plugins directory.

    Source hosts unpack into directories like ``owner-repo-1a2b3c``, so the
    unpacked root is renamed to the directory the plugin slug expects before
    it is moved into place.
    """

    def __init__(self, plugins_dir: Path, timeout: float = 30):
        self.plugins_dir = Path(plugins_dir)
        self.timeout = timeout

    async def install(self, download_link: str, slug: str) -> Optional[OperationResult]:
        """Download, unpack and move a plugin into place.

        Unpacking and moving run in a worker thread so large archives do
        not block the event loop.

        Args:
            download_link: URL of the zip archive
            slug: Plugin slug the result must be installed as

        Returns:
            The outcome, or None if nothing was downloaded

        Raises:
            InstallError: If the archive is unusable or cannot be moved into place
        """
        try:
            with tempfile.TemporaryDirectory(prefix="wpdi-") as tmp:
                archive = Path(tmp) / "package.zip"
                try:
                    size = await self._download(download_link, archive)
                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    logger.error(f"[Installer] Download of {download_link} failed: {e}")
                    return OperationResult(success=False, message=f"Download failed. {e}")

                if size == 0:
                    logger.error(f"[Installer] Empty download from {download_link}")
                    return None

                destination = await asyncio.to_thread(self._extract_and_place, archive, Path(tmp) / "extracted", slug)
        except OSError as e:
            logger.error(f"[Installer] Installing {slug} failed: {e}")
            raise InstallError(f"Could not install {slug}. {e}") from e

        logger.info(f"[Installer] Installed {slug} to {destination}")
        return OperationResult(success=True, message=f"Installed {slug}.")

    def _extract_and_place(self, archive: Path, extract_dir: Path, slug: str) -> Path:
        self._unpack(archive, extract_dir)
        source = self.select_source(extract_dir, slug)
        return self._move_into_place(source)

    async def _download(self, url: str, target: Path) -> int:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        size = 0
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url) as response:
                if response.status != 200:
                    raise InstallError(f"Download failed. {response.status} {response.reason}")
                with open(target, "wb") as f:
                    async for chunk in response.content.iter_chunked(64 * 1024):
                        f.write(chunk)
                        size += len(chunk)
        logger.debug(f"[Installer] Downloaded {size} bytes from {url}")
        return size

    @staticmethod
    def _unpack(archive: Path, extract_dir: Path) -> None:
        try:
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(extract_dir)
        except zipfile.BadZipFile as e:
            raise InstallError(f"Incompatible archive. {e}") from e

    def select_source(self, extract_dir: Path, slug: str) -> Path:
        """Rename the single unpacked root directory after the plugin slug.

        Raises:
            InstallError: If the archive does not hold exactly one top-level directory
        """
        entries = [p for p in extract_dir.iterdir() if p.name not in IGNORED_ARCHIVE_ENTRIES]
        if len(entries) != 1 or not entries[0].is_dir():
            raise InstallError(
                f"Archive must contain exactly one top-level directory, found {len(entries)} entries."
            )

        source = entries[0]
        renamed = extract_dir / slug_directory(slug)
        if source != renamed:
            source.rename(renamed)
            logger.debug(f"[Installer] Renamed {source.name} -> {renamed.name}")
        return renamed

    def _move_into_place(self, source: Path) -> Path:
        destination = self.plugins_dir / source.name
        if destination.exists():
            raise InstallError("Destination folder already exists.")
        self.plugins_dir.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(destination))
        return destination
