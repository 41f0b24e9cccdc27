"""Fetching of remote dependency sources.

A dependency without a local path is fetched from one of its ``"url"``
entries into a scratch directory. Two methods are supported:

- Archive URLs (.zip, .tar.gz, .tgz, .tar.xz, .txz) are streamed to disk with
  requests and extracted. A single top-level directory inside the archive
  (the GitHub archive layout) is collapsed into the destination.
- Anything else is treated as a git remote and cloned with ``git clone``.

SourceFetcher.fetch() reports success as a boolean. Trying the next URL and
deciding that a dependency is unfetchable is the resolver's job.
"""

import logging
import shutil
import tarfile
import zipfile
from enum import Enum
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import requests

from ..output import log, log_warning
from ..paths import get_git_executable
from ..subprocess_utils import CommandRunner, run_command

logger = logging.getLogger(__name__)

_ARCHIVE_SUFFIXES = {
    ".zip": "zip",
    ".tar.gz": "r:gz",
    ".tgz": "r:gz",
    ".tar.xz": "r:xz",
    ".txz": "r:xz",
}

_DOWNLOAD_TIMEOUT = 30
_CHUNK_SIZE = 8192


class FetchMethod(Enum):
    """How a remote location is turned into a local directory."""

    GIT = "git"
    ARCHIVE = "archive"


def archive_format(url: str) -> Optional[str]:
    """Return the archive format of a URL ("zip" or a tarfile mode), or None."""
    path = urlparse(url).path.lower()
    for suffix, fmt in _ARCHIVE_SUFFIXES.items():
        if path.endswith(suffix):
            return fmt
    return None


def detect_fetch_method(url: str) -> FetchMethod:
    """Pick the fetch method for a URL.

    Examples:
        >>> detect_fetch_method("https://github.com/owner/repo/archive/refs/heads/main.zip")
        <FetchMethod.ARCHIVE: 'archive'>
        >>> detect_fetch_method("https://github.com/owner/repo.git")
        <FetchMethod.GIT: 'git'>
    """
    return FetchMethod.ARCHIVE if archive_format(url) else FetchMethod.GIT


class SourceFetcher:
    """Fetches a remote location into a destination directory.

    Args:
        runner: Executes the git command and returns its exit code
        git: git executable (defaults to CFACTORY_GIT or "git")
    """

    def __init__(self, runner: CommandRunner = run_command, git: Optional[str] = None):
        self.runner = runner
        self.git = git or get_git_executable()

    def fetch(self, url: str, destination: Path) -> bool:
        """Fetch url into destination.

        Args:
            url: Remote location
            destination: Directory that receives the sources (may already exist, empty)

        Returns:
            True if the sources were fetched
        """
        fmt = archive_format(url)
        method = FetchMethod.ARCHIVE if fmt else FetchMethod.GIT
        logger.debug("Fetching %s into %s using %s", url, destination, method.value)
        if fmt is not None:
            return self._download(url, destination, fmt)
        return self._clone(url, destination)

    def _clone(self, url: str, destination: Path) -> bool:
        cmd = [self.git, "clone", url, str(destination)]
        return self.runner(cmd, None) == 0

    def _download(self, url: str, destination: Path, fmt: str) -> bool:
        archive_name = Path(urlparse(url).path).name
        destination.parent.mkdir(parents=True, exist_ok=True)
        temp_file = destination.parent / f"{archive_name}.download"

        log(f"Downloading {url}")
        try:
            self._download_to(url, temp_file)
            self._extract(temp_file, destination, fmt)
        except requests.RequestException as e:
            log_warning(f"Download failed for {url}: {e}")
            return False
        except (tarfile.TarError, zipfile.BadZipFile, OSError) as e:
            log_warning(f"Could not unpack {archive_name}: {e}")
            return False
        finally:
            if temp_file.exists():
                temp_file.unlink()
        return True

    def _download_to(self, url: str, temp_file: Path) -> None:
        response = requests.get(url, stream=True, timeout=_DOWNLOAD_TIMEOUT)
        response.raise_for_status()
        downloaded = 0
        with open(temp_file, "wb") as f:
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                if chunk:
                    f.write(chunk)
                    downloaded += len(chunk)
        logger.debug("Downloaded %d bytes from %s", downloaded, url)

    def _extract(self, archive_path: Path, destination: Path, fmt: str) -> None:
        """Extract an archive into destination, collapsing a single top-level directory."""
        temp_extract = destination.parent / f"temp_extract_{destination.name}"
        if temp_extract.exists():
            shutil.rmtree(temp_extract)
        temp_extract.mkdir(parents=True)
        try:
            if fmt == "zip":
                with zipfile.ZipFile(archive_path, "r") as zf:
                    zf.extractall(temp_extract)
            else:
                with tarfile.open(archive_path, fmt) as tar:  # type: ignore[call-overload]
                    tar.extractall(temp_extract, filter="data")

            items = list(temp_extract.iterdir())
            source_dir = items[0] if len(items) == 1 and items[0].is_dir() else temp_extract

            if destination.exists():
                shutil.rmtree(destination)
            shutil.move(str(source_dir), str(destination))
        finally:
            if temp_extract.exists():
                shutil.rmtree(temp_extract, ignore_errors=True)
