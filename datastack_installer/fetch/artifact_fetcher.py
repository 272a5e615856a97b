# Path and File Name : /home/datastack/rebuild/datastack_installer/fetch/artifact_fetcher.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Downloads component archives with bounded retry, extracts them and places them under the install root

"""
Artifact Fetcher.

install(descriptor, target, disposition) -> install path

- Existing install: AlreadyInstalled unless a disposition is given.
  REUSE keeps it, REPLACE removes the tree and fetches again.
- Download: up to `retries` full attempts (no resume), fixed back-off between them.
- Extraction: a single attempt. A corrupt archive is fatal and does NOT
  re-enter the download loop.
- Ownership of the installed tree is handed to the target user.
"""

import logging
import shutil
import tarfile
import time
from pathlib import Path
from typing import Callable, Optional

import requests

from ..components import ComponentDescriptor, InstallTarget
from ..errors import AlreadyInstalled, FetchError
from ..run_log import get_logger, success
from ..shell import chown_tree
from ..stages import Disposition

CHUNK_SIZE = 1024 * 1024


class ArtifactFetcher:
    """Fetches and installs component archives."""

    def __init__(
        self,
        retries: int = 3,
        backoff_seconds: float = 2.0,
        timeout_seconds: float = 60.0,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        if retries < 1:
            raise ValueError("retries must be >= 1")
        self.retries = retries
        self.backoff_seconds = backoff_seconds
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()
        self.sleep = sleep
        self.logger = logger or get_logger()

    @staticmethod
    def is_installed(target: InstallTarget) -> bool:
        return target.path.exists()

    def install(
        self,
        descriptor: ComponentDescriptor,
        target: InstallTarget,
        disposition: Optional[Disposition] = None,
    ) -> Path:
        """
        Install one component.

        Args:
            descriptor: What to fetch
            target: Where to put it
            disposition: REUSE or REPLACE, required when the target already exists

        Returns:
            The install path

        Raises:
            AlreadyInstalled: Target exists and no disposition was given
            FetchError: Download retries exhausted or extraction failed
        """
        destination = target.path
        self.logger.info(f"Installing {descriptor.display_name} {descriptor.version}...")

        if destination.exists():
            if disposition is None:
                raise AlreadyInstalled(descriptor.name, destination)
            if disposition is Disposition.REUSE:
                self.logger.info(f"Skipping {descriptor.display_name} installation (reusing {destination})")
                return destination
            if disposition is not Disposition.REPLACE:
                raise ValueError(f"Unsupported disposition for existing install: {disposition}")
            self.logger.info("Removing existing installation...")
            shutil.rmtree(destination)

        target.root.mkdir(parents=True, exist_ok=True)
        archive_path = target.root / descriptor.archive_filename

        self.logger.info(f"Downloading {descriptor.display_name} {descriptor.version}...")
        self._download(descriptor, archive_path)

        self.logger.info(f"Extracting {descriptor.display_name}...")
        self._extract(descriptor, archive_path, target)
        success(self.logger, f"{descriptor.display_name} extracted successfully")

        try:
            chown_tree(destination, target.owner)
        except RuntimeError as e:
            raise FetchError(descriptor.name, str(e))

        success(self.logger, f"{descriptor.display_name} {descriptor.version} installation completed")
        return destination

    def _download(self, descriptor: ComponentDescriptor, archive_path: Path) -> None:
        """Download with a fixed retry budget. Each attempt starts from scratch."""
        url = descriptor.url
        for attempt in range(1, self.retries + 1):
            try:
                self._download_once(url, archive_path)
                return
            except (requests.RequestException, OSError) as e:
                archive_path.unlink(missing_ok=True)
                self.logger.warning(f"Download failed ({e}). Retry {attempt} of {self.retries}...")
                if attempt < self.retries:
                    self.sleep(self.backoff_seconds)

        self.logger.error(f"Failed to download {descriptor.display_name} after {self.retries} attempts.")
        raise FetchError(
            descriptor.name,
            f"Failed to download {descriptor.display_name} from {url} after {self.retries} attempts",
            attempts=self.retries,
        )

    def _download_once(self, url: str, archive_path: Path) -> None:
        with self.session.get(url, stream=True, timeout=self.timeout_seconds) as response:
            response.raise_for_status()
            with open(archive_path, 'wb') as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)

    def _extract(self, descriptor: ComponentDescriptor, archive_path: Path, target: InstallTarget) -> None:
        """Extract once; verify the expected directory appeared."""
        try:
            with tarfile.open(archive_path, 'r:gz') as archive:
                archive.extractall(path=target.root, filter='data')
        except (tarfile.TarError, OSError, EOFError) as e:
            self.logger.error(f"Failed to extract {descriptor.display_name}: {e}")
            raise FetchError(
                descriptor.name,
                f"Failed to extract {archive_path}: {e}",
                attempts=1,
                extraction=True,
            )
        finally:
            archive_path.unlink(missing_ok=True)

        if not target.path.is_dir():
            self.logger.error(f"Failed to extract {descriptor.display_name}: {target.path} not found in archive")
            raise FetchError(
                descriptor.name,
                f"Archive {descriptor.archive_filename} did not contain {descriptor.install_subdir}/",
                attempts=1,
                extraction=True,
            )
