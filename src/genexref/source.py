"""Default HGNC table: download and on-disk cache.

The table is fetched once into ``<data_dir>/hgnc/`` and reused afterwards.
Loading it into a converter matrix is the loader's job.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.request import Request, urlopen

from genexref.retry import with_retry

if TYPE_CHECKING:
    from genexref.config import Settings

logger = logging.getLogger(__name__)

USER_AGENT = "genexref/0.1"


def fetch_text(url: str, timeout: float = 120.0) -> str:
    """Fetch ``url`` and return the body decoded as UTF-8."""
    request = Request(url, headers={"User-Agent": USER_AGENT})
    with urlopen(request, timeout=timeout) as response:
        return response.read().decode("utf-8")


class HGNCSource:
    """Fetch-and-cache collaborator for the default HGNC table."""

    name = "hgnc"
    display_name = "HGNC gene identifier table"

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def path(self) -> Path:
        return self.settings.table_path

    def download(self, force: bool = False) -> Path:
        """Download the table unless it is already cached.

        Args:
            force: Re-download even if the file exists.

        Returns:
            Path of the cached table.

        Raises:
            DownloadError: If the download fails after retries.
        """
        path = self.path
        if not force and path.exists():
            return path

        path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Downloading HGNC table from %s", self.settings.table_url)

        text = with_retry(
            lambda: fetch_text(self.settings.table_url),
            "HGNC table download",
            max_retries=self.settings.max_retries,
            initial_delay=self.settings.retry_initial_delay,
            max_delay=self.settings.retry_max_delay,
        )

        # Only a complete download is ever visible at the cached path
        partial = path.with_name(path.name + ".part")
        partial.write_text(text, encoding="utf-8")
        partial.replace(path)
        logger.info("Saved HGNC table to %s", path)
        return path
