"""Load a bracket page from a URL or a saved HTML file."""

from pathlib import Path
from typing import Optional
import logging

import requests
from bs4 import BeautifulSoup

from majorpredictor.exceptions import PageLoadError

logger = logging.getLogger(__name__)


def is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def parse_html(html: str) -> BeautifulSoup:
    """Parse HTML string into a BeautifulSoup document."""
    return BeautifulSoup(html, "lxml")


class PageLoader:
    """Fetches page HTML over HTTP or reads it from disk."""

    def __init__(self, user_agent: str, timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def fetch(self, source: str) -> str:
        """Return the HTML for ``source``."""
        if is_url(source):
            return self._fetch_url(source)
        return self._read_file(source)

    def fetch_and_parse(self, source: str) -> BeautifulSoup:
        return parse_html(self.fetch(source))

    def _fetch_url(self, url: str) -> str:
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise PageLoadError(url, original_error=e) from e
        logger.info("Fetched %s (%d bytes)", url, len(resp.text))
        return resp.text

    def _read_file(self, path_str: str) -> str:
        path = Path(path_str)
        if not path.exists():
            raise PageLoadError(path_str, "file not found")
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PageLoadError(path_str, original_error=e) from e
