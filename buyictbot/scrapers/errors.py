from __future__ import annotations
# buyictbot/scrapers/errors.py
from typing import Optional


class ScrapeError(Exception):
    """Base class for crawl failures. `url` is the page involved, when known."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url

    def __str__(self) -> str:
        msg = super().__str__()
        return f"{msg} [{self.url}]" if self.url else msg


class NavigationError(ScrapeError):
    """A page failed to load, or a pagination control could not be driven."""


class ExtractionError(ScrapeError):
    """A detail page lacks a DOM fixture the extractor depends on."""

    def __init__(self, message: str, url: Optional[str] = None, fixture: Optional[str] = None):
        super().__init__(message, url)
        self.fixture = fixture


class PersistenceError(ScrapeError):
    """The snapshot could not be written or read back."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, None)
        self.path = path

    def __str__(self) -> str:
        msg = Exception.__str__(self)
        return f"{msg} [{self.path}]" if self.path else msg
