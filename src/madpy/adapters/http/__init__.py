"""HTTP adapters."""

from madpy.adapters.http.scraper import Scraper, validate_endpoint

__all__ = [
    "Scraper",
    "validate_endpoint",
]
