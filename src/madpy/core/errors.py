"""Error kinds raised and reported across the sampling pipeline.

Every failure the pipeline can observe belongs to exactly one ErrorKind.
The three fatal-or-aborting kinds are raised as exceptions; the two benign
kinds only ever appear as search result statuses.
"""

from enum import Enum


class ErrorKind(Enum):
    """Closed set of failure kinds."""

    CONFIG = "config"
    FETCH = "fetch"
    PARSE = "parse"
    VECTOR_TYPE_MISMATCH = "vector_type_mismatch"
    SEARCH_TARGET_NOT_FOUND = "search_target_not_found"


class MadpyError(Exception):
    """Base class for madpy exceptions."""

    kind: ErrorKind


class ConfigError(MadpyError):
    """Invalid selector, endpoint or interval. Fatal at startup."""

    kind = ErrorKind.CONFIG


class FetchError(MadpyError):
    """Scrape request failed. Terminates the scrape loop."""

    kind = ErrorKind.FETCH


class ParseError(MadpyError):
    """Malformed selector or sample descriptor."""

    kind = ErrorKind.PARSE
