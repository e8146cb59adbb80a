"""madpy: change point detection for a single scraped metric."""

__version__ = "0.1.0"

from madpy.adapters.http.scraper import Scraper  # noqa: E402
from madpy.adapters.storage.ring_buffer import ChangePointHistory  # noqa: E402
from madpy.adapters.storage.sample_queue import SampleQueue  # noqa: E402
from madpy.core.changepoint import detect  # noqa: E402
from madpy.core.detector import WindowDetector  # noqa: E402
from madpy.core.errors import (  # noqa: E402
    ConfigError,
    ErrorKind,
    FetchError,
    MadpyError,
    ParseError,
)
from madpy.core.models import ChangePoint, Sample  # noqa: E402
from madpy.core.selector import Selector, parse_selector, selectors_equal  # noqa: E402
from madpy.options import Options  # noqa: E402
from madpy.runtime.pipeline import Pipeline  # noqa: E402

__all__ = [
    "ChangePoint",
    "ChangePointHistory",
    "ConfigError",
    "ErrorKind",
    "FetchError",
    "MadpyError",
    "Options",
    "ParseError",
    "Pipeline",
    "Sample",
    "SampleQueue",
    "Scraper",
    "Selector",
    "WindowDetector",
    "__version__",
    "detect",
    "parse_selector",
    "selectors_equal",
]
