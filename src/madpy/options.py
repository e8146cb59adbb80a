"""Options used to initialize the pipeline."""

from dataclasses import dataclass

from madpy.adapters.http.scraper import validate_endpoint
from madpy.core.errors import ConfigError
from madpy.core.selector import Selector, parse_selector
from madpy.core.window import MIN_SAMPLE_COUNT


@dataclass(frozen=True)
class Options:
    """Process configuration.

    Attributes:
        scrape_interval: Seconds between scrapes, an integer greater than 0.
        time_series_selector: Vector selector for the target series. If
            several lines match it, the first one is used.
        endpoint: URL to scrape.
        timeout: HTTP timeout in seconds, defaults to the scrape interval.
        min_samples: Window size at which detection starts.
        parse_workers: Parse tasks allowed in flight at once.
    """

    scrape_interval: int = 1
    time_series_selector: str = ""
    endpoint: str = ""
    timeout: float | None = None
    min_samples: int = MIN_SAMPLE_COUNT
    parse_workers: int = 1

    def validate(self) -> Selector:
        """Check every option and return the parsed selector.

        Raises:
            ConfigError: On the first invalid option.
        """
        if isinstance(self.scrape_interval, bool) or not isinstance(
            self.scrape_interval, int
        ):
            raise ConfigError("scrape-interval must be an integer")
        if self.scrape_interval < 1:
            raise ConfigError("scrape-interval must be greater than 0")
        if not self.time_series_selector:
            raise ConfigError("time-series-selector must be set")
        if not self.endpoint:
            raise ConfigError("endpoint must be set")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError("timeout must be greater than 0")
        if self.min_samples < 3:
            raise ConfigError("min-samples must be at least 3")
        if self.parse_workers < 1:
            raise ConfigError("parse-workers must be at least 1")
        selector = parse_selector(self.time_series_selector)
        validate_endpoint(self.endpoint)
        return selector
