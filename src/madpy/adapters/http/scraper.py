"""HTTP scraper feeding target series samples into the sample queue.

A fixed-rate timer triggers one GET per tick. Each successful body is handed
to a parse task that searches it for the target series and pushes at most
one sample.
"""

import logging
import threading
import time
from collections.abc import Iterator
from concurrent.futures import Future, ThreadPoolExecutor

import httpx

from madpy.adapters.storage.sample_queue import QueueClosed
from madpy.core.errors import ConfigError, FetchError, ParseError
from madpy.core.models import Sample
from madpy.core.ports import SampleSinkPort
from madpy.core.search import extract_sample
from madpy.core.selector import Selector, parse_selector

logger = logging.getLogger(__name__)


def validate_endpoint(endpoint: str) -> httpx.URL:
    """Parse an endpoint into an absolute http(s) URL.

    Raises:
        ConfigError: If the endpoint is empty or not an absolute http(s) URL.
    """
    if not endpoint:
        raise ConfigError("endpoint must be set")
    try:
        url = httpx.URL(endpoint)
    except (httpx.InvalidURL, TypeError) as exc:
        raise ConfigError(f"{endpoint} must be a valid URL: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigError(f"{endpoint} must be a valid http(s) URL")
    return url


def _log_task_failure(future: Future) -> None:
    """Log parse tasks that died with an unexpected exception."""
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error("Parse task failed", exc_info=exc)


# @tra: Adapter.Scraper.FixedInterval
# @tra: Adapter.Scraper.NoRetry
class Scraper:
    """Periodically scrapes one endpoint for one time series.

    Configuration is validated up front; nothing touches the network
    before run() or fetch() is called.

    Args:
        scrape_interval: Seconds between scrape attempts, must be positive.
        selector: Target series, as a Selector or a selector string.
        endpoint: URL serving the exposition payload.
        sink: Where matched samples are pushed.
        client: HTTP client to use; one is created when omitted.
        timeout: HTTP timeout in seconds, defaults to scrape_interval.
        parse_workers: Parse tasks allowed in flight at once. With one
            worker samples are pushed in the order their fetches completed.
    """

    def __init__(
        self,
        scrape_interval: float,
        selector: Selector | str,
        endpoint: str,
        sink: SampleSinkPort,
        *,
        client: httpx.Client | None = None,
        timeout: float | None = None,
        parse_workers: int = 1,
    ) -> None:
        if scrape_interval <= 0:
            raise ConfigError(
                f"scrape interval must be greater than 0, got {scrape_interval}"
            )
        if timeout is not None and timeout <= 0:
            raise ConfigError(f"timeout must be greater than 0, got {timeout}")
        if parse_workers < 1:
            raise ConfigError(f"parse workers must be positive, got {parse_workers}")
        if isinstance(selector, str):
            selector = parse_selector(selector)
        self.scrape_interval = scrape_interval
        self.selector = selector
        self.endpoint = validate_endpoint(endpoint)
        self.parse_workers = parse_workers
        self._sink = sink
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout if timeout is not None else scrape_interval
        )

    def __repr__(self) -> str:
        return (
            f"Scraper(scrape_interval={self.scrape_interval!r}, "
            f"selector='{self.selector}', endpoint='{self.endpoint}')"
        )

    def close(self) -> None:
        """Close the HTTP client if this scraper created it."""
        if self._owns_client:
            self._client.close()

    def _ticks(self, stop: threading.Event) -> Iterator[None]:
        """Yield once per interval until stop is set.

        Ticks are anchored to the start time; ticks missed while a scrape
        ran long are dropped rather than fired in a burst.
        """
        next_tick = time.monotonic() + self.scrape_interval
        while not stop.wait(max(0.0, next_tick - time.monotonic())):
            yield
            now = time.monotonic()
            next_tick += self.scrape_interval
            if next_tick <= now:
                missed = int((now - next_tick) // self.scrape_interval) + 1
                next_tick += missed * self.scrape_interval

    def run(self, stop: threading.Event) -> None:
        """Scrape on every tick until stop is set.

        Returns cleanly once stop is observed. Parse tasks still in flight
        are awaited before returning. A tick is skipped without fetching
        while parse_workers tasks are still pending, which happens when the
        sink is full and its consumer has stalled.

        Raises:
            FetchError: On the first failed fetch; there is no retry.
        """
        pending: set[Future] = set()
        with ThreadPoolExecutor(
            max_workers=self.parse_workers, thread_name_prefix="madpy-parse"
        ) as executor:
            for _ in self._ticks(stop):
                pending = {future for future in pending if not future.done()}
                if len(pending) >= self.parse_workers:
                    logger.debug(
                        "Skipping scrape, %d parse tasks pending", len(pending)
                    )
                    continue
                body = self.fetch(stop)
                if body is None:
                    return
                future = executor.submit(self.parse, body)
                future.add_done_callback(_log_task_failure)
                pending.add(future)

    def fetch(self, stop: threading.Event | None = None) -> str | None:
        """GET the endpoint and return the response body.

        The body is streamed so that a stop observed mid-read abandons the
        request.

        Returns:
            The decoded body, or None if stop was set during the read.

        Raises:
            FetchError: On transport errors, non-200 responses or body read
                failures.
        """
        url = str(self.endpoint)
        try:
            with self._client.stream("GET", url) as response:
                if response.status_code != httpx.codes.OK:
                    raise FetchError(
                        f"expected status code 200, got {response.status_code}"
                    )
                return self._read_body(response, stop)
        except httpx.HTTPError as exc:
            raise FetchError(f"could not GET {url}: {exc}") from exc

    def _read_body(
        self, response: httpx.Response, stop: threading.Event | None
    ) -> str | None:
        chunks: list[bytes] = []
        try:
            for chunk in response.iter_bytes():
                if stop is not None and stop.is_set():
                    logger.debug("Stop requested, abandoning GET %s", self.endpoint)
                    return None
                chunks.append(chunk)
        except httpx.HTTPError as exc:
            raise FetchError(f"could not read response body: {exc}") from exc
        return b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")

    def parse(self, body: str) -> Sample | None:
        """Search a body for the target series and push the sample, if any.

        Parse errors are logged and only cost this tick's sample. A closed
        sink drops the sample.
        """
        try:
            sample = extract_sample(body, self.selector)
        except ParseError as exc:
            logger.error("Could not parse scrape payload: %s", exc)
            return None
        if sample is None:
            logger.debug("Target %s not found in scrape payload", self.selector)
            return None
        try:
            self._sink.push(sample)
        except QueueClosed:
            logger.debug("Sample queue closed, dropping %s", sample)
            return None
        return sample
