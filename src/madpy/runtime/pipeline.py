"""Runs the scraper and the detector side by side.

The pipeline owns the shared stop event and the sample queue. Stopping sets
the event and closes the queue, which wakes any thread blocked on it, then
joins both threads.
"""

import logging
import threading

import httpx

from madpy.adapters.http.scraper import Scraper
from madpy.adapters.storage.ring_buffer import ChangePointHistory
from madpy.adapters.storage.sample_queue import QueueClosed, SampleQueue
from madpy.core.detector import WindowDetector
from madpy.core.errors import FetchError
from madpy.options import Options

logger = logging.getLogger(__name__)


class Pipeline:
    """Scrape-and-detect pipeline running on two threads.

    Example:
        ```python
        pipeline = Pipeline.from_options(options)
        with pipeline:
            pipeline.wait()
        ```
    """

    def __init__(
        self,
        scraper: Scraper,
        detector: WindowDetector,
        queue: SampleQueue,
        history: ChangePointHistory | None = None,
    ) -> None:
        self.scraper = scraper
        self.detector = detector
        self.queue = queue
        self.history = history
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []
        self._error: Exception | None = None

    @classmethod
    def from_options(
        cls, options: Options, client: httpx.Client | None = None
    ) -> "Pipeline":
        """Validate options and wire up queue, scraper, detector and history.

        Raises:
            ConfigError: If any option is invalid.
        """
        selector = options.validate()
        queue = SampleQueue(capacity=options.min_samples)
        history = ChangePointHistory()
        scraper = Scraper(
            options.scrape_interval,
            selector,
            options.endpoint,
            queue,
            client=client,
            timeout=options.timeout,
            parse_workers=options.parse_workers,
        )
        detector = WindowDetector(
            queue, min_samples=options.min_samples, history=history
        )
        return cls(scraper, detector, queue, history)

    @property
    def error(self) -> Exception | None:
        """The error that ended the pipeline, if any."""
        return self._error

    @property
    def stopping(self) -> bool:
        """True once a stop has been requested."""
        return self._stop.is_set()

    def __enter__(self) -> "Pipeline":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def start(self) -> None:
        """Start the scraper and detector threads."""
        if self._threads:
            raise RuntimeError("pipeline already started")
        logger.info("Starting %r", self.scraper)
        self._threads = [
            threading.Thread(
                target=self._run_scraper, name="madpy-scraper", daemon=True
            ),
            threading.Thread(
                target=self._run_detector, name="madpy-detector", daemon=True
            ),
        ]
        for thread in self._threads:
            thread.start()

    def request_stop(self) -> None:
        """Ask both loops to exit. Safe to call from a signal handler."""
        self._stop.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until a stop is requested; return False on timeout."""
        return self._stop.wait(timeout)

    def stop(self, timeout: float | None = None) -> None:
        """Stop both loops and join their threads.

        Args:
            timeout: Seconds to wait for each thread, defaults to twice the
                scrape interval.
        """
        self._stop.set()
        self.queue.close()
        join_timeout = (
            timeout if timeout is not None else 2 * self.scraper.scrape_interval
        )
        for thread in self._threads:
            thread.join(join_timeout)
            if thread.is_alive():
                logger.warning("Thread %s did not exit in time", thread.name)
        self.scraper.close()
        logger.info("Pipeline stopped")

    def _fail(self, exc: Exception) -> None:
        if self._error is None:
            self._error = exc
        self._stop.set()

    def _run_scraper(self) -> None:
        try:
            self.scraper.run(self._stop)
        except FetchError as exc:
            logger.error("Could not scrape endpoint: %s", exc)
            self._fail(exc)
        except Exception as exc:
            logger.exception("Scraper crashed")
            self._fail(exc)

    def _run_detector(self) -> None:
        try:
            self.detector.run(self._stop)
        except QueueClosed:
            logger.debug("Sample queue closed, detector exiting")
        except Exception as exc:
            logger.exception("Detector crashed")
            self._fail(exc)
