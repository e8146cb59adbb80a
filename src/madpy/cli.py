"""Command line entry point."""

import argparse
import logging
import signal
import sys

from madpy.adapters.logging import (
    LOGGER_NAME,
    VALID_LEVELS,
    configure_logging,
    log_version,
    version_banner,
)
from madpy.core.errors import ConfigError
from madpy.options import Options
from madpy.runtime.pipeline import Pipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the madpy command."""
    parser = argparse.ArgumentParser(
        prog="madpy",
        description=(
            "Scrape one time series from a metrics endpoint and log "
            "change points in its values."
        ),
    )
    parser.add_argument(
        "--scrape-interval",
        type=int,
        default=1,
        help=(
            "The time interval in seconds at which the endpoint is scraped. "
            "Must be an integer greater than 0."
        ),
    )
    parser.add_argument(
        "--time-series-selector",
        default="",
        help=(
            "The selector used to pick the time series to sample from the "
            "scraped payload, for example 'foo{bar=\"baz\"}'. If several time "
            "series match, the first one is used."
        ),
    )
    parser.add_argument(
        "--endpoint",
        default="",
        help=(
            "The endpoint to scrape, must be a valid URL. Only non-empty lines "
            "that are not comments (starting with '#') are processed."
        ),
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="HTTP timeout in seconds (default: the scrape interval).",
    )
    parser.add_argument(
        "--parse-workers",
        type=int,
        default=1,
        help=(
            "Parse tasks allowed in flight at once. More than one may push "
            "samples out of scrape order."
        ),
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=VALID_LEVELS,
        default="INFO",
    )
    parser.add_argument("--version", action="version", version=version_banner())
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the pipeline until SIGINT or SIGTERM.

    Returns:
        0 after a signal-initiated shutdown, 1 on invalid configuration or
        when scraping failed.
    """
    args = build_parser().parse_args(argv)
    handler = configure_logging(args.log_level)
    try:
        log_version(logger)
        options = Options(
            scrape_interval=args.scrape_interval,
            time_series_selector=args.time_series_selector,
            endpoint=args.endpoint,
            timeout=args.timeout,
            parse_workers=args.parse_workers,
        )
        try:
            pipeline = Pipeline.from_options(options)
        except ConfigError as exc:
            logger.critical("Could not initialize scraper: %s, exiting", exc)
            return 1

        def _on_signal(signum: int, frame: object) -> None:
            logger.info("Received %s, shutting down", signal.Signals(signum).name)
            pipeline.request_stop()

        previous = {
            signum: signal.signal(signum, _on_signal)
            for signum in (signal.SIGINT, signal.SIGTERM)
        }
        try:
            with pipeline:
                pipeline.wait()
        finally:
            for signum, old in previous.items():
                signal.signal(signum, old)
        return 0 if pipeline.error is None else 1
    finally:
        logging.getLogger(LOGGER_NAME).removeHandler(handler)


if __name__ == "__main__":
    sys.exit(main())
