"""Run the weather widget in a terminal: fetch, refresh hourly, render."""

from __future__ import annotations

import argparse
import logging
import sys
import time

from rich.console import Console

from .config import load_settings
from .exceptions import ConfigError
from .log_setup import setup_logger
from .runtime import WidgetRuntime
from .ui.widget_view import WidgetView


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse widget CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Geolocate this host and show a two-day weather outlook."
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Fetch once, render, and exit instead of refreshing hourly.",
    )
    parser.add_argument(
        "--hours",
        type=int,
        default=6,
        help="Number of upcoming hourly rows to render.",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Override TIMER_INTERVAL_SECONDS between timer ticks.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def _run_loop(runtime: WidgetRuntime, view: WidgetView, interval: float) -> None:
    runtime.start()
    runtime.pump()
    view.render()
    while True:
        time.sleep(interval)
        started = runtime.on_timer()
        handled = runtime.pump()
        if started or handled:
            view.render()


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``weather-widget`` console script."""
    args = parse_args(argv)
    logger = setup_logger()
    console = Console()

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2

    logger.setLevel(logging.DEBUG if args.verbose else settings.log_level)
    if args.hours <= 0:
        logger.error("--hours must be > 0.")
        return 2
    interval = args.interval if args.interval is not None else settings.timer_interval_seconds
    if interval <= 0:
        logger.error("--interval must be > 0.")
        return 2
    logger.info("Starting weather widget: %s", settings.safe_summary())

    with WidgetRuntime(settings=settings, logger=logger) as runtime:
        view = WidgetView(
            console=console,
            state=runtime.state,
            unit_label=settings.temperature_unit_label,
            hours=args.hours,
        )
        if args.once:
            ok = runtime.refresh_now()
            view.render()
            return 0 if ok else 4
        try:
            _run_loop(runtime, view, interval)
        except KeyboardInterrupt:
            logger.info("Interrupted; shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
