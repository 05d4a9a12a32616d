"""Command line entry point for the Coinbase gains report.

Fetches every account's transactions and current USD spot rates, then prints
holdings, cost basis and profit per currency as an aligned table.

Usage:
    cbgains                      # last 28 days
    cbgains --since 2024-01-01   # transactions on or after a date
    cbgains --all                # full history
"""

import argparse
import logging
import sys
from datetime import UTC, date, datetime, timedelta

from pydantic import ValidationError

from cbgains.config import Settings
from cbgains.services.coinbase.client import CoinbaseAPIError, CoinbaseClient
from cbgains.services.gains import GainsError, calculate_gains
from cbgains.services.reporting import render_report
from cbgains.services.shared.http_client import HTTPClientError

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_date(value: str) -> date:
    """argparse type for YYYY-MM-DD dates."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cbgains",
        description="Report Coinbase holdings and profit/loss per currency",
    )

    window_group = parser.add_mutually_exclusive_group()
    window_group.add_argument(
        "--since",
        "-since",
        type=parse_date,
        metavar="YYYY-MM-DD",
        help="Only count transactions on or after this date (UTC)",
    )
    window_group.add_argument(
        "--all",
        "-all",
        "--zero",
        "-zero",
        dest="all_time",
        action="store_true",
        help="Count the full transaction history",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser


def resolve_cutoff(
    since: date | None,
    all_time: bool,
    now: datetime,
    window_days: int = 28,
) -> datetime:
    """Resolve the inclusive lower bound of the reporting window.

    Args:
        since: Explicit start date, taken as midnight UTC
        all_time: Use the epoch as cutoff
        now: Current time, used for the default window
        window_days: Length of the default window

    Raises:
        ValueError: If both since and all_time are given
    """
    if since is not None and all_time:
        raise ValueError("since and all_time are mutually exclusive")
    if all_time:
        return EPOCH
    if since is not None:
        return datetime(since.year, since.month, since.day, tzinfo=UTC)
    return now - timedelta(days=window_days)


def load_settings(parser: argparse.ArgumentParser) -> Settings:
    """Build settings, reporting bad values as usage errors."""
    try:
        settings = Settings()
    except ValidationError as e:
        parser.error(f"invalid configuration: {e}")
    if not settings.has_credentials:
        parser.error("COINBASE_KEY and COINBASE_SECRET must be set")
    return settings


def main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    """Run the gains report and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if settings is None:
        settings = load_settings(parser)
    elif not settings.has_credentials:
        parser.error("COINBASE_KEY and COINBASE_SECRET must be set")

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    cutoff = resolve_cutoff(
        args.since, args.all_time, datetime.now(UTC), settings.default_window_days
    )
    logger.info(f"Reporting transactions since {cutoff.isoformat()}")

    try:
        with CoinbaseClient(
            settings.coinbase_credentials(),
            base_url=settings.coinbase_api_url,
            api_version=settings.coinbase_api_version,
            timeout=settings.http_timeout,
            page_limit=settings.page_limit,
        ) as client:
            accounts = client.list_accounts()
            transactions = client.list_all_transactions([a.id for a in accounts])
            spot_rates = client.list_spot_rates()

        report = calculate_gains(transactions, spot_rates, cutoff)
    except (CoinbaseAPIError, HTTPClientError) as e:
        logger.error(f"Failed to fetch data from Coinbase: {e}")
        return 1
    except GainsError as e:
        logger.error(f"Cannot compute gains: {e}")
        return 1

    sys.stdout.write(render_report(report))
    return 0
