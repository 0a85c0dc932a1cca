#!/usr/bin/env python3
"""
Strava Dashboard CLI
--------------------
Fetch the latest activities, aggregate them per sport and print or dump
the summaries.

Usage:
    # Print the authorization URL, then exchange the code from the redirect
    python -m stravadash.connectors.strava --auth-url
    python -m stravadash.connectors.strava --code <code>

    # Print the per-sport table
    python -m stravadash.connectors.strava

    # Dump summaries as CSV and the raw page as JSONL
    python -m stravadash.connectors.strava --format csv --output-dir ./output --raw
"""
import argparse
import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import List

from stravadash.connectors.strava.client import (
    build_authorization_url,
    fetch_activities,
    get_strava_credentials,
)
from stravadash.connectors.strava.config import (
    DEFAULT_REDIRECT_PATH,
    DEFAULT_TOKEN_FILE,
    ENV_TOKEN_FILE,
    REQUEST_TIMEOUT_SECONDS,
)
from stravadash.connectors.strava.errors import ConfigurationError
from stravadash.connectors.strava.token_cache import TokenCache
from stravadash.connectors.strava.token_store import JsonFileStore
from stravadash.connectors.utils import load_env, setup_logging, write_records
from stravadash.services.dashboard import SportSummary, aggregate
from stravadash.services.dashboard.presenter import format_value


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Fetch Strava activities and summarise them per sport.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "-e", "--env",
        type=Path,
        default=Path(".env"),
        help="Path to the .env file",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level",
    )
    parser.add_argument(
        "-f", "--format",
        choices=["table", "json", "csv"],
        default="table",
        help="Output format for the summaries",
    )
    parser.add_argument(
        "-o", "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory for csv / raw dumps",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=REQUEST_TIMEOUT_SECONDS,
        help="HTTP timeout in seconds",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Also dump the raw activities page as JSONL",
    )
    parser.add_argument(
        "--auth-url",
        action="store_true",
        help="Print the Strava authorization URL and exit",
    )
    parser.add_argument(
        "--code",
        help="Authorization code from the OAuth redirect to exchange for tokens",
    )
    return parser.parse_args(argv)


def format_table(summaries: List[SportSummary]) -> str:
    """Render summaries as a plain text table."""
    header = f"{'Sport':<20}{'Count':>7}{'Distance':>14}{'Elevation':>14}{'Duration':>14}{'Avg speed':>14}"
    lines = [header, "-" * len(header)]
    for s in summaries:
        lines.append(
            f"{s.sport or '(none)':<20}{s.count:>7}"
            f"{format_value(s.total_distance_km, 'km'):>14}"
            f"{format_value(s.total_elevation_m, 'm'):>14}"
            f"{format_value(s.total_duration_hours, 'h'):>14}"
            f"{format_value(s.average_speed_km_h, 'km/h'):>14}"
        )
    return "\n".join(lines)


def build_token_cache(timeout: float) -> TokenCache:
    """Token cache backed by the JSON token file, with stored tokens loaded."""
    credentials = get_strava_credentials()
    token_file = Path(os.getenv(ENV_TOKEN_FILE) or DEFAULT_TOKEN_FILE)
    cache = TokenCache(credentials, store=JsonFileStore(token_file), timeout=timeout)
    cache.load()
    return cache


def main(argv=None) -> None:
    """Main entry point."""
    try:
        args = parse_args(argv)
        setup_logging(args.log_level)
        load_env(args.env)
        if os.getenv("DEBUG", "false").lower() in ("1", "true", "yes"):
            setup_logging("DEBUG")

        if args.auth_url:
            credentials = get_strava_credentials()
            redirect_uri = os.getenv("APP_URL", "http://localhost:8000").rstrip("/") + DEFAULT_REDIRECT_PATH
            print(build_authorization_url(credentials.client_id, redirect_uri))
            return

        cache = build_token_cache(args.timeout)

        if args.code:
            cache.bootstrap_from_code(args.code.strip())
            logging.info("✅ Tokens saved, you can now fetch activities")
            return

        if not cache.is_valid() and not cache.has_refresh_token:
            raise ConfigurationError(
                "No Strava tokens found. Set STRAVA_REFRESH_TOKEN or run with --auth-url then --code."
            )

        batch = fetch_activities(cache.get_valid_token(), timeout=args.timeout)
        summaries = aggregate(batch.activities)
        prefix = datetime.now().strftime("%Y_%m_%d_%H_%M")

        if args.raw:
            write_records(batch.activities, args.output_dir / f"{prefix}_strava_activities.jsonl")

        if args.format == "json":
            print(json.dumps([s.model_dump() for s in summaries], indent=2, ensure_ascii=False))
        elif args.format == "csv":
            rows = [s.model_dump() for s in summaries]
            write_records(rows, args.output_dir / f"{prefix}_strava_sport_summaries.csv")
        else:
            print(format_table(summaries))

        if batch.possibly_truncated:
            logging.warning(
                f"⚠️ Only the latest {batch.page_size} activities were included"
            )

    except KeyboardInterrupt:
        logging.info("Script interrupted by user")
        sys.exit(130)
    except Exception as e:
        logging.error(f"Unexpected error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
