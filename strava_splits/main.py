"""Command line entry point: authorise, then summarise or split activities."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime, time
from functools import partial
from typing import List, Optional, Sequence, Tuple

from .auth import CredentialManager
from .config import OAuthSettings, StoragePaths
from .errors import AuthError, StorageError, StravaAPIError, TransportError
from .models import Activity, AppSecrets
from .reports import (
    compute_splits,
    laps_frame,
    normalize_interval,
    summarize_activity,
    summarize_week,
)
from .storage import ActivityStore, CredentialStore, load_app_secrets
from .strava_client import StravaClient, get_streams, list_activities

LOGGER = logging.getLogger(__name__)

DATE_FORMAT = "%m/%d/%Y"


def _setup_logging(verbose: bool) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def parse_date_range(start: str, end: str) -> Tuple[int, int]:
    """Return ``(after, before)`` unix timestamps for an inclusive local date range.

    ``after`` is the start of the first day and ``before`` the last second of
    the final day. Raises ``ValueError`` for bad dates or an empty range.
    """

    start_date = datetime.strptime(start.strip(), DATE_FORMAT).date()
    end_date = datetime.strptime(end.strip(), DATE_FORMAT).date()
    if end_date <= start_date:
        raise ValueError("End date must be after the start date")
    after = datetime.combine(start_date, time(0, 0, 0))
    before = datetime.combine(end_date, time(23, 59, 59))
    return int(after.timestamp()), int(before.timestamp())


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarise Strava runs and split them into fixed-distance laps"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("auth", help="Authorise this app with Strava in a browser")

    range_parent = argparse.ArgumentParser(add_help=False)
    range_parent.add_argument(
        "--start", required=True, help="First day of the range (MM/DD/YYYY)"
    )
    range_parent.add_argument(
        "--end", required=True, help="Last day of the range (MM/DD/YYYY)"
    )
    range_parent.add_argument(
        "--interval",
        type=str.lower,
        choices=["mile", "1k"],
        default="mile",
        help="Lap and pace unit (default: mile)",
    )
    commands.add_parser(
        "summary", parents=[range_parent], help="Distance and pace per activity"
    )
    commands.add_parser(
        "splits", parents=[range_parent], help="Per-lap splits for each activity"
    )
    commands.add_parser(
        "week", parents=[range_parent], help="Totals across the date range"
    )
    return parser


def _access_token(
    manager: CredentialManager, store: CredentialStore, secrets: AppSecrets
) -> str:
    if not store.exists():
        LOGGER.info("No saved credentials at %s; starting authorisation.", store.path)
        store.save(manager.acquire_initial_credentials(secrets))
    credentials = store.load()
    current, token = manager.get_valid_token(credentials, secrets)
    if current != credentials:
        store.save(current)
    return token


def _print_summaries(activities: Sequence[Activity], interval: str) -> None:
    for activity in reversed(activities):
        print(summarize_activity(activity, interval).render())
        print()


def _print_splits(
    activities: Sequence[Activity], interval: str, store: ActivityStore
) -> None:
    for activity in activities:
        print(activity.name)
        if activity.laps is None:
            print(f"Manual activity {activity.id} has no laps")
        else:
            print(laps_frame(activity.laps, interval).to_string(index=False))
        print()
        store.save(activity)


def run(args: argparse.Namespace) -> None:
    paths = StoragePaths.from_env()
    client = StravaClient()
    manager = CredentialManager(OAuthSettings.from_env(), client=client)
    secrets = load_app_secrets(paths)
    credential_store = CredentialStore(paths.credentials_file)

    if args.command == "auth":
        credential_store.save(manager.acquire_initial_credentials(secrets))
        print("Authorisation complete.")
        return

    interval = normalize_interval(args.interval)
    token = _access_token(manager, credential_store, secrets)
    activities: List[Activity] = list_activities(
        client, token, args.after, args.before
    )
    if not activities:
        print("No activities found!")
        return

    if args.command == "summary":
        _print_summaries(activities, interval)
    elif args.command == "week":
        print(summarize_week(activities, interval).render())
    elif args.command == "splits":
        compute_splits(activities, interval, partial(get_streams, client, token))
        _print_splits(activities, interval, ActivityStore(paths.activities_dir))


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    if args.command != "auth":
        try:
            args.after, args.before = parse_date_range(args.start, args.end)
        except ValueError as exc:
            parser.error(f"Invalid date range: {exc}")
    try:
        run(args)
    except (AuthError, StorageError, StravaAPIError, TransportError) as exc:
        LOGGER.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI helper
    raise SystemExit(main())
