"""JSON persistence for app secrets, user credentials and computed activities."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from . import config
from .config import StoragePaths
from .errors import StorageError
from .models import Activity, AppSecrets, Credentials

LOGGER = logging.getLogger(__name__)

__all__ = ["load_app_secrets", "CredentialStore", "ActivityStore"]


def _read_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise StorageError(f"Missing {what} file: {path}") from exc
    except (OSError, ValueError) as exc:
        raise StorageError(f"Unable to read {what} from {path}: {exc}") from exc


def _write_json(path: Path, payload: Any, what: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        raise StorageError(f"Unable to write {what} to {path}: {exc}") from exc


def load_app_secrets(paths: StoragePaths) -> AppSecrets:
    """Return client credentials from the environment or the secrets file."""

    if config.CLIENT_ID and config.CLIENT_SECRET:
        LOGGER.debug("Using client credentials from environment")
        try:
            return AppSecrets(
                client_id=int(config.CLIENT_ID), client_secret=config.CLIENT_SECRET
            )
        except ValueError as exc:
            raise StorageError("STRAVA_CLIENT_ID must be an integer") from exc
    data = _read_json(paths.secrets_file, "app secrets")
    try:
        return AppSecrets.from_dict(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise StorageError(
            f"App secrets in {paths.secrets_file} need client_id and client_secret"
        ) from exc


class CredentialStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Credentials:
        data = _read_json(self.path, "user credentials")
        try:
            return Credentials.from_token_payload(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError(f"Invalid user credentials in {self.path}") from exc

    def save(self, credentials: Credentials) -> None:
        _write_json(self.path, credentials.to_dict(), "user credentials")
        LOGGER.info("Saved user credentials to %s", self.path)


class ActivityStore:
    """Writes one ``<MM-DD>-<id>.json`` file per activity."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, activity: Activity) -> Path:
        try:
            date = activity.start_date.strftime("%m-%d")
        except ValueError as exc:
            raise StorageError(
                f"Bad start date {activity.start_date_local!r} "
                f"for activity {activity.id}"
            ) from exc
        return self.directory / f"{date}-{activity.id}.json"

    def save(self, activity: Activity) -> Path:
        path = self.path_for(activity)
        _write_json(path, activity.to_dict(), f"activity {activity.id}")
        LOGGER.info("Wrote activity %s to %s", activity.id, path)
        return path

    def load(self, path: Path) -> Activity:
        data = _read_json(Path(path), "activity")
        try:
            return Activity.from_payload(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError(f"Invalid activity in {path}") from exc
