from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

START_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


@dataclass(frozen=True)
class AppSecrets:
    client_id: int
    client_secret: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AppSecrets":
        return cls(
            client_id=int(data["client_id"]),
            client_secret=str(data["client_secret"]),
        )


@dataclass(frozen=True)
class Credentials:
    """User OAuth tokens; ``expires_at`` is a unix timestamp in seconds."""

    access_token: str
    expires_at: int
    refresh_token: str

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now

    @classmethod
    def from_token_payload(cls, data: Mapping[str, Any]) -> "Credentials":
        """Keep only the token fields from a token endpoint response.

        Raises ``KeyError``/``TypeError``/``ValueError`` for malformed payloads.
        """

        access_token = data["access_token"]
        refresh_token = data["refresh_token"]
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("access_token must be a non-empty string")
        if not isinstance(refresh_token, str) or not refresh_token:
            raise ValueError("refresh_token must be a non-empty string")
        return cls(
            access_token=access_token,
            expires_at=int(data["expires_at"]),
            refresh_token=refresh_token,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AuthorizationSuccess:
    code: str
    scopes: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class AuthorizationFailure:
    reason: str


AuthorizationResult = Union[AuthorizationSuccess, AuthorizationFailure]


@dataclass(frozen=True)
class StreamSeries:
    data: List[Any]
    original_size: int

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "StreamSeries":
        raw = payload.get("data") or []
        if not isinstance(raw, list):
            raise TypeError(f"stream data must be a list, got {type(raw).__name__}")
        data = list(raw)
        return cls(
            data=data, original_size=int(payload.get("original_size", len(data)))
        )


@dataclass(frozen=True)
class TelemetryStream:
    """Parallel distance (m), elapsed time (s) and moving-flag series."""

    distance: StreamSeries
    time: StreamSeries
    moving: StreamSeries

    @classmethod
    def from_lists(
        cls,
        distance: Sequence[float],
        time: Sequence[int],
        moving: Sequence[bool],
    ) -> "TelemetryStream":
        return cls(
            distance=StreamSeries(list(distance), len(distance)),
            time=StreamSeries(list(time), len(time)),
            moving=StreamSeries(list(moving), len(moving)),
        )


@dataclass(frozen=True)
class Lap:
    name: str
    distance: float
    moving_time: int


@dataclass
class Activity:
    id: int
    name: str
    distance: float
    moving_time: int
    start_date_local: str
    manual: bool = False
    laps: Optional[List[Lap]] = None

    @property
    def start_date(self) -> datetime:
        return datetime.strptime(self.start_date_local, START_DATE_FORMAT)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Activity":
        laps = data.get("laps")
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            distance=float(data.get("distance") or 0.0),
            moving_time=int(data.get("moving_time") or 0),
            start_date_local=str(data["start_date_local"]),
            manual=bool(data.get("manual", False)),
            laps=[Lap(**lap) for lap in laps] if laps is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
