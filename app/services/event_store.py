"""
Event Store — the per-user craving log.

Public API
----------
new_event(...)                       -> BehaviorEvent  (validate + clamp)
EventStore(db, user_id).read_all_events()   -> list[BehaviorEvent]
EventStore(db, user_id).append_event(event) -> BehaviorEvent

Events are immutable once stored. Every append prunes entries older than
RETENTION_DAYS and rewrites the whole list under the per-user write lock.
Records that fail to deserialize are skipped (and dropped on the next
append) rather than failing the whole read.
"""
from __future__ import annotations

import enum
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import EventValidationError, StoreReadError, StoreWriteError
from app.services.kv_store import KeyValueStore, exclusive

logger = logging.getLogger(__name__)

DEFAULT_USER = "default"


class Mood(str, enum.Enum):
    great = "great"
    good = "good"
    neutral = "neutral"
    bad = "bad"
    terrible = "terrible"


# ---------------------------------------------------------------------------
# Event type
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BehaviorEvent:
    id: str
    timestamp: datetime          # tz-aware UTC
    hour: int                    # 0 – 23
    day_of_week: int             # 0 = Sunday … 6 = Saturday
    mood: str
    stress_level: int            # 1 – 10
    craving_level: int           # 1 – 10
    did_smoke: bool
    activity: str = ""
    triggers: tuple[str, ...] = field(default_factory=tuple)  # sorted, unique
    location: Optional[str] = None
    weather: Optional[str] = None

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "hour": self.hour,
            "day_of_week": self.day_of_week,
            "mood": self.mood,
            "stress_level": self.stress_level,
            "craving_level": self.craving_level,
            "did_smoke": self.did_smoke,
            "activity": self.activity,
            "triggers": list(self.triggers),
            "location": self.location,
            "weather": self.weather,
        }

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> "BehaviorEvent":
        """Rebuild a stored event. Raises KeyError / ValueError / TypeError on bad input."""
        return cls(
            id=str(rec["id"]),
            timestamp=_parse_timestamp(rec["timestamp"]),
            hour=_clamp(int(rec["hour"]), 0, 23),
            day_of_week=_clamp(int(rec["day_of_week"]), 0, 6),
            mood=str(rec["mood"]),
            stress_level=_clamp(int(rec["stress_level"]), 1, 10),
            craving_level=_clamp(int(rec["craving_level"]), 1, 10),
            did_smoke=bool(rec["did_smoke"]),
            activity=str(rec.get("activity") or ""),
            triggers=_normalize_triggers(rec.get("triggers") or ()),
            location=rec.get("location"),
            weather=rec.get("weather"),
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


def _parse_timestamp(value: Any) -> datetime:
    ts = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _normalize_triggers(triggers: Iterable[str]) -> tuple[str, ...]:
    return tuple(sorted({str(t).strip() for t in triggers if str(t).strip()}))


def sunday_based_weekday(ts: datetime) -> int:
    """0 = Sunday … 6 = Saturday (datetime.weekday() starts on Monday)."""
    return (ts.weekday() + 1) % 7


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------

def new_event(
    *,
    mood: str,
    stress_level: int,
    craving_level: int,
    did_smoke: bool,
    triggers: Iterable[str] = (),
    activity: str = "",
    timestamp: Optional[datetime | str] = None,
    hour: Optional[int] = None,
    day_of_week: Optional[int] = None,
    location: Optional[str] = None,
    weather: Optional[str] = None,
) -> BehaviorEvent:
    """
    Build a BehaviorEvent from user input.
    Numeric fields are clamped into range; an unknown mood or an unparseable
    timestamp raises EventValidationError. hour / day_of_week default to the
    timestamp's own.
    """
    mood_value = mood.value if isinstance(mood, Mood) else str(mood).strip().lower()
    if mood_value not in Mood.__members__:
        raise EventValidationError("mood", mood)

    if timestamp is None:
        ts = _now()
    else:
        try:
            ts = _parse_timestamp(timestamp)
        except (TypeError, ValueError) as exc:
            raise EventValidationError("timestamp", timestamp) from exc

    return BehaviorEvent(
        id=uuid.uuid4().hex,
        timestamp=ts,
        hour=_clamp(int(ts.hour if hour is None else hour), 0, 23),
        day_of_week=_clamp(
            int(sunday_based_weekday(ts) if day_of_week is None else day_of_week), 0, 6
        ),
        mood=mood_value,
        stress_level=_clamp(int(stress_level), 1, 10),
        craving_level=_clamp(int(craving_level), 1, 10),
        did_smoke=bool(did_smoke),
        activity=(activity or "").strip(),
        triggers=_normalize_triggers(triggers),
        location=location,
        weather=weather,
    )


def _decode(records: list[dict], key: str) -> list[BehaviorEvent]:
    events: list[BehaviorEvent] = []
    for rec in records:
        try:
            events.append(BehaviorEvent.from_record(rec))
        except (KeyError, ValueError, TypeError, AttributeError):
            logger.warning("Skipping malformed record in %s: %r", key, rec)
    return events


def prune(events: list[BehaviorEvent], now: datetime, retention_days: int) -> list[BehaviorEvent]:
    """Keep events with now - timestamp <= retention_days."""
    cutoff = now - timedelta(days=retention_days)
    return [e for e in events if e.timestamp >= cutoff]


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class EventStore:
    """Append-only behavior log for one user."""

    def __init__(
        self,
        db: Session,
        user_id: str = DEFAULT_USER,
        retention_days: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self.kv = KeyValueStore(db)
        self.user_id = user_id
        self.retention_days = retention_days or settings.RETENTION_DAYS
        self.timeout = timeout if timeout is not None else settings.STORE_TIMEOUT_SECONDS

    @property
    def key(self) -> str:
        return f"behavior_events:{self.user_id}"

    def read_all_events(self) -> list[BehaviorEvent]:
        """All stored events, oldest first. Raises StoreReadError."""
        events = _decode(self.kv.read(self.key), self.key)
        return sorted(events, key=lambda e: e.timestamp)

    def append_event(self, event: BehaviorEvent, now: Optional[datetime] = None) -> BehaviorEvent:
        """
        Append + prune + persist inside the per-user critical section.
        An event already outside the retention window is rejected with
        EventValidationError before anything is written.
        Raises StoreWriteError (a failed read inside the section counts as a
        failed write).
        """
        now = now or _now()
        if event.timestamp < now - timedelta(days=self.retention_days):
            raise EventValidationError("timestamp", event.timestamp.isoformat())

        with exclusive(self.key, self.timeout):
            try:
                current = _decode(self.kv.read(self.key, for_update=True), self.key)
            except StoreReadError as exc:
                raise StoreWriteError(self.key, reason=exc.message) from exc

            kept = prune(current + [event], now, self.retention_days)
            self.kv.write(self.key, [e.to_record() for e in kept])

        dropped = len(current) + 1 - len(kept)
        if dropped:
            logger.info("Evicted %d expired event(s) from %s", dropped, self.key)
        return event
