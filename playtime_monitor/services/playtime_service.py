# playtime_monitor/services/playtime_service.py

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional

from playtime_monitor.services.exceptions import ChildNotFoundError, PlaytimeSourceError
from playtime_monitor.services.message_manager import DispatchResult
from playtime_monitor.services.roster_store import ParentContact, RosterStore
from playtime_monitor.services.steam_client import GamePlaytime
from playtime_monitor.utils.constants import (
    LIMIT_WINDOW_WEEKS,
    NOTIFICATION_SUPPRESSION_HOURS,
    QUICK_CHECK_LIMIT_HOURS,
)

logger = logging.getLogger(__name__)

SUPPRESSION_WINDOW = timedelta(hours=NOTIFICATION_SUPPRESSION_HOURS)


def utc_now() -> datetime:
    # Timestamps are stored as naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


class OutcomeStatus(str, Enum):
    NO_DATA = "no_data"
    EVALUATED = "evaluated"
    SUPPRESSED = "suppressed"
    SOURCE_ERROR = "source_error"


@dataclass
class PlaytimeSnapshot:
    steam_id: str
    total_minutes: int
    limit_hours: int
    limit_minutes: int
    over_limit: bool
    games: List[GamePlaytime] = field(default_factory=list)

    @property
    def total_hours(self) -> float:
        return round(self.total_minutes / 60, 2)

    def to_dict(self):
        return {
            "steam_id": self.steam_id,
            "total_playtime_minutes": self.total_minutes,
            "total_playtime_hours": self.total_hours,
            "limit_hours": self.limit_hours,
            "limit_minutes": self.limit_minutes,
            "is_over_limit": self.over_limit,
            "games": [g.to_dict() for g in self.games],
        }


@dataclass
class EvaluationOutcome:
    child_id: int
    steam_id: str
    status: OutcomeStatus
    snapshot: Optional[PlaytimeSnapshot] = None
    dispatch: Optional[DispatchResult] = None
    error: Optional[str] = None

    @property
    def notified(self) -> bool:
        return self.dispatch is not None


@dataclass
class QuickCheckResult:
    steam_id: str
    snapshot: Optional[PlaytimeSnapshot] = None
    dispatch: Optional[DispatchResult] = None

    @property
    def game_count(self) -> int:
        return len(self.snapshot.games) if self.snapshot else 0

    @property
    def notified(self) -> bool:
        return self.dispatch is not None


def limit_minutes_for(limit_hours: int) -> int:
    # Weekly limit doubled to match Steam's two-week window
    return limit_hours * LIMIT_WINDOW_WEEKS * 60


def build_snapshot(steam_id: str, limit_hours: int, games: List[GamePlaytime]) -> PlaytimeSnapshot:
    total_minutes = sum(g.playtime_2weeks for g in games)
    limit_minutes = limit_minutes_for(limit_hours)

    return PlaytimeSnapshot(
        steam_id=steam_id,
        total_minutes=total_minutes,
        limit_hours=limit_hours,
        limit_minutes=limit_minutes,
        over_limit=total_minutes > limit_minutes,
        games=list(games),
    )


def is_suppressed(last_notified_at: Optional[datetime], now: datetime) -> bool:
    if last_notified_at is None:
        return False
    return now - last_notified_at < SUPPRESSION_WINDOW


def _assess(
    store: RosterStore,
    child,
    contact: ParentContact,
    games: List[GamePlaytime],
    messenger,
    now: datetime,
) -> EvaluationOutcome:
    if not games:
        return EvaluationOutcome(child.child_id, child.steam_id, OutcomeStatus.NO_DATA)

    snapshot = build_snapshot(child.steam_id, child.playtime_limit_hours, games)
    outcome = EvaluationOutcome(child.child_id, child.steam_id, OutcomeStatus.EVALUATED, snapshot=snapshot)

    if not snapshot.over_limit:
        return outcome

    previous = child.last_notified_at
    if is_suppressed(previous, now):
        logger.info(f"Child {child.child_id} was notified at {previous}, skipping notification")
        outcome.status = OutcomeStatus.SUPPRESSED
        return outcome

    if not contact.has_channels:
        logger.info(
            f"Parent {contact.user_id} has no notification channel configured, "
            f"not notifying for child {child.child_id}"
        )
        return outcome

    # Claim the notification slot before sending so concurrent checks cannot both dispatch
    if not store.claim_notification(child.child_id, previous, now):
        logger.info(f"Child {child.child_id} was notified by a concurrent check, skipping notification")
        outcome.status = OutcomeStatus.SUPPRESSED
        return outcome

    logger.info(
        f"Playtime limit exceeded for child {child.child_id} "
        f"({snapshot.total_minutes} > {snapshot.limit_minutes} min), sending notifications"
    )
    outcome.dispatch = messenger.dispatch(
        contact,
        child.child_name,
        snapshot.total_minutes,
        snapshot.limit_hours,
    )
    return outcome


def evaluate(
    store: RosterStore,
    child,
    contact: ParentContact,
    steam_client,
    messenger,
    now: Optional[datetime] = None,
) -> EvaluationOutcome:
    """Check one child against its limit and notify the parent if needed.

    Source failures come back as ``SOURCE_ERROR`` without touching the
    child's record; any other exception propagates to the caller.
    """
    now = now or utc_now()

    try:
        games = steam_client.get_recently_played(child.steam_id)
    except PlaytimeSourceError as e:
        logger.warning(f"Steam lookup failed for child {child.child_id} ({child.steam_id}): {e}")
        return EvaluationOutcome(child.child_id, child.steam_id, OutcomeStatus.SOURCE_ERROR, error=str(e))

    return _assess(store, child, contact, games, messenger, now)


def check_now(
    store: RosterStore,
    child_id: int,
    parent_id: int,
    steam_client,
    messenger,
    now: Optional[datetime] = None,
) -> EvaluationOutcome:
    """On-demand check requested by a parent for one of their children.

    Raises ChildNotFoundError for children the parent does not own and lets
    PlaytimeSourceError propagate. Every successful fetch is written to the
    activity log. The returned snapshot always carries the full game list,
    even when the notification itself is suppressed.
    """
    now = now or utc_now()

    child = store.get_child_for_parent(child_id, parent_id)
    contact = store.get_contact(parent_id)
    if contact is None:
        raise ChildNotFoundError(f"Parent {parent_id} not found")

    games = steam_client.get_recently_played(child.steam_id)

    store.record_activity(parent_id, child.steam_id, now)

    return _assess(store, child, contact, games, messenger, now)


def quick_check(
    store: RosterStore,
    steam_id: str,
    contact: ParentContact,
    steam_client,
    messenger,
    user_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> QuickCheckResult:
    """Free-form check of any Steam ID against the fixed weekly limit.

    Alerts go to the one-off contact given with the request, with no
    suppression window. Each check with game data is kept as a playtime
    record, and logged-in callers also get an activity entry.
    """
    now = now or utc_now()

    games = steam_client.get_recently_played(steam_id)
    if not games:
        return QuickCheckResult(steam_id)

    snapshot = build_snapshot(steam_id, QUICK_CHECK_LIMIT_HOURS, games)
    result = QuickCheckResult(steam_id, snapshot=snapshot)

    if snapshot.over_limit and contact.has_channels:
        logger.info(
            f"Playtime limit exceeded for Steam ID {steam_id} "
            f"({snapshot.total_minutes} > {snapshot.limit_minutes} min), sending notifications"
        )
        result.dispatch = messenger.dispatch(
            contact,
            f"Steam user {steam_id}",
            snapshot.total_minutes,
            snapshot.limit_hours,
        )

    store.record_playtime(steam_id, snapshot.total_minutes, now)
    if user_id is not None:
        store.record_activity(user_id, steam_id, now)

    return result
