# playtime_monitor/cron/playtime_sweep.py

"""
Scheduled playtime sweep
- Loads every monitored child
- Checks each one against its limit and notifies the parent
- One child's failure never stops the rest of the sweep
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import ObjectDeletedError

from playtime_monitor.database import SessionLocal
from playtime_monitor.models.children import Child
from playtime_monitor.services.message_manager import MessageManager
from playtime_monitor.services.playtime_service import (
    EvaluationOutcome,
    OutcomeStatus,
    evaluate,
    utc_now,
)
from playtime_monitor.services.roster_store import RosterStore
from playtime_monitor.services.steam_client import SteamClient

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    started_at: datetime
    finished_at: Optional[datetime] = None
    total: int = 0
    evaluated: int = 0
    notified: int = 0
    suppressed: int = 0
    no_data: int = 0
    skipped: int = 0
    failed: int = 0
    outcomes: List[EvaluationOutcome] = field(default_factory=list)

    def add(self, outcome: EvaluationOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.status is OutcomeStatus.EVALUATED:
            self.evaluated += 1
            if outcome.notified:
                self.notified += 1
        elif outcome.status is OutcomeStatus.SUPPRESSED:
            self.suppressed += 1
        elif outcome.status is OutcomeStatus.NO_DATA:
            self.no_data += 1
        else:
            self.failed += 1

    def as_dict(self):
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "total": self.total,
            "evaluated": self.evaluated,
            "notified": self.notified,
            "suppressed": self.suppressed,
            "no_data": self.no_data,
            "skipped": self.skipped,
            "failed": self.failed,
        }


def run_sweep(
    db: Optional[Session] = None,
    steam_client=None,
    messenger=None,
    now: Optional[datetime] = None,
) -> SweepReport:
    owns_session = db is None
    db = db or SessionLocal()
    steam_client = steam_client or SteamClient()
    messenger = messenger or MessageManager()

    report = SweepReport(started_at=now or utc_now())
    logger.info("Running scheduled job: checking playtime for all children...")

    try:
        store = RosterStore(db)
        # Commits below expire every loaded child, so work from plain identifiers
        roster = [(c.child_id, c.steam_id) for c in store.list_children()]
        report.total = len(roster)

        for child_id, steam_id in roster:
            try:
                child = db.get(Child, child_id)
                if child is None:
                    logger.info(f"Child {child_id} was removed during the sweep, skipping.")
                    report.skipped += 1
                    continue

                contact = store.get_contact(child.parent_id)
                if contact is None:
                    logger.info(f"Parent not found for child {child_id}, skipping.")
                    report.skipped += 1
                    continue

                outcome = evaluate(store, child, contact, steam_client, messenger, now=now)
                report.add(outcome)

                if outcome.status is OutcomeStatus.NO_DATA:
                    logger.info(f"No recent game data for child {child_id} (Steam ID: {steam_id}).")

            except ObjectDeletedError:
                logger.info(f"Child {child_id} was removed during the sweep, skipping.")
                db.rollback()
                report.skipped += 1
                continue

            except Exception:
                logger.exception(f"Error checking child {child_id} (Steam ID: {steam_id})")
                db.rollback()
                report.failed += 1
                continue

    finally:
        if owns_session:
            db.close()
        report.finished_at = utc_now()
        logger.info(
            f"Scheduled job finished: {report.total} children, {report.notified} notified, "
            f"{report.suppressed} suppressed, {report.no_data} without data, "
            f"{report.skipped} skipped, {report.failed} failed."
        )

    return report


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    result = run_sweep()
    logger.info(f"[SWEEP] {result.as_dict()}")
