from datetime import timedelta

import pytest

from playtime_monitor.models import Child, PlaytimeRecord
from playtime_monitor.services.exceptions import ChildNotFoundError, PlaytimeSourceError, SteamAuthError
from playtime_monitor.services.playtime_service import (
    OutcomeStatus,
    build_snapshot,
    check_now,
    evaluate,
    is_suppressed,
    limit_minutes_for,
    quick_check,
)
from playtime_monitor.services.roster_store import ParentContact, RosterStore
from tests.conftest import NOW, FakeMessenger, FakeSteamClient, game


def _reload(db, child):
    db.expire_all()
    return db.get(Child, child.child_id)


def test_limit_is_doubled_for_two_week_window():
    assert limit_minutes_for(20) == 2400
    assert limit_minutes_for(10) == 1200


def test_snapshot_sums_two_week_minutes():
    snapshot = build_snapshot("sid", 10, [game("A", 700), game("B", 600)])

    assert snapshot.total_minutes == 1300
    assert snapshot.limit_minutes == 1200
    assert snapshot.over_limit is True
    assert snapshot.total_hours == 21.67


def test_snapshot_at_exact_limit_is_not_over():
    snapshot = build_snapshot("sid", 10, [game("A", 1200)])
    assert snapshot.over_limit is False


def test_suppression_window():
    assert is_suppressed(None, NOW) is False
    assert is_suppressed(NOW - timedelta(hours=23), NOW) is True
    assert is_suppressed(NOW - timedelta(hours=25), NOW) is False


def test_under_limit_never_dispatches(db, make_parent, make_child):
    parent = make_parent(discord_webhook_url="https://discord.com/api/webhooks/1/abc")
    child = make_child(parent, playtime_limit_hours=20)
    steam = FakeSteamClient({child.steam_id: [game("A", 1000), game("B", 1400)]})
    messenger = FakeMessenger()
    store = RosterStore(db)

    outcome = evaluate(store, child, store.get_contact(parent.user_id), steam, messenger, now=NOW)

    assert outcome.status is OutcomeStatus.EVALUATED
    assert outcome.snapshot.total_minutes == 2400
    assert outcome.snapshot.over_limit is False
    assert outcome.notified is False
    assert messenger.calls == []
    assert _reload(db, child).last_notified_at is None


def test_over_limit_dispatches_and_sets_timestamp(db, make_parent, make_child):
    parent = make_parent(discord_webhook_url="https://discord.com/api/webhooks/1/abc")
    child = make_child(parent, playtime_limit_hours=10)
    steam = FakeSteamClient({child.steam_id: [game("A", 700), game("B", 600)]})
    messenger = FakeMessenger()
    store = RosterStore(db)

    outcome = evaluate(store, child, store.get_contact(parent.user_id), steam, messenger, now=NOW)

    assert outcome.status is OutcomeStatus.EVALUATED
    assert outcome.snapshot.over_limit is True
    assert outcome.dispatch.sent == ["email", "discord"]
    assert len(messenger.calls) == 1
    assert messenger.calls[0]["total_minutes"] == 1300
    assert messenger.calls[0]["limit_hours"] == 10
    assert _reload(db, child).last_notified_at == NOW


def test_over_limit_without_channels_does_not_claim(db, make_parent, make_child):
    parent = make_parent(email=None)
    child = make_child(parent, playtime_limit_hours=10)
    steam = FakeSteamClient({child.steam_id: [game("A", 3000)]})
    messenger = FakeMessenger()
    store = RosterStore(db)

    outcome = evaluate(store, child, store.get_contact(parent.user_id), steam, messenger, now=NOW)

    assert outcome.status is OutcomeStatus.EVALUATED
    assert outcome.snapshot.over_limit is True
    assert outcome.notified is False
    assert messenger.calls == []
    assert _reload(db, child).last_notified_at is None


def test_recent_notification_is_suppressed(db, make_parent, make_child):
    parent = make_parent()
    previous = NOW - timedelta(hours=23)
    child = make_child(parent, playtime_limit_hours=10, last_notified_at=previous)
    steam = FakeSteamClient({child.steam_id: [game("A", 3000)]})
    messenger = FakeMessenger()
    store = RosterStore(db)

    outcome = evaluate(store, child, store.get_contact(parent.user_id), steam, messenger, now=NOW)

    assert outcome.status is OutcomeStatus.SUPPRESSED
    assert outcome.snapshot.over_limit is True
    assert messenger.calls == []
    assert _reload(db, child).last_notified_at == previous


def test_notification_older_than_window_is_sent_again(db, make_parent, make_child):
    parent = make_parent()
    child = make_child(parent, playtime_limit_hours=10, last_notified_at=NOW - timedelta(hours=25))
    steam = FakeSteamClient({child.steam_id: [game("A", 3000)]})
    messenger = FakeMessenger()
    store = RosterStore(db)

    outcome = evaluate(store, child, store.get_contact(parent.user_id), steam, messenger, now=NOW)

    assert outcome.status is OutcomeStatus.EVALUATED
    assert outcome.notified is True
    assert len(messenger.calls) == 1
    assert _reload(db, child).last_notified_at == NOW


def test_no_games_is_no_data(db, make_parent, make_child):
    parent = make_parent()
    child = make_child(parent)
    messenger = FakeMessenger()
    store = RosterStore(db)

    outcome = evaluate(store, child, store.get_contact(parent.user_id), FakeSteamClient(), messenger, now=NOW)

    assert outcome.status is OutcomeStatus.NO_DATA
    assert outcome.snapshot is None
    assert messenger.calls == []


def test_source_error_leaves_state_untouched(db, make_parent, make_child, activity_count):
    parent = make_parent()
    child = make_child(parent, playtime_limit_hours=1)
    steam = FakeSteamClient(errors={child.steam_id: PlaytimeSourceError("timeout")})
    messenger = FakeMessenger()
    store = RosterStore(db)

    outcome = evaluate(store, child, store.get_contact(parent.user_id), steam, messenger, now=NOW)

    assert outcome.status is OutcomeStatus.SOURCE_ERROR
    assert "timeout" in outcome.error
    assert messenger.calls == []
    assert _reload(db, child).last_notified_at is None
    assert activity_count() == 0


def test_lost_claim_counts_as_suppressed(db, make_parent, make_child):
    parent = make_parent()
    child = make_child(parent, playtime_limit_hours=1)
    store = RosterStore(db)

    # Another check claimed the slot after this one loaded the child
    assert store.claim_notification(child.child_id, None, NOW - timedelta(minutes=1)) is True
    stale = Child(
        child_id=child.child_id,
        parent_id=parent.user_id,
        child_name=child.child_name,
        steam_id=child.steam_id,
        playtime_limit_hours=1,
        last_notified_at=None,
    )
    messenger = FakeMessenger()
    steam = FakeSteamClient({child.steam_id: [game("A", 500)]})

    outcome = evaluate(store, stale, store.get_contact(parent.user_id), steam, messenger, now=NOW)

    assert outcome.status is OutcomeStatus.SUPPRESSED
    assert messenger.calls == []


def test_check_now_returns_full_games_when_suppressed(db, make_parent, make_child, activity_count):
    parent = make_parent()
    child = make_child(parent, playtime_limit_hours=20, last_notified_at=NOW - timedelta(hours=1))
    games = [game("A", 1800, appid=10), game("B", 1200, appid=20)]
    steam = FakeSteamClient({child.steam_id: games})
    messenger = FakeMessenger()
    store = RosterStore(db)

    outcome = check_now(store, child.child_id, parent.user_id, steam, messenger, now=NOW)

    assert outcome.status is OutcomeStatus.SUPPRESSED
    assert outcome.snapshot.limit_minutes == 2400
    assert outcome.snapshot.total_minutes == 3000
    assert outcome.snapshot.over_limit is True
    assert [g.name for g in outcome.snapshot.games] == ["A", "B"]
    assert messenger.calls == []
    assert activity_count() == 1


def test_check_now_twice_sends_once(db, make_parent, make_child, activity_count):
    parent = make_parent()
    child = make_child(parent, playtime_limit_hours=10)
    steam = FakeSteamClient({child.steam_id: [game("A", 700), game("B", 600)]})
    messenger = FakeMessenger()
    store = RosterStore(db)

    first = check_now(store, child.child_id, parent.user_id, steam, messenger, now=NOW)
    second = check_now(store, child.child_id, parent.user_id, steam, messenger, now=NOW + timedelta(minutes=5))

    assert first.snapshot.to_dict() == second.snapshot.to_dict()
    assert first.notified is True
    assert second.status is OutcomeStatus.SUPPRESSED
    assert len(messenger.calls) == 1
    assert activity_count() == 2


def test_check_now_logs_activity_when_under_limit(db, make_parent, make_child, activity_count):
    parent = make_parent()
    child = make_child(parent)
    steam = FakeSteamClient({child.steam_id: [game("A", 10)]})
    store = RosterStore(db)

    outcome = check_now(store, child.child_id, parent.user_id, steam, FakeMessenger(), now=NOW)

    assert outcome.snapshot.over_limit is False
    assert activity_count() == 1


def test_check_now_rejects_other_parents_child(db, make_parent, make_child, activity_count):
    owner = make_parent(username="owner")
    other = make_parent(username="other")
    child = make_child(owner)
    steam = FakeSteamClient({child.steam_id: [game("A", 10)]})

    with pytest.raises(ChildNotFoundError):
        check_now(RosterStore(db), child.child_id, other.user_id, steam, FakeMessenger(), now=NOW)

    assert steam.calls == []
    assert activity_count() == 0


def test_check_now_source_failure_propagates_without_audit(db, make_parent, make_child, activity_count):
    parent = make_parent()
    child = make_child(parent)
    steam = FakeSteamClient(errors={child.steam_id: SteamAuthError("bad key")})

    with pytest.raises(SteamAuthError):
        check_now(RosterStore(db), child.child_id, parent.user_id, steam, FakeMessenger(), now=NOW)

    assert activity_count() == 0


def test_quick_check_uses_fixed_limit_and_records_history(db, activity_count):
    steam = FakeSteamClient({"7656": [game("A", 3000), game("B", 2000)]})
    messenger = FakeMessenger()
    contact = ParentContact(user_id=None, email="mom@example.com")

    result = quick_check(RosterStore(db), "7656", contact, steam, messenger, now=NOW)

    assert result.snapshot.limit_hours == 40
    assert result.snapshot.limit_minutes == 4800
    assert result.snapshot.over_limit is True
    assert result.game_count == 2
    assert result.notified is True
    assert messenger.calls[0]["contact"] == contact
    assert messenger.calls[0]["total_minutes"] == 5000

    record = db.query(PlaytimeRecord).one()
    assert (record.steam_id, record.total_playtime_minutes, record.timestamp) == ("7656", 5000, NOW)
    assert activity_count() == 0


def test_quick_check_has_no_suppression_window(db):
    steam = FakeSteamClient({"7656": [game("A", 5000)]})
    messenger = FakeMessenger()
    contact = ParentContact(user_id=None, discord_webhook_url="https://discord.com/api/webhooks/1/abc")
    store = RosterStore(db)

    quick_check(store, "7656", contact, steam, messenger, now=NOW)
    quick_check(store, "7656", contact, steam, messenger, now=NOW + timedelta(minutes=1))

    assert len(messenger.calls) == 2
    assert db.query(PlaytimeRecord).count() == 2


def test_quick_check_logs_activity_for_logged_in_caller(db, make_parent, activity_count):
    parent = make_parent()
    steam = FakeSteamClient({"7656": [game("A", 10)]})
    messenger = FakeMessenger()

    result = quick_check(RosterStore(db), "7656", ParentContact(user_id=parent.user_id), steam, messenger,
                         user_id=parent.user_id, now=NOW)

    assert result.snapshot.over_limit is False
    assert result.notified is False
    assert messenger.calls == []
    assert activity_count() == 1


def test_quick_check_without_games_writes_nothing(db, activity_count):
    result = quick_check(RosterStore(db), "7656", ParentContact(user_id=None), FakeSteamClient(), FakeMessenger(),
                         user_id=None, now=NOW)

    assert result.snapshot is None
    assert result.game_count == 0
    assert db.query(PlaytimeRecord).count() == 0
    assert activity_count() == 0


def test_quick_check_over_limit_without_contact_sends_nothing(db):
    steam = FakeSteamClient({"7656": [game("A", 5000)]})
    messenger = FakeMessenger()

    result = quick_check(RosterStore(db), "7656", ParentContact(user_id=None), steam, messenger, now=NOW)

    assert result.snapshot.over_limit is True
    assert result.notified is False
    assert messenger.calls == []
    assert db.query(PlaytimeRecord).count() == 1
