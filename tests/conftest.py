from datetime import datetime
from typing import Dict, List, Optional

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from playtime_monitor.database import Base, build_engine
from playtime_monitor.models import ActivityLog, Child, User
from playtime_monitor.services.message_manager import DispatchResult
from playtime_monitor.services.steam_client import GamePlaytime
from playtime_monitor.utils.security import hash_password

NOW = datetime(2026, 10, 18, 12, 0, 0)


def game(name: str, minutes: int, appid: Optional[int] = None, forever: Optional[int] = None) -> GamePlaytime:
    return GamePlaytime(
        appid=appid,
        name=name,
        playtime_2weeks=minutes,
        playtime_forever=minutes if forever is None else forever,
        img_icon_url="",
    )


class FakeSteamClient:
    def __init__(self, games: Optional[Dict[str, List[GamePlaytime]]] = None, errors: Optional[Dict[str, Exception]] = None):
        self.games = games or {}
        self.errors = errors or {}
        self.calls: List[str] = []

    def get_recently_played(self, steam_id: str) -> List[GamePlaytime]:
        self.calls.append(steam_id)
        if steam_id in self.errors:
            raise self.errors[steam_id]
        return list(self.games.get(steam_id, []))


class FakeMessenger:
    def __init__(self):
        self.calls = []

    def dispatch(self, contact, child_name, total_minutes, limit_hours) -> DispatchResult:
        self.calls.append(
            {
                "contact": contact,
                "child_name": child_name,
                "total_minutes": total_minutes,
                "limit_hours": limit_hours,
            }
        )
        result = DispatchResult()
        if contact.email:
            result.sent.append("email")
        if contact.discord_webhook_url:
            result.sent.append("discord")
        return result


@pytest.fixture
def engine():
    test_engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_parent(db):
    def _make_parent(
        username: str = "parent",
        password: str = "secret",
        email: Optional[str] = "parent@example.com",
        discord_webhook_url: Optional[str] = None,
        role: str = "parent",
    ) -> User:
        user = User(
            username=username,
            password_hash=hash_password(password),
            role=role,
            email=email,
            discord_webhook_url=discord_webhook_url,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_parent


@pytest.fixture
def make_child(db):
    def _make_child(
        parent: User,
        steam_id: str = "76561198000000001",
        child_name: str = "Alex",
        playtime_limit_hours: int = 20,
        last_notified_at: Optional[datetime] = None,
    ) -> Child:
        child = Child(
            parent_id=parent.user_id,
            child_name=child_name,
            steam_id=steam_id,
            playtime_limit_hours=playtime_limit_hours,
            last_notified_at=last_notified_at,
        )
        db.add(child)
        db.commit()
        db.refresh(child)
        return child

    return _make_child


@pytest.fixture
def activity_count(db):
    def _count() -> int:
        return db.query(ActivityLog).count()

    return _count
