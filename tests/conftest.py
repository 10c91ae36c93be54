import pytest
from datetime import date
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import studyplan.models  # noqa: F401
from studyplan.crud import create_plan
from studyplan.database import Base
from studyplan.duration import Duration
from studyplan.schemas import PlanCreate

MON_WED_FRI = [True, False, True, False, True, False, False]
MONDAY_ONLY = [True, False, False, False, False, False, False]
EVERY_DAY = [True] * 7

# 2025-08-04 is a Monday
MONDAY = date(2025, 8, 4)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_plan(db):
    def _make(**overrides):
        data = {
            "title": "Algorithms",
            "category": "Programming",
            "schedule": MON_WED_FRI,
            "start_date": MONDAY,
            "duration": Duration(hours=1),
        }
        data.update(overrides)
        return create_plan(db, PlanCreate(**data))
    return _make
