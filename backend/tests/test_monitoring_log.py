from __future__ import annotations

from datetime import date, timedelta
from uuid import uuid4

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from adaptwell.db.base import Base
from adaptwell.db.models.goal import Goal
from adaptwell.db.models.user import User
from adaptwell.services.monitoring_log import compute_run_counters, record_monitoring_entry
from adaptwell.services.persistence import PersistenceGateway


def _session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_fk(conn, record):  # pragma: no cover
        cursor = conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def _seed_user(session):
    user_id = uuid4()
    session.add(User(id=user_id))
    session.flush()
    session.commit()
    return user_id


def _log(persistence, user_id, day, completed, **extra):
    fields = {"date": day, "activity_type": "run", "completed": completed, **extra}
    return record_monitoring_entry(persistence, user_id, fields)


def test_seven_day_alternating_scenario():
    Session = _session()
    session = Session()
    user_id = _seed_user(session)
    persistence = PersistenceGateway(session)
    start = date(2024, 3, 4)

    outcomes = [True, True, True, False, True, True, True]
    entries = [_log(persistence, user_id, start + timedelta(days=i), done) for i, done in enumerate(outcomes)]

    counters = [e.streak_count if e.completed else e.consecutive_misses for e in entries]
    assert counters == [1, 2, 3, 1, 1, 2, 3]
    assert [e.is_deviation for e in entries] == [False, False, False, True, False, False, False]
    assert [e.deviation_type for e in entries] == [None, None, None, "missed", None, None, None]
    session.close()


def test_streak_is_not_capped_at_a_week():
    Session = _session()
    session = Session()
    user_id = _seed_user(session)
    persistence = PersistenceGateway(session)
    start = date(2024, 1, 1)

    for i in range(60):
        entry = _log(persistence, user_id, start + timedelta(days=i), True)

    assert entry.streak_count == 60
    assert entry.consecutive_misses == 0
    session.close()


def test_consecutive_misses_grow_and_reset():
    Session = _session()
    session = Session()
    user_id = _seed_user(session)
    persistence = PersistenceGateway(session)
    start = date(2024, 5, 1)

    misses = [_log(persistence, user_id, start + timedelta(days=i), False) for i in range(4)]
    assert [m.consecutive_misses for m in misses] == [1, 2, 3, 4]
    assert all(m.is_deviation for m in misses)
    assert all(m.streak_count == 0 for m in misses)

    recovered = _log(persistence, user_id, start + timedelta(days=4), True)
    assert recovered.streak_count == 1
    assert recovered.consecutive_misses == 0
    assert recovered.is_deviation is False
    session.close()


def test_same_day_entries_do_not_count_towards_the_run():
    Session = _session()
    session = Session()
    user_id = _seed_user(session)
    persistence = PersistenceGateway(session)
    day = date(2024, 6, 10)

    _log(persistence, user_id, day - timedelta(days=1), True)
    first = _log(persistence, user_id, day, True)
    second = _log(persistence, user_id, day, True)

    assert first.streak_count == 2
    assert second.streak_count == 2
    session.close()


def test_runs_are_scoped_per_user():
    Session = _session()
    session = Session()
    user_a = _seed_user(session)
    user_b = _seed_user(session)
    persistence = PersistenceGateway(session)
    day = date(2024, 6, 10)

    _log(persistence, user_a, day - timedelta(days=2), True)
    _log(persistence, user_a, day - timedelta(days=1), True)
    other = _log(persistence, user_b, day, True)

    assert other.streak_count == 1
    session.close()


def test_compute_run_counters_deviation_iff_missed():
    done = compute_run_counters(True, [False, False, False])
    assert done.streak_count == 1
    assert done.consecutive_misses == 0
    assert done.is_deviation is False

    missed = compute_run_counters(False, [True, True])
    assert missed.consecutive_misses == 1
    assert missed.is_deviation is True

    long_miss = compute_run_counters(False, [False, False, True])
    assert long_miss.consecutive_misses == 3
    assert long_miss.is_deviation is True


def test_goal_progress_sums_completed_values_and_never_decreases():
    Session = _session()
    session = Session()
    user_id = _seed_user(session)
    persistence = PersistenceGateway(session)
    goal = persistence.add_goal(
        Goal(user_id=user_id, title="Run", status="active", target_value=20, unit="km")
    )
    day = date(2024, 7, 1)

    _log(persistence, user_id, day, True, goal_id=goal.id, value=5.0)
    _log(persistence, user_id, day + timedelta(days=1), True, goal_id=goal.id, value=3.5)
    _log(persistence, user_id, day + timedelta(days=2), False, goal_id=goal.id, value=10.0)

    session.refresh(goal)
    assert goal.current_value == 8.5
    session.close()


def test_goal_progress_counts_sessions_when_no_values():
    Session = _session()
    session = Session()
    user_id = _seed_user(session)
    persistence = PersistenceGateway(session)
    goal = persistence.add_goal(Goal(user_id=user_id, title="Yoga", status="active", target_value=12))
    day = date(2024, 7, 1)

    for i in range(3):
        _log(persistence, user_id, day + timedelta(days=i), True, goal_id=goal.id)

    session.refresh(goal)
    assert goal.current_value == 3.0
    session.close()
