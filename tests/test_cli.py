from rich.console import Console
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from typer.testing import CliRunner

import cli
from studyplan.crud import get_plan

runner = CliRunner()


def invoke(args, session_factory, monkeypatch):
    monkeypatch.setattr(cli, "SessionLocal", session_factory)
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)
    monkeypatch.setattr(cli, "console", Console(width=200))
    return runner.invoke(cli.app, args)


def create(session_factory, monkeypatch, *extra):
    return invoke([
        "create-plan",
        "--title", "Calculus",
        "--category", "Math",
        "--days", "Mon,Wed,Fri",
        "--duration", "45m",
        "--start-date", "2025-08-04",
        *extra
    ], session_factory, monkeypatch)


def test_create_and_list(session_factory, monkeypatch):
    result = create(session_factory, monkeypatch)
    assert result.exit_code == 0, result.output
    assert "Plan ID: 1" in result.output

    result = invoke(["list-plans"], session_factory, monkeypatch)
    assert result.exit_code == 0
    assert "Calculus" in result.output


def test_complete_updates_streak(session_factory, monkeypatch, db):
    create(session_factory, monkeypatch)

    result = invoke(["complete", "1", "--day", "2025-08-04"], session_factory, monkeypatch)
    assert result.exit_code == 0, result.output
    assert "Studied: 45 min" in result.output

    invoke(["complete", "1", "--day", "2025-08-06", "--minutes", "30"], session_factory, monkeypatch)
    assert get_plan(db, 1).streak == 2


def test_today_shows_due_plans(session_factory, monkeypatch):
    create(session_factory, monkeypatch)
    invoke(["start", "1", "--day", "2025-08-04"], session_factory, monkeypatch)

    result = invoke(["today", "--day", "2025-08-04"], session_factory, monkeypatch)
    assert "Calculus" in result.output
    assert "running" in result.output

    result = invoke(["today", "--day", "2025-08-05"], session_factory, monkeypatch)
    assert "Nothing scheduled" in result.output


def test_sweep_resets_missed_plan(session_factory, monkeypatch, db):
    create(session_factory, monkeypatch)
    invoke(["complete", "1", "--day", "2025-08-04"], session_factory, monkeypatch)

    result = invoke(["sweep", "--day", "2025-08-08"], session_factory, monkeypatch)

    assert result.exit_code == 0
    assert "1 streaks reset" in result.output
    assert get_plan(db, 1).streak == 0


def test_invalid_days_rejected(session_factory, monkeypatch):
    result = create(session_factory, monkeypatch, "--days", "Someday")
    assert result.exit_code != 0


def test_missing_plan_fails(session_factory, monkeypatch):
    result = invoke(["complete", "9"], session_factory, monkeypatch)
    assert result.exit_code == 1
    assert "not found" in result.output


def test_store_error_before_init_is_reported(monkeypatch):
    # No tables have been created on this engine
    bare = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    try:
        for args in (["today", "--day", "2025-08-04"], ["list-plans"], ["complete", "1"]):
            result = invoke(args, sessionmaker(bind=bare), monkeypatch)
            assert result.exit_code == 1, args
            assert "✗" in result.output
            assert "database initialized" in result.output
    finally:
        bare.dispose()
