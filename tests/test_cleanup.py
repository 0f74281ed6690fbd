from models.login_attempt import LoginAttempt
from security import cleanup
from security.attempt_log import now_ms, record_login_attempt
from security.cleanup import maybe_schedule_sweep, sweep

MINUTE = 60 * 1000
NOW = 1_800_000_000_000
CLEANUP_AGE = 60 * MINUTE


def test_sweep_removes_all_and_only_expired_rows(app, add_attempts):
    add_attempts("alice", [NOW - CLEANUP_AGE - 1, NOW - 2 * CLEANUP_AGE])
    add_attempts("bob", [NOW - CLEANUP_AGE, NOW - MINUTE, NOW], success=True, reason=None)

    assert sweep(now=NOW) == 2
    remaining = sorted(a.timestamp for a in LoginAttempt.query.all())
    assert remaining == [NOW - CLEANUP_AGE, NOW - MINUTE, NOW]


def test_second_sweep_reports_nothing(app, add_attempts):
    add_attempts("alice", [NOW - CLEANUP_AGE - 1] * 3)

    assert sweep(now=NOW) == 3
    assert sweep(now=NOW) == 0


def test_scheduled_sweep_runs_in_background(app, add_attempts):
    app.config["CLEANUP_PROBABILITY"] = 0.1
    add_attempts("alice", [now_ms() - 2 * CLEANUP_AGE] * 2)

    worker = maybe_schedule_sweep(rng=lambda: 0.05)
    assert worker is not None
    worker.join(timeout=10)

    assert LoginAttempt.query.count() == 0


def test_sweep_not_scheduled_above_probability(app):
    app.config["CLEANUP_PROBABILITY"] = 0.1

    assert maybe_schedule_sweep(rng=lambda: 0.5) is None


def test_sweep_disabled_with_zero_probability(app):
    assert maybe_schedule_sweep(rng=lambda: 0.0) is None


def test_background_failure_is_swallowed(app, monkeypatch):
    def boom(now=None):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(cleanup, "sweep", boom)

    cleanup._sweep_in_background(app)


def test_recording_an_attempt_may_trigger_sweep(app, monkeypatch):
    calls = []
    monkeypatch.setattr(cleanup, "maybe_schedule_sweep", lambda: calls.append(1))

    record_login_attempt("alice", ip_address="10.0.0.1", success=False, reason="Invalid password")

    assert calls == [1]
    row = LoginAttempt.query.one()
    assert row.username == "alice"
    assert row.reason == "Invalid password"
