"""
Append-only store of login attempts.

Everything the rate limiter knows comes from here: there is no lock flag or
counter anywhere else, so deleting rows is the only way state changes.
"""
import time

from models import db
from models.login_attempt import LoginAttempt


def now_ms() -> int:
    return int(time.time() * 1000)


def append(username: str, ip_address=None, success: bool = False, reason=None,
           account_id=None, timestamp=None) -> int:
    row = LoginAttempt(
        username=username,
        ip_address=ip_address,
        timestamp=timestamp if timestamp is not None else now_ms(),
        success=success,
        reason=reason if not success else None,
        account_id=account_id,
    )
    db.session.add(row)
    db.session.commit()
    return row.id


def query_by_ip(ip_address: str, since: int) -> list[LoginAttempt]:
    return (
        LoginAttempt.query
        .filter(LoginAttempt.ip_address == ip_address, LoginAttempt.timestamp >= since)
        .all()
    )


def query_by_username(username: str, since: int) -> list[LoginAttempt]:
    return (
        LoginAttempt.query
        .filter(LoginAttempt.username == username, LoginAttempt.timestamp >= since)
        .all()
    )


def delete_older_than(cutoff: int) -> int:
    # single bulk DELETE: safe to race with another sweep
    count = (
        LoginAttempt.query
        .filter(LoginAttempt.timestamp < cutoff)
        .delete(synchronize_session=False)
    )
    db.session.commit()
    return count


def record_login_attempt(username: str, ip_address=None, success: bool = False,
                         reason=None, account_id=None) -> int:
    """
    Appends an attempt and occasionally kicks off a background sweep.
    """
    from security.cleanup import maybe_schedule_sweep

    attempt_id = append(
        username,
        ip_address=ip_address,
        success=success,
        reason=reason,
        account_id=account_id,
    )
    maybe_schedule_sweep()
    return attempt_id
