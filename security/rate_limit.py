"""
Login throttling computed from the attempt log.

Nothing here is stored: every call recounts failures inside sliding windows
that end at `now`. A lock therefore lifts on its own once the oldest failure
that caused it ages out of the lockout window.

Checks run in a fixed order and the first one that trips wins:
IP rate limit, then account lockout, then username rate limit.
"""
import enum
import math
from dataclasses import dataclass
from typing import Optional

from flask import current_app

from security.attempt_log import now_ms, query_by_ip, query_by_username

MINUTE_MS = 60 * 1000


class RateLimitKind(str, enum.Enum):
    IP_RATE_LIMIT = "ip_rate_limit"
    ACCOUNT_LOCKED = "account_locked"
    USERNAME_RATE_LIMIT = "username_rate_limit"


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    kind: Optional[RateLimitKind] = None
    reason: Optional[str] = None
    lockout_expires: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "allowed": self.allowed,
            "remaining": self.remaining,
            "kind": self.kind.value if self.kind else None,
            "reason": self.reason,
            "lockout_expires": self.lockout_expires,
        }


def _limits() -> dict:
    cfg = current_app.config
    return {
        "max_per_ip": cfg.get("MAX_ATTEMPTS_PER_IP", 5),
        "max_per_username": cfg.get("MAX_ATTEMPTS_PER_USERNAME", 5),
        "window": cfg.get("RATE_LIMIT_WINDOW_MS", 15 * MINUTE_MS),
        "lockout_attempts": cfg.get("ACCOUNT_LOCKOUT_ATTEMPTS", 10),
        "lockout_duration": cfg.get("ACCOUNT_LOCKOUT_DURATION_MS", 30 * MINUTE_MS),
    }


def _failures(attempts) -> list:
    return [a for a in attempts if not a.success]


def _window_minutes(window_ms: int) -> int:
    return max(1, math.ceil(window_ms / MINUTE_MS))


def check_ip(ip_address, now: int, limits: dict) -> tuple[bool, int]:
    """
    Returns (limited, remaining). No IP means nothing to penalise.
    """
    max_per_ip = limits["max_per_ip"]
    if not ip_address:
        return False, max_per_ip

    failed = len(_failures(query_by_ip(ip_address, now - limits["window"])))
    return failed >= max_per_ip, max(0, max_per_ip - failed)


def check_username(username: str, now: int, limits: dict) -> dict:
    """
    Evaluates both username checks from one read of the lockout window,
    which always covers the shorter rate-limit window.
    """
    window_start = now - limits["window"]
    lockout_start = now - limits["lockout_duration"]
    since = min(window_start, lockout_start)

    failures = _failures(query_by_username(username, since))
    lockout_failures = [a for a in failures if a.timestamp >= lockout_start]
    window_failures = [a for a in failures if a.timestamp >= window_start]

    locked = len(lockout_failures) >= limits["lockout_attempts"]
    lockout_expires = None
    if locked and lockout_failures:
        oldest = min(a.timestamp for a in lockout_failures)
        lockout_expires = oldest + limits["lockout_duration"]

    max_per_username = limits["max_per_username"]
    return {
        "limited": len(window_failures) >= max_per_username,
        "locked": locked,
        "remaining": max(0, max_per_username - len(window_failures)),
        "lockout_expires": lockout_expires,
    }


def evaluate_rate_limit(username: str, ip_address=None, now=None) -> RateLimitDecision:
    if now is None:
        now = now_ms()
    limits = _limits()
    window_minutes = _window_minutes(limits["window"])

    ip_limited, ip_remaining = check_ip(ip_address, now, limits)
    if ip_limited:
        return RateLimitDecision(
            allowed=False,
            remaining=0,
            kind=RateLimitKind.IP_RATE_LIMIT,
            reason=(
                "Too many login attempts from this IP address. "
                f"Please try again in {window_minutes} minutes."
            ),
        )

    user = check_username(username, now, limits)
    if user["locked"]:
        expires = user["lockout_expires"]
        minutes_left = max(1, math.ceil((expires - now) / MINUTE_MS))
        return RateLimitDecision(
            allowed=False,
            remaining=0,
            kind=RateLimitKind.ACCOUNT_LOCKED,
            reason=(
                "Account temporarily locked due to too many failed login attempts. "
                f"Please try again in {minutes_left} minute(s)."
            ),
            lockout_expires=expires,
        )

    if user["limited"]:
        return RateLimitDecision(
            allowed=False,
            remaining=user["remaining"],
            kind=RateLimitKind.USERNAME_RATE_LIMIT,
            reason=(
                "Too many login attempts for this account. "
                f"Please try again in {window_minutes} minutes. "
                f"{user['remaining']} attempt(s) remaining."
            ),
        )

    return RateLimitDecision(allowed=True, remaining=min(ip_remaining, user["remaining"]))


def login_attempt_stats(username: str, window_minutes: int = 60, now=None) -> dict:
    """
    Summary of recent attempts for a username, for admin tooling.
    """
    if now is None:
        now = now_ms()
    attempts = sorted(
        query_by_username(username, now - window_minutes * MINUTE_MS),
        key=lambda a: a.timestamp,
    )
    successful = sum(1 for a in attempts if a.success)
    return {
        "username": username,
        "window_minutes": window_minutes,
        "total": len(attempts),
        "successful": successful,
        "failed": len(attempts) - successful,
        "attempts": [a.to_dict() for a in attempts[-10:]],
    }
