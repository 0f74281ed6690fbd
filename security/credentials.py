"""
Credential verification: the single entry point the identity layer calls.

verify_credentials() never raises for an expected outcome (throttled, unknown
user, bad password, inactive account). Those come back as a VerifyResult with
a `kind` tag and are written to the attempt log. Database or hashing faults
propagate to the caller once a failed attempt has been logged for them.

Messages stay generic until the password has been proven, so a response never
reveals whether a call sign exists.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Optional

from models import db
from models.personnel import Personnel
from security.attempt_log import now_ms, record_login_attempt
from security.password import (
    derive_password_hash,
    hash_password,
    hashes_match,
    legacy_salt,
    verify_password,
)
from security.password_policy import generate_temporary_password, validate_password
from security.rate_limit import evaluate_rate_limit
from utils.accounts import (
    assign_roles,
    find_account_by_username,
    get_account,
    roles_of,
    set_password_fields,
)
from utils.roles import primary_role

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"
NO_PASSWORD_MESSAGE = "Please set up your password first"
DEACTIVATED_MESSAGE = "Your account has been deactivated"
AUTHENTICATION_ERROR_REASON = "Authentication error"


class FailureKind(str, enum.Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    NO_PASSWORD = "no_password"
    DEACTIVATED = "deactivated"


@dataclass
class VerifyResult:
    success: bool
    error: Optional[str] = None
    kind: Optional[str] = None
    account: Optional[dict] = None
    role: Optional[str] = None
    remaining: Optional[int] = None
    lockout_expires: Optional[int] = None

    def to_dict(self) -> dict:
        body = {"success": self.success}
        if self.success:
            body["account"] = self.account
            body["role"] = self.role
            return body
        body["error"] = self.error
        body["kind"] = self.kind
        if self.remaining is not None:
            body["remaining"] = self.remaining
        if self.lockout_expires is not None:
            body["lockout_expires"] = self.lockout_expires
        return body


@dataclass
class ActionResult:
    success: bool
    error: Optional[str] = None
    message: Optional[str] = None
    details: list = field(default_factory=list)
    kind: Optional[str] = None


def _record(username, ip_address, success, reason=None, account_id=None):
    """Attempt-log write that must not turn a verdict into an error."""
    try:
        record_login_attempt(
            username,
            ip_address=ip_address,
            success=success,
            reason=reason,
            account_id=account_id,
        )
    except Exception:
        logger.exception("Could not record login attempt for %r", username)
        db.session.rollback()


def _fail(username, ip_address, reason, kind: FailureKind, message, account_id=None) -> VerifyResult:
    logger.warning("Login failed for %r from %s: %s", username, ip_address or "unknown ip", reason)
    _record(username, ip_address, False, reason=reason, account_id=account_id)
    return VerifyResult(success=False, error=message, kind=kind.value)


def _migrate_legacy_credential(person: Personnel, plain_password: str) -> None:
    """
    Re-hashes a verified legacy password under a fresh per-account salt.
    Any failure leaves the legacy hash in place for the next successful login.
    """
    account_id = person.id
    try:
        new_hash, new_salt = hash_password(plain_password)
        set_password_fields(account_id, new_hash, new_salt)
        logger.info("Migrated legacy credential for account %s", account_id)
    except Exception:
        logger.exception("Legacy credential migration failed for account %s", account_id)
        db.session.rollback()


def verify_credentials(username: str, password: str, ip_address=None) -> VerifyResult:
    decision = evaluate_rate_limit(username, ip_address)
    if not decision.allowed:
        logger.warning(
            "Login blocked for %r from %s: %s",
            username, ip_address or "unknown ip", decision.kind.value,
        )
        # blocked attempts are logged too and count toward later lockouts
        _record(username, ip_address, False, reason=decision.reason)
        return VerifyResult(
            success=False,
            error=decision.reason,
            kind=decision.kind.value,
            remaining=decision.remaining,
            lockout_expires=decision.lockout_expires,
        )

    account_id = None
    try:
        person = find_account_by_username(username)
        if person is None:
            return _fail(username, ip_address, "User not found",
                         FailureKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)
        account_id = person.id

        if not person.password_hash:
            return _fail(username, ip_address, "No password set",
                         FailureKind.NO_PASSWORD, NO_PASSWORD_MESSAGE, account_id=account_id)

        is_legacy = not person.password_salt
        salt = legacy_salt() if is_legacy else person.password_salt
        candidate = derive_password_hash(password or "", salt)
        if not hashes_match(candidate, person.password_hash):
            return _fail(username, ip_address, "Invalid password",
                         FailureKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE, account_id=account_id)

        if not person.is_active:
            return _fail(username, ip_address, "Account deactivated",
                         FailureKind.DEACTIVATED, DEACTIVATED_MESSAGE, account_id=account_id)

        if is_legacy:
            _migrate_legacy_credential(person, password)

        role = primary_role(roles_of(account_id))
    except Exception:
        logger.exception("Credential check failed for %r", username)
        db.session.rollback()
        _record(username, ip_address, False, reason=AUTHENTICATION_ERROR_REASON, account_id=account_id)
        raise

    _record(username, ip_address, True, account_id=account_id)
    logger.info("Login succeeded for account %s as %s", account_id, role)

    person = get_account(account_id)
    return VerifyResult(success=True, account=person.to_public_dict(), role=role)


def change_password(username: str, current_password: str, new_password: str,
                    ip_address=None) -> ActionResult:
    # current-password checks are throttled and logged like logins
    decision = evaluate_rate_limit(username, ip_address)
    if not decision.allowed:
        _record(username, ip_address, False, reason=decision.reason)
        return ActionResult(success=False, error=decision.reason, kind=decision.kind.value)

    person = find_account_by_username(username)
    if person is None:
        return ActionResult(success=False, error="User not found")
    if not person.password_hash:
        return ActionResult(success=False, error="No password set for this account")

    if not verify_password(current_password, person.password_hash, person.password_salt):
        _record(username, ip_address, False, reason="Invalid current password", account_id=person.id)
        return ActionResult(success=False, error="Current password is incorrect")

    valid, errors = validate_password(new_password)
    if not valid:
        return ActionResult(success=False, error=", ".join(errors), details=errors)

    if verify_password(new_password, person.password_hash, person.password_salt):
        return ActionResult(success=False, error="New password must be different from the current password")

    new_hash, new_salt = hash_password(new_password)
    set_password_fields(
        person.id, new_hash, new_salt,
        require_password_change=False,
        touch_changed_at=True,
    )
    logger.info("Password changed for account %s", person.id)
    return ActionResult(success=True, message="Password updated successfully")


def reset_password(account_id: int) -> str:
    """
    Admin reset. Returns the temporary password; the account must change it on next login.
    """
    person = get_account(account_id)
    if person is None:
        raise LookupError(f"Personnel record {account_id} not found")

    temporary_password = generate_temporary_password()
    new_hash, new_salt = hash_password(temporary_password)
    set_password_fields(
        person.id, new_hash, new_salt,
        require_password_change=True,
        touch_changed_at=True,
    )
    logger.info("Password reset for account %s", person.id)
    return temporary_password


def create_account(call_sign: str, password: str, roles=("member",), **profile) -> Personnel:
    call_sign = (call_sign or "").strip()
    if not call_sign:
        raise ValueError("Call sign is required")

    valid, errors = validate_password(password)
    if not valid:
        raise ValueError(", ".join(errors))

    if find_account_by_username(call_sign) is not None:
        raise ValueError("Call sign already exists")

    password_hash, password_salt = hash_password(password)
    person = Personnel(
        call_sign=call_sign,
        password_hash=password_hash,
        password_salt=password_salt,
        is_active=True,
        last_password_change=now_ms(),
        **profile,
    )
    assign_roles(person, roles)
    db.session.add(person)
    db.session.commit()
    logger.info("Created account %s (%s)", person.id, call_sign)
    return person
