"""
Personnel store access used by the credential core.

These are the only three operations the core needs from the personnel side:
lookup by call sign, role listing, and the password field patch.
"""
from models import db
from models.personnel import Personnel, Role
from security.attempt_log import now_ms


def find_account_by_username(username: str):
    if not username:
        return None
    return Personnel.query.filter_by(call_sign=username).first()


def get_account(account_id: int):
    return db.session.get(Personnel, account_id)


def roles_of(account_id: int) -> list[str]:
    return [
        r.name
        for r in Role.query.join(Role.personnel).filter(Personnel.id == account_id).all()
    ]


def set_password_fields(account_id: int, password_hash: str, password_salt: str, *,
                        require_password_change=None, touch_changed_at: bool = False):
    person = get_account(account_id)
    if person is None:
        raise LookupError(f"Personnel record {account_id} not found")

    person.password_hash = password_hash
    person.password_salt = password_salt
    if require_password_change is not None:
        person.require_password_change = require_password_change
    if touch_changed_at:
        person.last_password_change = now_ms()
    db.session.commit()
    return person


def assign_roles(person: Personnel, names) -> None:
    roles = Role.query.filter(Role.name.in_(list(names))).all() if names else []
    missing = set(names or []) - {r.name for r in roles}
    if missing:
        raise ValueError(f"Unknown role(s): {', '.join(sorted(missing))}")
    for role in roles:
        if role not in person.roles:
            person.roles.append(role)
