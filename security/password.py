import hashlib
import hmac
import secrets

try:
    from flask import current_app
except Exception:  # pragma: no cover - used outside app context (tests/CLI)
    current_app = None

_DEFAULTS = {
    "SCRYPT_N": 16384,
    "SCRYPT_R": 8,
    "SCRYPT_P": 1,
    "SCRYPT_KEY_LENGTH": 64,
    "LEGACY_PASSWORD_SALT": "anzac-management-salt",
}

SALT_BYTES = 32


def _cfg(name: str):
    if current_app is None:
        return _DEFAULTS[name]
    try:
        return current_app.config.get(name, _DEFAULTS[name])
    except RuntimeError:
        return _DEFAULTS[name]


def legacy_salt() -> str:
    return _cfg("LEGACY_PASSWORD_SALT")


def derive_password_hash(plain_password: str, salt: str) -> str:
    """
    scrypt(plain_password, salt) as lowercase hex.
    Slow on purpose: never call this while holding a lock.
    """
    if not isinstance(plain_password, str):
        raise ValueError("Password must be a string")
    if not isinstance(salt, str) or len(salt) == 0:
        raise ValueError("Salt must be a non-empty string")

    n = int(_cfg("SCRYPT_N"))
    r = int(_cfg("SCRYPT_R"))
    p = int(_cfg("SCRYPT_P"))
    digest = hashlib.scrypt(
        plain_password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=n,
        r=r,
        p=p,
        # the default 32 MiB cap is too tight once r or n are raised
        maxmem=256 * n * r + 1024 * 1024,
        dklen=int(_cfg("SCRYPT_KEY_LENGTH")),
    )
    return digest.hex()


def generate_salt() -> str:
    return secrets.token_hex(SALT_BYTES)


def hashes_match(candidate: str, stored: str) -> bool:
    if not candidate or not stored:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), stored.encode("utf-8"))


def verify_password(plain_password: str, password_hash: str, salt=None) -> bool:
    """
    Checks a password against a stored hash. salt=None means the legacy shared salt.
    """
    if not plain_password or not password_hash:
        return False
    candidate = derive_password_hash(plain_password, salt or legacy_salt())
    return hashes_match(candidate, password_hash)


def hash_password(plain_password: str) -> tuple[str, str]:
    """
    Returns (hash, salt) for a new password with a fresh per-account salt.
    """
    if not isinstance(plain_password, str) or len(plain_password) == 0:
        raise ValueError("Password must be a non-empty string")

    salt = generate_salt()
    return derive_password_hash(plain_password, salt), salt
