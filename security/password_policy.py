import re
import secrets
import string
from typing import List, Tuple

try:
    from flask import current_app
except Exception:  # pragma: no cover - used outside app context (tests/CLI)
    current_app = None

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"\d")
_SYMBOL = re.compile(r"[^A-Za-z0-9]")

_TEMP_SYMBOLS = "!@#$%^&*"

_DEFAULTS = {
    "PASSWORD_MIN_LEN": 8,
    "PASSWORD_MAX_LEN": 128,
    "PASSWORD_REQUIRE_UPPER": True,
    "PASSWORD_REQUIRE_LOWER": True,
    "PASSWORD_REQUIRE_DIGIT": True,
    "PASSWORD_REQUIRE_SYMBOL": False,
    "TEMPORARY_PASSWORD_LENGTH": 16,
}


def _cfg(name: str):
    if current_app is None:
        return _DEFAULTS[name]
    try:
        return current_app.config.get(name, _DEFAULTS[name])
    except RuntimeError:
        return _DEFAULTS[name]

def validate_password(pw: str) -> Tuple[bool, List[str]]:
    errors: List[str] = []

    if not isinstance(pw, str):
        return False, ["Password must be a string"]

    min_len = int(_cfg("PASSWORD_MIN_LEN"))
    max_len = int(_cfg("PASSWORD_MAX_LEN"))
    require_upper = bool(_cfg("PASSWORD_REQUIRE_UPPER"))
    require_lower = bool(_cfg("PASSWORD_REQUIRE_LOWER"))
    require_digit = bool(_cfg("PASSWORD_REQUIRE_DIGIT"))
    require_symbol = bool(_cfg("PASSWORD_REQUIRE_SYMBOL"))

    if len(pw) < min_len:
        errors.append(f"Password must be at least {min_len} characters long")
    if len(pw) > max_len:
        errors.append(f"Password must be at most {max_len} characters")

    if require_upper and not _UPPER.search(pw):
        errors.append("Password must contain at least one uppercase letter")
    if require_lower and not _LOWER.search(pw):
        errors.append("Password must contain at least one lowercase letter")
    if require_digit and not _DIGIT.search(pw):
        errors.append("Password must contain at least one number")
    if require_symbol and not _SYMBOL.search(pw):
        errors.append("Password must contain at least one symbol")

    return (len(errors) == 0), errors


def generate_temporary_password(length: int = None) -> str:
    """
    Random password that always satisfies the policy: one upper, one lower,
    one digit and one symbol, the rest drawn from the full alphabet.
    """
    if length is None:
        length = int(_cfg("TEMPORARY_PASSWORD_LENGTH"))
    length = max(length, int(_cfg("PASSWORD_MIN_LEN")), 4)

    rng = secrets.SystemRandom()
    alphabet = string.ascii_letters + string.digits + _TEMP_SYMBOLS
    chars = [
        rng.choice(string.ascii_uppercase),
        rng.choice(string.ascii_lowercase),
        rng.choice(string.digits),
        rng.choice(_TEMP_SYMBOLS),
    ]
    chars.extend(rng.choice(alphabet) for _ in range(length - len(chars)))
    rng.shuffle(chars)
    return "".join(chars)
