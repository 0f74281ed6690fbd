import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

MINUTE_MS = 60 * 1000


class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # Shared secret for the identity layer and admin tooling
    SERVICE_TOKEN = os.getenv("SERVICE_TOKEN")

    # SQLite database file stored next to the app as personnel_auth.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "personnel_auth.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Login throttling (all windows in milliseconds)
    MAX_ATTEMPTS_PER_IP = int(os.getenv("MAX_ATTEMPTS_PER_IP", "5"))
    MAX_ATTEMPTS_PER_USERNAME = int(os.getenv("MAX_ATTEMPTS_PER_USERNAME", "5"))
    RATE_LIMIT_WINDOW_MS = 15 * MINUTE_MS

    # Hard lock: failures inside the lockout window
    ACCOUNT_LOCKOUT_ATTEMPTS = int(os.getenv("ACCOUNT_LOCKOUT_ATTEMPTS", "10"))
    ACCOUNT_LOCKOUT_DURATION_MS = 30 * MINUTE_MS

    # Attempt log retention
    CLEANUP_AGE_MS = 60 * MINUTE_MS
    CLEANUP_PROBABILITY = float(os.getenv("CLEANUP_PROBABILITY", "0.1"))

    # scrypt parameters; changing these invalidates every stored hash
    SCRYPT_N = 16384
    SCRYPT_R = 8
    SCRYPT_P = 1
    SCRYPT_KEY_LENGTH = 64

    # Shared salt used before per-account salts existed
    LEGACY_PASSWORD_SALT = os.getenv("LEGACY_PASSWORD_SALT", "anzac-management-salt")

    # Password policy
    PASSWORD_MIN_LEN = 8
    PASSWORD_MAX_LEN = 128
    PASSWORD_REQUIRE_UPPER = True
    PASSWORD_REQUIRE_LOWER = True
    PASSWORD_REQUIRE_DIGIT = True
    PASSWORD_REQUIRE_SYMBOL = False
    TEMPORARY_PASSWORD_LENGTH = 16

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False


class TestingConfig(Config):
    TESTING = True
    SERVICE_TOKEN = "test-service-token"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    # sweeps are triggered explicitly in tests
    CLEANUP_PROBABILITY = 0.0
