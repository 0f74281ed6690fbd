import pytest

from app import create_app
from config import TestingConfig
from models import db
from models.personnel import Personnel
from security import attempt_log
from security.password import derive_password_hash, hash_password, legacy_salt
from utils.accounts import assign_roles
from utils.seed import seed_roles

SERVICE_HEADERS = {"X-Service-Token": TestingConfig.SERVICE_TOKEN}
PASSWORD = "Correct1Horse"


@pytest.fixture
def app(tmp_path):
    class _Config(TestingConfig):
        # file-backed so background sweeps on other threads see the same data
        SQLALCHEMY_DATABASE_URI = "sqlite:///" + str(tmp_path / "auth.db")

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
        seed_roles()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_account(app):
    def _make(call_sign="alice", password=PASSWORD, roles=("member",), legacy=False,
              is_active=True, with_password=True):
        if not with_password:
            password_hash, password_salt = None, None
        elif legacy:
            password_hash, password_salt = derive_password_hash(password, legacy_salt()), None
        else:
            password_hash, password_salt = hash_password(password)

        person = Personnel(
            call_sign=call_sign,
            password_hash=password_hash,
            password_salt=password_salt,
            is_active=is_active,
        )
        assign_roles(person, roles)
        db.session.add(person)
        db.session.commit()
        return person
    return _make


@pytest.fixture
def add_attempts(app):
    def _add(username, timestamps, ip_address=None, success=False, reason="Invalid password"):
        for ts in timestamps:
            attempt_log.append(
                username,
                ip_address=ip_address,
                success=success,
                reason=reason,
                timestamp=ts,
            )
    return _add
