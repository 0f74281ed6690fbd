import logging

from flask import Flask, jsonify
from flask_migrate import Migrate
from sqlalchemy.exc import SQLAlchemyError

from config import Config
from routes import health_bp, auth_bp, admin_bp

from models import db
from utils.seed import seed_roles

logger = logging.getLogger(__name__)


def configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        root.addHandler(handler)
    for name in ("security", "utils", __name__):
        logging.getLogger(name).setLevel(level)


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    configure_logging(app)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    @app.errorhandler(SQLAlchemyError)
    def _store_unavailable(exc):
        db.session.rollback()
        logger.exception("Credential store error")
        return jsonify(error="Service unavailable"), 503

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Cache-Control"] = "no-store"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app

#-------------------------
import click


def register_cli(app):
    @app.cli.command("seed-roles")
    def seed_roles_command():
        """Create the default roles (idempotent)."""
        seed_roles()
        click.echo("Roles seeded")

    @app.cli.command("sweep-login-attempts")
    def sweep_login_attempts():
        """Delete login attempts older than CLEANUP_AGE_MS (for cron)."""
        from security.cleanup import sweep

        deleted = sweep()
        click.echo(f"Deleted {deleted} login attempt(s)")

    @app.cli.command("create-account")
    @click.argument("call_sign")
    @click.option("--role", "roles", multiple=True, default=["member"], show_default=True,
                  help="Role name; repeat for several roles.")
    @click.password_option()
    def create_account_command(call_sign, roles, password):
        """Provision a personnel account with system access."""
        from security.credentials import create_account

        seed_roles()
        try:
            person = create_account(call_sign, password, roles=list(roles))
        except ValueError as exc:
            raise click.ClickException(str(exc))
        click.echo(f"Created {person.call_sign} (id={person.id})")

    @app.cli.command("reset-password")
    @click.argument("call_sign")
    def reset_password_command(call_sign):
        """Issue a temporary password; the account must change it on next login."""
        from security.credentials import reset_password
        from utils.accounts import find_account_by_username

        person = find_account_by_username(call_sign)
        if not person:
            raise click.ClickException("User not found")

        temporary_password = reset_password(person.id)
        click.echo(f"Temporary password for {person.call_sign}: {temporary_password}")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
