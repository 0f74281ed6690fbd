import logging
import random
import threading

from flask import current_app

from security.attempt_log import delete_older_than, now_ms

logger = logging.getLogger(__name__)


def sweep(now=None) -> int:
    """
    Deletes attempts older than CLEANUP_AGE_MS. Idempotent.
    """
    if now is None:
        now = now_ms()
    cleanup_age = current_app.config.get("CLEANUP_AGE_MS", 60 * 60 * 1000)
    deleted = delete_older_than(now - cleanup_age)
    logger.info("Swept %d login attempts older than %d", deleted, now - cleanup_age)
    return deleted


def _sweep_in_background(app):
    with app.app_context():
        try:
            sweep()
        except Exception:
            # a failed sweep just waits for the next trigger
            logger.exception("Background login attempt sweep failed")
            from models import db
            db.session.rollback()


def maybe_schedule_sweep(rng=random.random):
    """
    Starts a sweep on a daemon thread with probability CLEANUP_PROBABILITY.
    Returns the thread so callers (tests) can join it, or None.
    """
    probability = current_app.config.get("CLEANUP_PROBABILITY", 0.1)
    if probability <= 0 or rng() >= probability:
        return None

    app = current_app._get_current_object()
    worker = threading.Thread(target=_sweep_in_background, args=(app,), daemon=True)
    worker.start()
    return worker
