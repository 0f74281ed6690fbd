from models.db import db


class LoginAttempt(db.Model):
    """One row per login attempt. Rows are never updated, only swept."""

    __tablename__ = "login_attempts"

    id = db.Column(db.Integer, primary_key=True)

    # username as submitted, not normalised, so throttling sees what attackers send
    username = db.Column(db.String(255), nullable=False, index=True)
    ip_address = db.Column(db.String(64), nullable=True, index=True)

    # milliseconds since the epoch
    timestamp = db.Column(db.BigInteger, nullable=False, index=True)

    success = db.Column(db.Boolean, nullable=False)
    reason = db.Column(db.String(255), nullable=True)  # failures only

    account_id = db.Column(db.Integer, db.ForeignKey("personnel.id"), nullable=True, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "ip_address": self.ip_address,
            "timestamp": self.timestamp,
            "success": self.success,
            "reason": self.reason,
            "account_id": self.account_id,
        }
