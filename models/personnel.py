from models.db import db

# association table for many-to-many Personnel <-> Role
personnel_roles = db.Table(
    "personnel_roles",
    db.Column("personnel_id", db.Integer, db.ForeignKey("personnel.id"), primary_key=True),
    db.Column("role_id", db.Integer, db.ForeignKey("roles.id"), primary_key=True),
)


class Personnel(db.Model):
    __tablename__ = "personnel"

    id = db.Column(db.Integer, primary_key=True)

    # call sign doubles as the login username
    call_sign = db.Column(db.String(120), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), nullable=True)
    first_name = db.Column(db.String(120), nullable=True)
    last_name = db.Column(db.String(120), nullable=True)

    password_hash = db.Column(db.String(255), nullable=True)
    # NULL means the hash was derived with the legacy shared salt
    password_salt = db.Column(db.String(128), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    require_password_change = db.Column(db.Boolean, default=False, nullable=False)
    last_password_change = db.Column(db.BigInteger, nullable=True)

    roles = db.relationship("Role", secondary=personnel_roles, back_populates="personnel")

    def to_public_dict(self) -> dict:
        """Account view handed to callers. Password fields never leave this module."""
        return {
            "id": self.id,
            "call_sign": self.call_sign,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "is_active": self.is_active,
            "require_password_change": self.require_password_change,
            "last_password_change": self.last_password_change,
            "roles": [r.name for r in self.roles],
        }


class Role(db.Model):
    __tablename__ = "roles"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False)  # e.g. member, instructor, super_admin

    personnel = db.relationship("Personnel", secondary=personnel_roles, back_populates="roles")
