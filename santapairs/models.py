from datetime import datetime

from .extensions import db

GLOBAL_SCOPE = ""
GENERATED_KEY = "assignments_generated"


class Participant(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    # argon2 hash via passlib
    password_hash = db.Column(db.String(255), nullable=False)
    family_code = db.Column(db.String(64), nullable=False, default=GLOBAL_SCOPE, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("name", "family_code", name="uq_users_name_family_code"),
    )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    def __repr__(self) -> str:
        return f"<Participant(name={self.name!r}, family_code={self.family_code!r})>"


class Assignment(db.Model):
    """
    One giver -> receiver pair. Names rather than foreign keys, so a scope's
    assignment set can be replaced wholesale without touching participants.
    """
    __tablename__ = "assignments"

    id = db.Column(db.Integer, primary_key=True)
    giver = db.Column(db.String(255), nullable=False)
    receiver = db.Column(db.String(255), nullable=False)
    family_code = db.Column(db.String(64), nullable=False, default=GLOBAL_SCOPE, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("giver", "family_code", name="uq_assignments_giver_family_code"),
    )

    def __repr__(self) -> str:
        return f"<Assignment({self.giver!r} -> {self.receiver!r}, family_code={self.family_code!r})>"


class Setting(db.Model):
    __tablename__ = "settings"

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(255), nullable=False)
    value = db.Column(db.Text, nullable=False)
    family_code = db.Column(db.String(64), nullable=False, default=GLOBAL_SCOPE)

    __table_args__ = (
        db.UniqueConstraint("key", "family_code", name="uq_settings_key_family_code"),
    )
