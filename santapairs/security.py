from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from flask_login import UserMixin
from itsdangerous import BadData, URLSafeTimedSerializer
from passlib.context import CryptContext

ROLE_ADMIN = "admin"
ROLE_PARTICIPANT = "participant"

TOKEN_SALT = "santapairs-auth"


pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, stored_hash: str) -> bool:
    if not password or not stored_hash:
        return False
    try:
        return pwd_context.verify(password, stored_hash)
    except ValueError:
        # unrecognised or malformed stored hash
        return False


def verify_admin_password(password: str) -> bool:
    """Checks against the organizer hash from config; admin is disabled when unset."""
    admin_hash = (current_app.config.get("SANTA_ADMIN_PASSWORD_HASH") or "").strip()
    return bool(admin_hash) and verify_password(password, admin_hash)


# ---------------------------------------------------------------------------
# Bearer tokens
#
# Signed (not encrypted) with SECRET_KEY. The payload names who the caller is,
# their role and the scope they belong to; admin tokens carry no scope.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Identity(UserMixin):
    name: str
    role: str
    scope: str | None = None

    def get_id(self) -> str:
        return f"{self.role}:{self.scope or ''}:{self.name}"

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)


def issue_token(identity: Identity) -> str:
    return _serializer().dumps({"sub": identity.name, "role": identity.role, "scope": identity.scope})


def verify_token(token: str) -> Identity | None:
    """Returns the token's identity, or None if it is forged, malformed or expired."""
    max_age = current_app.config.get("SANTA_TOKEN_MAX_AGE")
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except BadData:
        return None

    if not isinstance(payload, dict) or payload.get("role") not in {ROLE_ADMIN, ROLE_PARTICIPANT}:
        return None
    name = payload.get("sub")
    if not isinstance(name, str) or not name:
        return None
    return Identity(name=name, role=payload["role"], scope=payload.get("scope"))
