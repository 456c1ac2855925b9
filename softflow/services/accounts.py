# softflow/services/accounts.py
from __future__ import annotations

import enum
from dataclasses import dataclass

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import User
from ..utils.passwords import hash_password, verify_password
from .sessions import destroy_user_sessions, resolve_session


class AuthError(enum.Enum):
    NOT_FOUND = "Incorrect username"
    BAD_PASSWORD = "Incorrect password"
    BLOCKED = "Your account has been blocked. Please contact administration."

    @property
    def message(self) -> str:
        return self.value


@dataclass
class LoginResult:
    user: User | None = None
    error: AuthError | None = None

    @property
    def ok(self) -> bool:
        return self.user is not None and self.error is None


class AccountError(ValueError):
    """A profile/password change the caller is not allowed to make (400)."""


# =========================
# Login / session identity
# =========================
def authenticate(username: str, password: str) -> LoginResult:
    """Check credentials. Order: unknown user, wrong password, blocked."""
    user = User.query.filter_by(username=(username or "").strip()).first()
    if user is None:
        current_app.logger.info("Login failed: unknown username %r", username)
        return LoginResult(error=AuthError.NOT_FOUND)

    if not verify_password(password, user.password_hash):
        current_app.logger.info("Login failed: bad password for user %s", user.id)
        return LoginResult(error=AuthError.BAD_PASSWORD)

    if user.is_blocked:
        current_app.logger.warning("Login refused: user %s is blocked", user.id)
        return LoginResult(error=AuthError.BLOCKED)

    return LoginResult(user=user)


def load_session_user(sid: str | None, user_id) -> User | None:
    """
    Resolve the request identity from the server-side session row.

    None when the session is missing or expired, belongs to someone else,
    or the user is gone or blocked.
    """
    record = resolve_session(sid)
    if record is None:
        return None

    try:
        expected_id = int(user_id)
    except (TypeError, ValueError):
        return None

    if record.user_id != expected_id:
        return None

    user = db.session.get(User, record.user_id)
    if user is None or user.is_blocked:
        return None
    return user


# =========================
# Registration / profile
# =========================
def username_taken(username: str) -> bool:
    return User.query.filter_by(username=username).first() is not None


def register_user(username: str, password: str, email: str | None = None, phone: str | None = None) -> User:
    """Create a regular (non-admin, unverified) account. AccountError if the username exists."""
    if username_taken(username):
        raise AccountError("Username already exists")

    user = User(
        username=username,
        password_hash=hash_password(password),
        email=email,
        phone=phone,
        is_admin=False,
        is_verified=False,
        is_blocked=False,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise AccountError("Username already exists") from exc

    current_app.logger.info("User %s registered (%s)", user.id, user.username)
    return user


PROFILE_FIELDS = ("email", "phone", "photo", "bio", "website", "linkedin", "github")
LOCKED_WHEN_VERIFIED = ("email", "phone")


def update_profile(user: User, changes: dict) -> User:
    if user.is_verified:
        for field in LOCKED_WHEN_VERIFIED:
            if field in changes and changes[field] != getattr(user, field):
                raise AccountError("Verified users cannot change their email or phone number")

    for field in PROFILE_FIELDS:
        if field in changes:
            setattr(user, field, changes[field])

    db.session.commit()
    return user


def change_password(user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.password_hash):
        raise AccountError("Current password is incorrect")
    if current_password == new_password:
        raise AccountError("New password must be different from the current password")

    user.password_hash = hash_password(new_password)
    db.session.commit()
    current_app.logger.info("User %s changed their password", user.id)


# =========================
# Admin actions
# =========================
def verify_user(user: User) -> User:
    user.is_verified = True
    db.session.commit()
    current_app.logger.info("User %s verified", user.id)
    return user


def set_blocked(user: User, blocked: bool) -> User:
    """Block/unblock. Blocking also drops every live session of the user."""
    user.is_blocked = bool(blocked)
    if user.is_blocked:
        destroy_user_sessions(user.id)
    db.session.commit()
    current_app.logger.warning("User %s %s", user.id, "blocked" if user.is_blocked else "unblocked")
    return user


def ensure_admin(username: str, password: str, email: str | None = None) -> tuple[User, bool]:
    """
    Idempotent admin seed. Creates the account if missing, otherwise makes
    sure it is an unblocked admin. The password of an existing account is
    left unchanged. Returns ``(user, created)``.
    """
    user = User.query.filter_by(username=username).first()
    if user is not None:
        user.is_admin = True
        user.is_blocked = False
        db.session.commit()
        return user, False

    user = User(
        username=username,
        password_hash=hash_password(password),
        email=email,
        is_admin=True,
        is_verified=True,
        is_blocked=False,
    )
    db.session.add(user)
    db.session.commit()
    current_app.logger.info("Admin user %s created", user.username)
    return user, True
