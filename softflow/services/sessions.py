# softflow/services/sessions.py
"""
Server-side session store.

The signed Flask cookie only carries an opaque session id; the row in the
``sessions`` table is the source of truth for who is logged in and until
when. Lifetime is fixed from creation (no sliding expiry).
"""
from __future__ import annotations

import secrets
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import UserSession, utcnow_naive


def _lifetime() -> timedelta:
    hours = current_app.config.get("SESSION_LIFETIME_HOURS", 24)
    return timedelta(hours=hours)


def generate_sid() -> str:
    return secrets.token_urlsafe(32)


def create_session(
    user_id: int,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> UserSession:
    """Persist a new session row for ``user_id`` and commit it."""
    now = utcnow_naive()
    record = UserSession(
        sid=generate_sid(),
        user_id=user_id,
        created_at=now,
        expires_at=now + _lifetime(),
        ip_address=(ip_address or "")[:64] or None,
        user_agent=(user_agent or "")[:255] or None,
    )
    db.session.add(record)
    db.session.commit()
    return record


def resolve_session(sid: str | None) -> UserSession | None:
    """Return the live session row for ``sid``; expired rows are removed."""
    if not sid:
        return None

    record = db.session.get(UserSession, sid)
    if record is None:
        return None

    if record.is_expired():
        db.session.delete(record)
        db.session.commit()
        return None

    return record


def destroy_session(sid: str | None) -> bool:
    if not sid:
        return False
    deleted = UserSession.query.filter_by(sid=sid).delete(synchronize_session=False)
    db.session.commit()
    return bool(deleted)


def destroy_user_sessions(user_id: int) -> int:
    """Drop every session of a user (e.g. after an admin blocks them). Does not commit."""
    return UserSession.query.filter_by(user_id=user_id).delete(synchronize_session=False)


def purge_expired() -> int:
    removed = UserSession.query.filter(UserSession.expires_at <= utcnow_naive()).delete(
        synchronize_session=False
    )
    db.session.commit()
    return removed
