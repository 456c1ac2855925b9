# softflow/utils/guards.py

from __future__ import annotations

from functools import wraps
from typing import Callable, Any

from flask import abort
from flask_login import current_user

from ..services.projects import can_access


def viewer_is_admin() -> bool:
    return bool(getattr(current_user, "is_authenticated", False) and getattr(current_user, "is_admin", False))


def require_login() -> None:
    if not getattr(current_user, "is_authenticated", False):
        abort(401, description="Not authenticated")


def require_admin() -> None:
    """401 for anonymous callers, 403 for authenticated non-admins."""
    require_login()
    if not getattr(current_user, "is_admin", False):
        abort(403, description="Admin access required")


def login_required_json(view: Callable[..., Any]) -> Callable[..., Any]:
    """Like flask_login.login_required, but always a JSON 401 (never a redirect)."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        require_login()
        return view(*args, **kwargs)

    return wrapped


def admin_required(view: Callable[..., Any]) -> Callable[..., Any]:
    """
    Allow only admins.
    Returns 401 when not logged in, 403 for every other logged-in user.
    """
    @wraps(view)
    def wrapped(*args, **kwargs):
        require_admin()
        return view(*args, **kwargs)

    return wrapped


def ensure_owner_or_admin(project) -> None:
    """Gate a project (or anything hanging off it) to its owner and admins."""
    require_login()
    if not can_access(current_user, project):
        abort(403, description="You do not have access to this project")
