# softflow/auth.py
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request, session
from flask_login import current_user, login_user, logout_user

from .extensions import limiter, login_manager
from .schemas import LoginRequest, PasswordChange, ProfileUpdate, RegisterRequest
from .services import accounts, catalog
from .services.sessions import create_session, destroy_session
from .utils.guards import login_required_json
from .validation import ApiValidationError, changes_from, parse_body

auth = Blueprint("auth", __name__, url_prefix="/api")

SESSION_KEY = "sid"


# =========================================================
# Flask-Login user loader
# =========================================================
@login_manager.user_loader
def load_user(user_id: str):
    # Re-checked on every request, so blocks and logouts apply immediately.
    return accounts.load_session_user(session.get(SESSION_KEY), user_id)


# =========================================================
# Helpers
# =========================================================
def _start_session(user) -> None:
    record = create_session(
        user.id,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )
    session.clear()
    session[SESSION_KEY] = record.sid
    session.permanent = True
    login_user(user)


def _end_session() -> None:
    destroy_session(session.get(SESSION_KEY))
    logout_user()
    session.pop(SESSION_KEY, None)


# =========================================================
# Register / Login / Logout
# =========================================================
@auth.route("/register", methods=["POST"])
@limiter.limit("10 per hour")
def register():
    body = parse_body(RegisterRequest, "Invalid registration data")
    try:
        user = accounts.register_user(body.username, body.password, email=body.email, phone=body.phone)
    except accounts.AccountError as exc:
        raise ApiValidationError(str(exc), [{"field": "username", "message": str(exc)}]) from exc

    _start_session(user)
    return jsonify(user.to_dict()), 201


@auth.route("/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    body = parse_body(LoginRequest, "Username and password are required")
    result = accounts.authenticate(body.username, body.password)
    if not result.ok:
        return jsonify({"message": result.error.message}), 401

    _start_session(result.user)
    current_app.logger.info("User %s logged in", result.user.id)
    return jsonify(result.user.to_dict()), 200


@auth.route("/logout", methods=["POST"])
def logout():
    # Not login_required: logging out an expired session is still a 200.
    user_id = getattr(current_user, "id", None)
    _end_session()
    if user_id is not None:
        current_app.logger.info("User %s logged out", user_id)
    return jsonify({"message": "Logged out"}), 200


# =========================================================
# Current user / profile
# =========================================================
@auth.route("/user", methods=["GET"])
@login_required_json
def get_user():
    return jsonify(current_user.to_dict())


@auth.route("/user", methods=["PUT"])
@login_required_json
def update_user():
    body = parse_body(ProfileUpdate, "Invalid profile data")
    try:
        user = accounts.update_profile(current_user, changes_from(body))
    except accounts.AccountError as exc:
        raise ApiValidationError(str(exc)) from exc
    return jsonify(user.to_dict())


@auth.route("/user/password", methods=["POST"])
@login_required_json
@limiter.limit("5 per minute")
def change_password():
    body = parse_body(PasswordChange, "Invalid password data")
    try:
        accounts.change_password(current_user, body.current_password, body.new_password)
    except accounts.AccountError as exc:
        raise ApiValidationError(str(exc)) from exc
    return jsonify({"message": "Password updated successfully"})


@auth.route("/user/applications", methods=["GET"])
@login_required_json
def my_applications():
    applications = catalog.applications_for_email(current_user.email)
    return jsonify([a.to_dict() for a in applications])
