# softflow/routes.py
"""Client dashboard: a user's own projects and invoices (admins see everything)."""
from __future__ import annotations

from flask import Blueprint, abort, jsonify
from flask_login import current_user

from .extensions import db
from .models import Invoice
from .services import projects as project_service
from .services.invoices import invoice_detail
from .utils.guards import ensure_owner_or_admin, login_required_json, viewer_is_admin

main = Blueprint("main", __name__, url_prefix="/api")


# ======================
# Helpers
# ======================
def _project_or_abort(raw_id: str):
    """400 on a malformed id, 404 when missing, 403 when not the owner."""
    if project_service.parse_id(raw_id) is None:
        abort(400, description="Invalid project ID")
    project = project_service.get_project(raw_id)
    if project is None:
        abort(404, description="Project not found")
    ensure_owner_or_admin(project)
    return project


def _invoice_or_abort(invoice_id: int) -> Invoice:
    invoice = db.session.get(Invoice, invoice_id)
    if invoice is None:
        abort(404, description="Invoice not found")
    ensure_owner_or_admin(invoice.project)
    return invoice


# ======================
# Projects
# ======================
@main.route("/projects", methods=["GET"])
@login_required_json
def my_projects():
    items = project_service.projects_for_user(current_user.id)
    return jsonify([p.to_dict() for p in items])


@main.route("/projects/<raw_id>", methods=["GET"])
@login_required_json
def project_detail(raw_id: str):
    project = _project_or_abort(raw_id)
    return jsonify(project.to_dict())


@main.route("/projects/<raw_id>/updates", methods=["GET"])
@login_required_json
def project_updates(raw_id: str):
    project = _project_or_abort(raw_id)
    return jsonify([u.to_dict() for u in project_service.list_updates(project)])


@main.route("/projects/<raw_id>/invoices", methods=["GET"])
@login_required_json
def project_invoices(raw_id: str):
    project = _project_or_abort(raw_id)
    return jsonify([i.to_dict() for i in project_service.list_invoices(project=project)])


# ======================
# Invoices
# ======================
@main.route("/invoices", methods=["GET"])
@login_required_json
def my_invoices():
    if viewer_is_admin():
        items = project_service.list_invoices()
    else:
        items = project_service.list_invoices(user=current_user)
    return jsonify([i.to_dict() for i in items])


@main.route("/invoices/<int:invoice_id>", methods=["GET"])
@login_required_json
def invoice_view(invoice_id: int):
    invoice = _invoice_or_abort(invoice_id)
    return jsonify(invoice_detail(invoice))


@main.route("/invoices/<int:invoice_id>/items", methods=["GET"])
@login_required_json
def invoice_items(invoice_id: int):
    invoice = _invoice_or_abort(invoice_id)
    return jsonify([item.to_dict() for item in invoice.items])


@main.route("/invoices/<int:invoice_id>/payments", methods=["GET"])
@login_required_json
def invoice_payments(invoice_id: int):
    invoice = _invoice_or_abort(invoice_id)
    return jsonify([payment.to_dict() for payment in invoice.payments])
