# softflow/admin.py
from __future__ import annotations

from flask import Blueprint, abort, jsonify, request

from .extensions import db
from .models import (
    Application,
    BlogPost,
    Career,
    Invoice,
    InvoiceItem,
    Message,
    Partner,
    Payment,
    Project,
    Service,
    User,
)
from .schemas import (
    ApplicationStatusUpdate,
    BlockUpdate,
    BlogPostChanges,
    BlogPostCreate,
    CareerChanges,
    CareerCreate,
    InvoiceChanges,
    InvoiceCreate,
    InvoiceItemChanges,
    InvoiceItemCreate,
    InvoiceStatusUpdate,
    PartnerChanges,
    PartnerCreate,
    PaymentCreate,
    ProjectChanges,
    ProjectCreate,
    ProjectUpdateCreate,
    ServiceChanges,
    ServiceCreate,
    ServiceToggle,
)
from .services import accounts, catalog, invoices
from .services import projects as project_service
from .utils.guards import admin_required, require_admin
from .validation import ApiValidationError, changes_from, parse_body

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.before_request
def _admin_only():
    # Prefix guard; every handler is also decorated with @admin_required.
    require_admin()


def _get_or_404(model, ident: int, label: str):
    return db.get_or_404(model, ident, description=f"{label} not found")


def _deleted():
    return "", 204


def _catalog_call(fn, *args):
    try:
        return fn(*args)
    except catalog.CatalogError as exc:
        raise ApiValidationError(str(exc)) from exc


# -------------------------------------------------------------------
# Blog posts
# -------------------------------------------------------------------
@admin_bp.route("/blogs", methods=["GET"])
@admin_required
def blogs_list():
    posts = catalog.list_blog_posts(include_unpublished=True)
    return jsonify([p.to_dict() for p in posts])


@admin_bp.route("/blogs", methods=["POST"])
@admin_required
def blogs_create():
    body = parse_body(BlogPostCreate, "Invalid blog post data")
    post = _catalog_call(catalog.create_blog_post, body.model_dump())
    return jsonify(post.to_dict()), 201


@admin_bp.route("/blogs/<int:post_id>", methods=["PUT"])
@admin_required
def blogs_update(post_id: int):
    post = _get_or_404(BlogPost, post_id, "Blog post")
    body = parse_body(BlogPostChanges, "Invalid blog post data")
    post = _catalog_call(catalog.update_blog_post, post, changes_from(body))
    return jsonify(post.to_dict())


@admin_bp.route("/blogs/<int:post_id>", methods=["DELETE"])
@admin_required
def blogs_delete(post_id: int):
    catalog.delete_record(_get_or_404(BlogPost, post_id, "Blog post"))
    return _deleted()


# -------------------------------------------------------------------
# Partners
# -------------------------------------------------------------------
@admin_bp.route("/partners", methods=["POST"])
@admin_required
def partners_create():
    body = parse_body(PartnerCreate, "Invalid partner data")
    partner = catalog.create_partner(body.model_dump())
    return jsonify(partner.to_dict()), 201


@admin_bp.route("/partners/<int:partner_id>", methods=["PUT"])
@admin_required
def partners_update(partner_id: int):
    partner = _get_or_404(Partner, partner_id, "Partner")
    body = parse_body(PartnerChanges, "Invalid partner data")
    partner = catalog.update_partner(partner, changes_from(body))
    return jsonify(partner.to_dict())


@admin_bp.route("/partners/<int:partner_id>", methods=["DELETE"])
@admin_required
def partners_delete(partner_id: int):
    catalog.delete_record(_get_or_404(Partner, partner_id, "Partner"))
    return _deleted()


# -------------------------------------------------------------------
# Messages
# -------------------------------------------------------------------
@admin_bp.route("/messages", methods=["GET"])
@admin_required
def messages_list():
    return jsonify([m.to_dict() for m in catalog.list_messages()])


@admin_bp.route("/messages/<int:message_id>/read", methods=["PUT"])
@admin_required
def messages_mark_read(message_id: int):
    message = _get_or_404(Message, message_id, "Message")
    data = request.get_json(silent=True) or {}
    message = catalog.mark_message_read(message, read=bool(data.get("read", True)))
    return jsonify(message.to_dict())


@admin_bp.route("/messages/<int:message_id>", methods=["DELETE"])
@admin_required
def messages_delete(message_id: int):
    catalog.delete_record(_get_or_404(Message, message_id, "Message"))
    return _deleted()


# -------------------------------------------------------------------
# Careers + applications
# -------------------------------------------------------------------
@admin_bp.route("/careers", methods=["GET"])
@admin_required
def careers_list():
    return jsonify([c.to_dict() for c in catalog.list_careers(include_unpublished=True)])


@admin_bp.route("/careers", methods=["POST"])
@admin_required
def careers_create():
    body = parse_body(CareerCreate, "Invalid career data")
    career = catalog.create_career(body.model_dump())
    return jsonify(career.to_dict()), 201


@admin_bp.route("/careers/<int:career_id>", methods=["PUT"])
@admin_required
def careers_update(career_id: int):
    career = _get_or_404(Career, career_id, "Career")
    body = parse_body(CareerChanges, "Invalid career data")
    career = catalog.update_career(career, changes_from(body))
    return jsonify(career.to_dict())


@admin_bp.route("/careers/<int:career_id>", methods=["DELETE"])
@admin_required
def careers_delete(career_id: int):
    catalog.delete_record(_get_or_404(Career, career_id, "Career"))
    return _deleted()


@admin_bp.route("/applications", methods=["GET"])
@admin_required
def applications_list():
    raw = request.args.get("careerId")
    career_id = None
    if raw:
        career_id = project_service.parse_id(raw)
        if career_id is None:
            abort(400, description="Invalid career ID")
    return jsonify([a.to_dict() for a in catalog.list_applications(career_id)])


@admin_bp.route("/applications/<int:application_id>/status", methods=["PUT"])
@admin_required
def applications_status(application_id: int):
    application = _get_or_404(Application, application_id, "Application")
    body = parse_body(ApplicationStatusUpdate, "Invalid application status")
    application = catalog.set_application_status(application, body.status)
    return jsonify(application.to_dict())


# -------------------------------------------------------------------
# Services
# -------------------------------------------------------------------
@admin_bp.route("/services", methods=["GET"])
@admin_required
def services_list():
    return jsonify([s.to_dict() for s in catalog.list_services(include_inactive=True)])


@admin_bp.route("/services", methods=["POST"])
@admin_required
def services_create():
    body = parse_body(ServiceCreate, "Invalid service data")
    service = _catalog_call(catalog.create_service, body.model_dump())
    return jsonify(service.to_dict()), 201


@admin_bp.route("/services/<int:service_id>", methods=["PUT"])
@admin_required
def services_update(service_id: int):
    service = _get_or_404(Service, service_id, "Service")
    body = parse_body(ServiceChanges, "Invalid service data")
    service = _catalog_call(catalog.update_service, service, changes_from(body))
    return jsonify(service.to_dict())


@admin_bp.route("/services/<int:service_id>/toggle", methods=["PUT"])
@admin_required
def services_toggle(service_id: int):
    service = _get_or_404(Service, service_id, "Service")
    body = parse_body(ServiceToggle, "Invalid service status")
    service = catalog.toggle_service(service, body.active)
    return jsonify(service.to_dict())


@admin_bp.route("/services/<int:service_id>", methods=["DELETE"])
@admin_required
def services_delete(service_id: int):
    catalog.delete_record(_get_or_404(Service, service_id, "Service"))
    return _deleted()


# -------------------------------------------------------------------
# Users
# -------------------------------------------------------------------
@admin_bp.route("/users", methods=["GET"])
@admin_required
def users_list():
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return jsonify([u.to_dict() for u in users])


@admin_bp.route("/users/<int:user_id>/verify", methods=["PUT"])
@admin_required
def users_verify(user_id: int):
    user = accounts.verify_user(_get_or_404(User, user_id, "User"))
    return jsonify(user.to_dict())


@admin_bp.route("/users/<int:user_id>/block", methods=["PUT"])
@admin_required
def users_block(user_id: int):
    user = _get_or_404(User, user_id, "User")
    body = parse_body(BlockUpdate, "Invalid block request")
    user = accounts.set_blocked(user, body.blocked)
    return jsonify(user.to_dict())


@admin_bp.route("/users/<int:user_id>/projects", methods=["GET"])
@admin_required
def users_projects(user_id: int):
    user = _get_or_404(User, user_id, "User")
    return jsonify([p.to_dict() for p in project_service.projects_for_user(user.id)])


@admin_bp.route("/users/<int:user_id>/projects", methods=["POST"])
@admin_required
def users_projects_create(user_id: int):
    user = _get_or_404(User, user_id, "User")
    body = parse_body(ProjectCreate, "Invalid project data")
    project = project_service.create_project(user, body.model_dump())
    return jsonify(project.to_dict()), 201


# -------------------------------------------------------------------
# Projects
# -------------------------------------------------------------------
@admin_bp.route("/projects", methods=["GET"])
@admin_required
def projects_list():
    return jsonify([p.to_dict() for p in project_service.get_all_projects()])


@admin_bp.route("/projects", methods=["POST"])
@admin_required
def projects_create():
    body = parse_body(ProjectCreate, "Invalid project data")
    if body.user_id is None:
        raise ApiValidationError("Invalid project data", [{"field": "userId", "message": "Field required"}])
    owner = _get_or_404(User, body.user_id, "User")
    project = project_service.create_project(owner, body.model_dump())
    return jsonify(project.to_dict()), 201


@admin_bp.route("/projects/<int:project_id>", methods=["PUT"])
@admin_required
def projects_update(project_id: int):
    project = _get_or_404(Project, project_id, "Project")
    body = parse_body(ProjectChanges, "Invalid project data")
    project = project_service.update_project(project, changes_from(body))
    return jsonify(project.to_dict())


@admin_bp.route("/projects/<int:project_id>", methods=["DELETE"])
@admin_required
def projects_delete(project_id: int):
    project_service.delete_project(_get_or_404(Project, project_id, "Project"))
    return _deleted()


@admin_bp.route("/projects/<int:project_id>/updates", methods=["POST"])
@admin_required
def projects_add_update(project_id: int):
    project = _get_or_404(Project, project_id, "Project")
    body = parse_body(ProjectUpdateCreate, "Invalid project update")
    update = project_service.add_update(project, body.title, body.content)
    return jsonify(update.to_dict()), 201


# -------------------------------------------------------------------
# Invoices
# -------------------------------------------------------------------
@admin_bp.route("/invoices", methods=["GET"])
@admin_required
def invoices_list():
    return jsonify([i.to_dict() for i in project_service.list_invoices()])


@admin_bp.route("/projects/<int:project_id>/invoices", methods=["POST"])
@admin_required
def invoices_create(project_id: int):
    project = _get_or_404(Project, project_id, "Project")
    body = parse_body(InvoiceCreate, "Invalid invoice data")
    invoice = invoices.create_invoice(project, body.model_dump())
    return jsonify(invoices.invoice_detail(invoice)), 201


@admin_bp.route("/invoices/<int:invoice_id>", methods=["PUT"])
@admin_required
def invoices_update(invoice_id: int):
    invoice = _get_or_404(Invoice, invoice_id, "Invoice")
    body = parse_body(InvoiceChanges, "Invalid invoice data")
    invoice = invoices.update_invoice(invoice, changes_from(body))
    return jsonify(invoices.invoice_detail(invoice))


@admin_bp.route("/invoices/<int:invoice_id>/status", methods=["PUT"])
@admin_required
def invoices_status(invoice_id: int):
    invoice = _get_or_404(Invoice, invoice_id, "Invoice")
    body = parse_body(InvoiceStatusUpdate, "Invalid invoice status")
    invoice = invoices.set_status(invoice, body.status)
    return jsonify(invoices.invoice_detail(invoice))


@admin_bp.route("/invoices/<int:invoice_id>", methods=["DELETE"])
@admin_required
def invoices_delete(invoice_id: int):
    invoices.delete_invoice(_get_or_404(Invoice, invoice_id, "Invoice"))
    return _deleted()


@admin_bp.route("/invoices/<int:invoice_id>/items", methods=["POST"])
@admin_required
def invoices_add_item(invoice_id: int):
    invoice = _get_or_404(Invoice, invoice_id, "Invoice")
    body = parse_body(InvoiceItemCreate, "Invalid invoice item")
    item = invoices.add_item(invoice, body.description, body.quantity, body.unit_price, body.tax_rate)
    return jsonify(item.to_dict()), 201


@admin_bp.route("/invoice-items/<int:item_id>", methods=["PUT"])
@admin_required
def invoice_items_update(item_id: int):
    item = _get_or_404(InvoiceItem, item_id, "Invoice item")
    body = parse_body(InvoiceItemChanges, "Invalid invoice item")
    item = invoices.update_item(item, changes_from(body))
    return jsonify(item.to_dict())


@admin_bp.route("/invoice-items/<int:item_id>", methods=["DELETE"])
@admin_required
def invoice_items_delete(item_id: int):
    invoices.delete_item(_get_or_404(InvoiceItem, item_id, "Invoice item"))
    return _deleted()


@admin_bp.route("/invoices/<int:invoice_id>/payments", methods=["POST"])
@admin_required
def invoices_add_payment(invoice_id: int):
    invoice = _get_or_404(Invoice, invoice_id, "Invoice")
    body = parse_body(PaymentCreate, "Invalid payment data")
    payment = invoices.record_payment(invoice, body.model_dump())
    payload = payment.to_dict()
    payload["invoice"] = invoices.invoice_detail(payment.invoice)
    return jsonify(payload), 201


@admin_bp.route("/payments/<int:payment_id>", methods=["DELETE"])
@admin_required
def payments_delete(payment_id: int):
    invoices.delete_payment(_get_or_404(Payment, payment_id, "Payment"))
    return _deleted()
