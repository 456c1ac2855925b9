# softflow/public.py
from __future__ import annotations

from flask import Blueprint, abort, jsonify

from .extensions import limiter
from .schemas import ApplicationCreate, MessageCreate
from .services import catalog
from .utils.guards import viewer_is_admin
from .validation import ApiValidationError, parse_body

public = Blueprint("public", __name__, url_prefix="/api")


# =========================================================
# Blog
# =========================================================
@public.route("/blogs", methods=["GET"])
def blogs():
    posts = catalog.list_blog_posts(include_unpublished=viewer_is_admin())
    return jsonify([p.to_dict() for p in posts])


@public.route("/blogs/<slug>", methods=["GET"])
def blog_detail(slug: str):
    post = catalog.get_blog_post(slug, include_unpublished=viewer_is_admin())
    if post is None:
        abort(404, description="Blog post not found")
    return jsonify(post.to_dict())


# =========================================================
# Partners
# =========================================================
@public.route("/partners", methods=["GET"])
def partners():
    return jsonify([p.to_dict() for p in catalog.list_partners()])


# =========================================================
# Contact
# =========================================================
@public.route("/messages", methods=["POST"])
@limiter.limit("5 per minute")
def send_message():
    body = parse_body(MessageCreate, "Invalid message data")
    message = catalog.create_message(body.model_dump())
    return jsonify(message.to_dict()), 201


# =========================================================
# Careers
# =========================================================
@public.route("/careers", methods=["GET"])
def careers():
    items = catalog.list_careers(include_unpublished=viewer_is_admin())
    return jsonify([c.to_dict() for c in items])


@public.route("/careers/<int:career_id>", methods=["GET"])
def career_detail(career_id: int):
    career = catalog.get_career(career_id, include_unpublished=viewer_is_admin())
    if career is None:
        abort(404, description="Career not found")
    return jsonify(career.to_dict())


@public.route("/careers/<int:career_id>/apply", methods=["POST"])
@limiter.limit("3 per minute")
def apply(career_id: int):
    career = catalog.get_career(career_id)
    if career is None:
        abort(404, description="Career not found")

    body = parse_body(ApplicationCreate, "Invalid application data")
    try:
        application = catalog.apply_to_career(career, body.model_dump())
    except catalog.CatalogError as exc:
        raise ApiValidationError(str(exc)) from exc
    return jsonify(application.to_dict()), 201


# =========================================================
# Services
# =========================================================
@public.route("/services", methods=["GET"])
def services():
    items = catalog.list_services(include_inactive=viewer_is_admin())
    return jsonify([s.to_dict() for s in items])


@public.route("/services/<slug>", methods=["GET"])
def service_detail(slug: str):
    service = catalog.get_service_by_slug(slug, include_inactive=viewer_is_admin())
    if service is None:
        abort(404, description="Service not found")
    return jsonify(service.to_dict())
