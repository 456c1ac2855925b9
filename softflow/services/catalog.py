# softflow/services/catalog.py
"""Public content: blog posts, partners, messages, careers, applications, services."""
from __future__ import annotations

import time

from flask import current_app

from ..extensions import db
from ..models import Application, BlogPost, Career, Message, Partner, Service


class CatalogError(ValueError):
    """Rejected content write (400)."""


def _apply(obj, changes: dict, fields) -> None:
    for field in fields:
        if field in changes and changes[field] is not None:
            setattr(obj, field, changes[field])


def _commit() -> None:
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def delete_record(obj) -> None:
    db.session.delete(obj)
    _commit()


# =========================
# Blog
# =========================
BLOG_FIELDS = ("title", "slug", "summary", "content", "category", "cover_image", "published")


def list_blog_posts(include_unpublished: bool = False) -> list[BlogPost]:
    query = BlogPost.query
    if not include_unpublished:
        query = query.filter_by(published=True)
    return query.order_by(BlogPost.created_at.desc(), BlogPost.id.desc()).all()


def get_blog_post(slug: str, include_unpublished: bool = False) -> BlogPost | None:
    """Unpublished posts are invisible (None) unless ``include_unpublished``."""
    post = BlogPost.query.filter_by(slug=slug).first()
    if post is None or (not post.published and not include_unpublished):
        return None
    return post


def _blog_slug_taken(slug: str, exclude_id: int | None = None) -> bool:
    query = BlogPost.query.filter_by(slug=slug)
    if exclude_id is not None:
        query = query.filter(BlogPost.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def create_blog_post(data: dict) -> BlogPost:
    if _blog_slug_taken(data["slug"]):
        raise CatalogError("A blog post with this slug already exists")
    post = BlogPost()
    _apply(post, data, BLOG_FIELDS)
    db.session.add(post)
    _commit()
    return post


def update_blog_post(post: BlogPost, changes: dict) -> BlogPost:
    if changes.get("slug") and _blog_slug_taken(changes["slug"], exclude_id=post.id):
        raise CatalogError("A blog post with this slug already exists")
    _apply(post, changes, BLOG_FIELDS)
    if "cover_image" in changes and changes["cover_image"] is None:
        post.cover_image = None
    _commit()
    return post


# =========================
# Partners
# =========================
PARTNER_FIELDS = ("name", "logo", "website")


def list_partners() -> list[Partner]:
    return Partner.query.order_by(Partner.id.asc()).all()


def create_partner(data: dict) -> Partner:
    partner = Partner()
    _apply(partner, data, PARTNER_FIELDS)
    db.session.add(partner)
    _commit()
    return partner


def update_partner(partner: Partner, changes: dict) -> Partner:
    _apply(partner, changes, PARTNER_FIELDS)
    if "website" in changes and changes["website"] is None:
        partner.website = None
    _commit()
    return partner


# =========================
# Contact messages
# =========================
MESSAGE_FIELDS = ("name", "email", "company", "service", "message")


def create_message(data: dict) -> Message:
    message = Message(read=False)
    _apply(message, data, MESSAGE_FIELDS)
    db.session.add(message)
    _commit()
    current_app.logger.info("Contact message %s received from %s", message.id, message.email)
    return message


def list_messages() -> list[Message]:
    return Message.query.order_by(Message.created_at.desc(), Message.id.desc()).all()


def mark_message_read(message: Message, read: bool = True) -> Message:
    message.read = bool(read)
    _commit()
    return message


# =========================
# Careers + applications
# =========================
CAREER_FIELDS = ("title", "department", "location", "type", "description", "requirements", "published")
APPLICATION_FIELDS = ("name", "email", "phone", "resume", "cover_letter")


def list_careers(include_unpublished: bool = False) -> list[Career]:
    query = Career.query
    if not include_unpublished:
        query = query.filter_by(published=True)
    return query.order_by(Career.created_at.desc(), Career.id.desc()).all()


def get_career(career_id: int, include_unpublished: bool = False) -> Career | None:
    career = db.session.get(Career, career_id)
    if career is None or (not career.published and not include_unpublished):
        return None
    return career


def create_career(data: dict) -> Career:
    career = Career()
    _apply(career, data, CAREER_FIELDS)
    db.session.add(career)
    _commit()
    return career


def update_career(career: Career, changes: dict) -> Career:
    _apply(career, changes, CAREER_FIELDS)
    _commit()
    return career


def apply_to_career(career: Career, data: dict) -> Application:
    """Applications are only accepted for published careers."""
    if not career.published:
        raise CatalogError("This position is not open for applications")
    application = Application(career_id=career.id, status="pending")
    _apply(application, data, APPLICATION_FIELDS)
    db.session.add(application)
    _commit()
    current_app.logger.info("Application %s received for career %s", application.id, career.id)
    return application


def list_applications(career_id: int | None = None) -> list[Application]:
    query = Application.query
    if career_id is not None:
        query = query.filter_by(career_id=career_id)
    return query.order_by(Application.created_at.desc(), Application.id.desc()).all()


def applications_for_email(email: str | None) -> list[Application]:
    if not email:
        return []
    return (
        Application.query.filter(db.func.lower(Application.email) == email.strip().lower())
        .order_by(Application.created_at.desc(), Application.id.desc())
        .all()
    )


def set_application_status(application: Application, status: str) -> Application:
    application.status = status
    _commit()
    return application


# =========================
# Services
# =========================
SERVICE_FIELDS = ("title", "slug", "description", "icon", "active")
SLUG_ATTEMPTS = 20


def list_services(include_inactive: bool = False) -> list[Service]:
    query = Service.query
    if not include_inactive:
        query = query.filter_by(active=True)
    return query.order_by(Service.display_order.asc(), Service.id.asc()).all()


def get_service_by_slug(slug: str, include_inactive: bool = False) -> Service | None:
    service = Service.query.filter_by(slug=slug).first()
    if service is None or (not service.active and not include_inactive):
        return None
    return service


def _service_slug_taken(slug: str, exclude_id: int | None = None) -> bool:
    query = Service.query.filter_by(slug=slug)
    if exclude_id is not None:
        query = query.filter(Service.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def _slug_token(offset: int = 0) -> str:
    # last 6 hex digits of the current epoch milliseconds
    return format(int(time.time() * 1000) + offset, "x")[-6:]


def unique_service_slug(slug: str, exclude_id: int | None = None) -> str:
    """Return ``slug`` or, when it is taken, ``<slug>-<token>``."""
    if not _service_slug_taken(slug, exclude_id):
        return slug
    for attempt in range(SLUG_ATTEMPTS):
        candidate = f"{slug}-{_slug_token(attempt)}"
        if not _service_slug_taken(candidate, exclude_id):
            return candidate
    raise CatalogError("Could not generate a unique slug")


def create_service(data: dict) -> Service:
    service = Service()
    _apply(service, data, SERVICE_FIELDS)
    service.display_order = data.get("order") or 0
    service.slug = unique_service_slug(data["slug"])
    db.session.add(service)
    _commit()
    return service


def update_service(service: Service, changes: dict) -> Service:
    if changes.get("slug") and changes["slug"] != service.slug:
        changes = dict(changes, slug=unique_service_slug(changes["slug"], exclude_id=service.id))
    _apply(service, changes, SERVICE_FIELDS)
    if changes.get("order") is not None:
        service.display_order = changes["order"]
    _commit()
    return service


def toggle_service(service: Service, active: bool) -> Service:
    service.active = bool(active)
    _commit()
    return service
