# softflow/services/projects.py
from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Invoice, Project, ProjectUpdate, User

PROJECT_FIELDS = (
    "title",
    "description",
    "service_type",
    "status",
    "start_date",
    "estimated_end_date",
    "completion_percentage",
)


def parse_id(raw) -> int | None:
    """Positive integer id, or None for anything else ("abc", "0", "-3", "1.5")."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw > 0 else None
    text = str(raw or "").strip()
    if not text.isdigit():
        return None
    value = int(text)
    return value if value > 0 else None


def get_project(raw_id) -> Project | None:
    """Never raises: bad ids and storage errors both come back as None."""
    project_id = parse_id(raw_id)
    if project_id is None:
        return None
    try:
        return db.session.get(Project, project_id)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to load project %s", project_id)
        return None


def get_all_projects() -> list[Project]:
    projects = Project.query.order_by(Project.created_at.desc(), Project.id.desc()).all()
    # Legacy rows imported without a title are skipped
    return [p for p in projects if (p.title or "").strip()]


def projects_for_user(user_id: int) -> list[Project]:
    return (
        Project.query.filter_by(user_id=user_id)
        .order_by(Project.created_at.desc(), Project.id.desc())
        .all()
    )


def can_access(user, project: Project) -> bool:
    if user is None or not getattr(user, "is_authenticated", False):
        return False
    return bool(user.is_admin) or project.user_id == user.id


def create_project(owner: User, data: dict) -> Project:
    project = Project(user_id=owner.id)
    for field in PROJECT_FIELDS:
        if data.get(field) is not None:
            setattr(project, field, data[field])
    db.session.add(project)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.info("Project %s created for user %s", project.id, owner.id)
    return project


def update_project(project: Project, changes: dict) -> Project:
    changes = dict(changes)
    legacy_name = changes.pop("name", None)
    if legacy_name and not changes.get("title"):
        changes["title"] = legacy_name

    for field in PROJECT_FIELDS:
        if field not in changes:
            continue
        value = changes[field]
        if value is None and field in ("title", "status", "completion_percentage"):
            continue
        setattr(project, field, value)

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return project


def delete_project(project: Project) -> None:
    project_id = project.id
    db.session.delete(project)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.info("Project %s deleted", project_id)


def add_update(project: Project, title: str, content: str) -> ProjectUpdate:
    update = ProjectUpdate(project_id=project.id, title=title, content=content)
    db.session.add(update)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return update


def list_updates(project: Project) -> list[ProjectUpdate]:
    return (
        ProjectUpdate.query.filter_by(project_id=project.id)
        .order_by(ProjectUpdate.created_at.desc(), ProjectUpdate.id.desc())
        .all()
    )


def list_invoices(project: Project | None = None, user: User | None = None) -> list[Invoice]:
    """Invoices of one project, of one user's projects, or all of them."""
    query = Invoice.query
    if project is not None:
        query = query.filter(Invoice.project_id == project.id)
    elif user is not None:
        query = query.join(Project, Invoice.project_id == Project.id).filter(Project.user_id == user.id)
    return query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()
