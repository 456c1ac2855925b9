# softflow/models.py
from __future__ import annotations

import enum
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from flask_login import UserMixin
from sqlalchemy import Enum as SAEnum

from .extensions import db


# Naive UTC everywhere: columns are "timestamp without time zone".
def utcnow_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


CENTS = Decimal("0.01")


def money_str(value) -> str | None:
    """Serialise a Numeric column as a fixed two-decimal string."""
    if value is None:
        return None
    return str(Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP))


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# =========================================================
# User model (Authentication + profile)
# =========================================================
class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)

    # "<hexKey>.<hexSalt>" (see utils.passwords). Never serialised.
    password_hash = db.Column("password", db.String(255), nullable=False)

    email = db.Column(db.String(120), nullable=True)
    phone = db.Column(db.String(30), nullable=True)

    is_admin = db.Column(db.Boolean, nullable=False, default=False)
    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    is_blocked = db.Column(db.Boolean, nullable=False, default=False)

    # Profile
    photo = db.Column(db.String(500), nullable=True)
    bio = db.Column(db.Text, nullable=True)
    website = db.Column(db.String(255), nullable=True)
    linkedin = db.Column(db.String(255), nullable=True)
    github = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)

    projects = db.relationship(
        "Project",
        back_populates="user",
        lazy="select",
        cascade="all, delete-orphan",
    )

    # Flask-Login refuses to log in inactive users.
    @property
    def is_active(self) -> bool:
        return not self.is_blocked

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "phone": self.phone,
            "isAdmin": bool(self.is_admin),
            "isVerified": bool(self.is_verified),
            "isBlocked": bool(self.is_blocked),
            "photo": self.photo,
            "bio": self.bio,
            "website": self.website,
            "linkedin": self.linkedin,
            "github": self.github,
            "createdAt": _iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<User {self.id} {self.username}>"


# =========================================================
# Server-side sessions
# =========================================================
class UserSession(db.Model):
    __tablename__ = "sessions"

    sid = db.Column(db.String(128), primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)

    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow_naive()) >= self.expires_at

    def __repr__(self) -> str:
        return f"<UserSession user={self.user_id} expires={self.expires_at}>"


# =========================================================
# Blog posts
# =========================================================
class BlogPost(db.Model):
    __tablename__ = "blog_posts"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), unique=True, nullable=False)
    summary = db.Column(db.Text, nullable=False)
    content = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(80), nullable=False)
    cover_image = db.Column(db.String(500), nullable=True)
    published = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "summary": self.summary,
            "content": self.content,
            "category": self.category,
            "coverImage": self.cover_image,
            "published": bool(self.published),
            "createdAt": _iso(self.created_at),
        }


# =========================================================
# Partners
# =========================================================
class Partner(db.Model):
    __tablename__ = "partners"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(160), nullable=False)
    logo = db.Column(db.String(500), nullable=False)
    website = db.Column(db.String(255), nullable=True)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "logo": self.logo, "website": self.website}


# =========================================================
# Contact messages
# =========================================================
class Message(db.Model):
    __tablename__ = "messages"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), nullable=False)
    company = db.Column(db.String(160), nullable=True)
    service = db.Column(db.String(120), nullable=True)
    message = db.Column(db.Text, nullable=False)
    read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "company": self.company,
            "service": self.service,
            "message": self.message,
            "read": bool(self.read),
            "createdAt": _iso(self.created_at),
        }


# =========================================================
# Careers + applications
# =========================================================
class Career(db.Model):
    __tablename__ = "careers"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    department = db.Column(db.String(120), nullable=False)
    location = db.Column(db.String(120), nullable=False)
    type = db.Column(db.String(40), nullable=False)  # full-time, part-time, contract
    description = db.Column(db.Text, nullable=False)
    requirements = db.Column(db.Text, nullable=False)
    published = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)

    applications = db.relationship(
        "Application",
        back_populates="career",
        lazy="select",
        cascade="all, delete-orphan",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "department": self.department,
            "location": self.location,
            "type": self.type,
            "description": self.description,
            "requirements": self.requirements,
            "published": bool(self.published),
            "createdAt": _iso(self.created_at),
        }


APPLICATION_STATUSES = ("pending", "reviewed", "interviewing", "rejected", "hired")


class Application(db.Model):
    __tablename__ = "applications"

    id = db.Column(db.Integer, primary_key=True)
    career_id = db.Column(
        db.Integer,
        db.ForeignKey("careers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    career = db.relationship("Career", back_populates="applications")

    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), nullable=False, index=True)
    phone = db.Column(db.String(30), nullable=False)
    resume = db.Column(db.Text, nullable=False)
    cover_letter = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default="pending")
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "careerId": self.career_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "resume": self.resume,
            "coverLetter": self.cover_letter,
            "status": self.status,
            "createdAt": _iso(self.created_at),
        }


# =========================================================
# Services (marketing catalogue)
# =========================================================
class Service(db.Model):
    __tablename__ = "services"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(160), nullable=False)
    slug = db.Column(db.String(200), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=False)
    icon = db.Column(db.String(60), nullable=False)
    active = db.Column(db.Boolean, nullable=False, default=True)
    display_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "description": self.description,
            "icon": self.icon,
            "active": bool(self.active),
            "order": self.display_order,
            "createdAt": _iso(self.created_at),
        }


# =========================================================
# Client projects
# =========================================================
PROJECT_STATUSES = ("pending", "planning", "in-progress", "review", "completed", "on-hold")


class Project(db.Model):
    __tablename__ = "projects"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user = db.relationship("User", back_populates="projects")

    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    service_type = db.Column(db.String(120), nullable=True)
    status = db.Column(db.String(20), nullable=False, default="pending")
    start_date = db.Column(db.Date, nullable=True)
    estimated_end_date = db.Column(db.Date, nullable=True)
    completion_percentage = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)

    updates = db.relationship(
        "ProjectUpdate",
        back_populates="project",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="ProjectUpdate.created_at.desc()",
    )
    invoices = db.relationship(
        "Invoice",
        back_populates="project",
        lazy="select",
        cascade="all, delete-orphan",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            # Older clients read "name"
            "name": self.title,
            "description": self.description,
            "serviceType": self.service_type,
            "status": self.status,
            "startDate": _iso(self.start_date),
            "estimatedEndDate": _iso(self.estimated_end_date),
            "completionPercentage": self.completion_percentage or 0,
            "createdAt": _iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Project {self.id} {self.title}>"


class ProjectUpdate(db.Model):
    __tablename__ = "project_updates"

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(
        db.Integer,
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project = db.relationship("Project", back_populates="updates")

    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "title": self.title,
            "content": self.content,
            "createdAt": _iso(self.created_at),
        }


# =========================================================
# Invoice Status (Enum)
# =========================================================
class InvoiceStatus(enum.Enum):
    PENDING = "pending"
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


# =========================================================
# Invoice
# =========================================================
class Invoice(db.Model):
    __tablename__ = "invoices"

    id = db.Column(db.Integer, primary_key=True)
    invoice_number = db.Column(db.String(40), unique=True, nullable=False)

    project_id = db.Column(
        db.Integer,
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project = db.relationship("Project", back_populates="invoices")

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    currency = db.Column(db.String(10), nullable=False, default="USD")

    status = db.Column(
        SAEnum(
            InvoiceStatus,
            name="invoice_status",
            values_callable=lambda enum_cls: [e.value for e in enum_cls],
            native_enum=False,
            create_constraint=True,
            length=20,
        ),
        nullable=False,
        default=InvoiceStatus.PENDING,
    )

    issue_date = db.Column(db.Date, nullable=False, default=date.today)
    due_date = db.Column(db.Date, nullable=True)
    payment_date = db.Column(db.DateTime, nullable=True)
    payment_reference = db.Column(db.String(120), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)

    items = db.relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        lazy="select",
        order_by="InvoiceItem.id",
    )
    payments = db.relationship(
        "Payment",
        back_populates="invoice",
        cascade="all, delete-orphan",
        lazy="select",
        order_by="Payment.id",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "invoiceNumber": self.invoice_number,
            "amount": money_str(self.amount),
            "currency": self.currency,
            "status": self.status.value if self.status else None,
            "issueDate": _iso(self.issue_date),
            "dueDate": _iso(self.due_date),
            "paymentDate": _iso(self.payment_date),
            "paymentReference": self.payment_reference,
            "notes": self.notes,
            "createdAt": _iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Invoice {self.id} {self.invoice_number} {self.status}>"


# =========================================================
# InvoiceSequence
# =========================================================
class InvoiceSequence(db.Model):
    """Last number handed out per ``<prefix>-<year>-`` stem. Never decreases."""

    __tablename__ = "invoice_sequences"

    stem = db.Column(db.String(40), primary_key=True)
    last_value = db.Column(db.Integer, nullable=False, default=0)


# =========================================================
# InvoiceItem
# =========================================================
class InvoiceItem(db.Model):
    __tablename__ = "invoice_items"

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(
        db.Integer,
        db.ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    invoice = db.relationship("Invoice", back_populates="items")

    description = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Numeric(12, 2), nullable=False, default=1)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    tax_rate = db.Column(db.Numeric(5, 2), nullable=True)
    tax_amount = db.Column(db.Numeric(12, 2), nullable=True)
    # quantity * unit_price; tax is tracked separately
    amount = db.Column(db.Numeric(12, 2), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoiceId": self.invoice_id,
            "description": self.description,
            "quantity": money_str(self.quantity),
            "unitPrice": money_str(self.unit_price),
            "taxRate": money_str(self.tax_rate),
            "taxAmount": money_str(self.tax_amount),
            "amount": money_str(self.amount),
            "createdAt": _iso(self.created_at),
        }


# =========================================================
# Payment
# =========================================================
class Payment(db.Model):
    __tablename__ = "payments"

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(
        db.Integer,
        db.ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    invoice = db.relationship("Invoice", back_populates="payments")

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_date = db.Column(db.DateTime, nullable=False, default=utcnow_naive)
    payment_method = db.Column(db.String(40), nullable=False)  # credit card, bank transfer, ...
    transaction_id = db.Column(db.String(120), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoiceId": self.invoice_id,
            "amount": money_str(self.amount),
            "paymentDate": _iso(self.payment_date),
            "paymentMethod": self.payment_method,
            "transactionId": self.transaction_id,
            "notes": self.notes,
            "createdAt": _iso(self.created_at),
        }
