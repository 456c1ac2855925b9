# softflow/schemas.py
"""Pydantic request models for the JSON API (camelCase on the wire)."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

InvoiceStatusValue = Literal["pending", "unpaid", "partially_paid", "paid", "overdue", "cancelled"]
ProjectStatusValue = Literal["pending", "planning", "in-progress", "review", "completed", "on-hold"]
ApplicationStatusValue = Literal["pending", "reviewed", "interviewing", "rejected", "hired"]


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


# -- Auth / accounts ---------------------------------------------------------


class RegisterRequest(ApiModel):
    username: str = Field(min_length=3, max_length=80)
    password: str = Field(min_length=6, max_length=256)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=120)
    phone: Optional[str] = Field(default=None, max_length=30)

    @field_validator("email", "phone", mode="before")
    @classmethod
    def _blank_optional(cls, value):
        return _blank_to_none(value)


class LoginRequest(ApiModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class ProfileUpdate(ApiModel):
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=120)
    phone: Optional[str] = Field(default=None, max_length=30)
    photo: Optional[str] = Field(default=None, max_length=500)
    bio: Optional[str] = None
    website: Optional[str] = Field(default=None, max_length=255)
    linkedin: Optional[str] = Field(default=None, max_length=255)
    github: Optional[str] = Field(default=None, max_length=255)

    @field_validator("email", "phone", mode="before")
    @classmethod
    def _blank_optional(cls, value):
        return _blank_to_none(value)


class PasswordChange(ApiModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=256)


class BlockUpdate(ApiModel):
    blocked: bool = True


# -- Blog / partners / messages ---------------------------------------------


class BlogPostCreate(ApiModel):
    title: str = Field(min_length=1, max_length=200)
    slug: str = Field(min_length=1, max_length=200, pattern=SLUG_PATTERN)
    summary: str = Field(min_length=1)
    content: str = Field(min_length=1)
    category: str = Field(min_length=1, max_length=80)
    cover_image: Optional[str] = Field(default=None, max_length=500)
    published: bool = False


class BlogPostChanges(ApiModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    slug: Optional[str] = Field(default=None, min_length=1, max_length=200, pattern=SLUG_PATTERN)
    summary: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1, max_length=80)
    cover_image: Optional[str] = Field(default=None, max_length=500)
    published: Optional[bool] = None


class PartnerCreate(ApiModel):
    name: str = Field(min_length=1, max_length=160)
    logo: str = Field(min_length=1, max_length=500)
    website: Optional[str] = Field(default=None, max_length=255)


class PartnerChanges(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=160)
    logo: Optional[str] = Field(default=None, min_length=1, max_length=500)
    website: Optional[str] = Field(default=None, max_length=255)


class MessageCreate(ApiModel):
    name: str = Field(min_length=1, max_length=120)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=120)
    company: Optional[str] = Field(default=None, max_length=160)
    service: Optional[str] = Field(default=None, max_length=120)
    message: str = Field(min_length=1)


# -- Careers -----------------------------------------------------------------


class CareerCreate(ApiModel):
    title: str = Field(min_length=1, max_length=200)
    department: str = Field(min_length=1, max_length=120)
    location: str = Field(min_length=1, max_length=120)
    type: str = Field(min_length=1, max_length=40)
    description: str = Field(min_length=1)
    requirements: str = Field(min_length=1)
    published: bool = True


class CareerChanges(ApiModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    department: Optional[str] = Field(default=None, min_length=1, max_length=120)
    location: Optional[str] = Field(default=None, min_length=1, max_length=120)
    type: Optional[str] = Field(default=None, min_length=1, max_length=40)
    description: Optional[str] = Field(default=None, min_length=1)
    requirements: Optional[str] = Field(default=None, min_length=1)
    published: Optional[bool] = None


class ApplicationCreate(ApiModel):
    name: str = Field(min_length=1, max_length=120)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=120)
    phone: str = Field(min_length=1, max_length=30)
    resume: str = Field(min_length=1)
    cover_letter: Optional[str] = None


class ApplicationStatusUpdate(ApiModel):
    status: ApplicationStatusValue


# -- Services ----------------------------------------------------------------


class ServiceCreate(ApiModel):
    title: str = Field(min_length=3, max_length=160)
    slug: str = Field(min_length=1, max_length=180, pattern=SLUG_PATTERN)
    description: str = Field(min_length=10)
    icon: str = Field(min_length=1, max_length=60)
    order: int = Field(default=0, ge=0)
    active: bool = True


class ServiceChanges(ApiModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=160)
    slug: Optional[str] = Field(default=None, min_length=1, max_length=180, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(default=None, min_length=10)
    icon: Optional[str] = Field(default=None, min_length=1, max_length=60)
    order: Optional[int] = Field(default=None, ge=0)
    active: Optional[bool] = None


class ServiceToggle(ApiModel):
    active: bool


# -- Projects ----------------------------------------------------------------


class ProjectCreate(ApiModel):
    user_id: Optional[int] = Field(default=None, gt=0)
    title: Optional[str] = Field(default=None, max_length=200)
    # Legacy clients send "name" instead of "title".
    name: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    service_type: Optional[str] = Field(default=None, max_length=120)
    status: ProjectStatusValue = "pending"
    start_date: Optional[date] = None
    estimated_end_date: Optional[date] = None
    completion_percentage: int = Field(default=0, ge=0, le=100)

    @field_validator("start_date", "estimated_end_date", mode="before")
    @classmethod
    def _blank_optional(cls, value):
        return _blank_to_none(value)

    @model_validator(mode="after")
    def _canonical_title(self):
        title = (self.title or self.name or "").strip()
        if not title:
            raise ValueError("title is required")
        self.title = title
        return self


class ProjectChanges(ApiModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    service_type: Optional[str] = Field(default=None, max_length=120)
    status: Optional[ProjectStatusValue] = None
    start_date: Optional[date] = None
    estimated_end_date: Optional[date] = None
    completion_percentage: Optional[int] = Field(default=None, ge=0, le=100)


class ProjectUpdateCreate(ApiModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)


# -- Invoicing ---------------------------------------------------------------


class InvoiceCreate(ApiModel):
    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=10)
    status: InvoiceStatusValue = "pending"
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_reference: Optional[str] = Field(default=None, max_length=120)
    notes: Optional[str] = None

    @field_validator("issue_date", "due_date", "payment_reference", mode="before")
    @classmethod
    def _blank_optional(cls, value):
        return _blank_to_none(value)


class InvoiceChanges(ApiModel):
    amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=10)
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_reference: Optional[str] = Field(default=None, max_length=120)
    notes: Optional[str] = None


class InvoiceStatusUpdate(ApiModel):
    status: InvoiceStatusValue


class InvoiceItemCreate(ApiModel):
    description: str = Field(min_length=1, max_length=255)
    quantity: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    unit_price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=100, max_digits=5, decimal_places=2)

    @field_validator("tax_rate", mode="before")
    @classmethod
    def _blank_optional(cls, value):
        return _blank_to_none(value)


class InvoiceItemChanges(ApiModel):
    description: Optional[str] = Field(default=None, min_length=1, max_length=255)
    quantity: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    unit_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=100, max_digits=5, decimal_places=2)

    @field_validator("tax_rate", mode="before")
    @classmethod
    def _blank_optional(cls, value):
        return _blank_to_none(value)


class PaymentCreate(ApiModel):
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    payment_date: Optional[datetime] = None
    payment_method: str = Field(min_length=1, max_length=40)
    transaction_id: Optional[str] = Field(default=None, max_length=120)
    notes: Optional[str] = None

    @field_validator("payment_date", mode="before")
    @classmethod
    def _date_only(cls, value):
        value = _blank_to_none(value)
        # Forms send a bare "YYYY-MM-DD"
        if isinstance(value, str) and len(value) == 10:
            return f"{value}T00:00:00"
        return value
