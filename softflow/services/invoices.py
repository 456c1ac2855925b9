# softflow/services/invoices.py
"""
Invoice lifecycle.

Status is driven by the payment ledger: every payment insert/delete runs in
one transaction that locks the invoice row, mutates the ledger, recomputes
the status and commits. Automatic computation only ever yields ``paid``,
``partially_paid`` or ``unpaid``; ``pending``, ``overdue`` and ``cancelled``
are set by an admin through :func:`set_status`.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import (
    CENTS,
    Invoice,
    InvoiceItem,
    InvoiceSequence,
    InvoiceStatus,
    Payment,
    Project,
    money_str,
    utcnow_naive,
)

NUMBER_ATTEMPTS = 5

INVOICE_FIELDS = ("amount", "currency", "issue_date", "due_date", "payment_reference", "notes")

PAYMENT_DRIVEN_STATUSES = frozenset(
    {InvoiceStatus.UNPAID, InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.PAID}
)


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def _naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _lock_invoice(invoice_id: int) -> Invoice:
    # SQLite ignores FOR UPDATE; Postgres serialises concurrent payment writes here.
    return (
        db.session.query(Invoice)
        .filter_by(id=invoice_id)
        .with_for_update()
        .populate_existing()
        .one()
    )


# =========================
# Status computation
# =========================
def compute_status(invoice_amount, payment_amounts: Iterable) -> InvoiceStatus:
    """Pure status rule: unpaid, partially_paid or paid."""
    amounts = [Decimal(str(a)) for a in payment_amounts]
    if not amounts:
        return InvoiceStatus.UNPAID

    total = sum(amounts, Decimal("0"))
    if total >= Decimal(str(invoice_amount)):
        return InvoiceStatus.PAID
    if total > 0:
        return InvoiceStatus.PARTIALLY_PAID
    return InvoiceStatus.UNPAID


def recompute_status(invoice: Invoice) -> InvoiceStatus:
    """Apply :func:`compute_status` to the invoice's current payments. Does not commit."""
    previous = invoice.status
    status = compute_status(invoice.amount, [p.amount for p in invoice.payments])

    invoice.status = status
    if status is InvoiceStatus.PAID:
        invoice.payment_date = utcnow_naive()
    else:
        invoice.payment_date = None

    if previous is not status:
        current_app.logger.info(
            "Invoice %s status %s -> %s",
            invoice.invoice_number,
            previous.value if previous else None,
            status.value,
        )
    return status


def payment_summary(invoice: Invoice) -> dict:
    total = sum((Decimal(str(p.amount)) for p in invoice.payments), Decimal("0"))
    balance = Decimal(str(invoice.amount)) - total
    return {
        "totalPaid": money_str(total),
        "balance": money_str(balance),
        "paymentCount": len(invoice.payments),
    }


def invoice_detail(invoice: Invoice) -> dict:
    """Invoice with its items, payments and payment summary."""
    body = invoice.to_dict()
    body["items"] = [item.to_dict() for item in invoice.items]
    body["payments"] = [payment.to_dict() for payment in invoice.payments]
    body["summary"] = payment_summary(invoice)
    return body


# =========================
# Payments
# =========================
def record_payment(invoice: Invoice, data: dict) -> Payment:
    """Insert a payment and recompute the invoice status in one transaction."""
    try:
        locked = _lock_invoice(invoice.id)

        payment = Payment(
            amount=_money(data["amount"]),
            payment_method=data["payment_method"],
            transaction_id=data.get("transaction_id"),
            notes=data.get("notes"),
        )
        paid_at = _naive_utc(data.get("payment_date"))
        if paid_at is not None:
            payment.payment_date = paid_at

        locked.payments.append(payment)
        db.session.flush()
        recompute_status(locked)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Payment %s of %s recorded on invoice %s", payment.id, payment.amount, locked.invoice_number
    )
    return payment


def delete_payment(payment: Payment) -> Invoice:
    """Remove a payment and recompute the invoice status in one transaction."""
    payment_id = payment.id
    try:
        locked = _lock_invoice(payment.invoice_id)
        was_cancelled = locked.status is InvoiceStatus.CANCELLED

        db.session.delete(payment)
        db.session.flush()
        db.session.expire(locked, ["payments"])

        keep_cancelled = current_app.config.get("INVOICE_KEEP_CANCELLED_ON_PAYMENT_DELETE", False)
        if not (was_cancelled and keep_cancelled):
            recompute_status(locked)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Payment %s deleted from invoice %s", payment_id, locked.invoice_number)
    return locked


# =========================
# Line items
# =========================
def _price_item(item: InvoiceItem) -> None:
    amount = _money(Decimal(str(item.quantity)) * Decimal(str(item.unit_price)))
    item.amount = amount
    if item.tax_rate is None:
        item.tax_amount = None
    else:
        item.tax_amount = _money(amount * Decimal(str(item.tax_rate)) / Decimal("100"))


def add_item(
    invoice: Invoice,
    description: str,
    quantity,
    unit_price,
    tax_rate=None,
) -> InvoiceItem:
    """
    Add a line item. ``amount`` is quantity x unit price; tax is tracked in
    ``tax_amount`` only. The invoice amount and status are left alone.
    """
    item = InvoiceItem(
        invoice_id=invoice.id,
        description=description,
        quantity=Decimal(str(quantity)),
        unit_price=Decimal(str(unit_price)),
        tax_rate=Decimal(str(tax_rate)) if tax_rate is not None else None,
    )
    _price_item(item)

    db.session.add(item)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return item


def update_item(item: InvoiceItem, changes: dict) -> InvoiceItem:
    for field in ("description", "quantity", "unit_price", "tax_rate"):
        if field not in changes:
            continue
        value = changes[field]
        if value is None and field != "tax_rate":
            continue
        if field != "description" and value is not None:
            value = Decimal(str(value))
        setattr(item, field, value)

    _price_item(item)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return item


def delete_item(item: InvoiceItem) -> None:
    db.session.delete(item)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


# =========================
# Invoices
# =========================
def highest_invoice_suffix(stem: str) -> int:
    """Largest numeric suffix among invoice numbers starting with ``stem``, or 0."""
    highest = 0
    numbers = db.session.query(Invoice.invoice_number).filter(
        Invoice.invoice_number.like(f"{stem}%")
    )
    for (number,) in numbers:
        suffix = number[len(stem):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return highest


def next_invoice_number() -> str:
    """
    ``INV-<year>-<NNNN>`` taken from the locked per-year sequence row.

    Numbers only move forward: the row remembers the last value handed out,
    so deleting an invoice never frees its number. The row is written in the
    caller's transaction and committed with the invoice.
    """
    prefix = current_app.config.get("INVOICE_NUMBER_PREFIX", "INV")
    stem = f"{prefix}-{date.today().year}-"

    sequence = (
        db.session.query(InvoiceSequence)
        .filter_by(stem=stem)
        .with_for_update()
        .populate_existing()
        .one_or_none()
    )
    if sequence is None:
        sequence = InvoiceSequence(stem=stem, last_value=0)
        db.session.add(sequence)

    # numbers imported or edited outside this function are skipped over
    sequence.last_value = max(sequence.last_value or 0, highest_invoice_suffix(stem)) + 1
    return f"{stem}{sequence.last_value:04d}"


def create_invoice(project: Project, data: dict) -> Invoice:
    status = data.get("status") or InvoiceStatus.PENDING.value
    currency = data.get("currency") or current_app.config.get("DEFAULT_CURRENCY", "USD")

    for _ in range(NUMBER_ATTEMPTS):
        invoice = Invoice(
            invoice_number=next_invoice_number(),
            project_id=project.id,
            amount=_money(data["amount"]),
            currency=currency.upper(),
            status=InvoiceStatus(status),
            issue_date=data.get("issue_date") or date.today(),
            due_date=data.get("due_date"),
            payment_reference=data.get("payment_reference"),
            notes=data.get("notes"),
        )
        if invoice.status is InvoiceStatus.PAID:
            invoice.payment_date = utcnow_naive()

        db.session.add(invoice)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            current_app.logger.warning(
                "Invoice number %s already taken, retrying", invoice.invoice_number
            )
            continue

        current_app.logger.info(
            "Invoice %s created for project %s (%s %s)",
            invoice.invoice_number,
            project.id,
            money_str(invoice.amount),
            invoice.currency,
        )
        return invoice

    raise RuntimeError("Could not allocate a unique invoice number")


def update_invoice(invoice: Invoice, changes: dict) -> Invoice:
    """
    Edit amount, currency, dates, reference or notes.

    An amount change on an invoice whose status is payment-driven (unpaid,
    partially_paid, paid) locks the row and recomputes the status against the
    existing payments in the same transaction. Manual statuses are kept.
    """
    reprice = changes.get("amount") is not None
    try:
        if reprice:
            invoice = _lock_invoice(invoice.id)

        for field in INVOICE_FIELDS:
            if field not in changes:
                continue
            value = changes[field]
            if field == "amount":
                if value is None:
                    continue
                value = _money(value)
            elif field == "currency":
                if not value:
                    continue
                value = value.upper()
            elif field == "issue_date" and value is None:
                continue
            setattr(invoice, field, value)

        if reprice and invoice.status in PAYMENT_DRIVEN_STATUSES:
            recompute_status(invoice)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return invoice


def set_status(invoice: Invoice, status) -> Invoice:
    """Manual override. Raises ValueError for values outside the enum."""
    new_status = status if isinstance(status, InvoiceStatus) else InvoiceStatus(status)
    previous = invoice.status

    invoice.status = new_status
    if new_status is InvoiceStatus.PAID:
        if invoice.payment_date is None:
            invoice.payment_date = utcnow_naive()
    else:
        invoice.payment_date = None

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Invoice %s status set %s -> %s",
        invoice.invoice_number,
        previous.value if previous else None,
        new_status.value,
    )
    return invoice


def delete_invoice(invoice: Invoice) -> None:
    """Delete items, payments and the invoice itself, all or nothing."""
    number = invoice.invoice_number
    try:
        InvoiceItem.query.filter_by(invoice_id=invoice.id).delete(synchronize_session=False)
        Payment.query.filter_by(invoice_id=invoice.id).delete(synchronize_session=False)
        db.session.expire(invoice, ["items", "payments"])
        db.session.delete(invoice)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Invoice %s deleted", number)
