from datetime import date
from decimal import Decimal

import pytest

from softflow.extensions import db
from softflow.models import Invoice, InvoiceItem, InvoiceStatus, Payment, Project, User
from softflow.services import invoices
from softflow.utils.passwords import hash_password


@pytest.fixture()
def project(ctx):
    owner = User(username="client", password_hash=hash_password("pw-123456"))
    db.session.add(owner)
    db.session.commit()
    project = Project(user_id=owner.id, title="Website rebuild")
    db.session.add(project)
    db.session.commit()
    return project


@pytest.fixture()
def invoice(project):
    return invoices.create_invoice(project, {"amount": Decimal("100.00")})


def _pay(invoice, amount):
    return invoices.record_payment(
        invoice, {"amount": Decimal(amount), "payment_method": "bank transfer"}
    )


# =============================================================================
# compute_status
# =============================================================================


@pytest.mark.parametrize(
    "amount,payments,expected",
    [
        ("100", [], InvoiceStatus.UNPAID),
        ("100", ["0"], InvoiceStatus.UNPAID),
        ("100", ["40"], InvoiceStatus.PARTIALLY_PAID),
        ("100", ["40", "60"], InvoiceStatus.PAID),
        ("100", ["150"], InvoiceStatus.PAID),
        ("0.30", ["0.10", "0.20"], InvoiceStatus.PAID),
        ("0", [], InvoiceStatus.UNPAID),
    ],
)
def test_compute_status(amount, payments, expected):
    assert invoices.compute_status(Decimal(amount), [Decimal(p) for p in payments]) is expected


# =============================================================================
# Creation / numbering
# =============================================================================


def test_create_invoice_defaults(invoice):
    year = date.today().year
    assert invoice.invoice_number == f"INV-{year}-0001"
    assert invoice.status is InvoiceStatus.PENDING
    assert invoice.currency == "USD"
    assert invoice.payment_date is None


def test_invoice_numbers_are_sequential(project, invoice):
    second = invoices.create_invoice(project, {"amount": Decimal("5"), "currency": "eur"})
    assert second.invoice_number.endswith("-0002")
    assert second.currency == "EUR"


def test_number_already_in_use_is_skipped(project, invoice):
    # a number taken outside the sequence is stepped over
    invoice.invoice_number = invoice.invoice_number.replace("0001", "0002")
    db.session.commit()

    second = invoices.create_invoice(project, {"amount": Decimal("5")})
    assert second.invoice_number.endswith("-0003")


def test_numbers_survive_deleting_early_invoices(project, invoice):
    created = [invoice] + [
        invoices.create_invoice(project, {"amount": Decimal("10")}) for _ in range(19)
    ]
    assert created[-1].invoice_number.endswith("-0020")

    for old in created[:5]:
        invoices.delete_invoice(old)

    fresh = invoices.create_invoice(project, {"amount": Decimal("10")})
    assert fresh.invoice_number.endswith("-0021")


def test_deleted_number_is_never_reused(project, invoice):
    second = invoices.create_invoice(project, {"amount": Decimal("10")})
    taken = second.invoice_number
    invoices.delete_invoice(second)

    third = invoices.create_invoice(project, {"amount": Decimal("10")})
    assert third.invoice_number != taken
    assert third.invoice_number.endswith("-0003")


def test_number_race_is_retried(monkeypatch, project, invoice):
    # another writer commits 0002 between our suffix scan and our insert
    stem = invoice.invoice_number[: -len("0001")]
    db.session.add(Invoice(invoice_number=f"{stem}0002", project_id=project.id, amount=Decimal("1")))
    db.session.commit()

    real_highest = invoices.highest_invoice_suffix
    calls = []

    def stale_then_real(s):
        calls.append(s)
        return 0 if len(calls) == 1 else real_highest(s)

    monkeypatch.setattr(invoices, "highest_invoice_suffix", stale_then_real)

    racer = invoices.create_invoice(project, {"amount": Decimal("5")})
    assert racer.invoice_number == f"{stem}0003"
    assert len(calls) == 2


# =============================================================================
# Payments drive status
# =============================================================================


def test_partial_then_full_payment(invoice):
    _pay(invoice, "40.00")
    assert invoice.status is InvoiceStatus.PARTIALLY_PAID
    assert invoice.payment_date is None

    _pay(invoice, "60.00")
    assert invoice.status is InvoiceStatus.PAID
    assert invoice.payment_date is not None

    summary = invoices.payment_summary(invoice)
    assert summary["totalPaid"] == "100.00"
    assert summary["balance"] == "0.00"


def test_deleting_payments_recomputes(invoice):
    first = _pay(invoice, "40.00")
    second = _pay(invoice, "60.00")

    invoices.delete_payment(second)
    assert invoice.status is InvoiceStatus.PARTIALLY_PAID
    assert invoice.payment_date is None

    invoices.delete_payment(first)
    assert invoice.status is InvoiceStatus.UNPAID
    assert Payment.query.count() == 0


def test_deleting_last_payment_of_cancelled_invoice(invoice):
    payment = _pay(invoice, "10.00")
    invoices.set_status(invoice, "cancelled")

    invoices.delete_payment(payment)
    assert invoice.status is InvoiceStatus.UNPAID


def test_cancelled_kept_when_configured(ctx, invoice):
    ctx.config["INVOICE_KEEP_CANCELLED_ON_PAYMENT_DELETE"] = True
    payment = _pay(invoice, "10.00")
    invoices.set_status(invoice, InvoiceStatus.CANCELLED)

    invoices.delete_payment(payment)
    assert invoice.status is InvoiceStatus.CANCELLED


def test_payment_date_only_is_midnight(invoice):
    from softflow.schemas import PaymentCreate

    body = PaymentCreate.model_validate(
        {"amount": "25", "paymentDate": "2024-03-01", "paymentMethod": "cash"}
    )
    payment = invoices.record_payment(invoice, body.model_dump())
    assert payment.payment_date.isoformat() == "2024-03-01T00:00:00"


# =============================================================================
# Manual status
# =============================================================================


def test_set_status_paid_stamps_date_and_others_clear_it(invoice):
    invoices.set_status(invoice, "paid")
    assert invoice.status is InvoiceStatus.PAID
    stamped = invoice.payment_date
    assert stamped is not None

    # already stamped: unchanged
    invoices.set_status(invoice, "paid")
    assert invoice.payment_date == stamped

    invoices.set_status(invoice, "overdue")
    assert invoice.status is InvoiceStatus.OVERDUE
    assert invoice.payment_date is None


def test_set_status_rejects_unknown(invoice):
    with pytest.raises(ValueError):
        invoices.set_status(invoice, "refunded")


# =============================================================================
# Line items
# =============================================================================


def test_add_item_computes_amount_without_touching_invoice(invoice):
    item = invoices.add_item(invoice, "Design work", 3, Decimal("19.99"))
    assert item.amount == Decimal("59.97")
    assert item.tax_amount is None

    db.session.refresh(invoice)
    assert invoice.amount == Decimal("100.00")
    assert invoice.status is InvoiceStatus.PENDING


def test_item_tax_is_tracked_separately(invoice):
    item = invoices.add_item(invoice, "Hosting", Decimal("2"), Decimal("50"), Decimal("16"))
    assert item.amount == Decimal("100.00")
    assert item.tax_amount == Decimal("16.00")


def test_update_item_recomputes(invoice):
    item = invoices.add_item(invoice, "Hours", 1, Decimal("10"))
    invoices.update_item(item, {"quantity": Decimal("2.5"), "tax_rate": Decimal("10")})
    assert item.amount == Decimal("25.00")
    assert item.tax_amount == Decimal("2.50")

    invoices.update_item(item, {"tax_rate": None})
    assert item.tax_amount is None


def test_delete_item(invoice):
    item = invoices.add_item(invoice, "Hours", 1, Decimal("10"))
    invoices.delete_item(item)
    assert InvoiceItem.query.count() == 0


# =============================================================================
# Deletion
# =============================================================================


def test_delete_invoice_removes_items_and_payments(invoice):
    invoices.add_item(invoice, "Design", 1, Decimal("100"))
    _pay(invoice, "30")
    invoice_id = invoice.id

    invoices.delete_invoice(invoice)

    assert db.session.get(Invoice, invoice_id) is None
    assert InvoiceItem.query.count() == 0
    assert Payment.query.count() == 0


def test_invoice_detail_shape(invoice):
    invoices.add_item(invoice, "Design", 1, Decimal("100"))
    _pay(invoice, "30")

    body = invoices.invoice_detail(invoice)
    assert body["status"] == "partially_paid"
    assert body["amount"] == "100.00"
    assert len(body["items"]) == 1
    assert body["payments"][0]["amount"] == "30.00"
    assert body["summary"] == {"totalPaid": "30.00", "balance": "70.00", "paymentCount": 1}


def test_failed_delete_keeps_invoice_items_and_payments(monkeypatch, invoice):
    invoices.add_item(invoice, "Design", 1, Decimal("100"))
    _pay(invoice, "30")
    invoice_id = invoice.id

    def flush_then_fail():
        db.session.flush()
        raise RuntimeError("connection lost")

    monkeypatch.setattr(db.session, "commit", flush_then_fail)
    with pytest.raises(RuntimeError):
        invoices.delete_invoice(invoice)
    monkeypatch.undo()

    assert db.session.get(Invoice, invoice_id) is not None
    assert InvoiceItem.query.filter_by(invoice_id=invoice_id).count() == 1
    assert Payment.query.filter_by(invoice_id=invoice_id).count() == 1


# =============================================================================
# Editing the amount
# =============================================================================


def test_raising_amount_on_paid_invoice_reopens_it(invoice):
    _pay(invoice, "100")
    assert invoice.status is InvoiceStatus.PAID

    invoices.update_invoice(invoice, {"amount": Decimal("200")})

    assert invoice.status is InvoiceStatus.PARTIALLY_PAID
    assert invoice.payment_date is None
    assert invoices.payment_summary(invoice)["balance"] == "100.00"


def test_lowering_amount_can_settle_invoice(invoice):
    _pay(invoice, "60")
    invoices.update_invoice(invoice, {"amount": Decimal("60")})

    assert invoice.status is InvoiceStatus.PAID
    assert invoice.payment_date is not None
    assert invoices.payment_summary(invoice)["balance"] == "0.00"


@pytest.mark.parametrize("manual", [InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED])
def test_amount_edit_keeps_manual_status(invoice, manual):
    _pay(invoice, "100")
    invoices.set_status(invoice, manual)

    invoices.update_invoice(invoice, {"amount": Decimal("250")})

    assert invoice.status is manual
    assert invoice.amount == Decimal("250.00")


def test_amount_edit_on_pending_invoice_stays_pending(invoice):
    invoices.update_invoice(invoice, {"amount": Decimal("80")})
    assert invoice.status is InvoiceStatus.PENDING


def test_notes_edit_does_not_recompute(invoice):
    _pay(invoice, "100")
    paid_at = invoice.payment_date

    invoices.update_invoice(invoice, {"notes": "thanks"})

    assert invoice.status is InvoiceStatus.PAID
    assert invoice.payment_date == paid_at
