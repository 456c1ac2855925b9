from datetime import date

import pytest

from softflow.extensions import db
from softflow.models import Project
from softflow.services import projects as project_service


@pytest.fixture()
def project_id(admin_client, alice_id):
    resp = admin_client.post(
        "/api/admin/projects",
        json={"userId": alice_id, "title": "Mobile app", "serviceType": "mobile"},
    )
    assert resp.status_code == 201
    return resp.get_json()["id"]


@pytest.fixture()
def invoice(admin_client, project_id):
    resp = admin_client.post(
        f"/api/admin/projects/{project_id}/invoices",
        json={"amount": "100.00", "dueDate": "2030-01-31"},
    )
    assert resp.status_code == 201
    return resp.get_json()


# =============================================================================
# Projects
# =============================================================================


class TestProjects:

    def test_legacy_name_is_accepted(self, admin_client, alice_id):
        resp = admin_client.post(
            f"/api/admin/users/{alice_id}/projects", json={"name": "Legacy CRM"}
        )
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["title"] == "Legacy CRM"
        assert body["name"] == "Legacy CRM"
        assert body["status"] == "pending"
        assert body["completionPercentage"] == 0

    def test_title_required(self, admin_client, alice_id):
        resp = admin_client.post("/api/admin/projects", json={"userId": alice_id})
        assert resp.status_code == 400

    def test_user_id_required(self, admin_client):
        resp = admin_client.post("/api/admin/projects", json={"title": "Orphan"})
        assert resp.status_code == 400
        assert resp.get_json()["errors"][0]["field"] == "userId"

    def test_update_project(self, admin_client, project_id):
        resp = admin_client.put(
            f"/api/admin/projects/{project_id}",
            json={"status": "in-progress", "completionPercentage": 40},
        )
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "in-progress"
        assert body["completionPercentage"] == 40
        assert body["title"] == "Mobile app"

    @pytest.mark.parametrize("payload", [{"status": "done"}, {"completionPercentage": 101}])
    def test_update_project_validation(self, admin_client, project_id, payload):
        resp = admin_client.put(f"/api/admin/projects/{project_id}", json=payload)
        assert resp.status_code == 400

    def test_updates_feed(self, admin_client, alice_client, project_id):
        resp = admin_client.post(
            f"/api/admin/projects/{project_id}/updates",
            json={"title": "Kickoff", "content": "We met"},
        )
        assert resp.status_code == 201

        feed = alice_client.get(f"/api/projects/{project_id}/updates").get_json()
        assert [u["title"] for u in feed] == ["Kickoff"]

    def test_user_projects(self, admin_client, alice_id, project_id):
        listed = admin_client.get(f"/api/admin/users/{alice_id}/projects").get_json()
        assert [p["id"] for p in listed] == [project_id]

    def test_delete_project_cascades(self, admin_client, project_id, invoice):
        assert admin_client.delete(f"/api/admin/projects/{project_id}").status_code == 204
        assert admin_client.get("/api/admin/invoices").get_json() == []

    def test_get_all_projects_skips_blank_titles(self, app, alice_id, project_id):
        with app.app_context():
            db.session.add(Project(user_id=alice_id, title="   "))
            db.session.commit()
            titles = [p.title for p in project_service.get_all_projects()]
        assert titles == ["Mobile app"]

    def test_get_project_never_raises(self, ctx):
        assert project_service.get_project("abc") is None
        assert project_service.get_project("0") is None
        assert project_service.get_project(None) is None
        assert project_service.get_project("12345") is None


# =============================================================================
# Invoices over HTTP
# =============================================================================


class TestInvoiceApi:

    def test_created_invoice(self, invoice):
        year = date.today().year
        assert invoice["invoiceNumber"] == f"INV-{year}-0001"
        assert invoice["status"] == "pending"
        assert invoice["currency"] == "USD"
        assert invoice["dueDate"] == "2030-01-31"
        assert invoice["items"] == []

    def test_payment_lifecycle(self, admin_client, alice_client, invoice):
        iid = invoice["id"]

        resp = admin_client.post(
            f"/api/admin/invoices/{iid}/payments",
            json={"amount": "40", "paymentMethod": "bank transfer"},
        )
        assert resp.status_code == 201
        first = resp.get_json()
        assert first["invoice"]["status"] == "partially_paid"

        resp = admin_client.post(
            f"/api/admin/invoices/{iid}/payments",
            json={"amount": "60", "paymentMethod": "mpesa", "paymentDate": "2025-05-01"},
        )
        assert resp.get_json()["invoice"]["status"] == "paid"
        assert resp.get_json()["invoice"]["paymentDate"] is not None

        detail = alice_client.get(f"/api/invoices/{iid}").get_json()
        assert detail["status"] == "paid"
        assert detail["summary"]["totalPaid"] == "100.00"
        assert len(alice_client.get(f"/api/invoices/{iid}/payments").get_json()) == 2

        assert admin_client.delete(f"/api/admin/payments/{first['id']}").status_code == 204
        detail = alice_client.get(f"/api/invoices/{iid}").get_json()
        assert detail["status"] == "partially_paid"
        assert detail["paymentDate"] is None

    @pytest.mark.parametrize(
        "payload",
        [
            {"amount": "0", "paymentMethod": "cash"},
            {"amount": "-5", "paymentMethod": "cash"},
            {"amount": "5"},
        ],
    )
    def test_invalid_payment(self, admin_client, invoice, payload):
        resp = admin_client.post(f"/api/admin/invoices/{invoice['id']}/payments", json=payload)
        assert resp.status_code == 400

    def test_items(self, admin_client, alice_client, invoice):
        iid = invoice["id"]
        resp = admin_client.post(
            f"/api/admin/invoices/{iid}/items",
            json={"description": "Screens", "quantity": 3, "unitPrice": "19.99"},
        )
        assert resp.status_code == 201
        item = resp.get_json()
        assert item["amount"] == "59.97"

        resp = admin_client.put(f"/api/admin/invoice-items/{item['id']}", json={"quantity": 1})
        assert resp.get_json()["amount"] == "19.99"

        detail = alice_client.get(f"/api/invoices/{iid}").get_json()
        assert detail["amount"] == "100.00"
        assert detail["status"] == "pending"

        assert admin_client.delete(f"/api/admin/invoice-items/{item['id']}").status_code == 204
        assert alice_client.get(f"/api/invoices/{iid}/items").get_json() == []

    def test_manual_status(self, admin_client, invoice):
        url = f"/api/admin/invoices/{invoice['id']}/status"
        resp = admin_client.put(url, json={"status": "overdue"})
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "overdue"

        assert admin_client.put(url, json={"status": "refunded"}).status_code == 400

    def test_update_invoice(self, admin_client, invoice):
        resp = admin_client.put(
            f"/api/admin/invoices/{invoice['id']}",
            json={"amount": "120.50", "notes": "Adjusted scope"},
        )
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["amount"] == "120.50"
        assert body["notes"] == "Adjusted scope"
        assert body["status"] == "pending"

    def test_delete_invoice(self, admin_client, invoice):
        iid = invoice["id"]
        admin_client.post(
            f"/api/admin/invoices/{iid}/items",
            json={"description": "Screens", "quantity": 1, "unitPrice": "10"},
        )
        admin_client.post(
            f"/api/admin/invoices/{iid}/payments", json={"amount": "10", "paymentMethod": "cash"}
        )
        assert admin_client.delete(f"/api/admin/invoices/{iid}").status_code == 204
        assert admin_client.get(f"/api/invoices/{iid}").status_code == 404
