"""
Authorization tests.

Verifies:
- Admin endpoints return 401 anonymous and 403 for regular users
- Project and invoice reads are limited to the owner and admins
"""

from decimal import Decimal

import pytest

from softflow.extensions import db
from softflow.models import Project
from softflow.services import invoices

ADMIN_ENDPOINTS = [
    ("GET", "/api/admin/users"),
    ("GET", "/api/admin/messages"),
    ("GET", "/api/admin/applications"),
    ("GET", "/api/admin/services"),
    ("GET", "/api/admin/projects"),
    ("GET", "/api/admin/invoices"),
    ("POST", "/api/admin/blogs"),
    ("POST", "/api/admin/partners"),
    ("PUT", "/api/admin/users/1/verify"),
    ("POST", "/api/admin/projects/1/invoices"),
    ("DELETE", "/api/admin/payments/1"),
    ("DELETE", "/api/admin/invoice-items/1"),
]


@pytest.fixture()
def alice_project(app, alice_id):
    with app.app_context():
        project = Project(user_id=alice_id, title="Alice's shop")
        db.session.add(project)
        db.session.commit()
        invoice = invoices.create_invoice(project, {"amount": Decimal("250")})
        return {"project": project.id, "invoice": invoice.id}


# =============================================================================
# ADMIN PREFIX: 401 / 403
# =============================================================================


class TestAdminGuard:

    @pytest.mark.parametrize("method,path", ADMIN_ENDPOINTS)
    def test_anonymous_is_401(self, client, method, path):
        resp = client.open(path, method=method, json={})
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    @pytest.mark.parametrize("method,path", ADMIN_ENDPOINTS)
    def test_regular_user_is_403(self, alice_client, method, path):
        resp = alice_client.open(path, method=method, json={})
        assert resp.status_code == 403, f"{method} {path} returned {resp.status_code}"

    def test_admin_allowed(self, admin_client):
        assert admin_client.get("/api/admin/users").status_code == 200


# =============================================================================
# OWNER OR ADMIN
# =============================================================================


class TestProjectAccess:

    def test_owner_can_read(self, alice_client, alice_project):
        pid = alice_project["project"]
        resp = alice_client.get(f"/api/projects/{pid}")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["title"] == "Alice's shop"
        assert body["name"] == "Alice's shop"

    def test_other_user_is_403(self, bob_client, alice_project):
        pid = alice_project["project"]
        assert bob_client.get(f"/api/projects/{pid}").status_code == 403
        assert bob_client.get(f"/api/projects/{pid}/updates").status_code == 403
        assert bob_client.get(f"/api/projects/{pid}/invoices").status_code == 403

    def test_anonymous_is_401(self, client, alice_project):
        assert client.get(f"/api/projects/{alice_project['project']}").status_code == 401

    def test_admin_can_read(self, admin_client, alice_project):
        assert admin_client.get(f"/api/projects/{alice_project['project']}").status_code == 200

    @pytest.mark.parametrize("raw", ["abc", "0", "-1"])
    def test_invalid_id_is_400(self, alice_client, raw):
        resp = alice_client.get(f"/api/projects/{raw}")
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid project ID"

    def test_missing_is_404(self, alice_client):
        assert alice_client.get("/api/projects/999").status_code == 404

    def test_project_list_is_own_only(self, alice_client, bob_client, alice_project):
        assert len(alice_client.get("/api/projects").get_json()) == 1
        assert bob_client.get("/api/projects").get_json() == []


class TestInvoiceAccess:

    def test_owner_sees_invoice_detail(self, alice_client, alice_project):
        resp = alice_client.get(f"/api/invoices/{alice_project['invoice']}")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["amount"] == "250.00"
        assert body["summary"]["balance"] == "250.00"

    def test_other_user_is_403(self, bob_client, alice_project):
        iid = alice_project["invoice"]
        assert bob_client.get(f"/api/invoices/{iid}").status_code == 403
        assert bob_client.get(f"/api/invoices/{iid}/items").status_code == 403
        assert bob_client.get(f"/api/invoices/{iid}/payments").status_code == 403

    def test_invoice_lists(self, alice_client, bob_client, admin_client, alice_project):
        assert len(alice_client.get("/api/invoices").get_json()) == 1
        assert bob_client.get("/api/invoices").get_json() == []
        assert len(admin_client.get("/api/invoices").get_json()) == 1
