# tests/test_api.py
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from auth import create_token
from database import get_session
from exceptions import PaymentProcessingError
from main import app
from models import UserRole
from routers.payments import get_processor

LEASE_TERMS = {"start_date": "2026-01-01", "end_date": "2027-01-01", "monthly_rent": "1000.00"}


@pytest.fixture
def client(session_factory):
     def override_get_session():
          session = session_factory()
          try:
               yield session
               session.commit()
          except Exception:
               session.rollback()
               raise
          finally:
               session.close()

     app.dependency_overrides[get_session] = override_get_session
     yield TestClient(app)
     app.dependency_overrides.clear()


def auth_headers(user_id):
     return {"Authorization": f"Bearer {create_token(user_id)}"}


@pytest.fixture
def manager_headers(manager):
     return auth_headers(manager.id)


def _rent_payment(tenant, unit, transaction_id, amount="500.00", status="completed"):
     return {
          "tenant_id": tenant.id,
          "unit_id": unit.id,
          "type": "rent",
          "amount": amount,
          "payment_method": "credit_card",
          "status": status,
          "transaction_id": transaction_id,
          "month": 1,
          "year": 2026,
     }


class TestAuth:

     def test_missing_token(self, client):
          assert client.get("/api/units").status_code == 401

     def test_invalid_token(self, client):
          response = client.get("/api/units", headers={"Authorization": "Bearer not-a-jwt"})
          assert response.status_code == 403

     def test_unknown_user(self, client):
          assert client.get("/api/units", headers=auth_headers(999)).status_code == 401


class TestLeaseRoutes:

     def test_create_and_conflict(self, client, manager_headers, make_user, make_unit):
          unit = make_unit()
          body = {"tenant_id": make_user().id, "unit_id": unit.id, "terms": LEASE_TERMS}

          created = client.post("/api/leases", json=body, headers=manager_headers)
          assert created.status_code == 201
          assert created.json()["status"] == "active"

          body["tenant_id"] = make_user().id
          conflict = client.post("/api/leases", json=body, headers=manager_headers)
          assert conflict.status_code == 409
          assert conflict.json()["success"] is False
          assert conflict.json()["error"] == "ConflictError"

     def test_invalid_terms_are_400(self, client, manager_headers, make_user, make_unit):
          terms = dict(LEASE_TERMS, end_date="2025-06-01")
          body = {"tenant_id": make_user().id, "unit_id": make_unit().id, "terms": terms}
          response = client.post("/api/leases", json=body, headers=manager_headers)
          assert response.status_code == 400
          assert response.json()["error"] == "ValidationError"

     def test_restricted_manager_denied_outside_scope(
          self, client, make_user, make_unit, make_lease, assign_units,
     ):
          restricted = make_user(UserRole.RESTRICTED_MANAGER)
          own_unit, other_unit = make_unit(), make_unit()
          assign_units(restricted, own_unit)
          lease = make_lease(make_user(), other_unit)

          response = client.get(f"/api/leases/{lease.id}", headers=auth_headers(restricted.id))
          assert response.status_code == 403
          listed = client.get("/api/leases", headers=auth_headers(restricted.id))
          assert listed.json()["total"] == 0

     def test_terminate_and_renew(self, client, manager_headers, make_user, make_unit, make_lease):
          lease = make_lease(make_user(), make_unit())

          renewed = client.post(
               f"/api/leases/{lease.id}/renew", json={"new_end_date": "2028-01-01"}, headers=manager_headers,
          )
          assert renewed.status_code == 201
          assert renewed.json()["renewed_from_id"] == lease.id
          assert renewed.json()["status"] == "pending"

          terminated = client.post(
               f"/api/leases/{lease.id}/terminate", json={"reason": "Relocating"}, headers=manager_headers,
          )
          assert terminated.status_code == 200
          assert terminated.json()["status"] == "terminated"

     def test_obligation_status(self, client, make_user, make_unit, make_lease):
          tenant, unit = make_user(), make_unit()
          lease = make_lease(tenant, unit)
          response = client.get(
               f"/api/leases/{lease.id}/obligation", params={"as_of": "2026-01-12"}, headers=auth_headers(tenant.id),
          )
          assert response.status_code == 200
          body = response.json()
          assert body["status"] == "due"
          assert body["days_overdue"] == 11
          assert body["urgent"] is True


class TestPaymentRoutes:

     def test_record_is_idempotent(self, client, manager_headers, make_user, make_unit, make_lease):
          tenant, unit = make_user(), make_unit()
          make_lease(tenant, unit)
          body = _rent_payment(tenant, unit, "api-1")

          first = client.post("/api/payments", json=body, headers=manager_headers)
          second = client.post("/api/payments", json=body, headers=manager_headers)
          assert first.status_code == 201
          assert second.status_code == 201
          assert first.json()["id"] == second.json()["id"]
          assert Decimal(second.json()["amount"]) == Decimal("500")

          history = client.get("/api/payments/history", headers=auth_headers(tenant.id))
          assert history.json()["total"] == 1

     def test_webhook_completes_payment(self, client, make_user, make_unit, make_lease):
          tenant, unit = make_user(), make_unit()
          lease = make_lease(tenant, unit)
          headers = auth_headers(tenant.id)
          client.post("/api/payments", json=_rent_payment(tenant, unit, "api-2", "1000.00", "processing"),
                      headers=headers)

          event = {"transaction_id": "api-2", "amount": "1000.00", "status": "completed"}
          assert client.post("/api/payments/webhook", json=event).json()["status"] == "completed"

          stale = dict(event, status="processing")
          assert client.post("/api/payments/webhook", json=stale).json()["status"] == "completed"

          obligation = client.get(
               f"/api/leases/{lease.id}/obligation", params={"as_of": "2026-01-12"}, headers=headers,
          )
          assert obligation.json()["status"] == "paid"

     def test_webhook_amount_mismatch(self, client, make_user, make_unit, make_lease):
          tenant, unit = make_user(), make_unit()
          make_lease(tenant, unit)
          client.post("/api/payments", json=_rent_payment(tenant, unit, "api-3", status="pending"),
                      headers=auth_headers(tenant.id))

          event = {"transaction_id": "api-3", "amount": "1.00", "status": "completed"}
          assert client.post("/api/payments/webhook", json=event).status_code == 400

     def test_tenant_cannot_record_for_someone_else(self, client, make_user, make_unit):
          tenant, other = make_user(), make_user()
          response = client.post(
               "/api/payments", json=_rent_payment(other, make_unit(), "api-4", status="pending"),
               headers=auth_headers(tenant.id),
          )
          assert response.status_code == 403

     def test_tenant_cannot_settle_own_payment(self, client, make_user, make_unit, make_lease):
          tenant, unit = make_user(), make_unit()
          lease = make_lease(tenant, unit)
          headers = auth_headers(tenant.id)

          response = client.post(
               "/api/payments", json=_rent_payment(tenant, unit, "api-6", "1000.00", "completed"), headers=headers,
          )
          assert response.status_code == 403
          assert client.get("/api/payments/history", headers=headers).json()["total"] == 0

          # A pending payment may not be pushed to completed by the tenant either
          client.post("/api/payments", json=_rent_payment(tenant, unit, "api-7", "1000.00", "pending"), headers=headers)
          replay = client.post(
               "/api/payments", json=_rent_payment(tenant, unit, "api-7", "1000.00", "completed"), headers=headers,
          )
          assert replay.status_code == 403

          obligation = client.get(
               f"/api/leases/{lease.id}/obligation", params={"as_of": "2026-01-12"}, headers=headers,
          ).json()
          assert obligation["status"] == "due"
          assert obligation["days_overdue"] == 11
          assert Decimal(obligation["late_fee"]) == Decimal("50")

     def test_manager_records_cash_payment(self, client, manager_headers, make_user, make_unit, make_lease):
          tenant, unit = make_user(), make_unit()
          make_lease(tenant, unit)
          body = dict(_rent_payment(tenant, unit, "api-8", "1000.00"), payment_method="cash")
          response = client.post("/api/payments", json=body, headers=manager_headers)
          assert response.status_code == 201
          assert response.json()["status"] == "completed"

     def test_restricted_manager_cannot_credit_out_of_scope_tenant(
          self, client, make_user, make_unit, make_lease, assign_units,
     ):
          restricted = make_user(UserRole.RESTRICTED_MANAGER)
          unit_a, unit_c = make_unit(), make_unit()
          assign_units(restricted, unit_a)
          make_lease(make_user(), unit_a)
          tenant_c = make_user()
          lease_c = make_lease(tenant_c, unit_c)

          response = client.post(
               "/api/payments", json=_rent_payment(tenant_c, unit_a, "api-9", "1000.00"),
               headers=auth_headers(restricted.id),
          )
          assert response.status_code == 403

          obligation = client.get(
               f"/api/leases/{lease_c.id}/obligation", params={"as_of": "2026-01-12"},
               headers=auth_headers(tenant_c.id),
          )
          assert obligation.json()["status"] == "due"

     def test_payment_must_match_a_lease_on_the_unit(
          self, client, manager_headers, make_user, make_unit, make_lease,
     ):
          tenant, other_unit = make_user(), make_unit()
          make_lease(tenant, make_unit())
          make_lease(make_user(), other_unit)

          response = client.post(
               "/api/payments", json=_rent_payment(tenant, other_unit, "api-10", "1000.00"), headers=manager_headers,
          )
          assert response.status_code == 400
          assert response.json()["error"] == "ValidationError"

     def test_processor_outage_is_retryable(self, client, manager_headers, make_user, make_unit):
          class DownProcessor:
               def fetch_confirmation(self, transaction_id):
                    raise PaymentProcessingError("Payment processor unreachable")

          app.dependency_overrides[get_processor] = DownProcessor
          response = client.post("/api/payments/api-5/confirm", headers=manager_headers)
          assert response.status_code == 502
          assert response.json()["retryable"] is True


class TestOverviewRoutes:

     def test_dashboard(self, client, make_user, make_unit, make_lease):
          tenant = make_user()
          lease = make_lease(tenant, make_unit())
          response = client.get("/api/dashboard", params={"as_of": "2026-01-12"}, headers=auth_headers(tenant.id))
          assert response.status_code == 200
          assert response.json()["lease"]["id"] == lease.id
          assert response.json()["obligation"]["status"] == "due"

     def test_dashboard_without_lease(self, client, make_user):
          tenant = make_user()
          response = client.get("/api/dashboard", headers=auth_headers(tenant.id))
          assert response.status_code == 404
          assert response.json()["message"] == "No active lease found"

     def test_balance_summary(self, client, manager_headers, make_user, make_unit, make_lease):
          make_lease(make_user(), make_unit())
          response = client.get("/api/balances/summary", params={"as_of": "2026-01-12"}, headers=manager_headers)
          assert response.status_code == 200
          assert response.json()["by_status"] == {"due": 1}

     def test_reconcile_requires_full_manager(self, client, make_user):
          restricted = make_user(UserRole.RESTRICTED_MANAGER)
          response = client.post("/api/leases/reconcile", headers=auth_headers(restricted.id))
          assert response.status_code == 403


class TestNotificationRoutes:

     def test_webhook_outcome_reaches_tenant_inbox(self, client, make_user, make_unit, make_lease):
          tenant, unit = make_user(), make_unit()
          make_lease(tenant, unit)
          headers = auth_headers(tenant.id)
          client.post("/api/payments", json=_rent_payment(tenant, unit, "api-n1", "1000.00", "processing"),
                      headers=headers)
          client.post("/api/payments/webhook", json={"transaction_id": "api-n1", "amount": "1000.00",
                                                     "status": "completed"})

          inbox = client.get("/api/notifications", headers=headers).json()
          assert inbox["unread"] == 1
          [notice] = inbox["notifications"]
          assert notice["type"] == "payment_received"

          read = client.post(f"/api/notifications/{notice['id']}/read", headers=headers)
          assert read.json()["is_read"] is True
          assert client.get("/api/notifications", params={"unread_only": True}, headers=headers).json() == {
               "notifications": [], "unread": 0,
          }

     def test_other_users_notification_is_404(self, client, make_user, make_unit, make_lease, manager_headers):
          tenant, unit = make_user(), make_unit()
          make_lease(tenant, unit)
          client.post("/api/payments", json=_rent_payment(tenant, unit, "api-n2", "1000.00"), headers=manager_headers)
          notice_id = client.get("/api/notifications", headers=auth_headers(tenant.id)).json()["notifications"][0]["id"]

          response = client.post(f"/api/notifications/{notice_id}/read", headers=auth_headers(make_user().id))
          assert response.status_code == 404

     def test_payment_due_sweep(self, client, manager_headers, make_user, make_unit, make_lease):
          tenant = make_user()
          make_lease(tenant, make_unit())

          sweep = client.post("/api/notifications/payment-due", params={"as_of": "2026-01-12"}, headers=manager_headers)
          assert sweep.status_code == 200
          assert sweep.json()["sent"] == 1
          assert sweep.json()["notifications"][0]["priority"] == "high"

          again = client.post("/api/notifications/payment-due", params={"as_of": "2026-01-12"}, headers=manager_headers)
          assert again.json()["sent"] == 0

          marked = client.post("/api/notifications/read-all", headers=auth_headers(tenant.id))
          assert marked.json() == {"updated": 1}
