# tests/test_payment_processor.py
from decimal import Decimal

import pytest
import requests

from exceptions import NotFoundError, PaymentProcessingError
from models import PaymentStatus
from services import payment_processor
from services.payment_processor import PaymentProcessorClient


class FakeResponse:

     def __init__(self, status_code, payload=None, text=""):
          self.status_code = status_code
          self._payload = payload or {}
          self.text = text

     def json(self):
          return self._payload


@pytest.fixture
def client():
     return PaymentProcessorClient(base_url="https://processor.test/v1/", secret_key="sk_test")


def _respond_with(monkeypatch, response, calls=None):
     def fake_get(url, headers=None, timeout=None):
          if calls is not None:
               calls.append({"url": url, "headers": headers, "timeout": timeout})
          return response
     monkeypatch.setattr(payment_processor.requests, "get", fake_get)


class TestFetchConfirmation:

     def test_succeeded_payment(self, monkeypatch, client):
          calls = []
          _respond_with(
               monkeypatch,
               FakeResponse(200, {"id": "pi_1", "amount": 100000, "status": "succeeded",
                                  "paid_at": "2026-01-03T12:00:00"}),
               calls,
          )

          event = client.fetch_confirmation("pi_1")
          assert event.transaction_id == "pi_1"
          assert event.amount == Decimal("1000")
          assert event.status == PaymentStatus.COMPLETED
          assert calls[0]["url"] == "https://processor.test/v1/payments/pi_1"
          assert calls[0]["headers"]["Authorization"].startswith("Basic ")
          assert calls[0]["timeout"] == 10

     @pytest.mark.parametrize(
          "processor_status, expected",
          [("processing", PaymentStatus.PROCESSING), ("canceled", PaymentStatus.FAILED)],
     )
     def test_status_mapping(self, monkeypatch, client, processor_status, expected):
          _respond_with(monkeypatch, FakeResponse(200, {"id": "pi_2", "amount": 500, "status": processor_status}))
          assert client.fetch_confirmation("pi_2").status == expected

     def test_unknown_transaction(self, monkeypatch, client):
          _respond_with(monkeypatch, FakeResponse(404))
          with pytest.raises(NotFoundError):
               client.fetch_confirmation("pi_missing")

     def test_upstream_error_is_retryable(self, monkeypatch, client):
          _respond_with(monkeypatch, FakeResponse(503, text="unavailable"))
          with pytest.raises(PaymentProcessingError) as excinfo:
               client.fetch_confirmation("pi_3")
          assert excinfo.value.retryable
          assert excinfo.value.to_dict()["retryable"] is True

     def test_network_failure(self, monkeypatch, client):
          def fake_get(url, headers=None, timeout=None):
               raise requests.ConnectionError("connection refused")
          monkeypatch.setattr(payment_processor.requests, "get", fake_get)

          with pytest.raises(PaymentProcessingError):
               client.fetch_confirmation("pi_4")

     def test_unexpected_status(self, monkeypatch, client):
          _respond_with(monkeypatch, FakeResponse(200, {"id": "pi_5", "amount": 100, "status": "disputed"}))
          with pytest.raises(PaymentProcessingError):
               client.fetch_confirmation("pi_5")

     def test_malformed_amount(self, monkeypatch, client):
          _respond_with(monkeypatch, FakeResponse(200, {"id": "pi_6", "amount": -100, "status": "succeeded"}))
          with pytest.raises(PaymentProcessingError):
               client.fetch_confirmation("pi_6")

     def test_not_configured(self):
          unconfigured = PaymentProcessorClient(base_url="", secret_key="")
          with pytest.raises(PaymentProcessingError):
               unconfigured.fetch_confirmation("pi_7")
