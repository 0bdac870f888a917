# services/payment_processor.py
"""
Payment processor client - the only outbound call the ledger makes.

It looks up the processor's view of a transaction and returns it as a
ConfirmationEvent, the same shape the processor pushes to
POST /api/payments/webhook. Card and bank tokenization stay with the
processor; nothing here touches payment credentials.
"""
import base64
import logging
import os
from decimal import Decimal
from urllib.parse import quote

import requests
from dotenv import load_dotenv

from exceptions import NotFoundError, PaymentProcessingError, ValidationError
from models import PaymentStatus
from schemas.payment import ConfirmationEvent
from schemas.validation import parse_model

load_dotenv()

logger = logging.getLogger(__name__)

PAYMENT_PROCESSOR_BASE_URL = os.getenv("PAYMENT_PROCESSOR_BASE_URL")
PAYMENT_PROCESSOR_SECRET_KEY = os.getenv("PAYMENT_PROCESSOR_SECRET_KEY")

# Processor status vocabulary -> ledger status
PROCESSOR_STATUSES = {
     "processing": PaymentStatus.PROCESSING,
     "requires_capture": PaymentStatus.PROCESSING,
     "succeeded": PaymentStatus.COMPLETED,
     "failed": PaymentStatus.FAILED,
     "canceled": PaymentStatus.FAILED,
}


class PaymentProcessorClient:
     """HTTP client for the processor's transaction lookup endpoint."""

     def __init__(self, base_url: str = None, secret_key: str = None, timeout: int = 10):
          self.base_url = (base_url or PAYMENT_PROCESSOR_BASE_URL or "").rstrip("/")
          self.secret_key = secret_key or PAYMENT_PROCESSOR_SECRET_KEY
          self.timeout = timeout

     def _headers(self) -> dict:
          auth = base64.b64encode(f"{self.secret_key}:".encode()).decode()
          return {
               "Content-Type": "application/json",
               "Authorization": f"Basic {auth}",
          }

     def fetch_confirmation(self, transaction_id: str) -> ConfirmationEvent:
          """
          Fetch the processor's current state of a transaction.

          Raises:
               NotFoundError: The processor does not know the transaction
               PaymentProcessingError: Processor unreachable or erroring (retryable)
          """
          if not self.base_url or not self.secret_key:
               raise PaymentProcessingError("Payment processor is not configured")

          url = f"{self.base_url}/payments/{quote(transaction_id, safe='')}"
          try:
               response = requests.get(url, headers=self._headers(), timeout=self.timeout)
          except requests.RequestException as exc:
               logger.error("Payment processor request failed for %s: %s", transaction_id, exc)
               raise PaymentProcessingError(
                    "Payment processor unreachable",
                    detail={"transaction_id": transaction_id},
               ) from exc

          if response.status_code == 404:
               raise NotFoundError(f"Transaction {transaction_id} not found at payment processor")
          if response.status_code != 200:
               logger.error(
                    "Payment processor returned %s for %s: %s",
                    response.status_code, transaction_id, response.text,
               )
               raise PaymentProcessingError(
                    f"Payment processor error ({response.status_code})",
                    detail={"transaction_id": transaction_id},
               )

          data = response.json()
          status = PROCESSOR_STATUSES.get(data.get("status"))
          if status is None:
               raise PaymentProcessingError(
                    f"Unexpected payment processor status '{data.get('status')}'",
                    detail={"transaction_id": transaction_id},
               )
          try:
               return parse_model(ConfirmationEvent, {
                    "transaction_id": data.get("id", transaction_id),
                    # Processor amounts are in minor units (cents)
                    "amount": Decimal(str(data.get("amount", 0))) / 100,
                    "status": status,
                    "paid_at": data.get("paid_at"),
               })
          except ValidationError as exc:
               raise PaymentProcessingError(
                    "Malformed payment processor response",
                    detail={"transaction_id": transaction_id, "errors": exc.detail},
               ) from exc
