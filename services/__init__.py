# services/__init__.py
from .access_scope import Actor, FullScope, RestrictedScope, load_actor, resolve
from .lease_registry import LeaseRegistry
from .notification_service import NotificationService
from .payment_ledger import ObligationStatus, PaymentHistory, PaymentLedger
from .late_fee_policy import FlatLateFeePolicy, DailyAccrualLateFeePolicy, get_late_fee_policy
from .payment_processor import PaymentProcessorClient
from .portfolio_service import PortfolioService
from .unit_service import UnitService

__all__ = [
     "Actor",
     "FullScope",
     "RestrictedScope",
     "load_actor",
     "resolve",
     "LeaseRegistry",
     "NotificationService",
     "ObligationStatus",
     "PaymentHistory",
     "PaymentLedger",
     "FlatLateFeePolicy",
     "DailyAccrualLateFeePolicy",
     "get_late_fee_policy",
     "PaymentProcessorClient",
     "PortfolioService",
     "UnitService",
]
