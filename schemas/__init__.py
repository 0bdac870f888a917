from .lease import (
     LeaseTerms,
     LeaseCreate,
     LeaseRenew,
     LeaseTerminate,
     CoTenantAdd,
     LeaseFilter,
     LeaseResponse,
     LeaseListResponse,
)
from .payment import (
     PaymentCreate,
     ConfirmationEvent,
     PaymentResponse,
     PaymentHistoryResponse,
     ObligationStatusResponse,
)
from .unit import UnitCreate, UnitUpdate, UnitResponse
from .overview import (
     TenantResponse,
     ServiceRequestResponse,
     BalanceSummaryResponse,
     TenantDashboardResponse,
     ReconcileResponse,
)
from .notification import (
     NotificationResponse,
     NotificationListResponse,
     MarkAllReadResponse,
     PaymentDueSweepResponse,
)
from .validation import parse_model

__all__ = [
     "LeaseTerms",
     "LeaseCreate",
     "LeaseRenew",
     "LeaseTerminate",
     "CoTenantAdd",
     "LeaseFilter",
     "LeaseResponse",
     "LeaseListResponse",
     "PaymentCreate",
     "ConfirmationEvent",
     "PaymentResponse",
     "PaymentHistoryResponse",
     "ObligationStatusResponse",
     "UnitCreate",
     "UnitUpdate",
     "UnitResponse",
     "TenantResponse",
     "ServiceRequestResponse",
     "BalanceSummaryResponse",
     "TenantDashboardResponse",
     "ReconcileResponse",
     "NotificationResponse",
     "NotificationListResponse",
     "MarkAllReadResponse",
     "PaymentDueSweepResponse",
     "parse_model",
]
