from .base import Base
from .user import User, UserRole, ManagerUnitAssignment
from .unit import Unit, PropertyType
from .lease import Lease, LeaseStatus, lease_additional_tenants
from .payment import Payment, PaymentType, PaymentMethod, PaymentStatus
from .service_request import ServiceRequest, ServiceRequestStatus, ServiceCategory, ServicePriority
from .notification import Notification, NotificationType, NotificationPriority

__all__ = [
     "Base",
     "User",
     "UserRole",
     "ManagerUnitAssignment",
     "Unit",
     "PropertyType",
     "Lease",
     "LeaseStatus",
     "lease_additional_tenants",
     "Payment",
     "PaymentType",
     "PaymentMethod",
     "PaymentStatus",
     "ServiceRequest",
     "ServiceRequestStatus",
     "ServiceCategory",
     "ServicePriority",
     "Notification",
     "NotificationType",
     "NotificationPriority",
]
