# routers/__init__.py
from .leases import router as leases_router
from .payments import router as payments_router
from .units import router as units_router
from .overview import router as overview_router
from .notifications import router as notifications_router

__all__ = [
     "leases_router",
     "payments_router",
     "units_router",
     "overview_router",
     "notifications_router",
]
