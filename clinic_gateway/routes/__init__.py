from .admin import router as admin_router
from .appointments import router as appointments_router
from .health import create_health_router
from .patients import router as patients_router
from .uploads import router as uploads_router

__all__ = [
    "admin_router",
    "appointments_router",
    "create_health_router",
    "patients_router",
    "uploads_router",
]
