# osm_api/routes/__init__.py
from .auth import auth_router
from .customers import customers_router
from .mechanics import mechanics_router
from .service_requests import service_requests_router

routers = [
    auth_router,
    customers_router,
    mechanics_router,
    service_requests_router
]

__all__ = ["routers"]
