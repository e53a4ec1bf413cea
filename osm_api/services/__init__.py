# osm_api/services/__init__.py
from . import credentials, password_reset, service_requests

__all__ = [
    "credentials",
    "password_reset",
    "service_requests"
]
