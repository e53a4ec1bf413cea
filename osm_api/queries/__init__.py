# osm_api/queries/__init__.py
from . import actor_queries, reset_token_queries, service_request_queries

__all__ = [
    'actor_queries',
    'reset_token_queries',
    'service_request_queries'
]
