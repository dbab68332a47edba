"""Middleware package."""

from hrms.api.middleware.request_id import RequestIdMiddleware, get_request_id
from hrms.api.middleware.logging import LoggingMiddleware

__all__ = [
    "RequestIdMiddleware",
    "LoggingMiddleware",
    "get_request_id",
]
