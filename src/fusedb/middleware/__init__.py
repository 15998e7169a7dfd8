"""Middleware base class and built-in middleware."""

from .base import Middleware
from .crypto import CryptoMiddleware
from .logger import LoggingMiddleware

__all__ = [
    "Middleware",
    "CryptoMiddleware",
    "LoggingMiddleware",
]
