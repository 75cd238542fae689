"""
Web UI Module - FastAPI-based HTTP interface
============================================

This module exposes the rules engine over HTTP:
- Engine status
- Message matching
- Placeholder listing
- Rule reloading
"""

from .app import create_app, run_app
from .routes import router

__all__ = [
    "create_app",
    "run_app",
    "router",
]
