# backend/core/deps.py

"""
Common dependencies for the application
"""

from fastapi import Request

from .auth import (
    get_auth_provider,
    get_current_admin,
    get_current_identity,
    get_document_store,
)
from .state import AdminConsoleState
from .stores import RealtimeStore

__all__ = [
    "get_auth_provider",
    "get_console_state",
    "get_current_admin",
    "get_current_identity",
    "get_document_store",
    "get_realtime_store",
]


def get_realtime_store(request: Request) -> RealtimeStore:
    return request.app.state.realtime_store


def get_console_state(request: Request) -> AdminConsoleState:
    return request.app.state.console_state
