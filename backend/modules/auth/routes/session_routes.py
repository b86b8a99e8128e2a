# backend/modules/auth/routes/session_routes.py

import logging

from fastapi import APIRouter, Depends

from core.auth import AuthenticatedAdmin, AuthProvider
from core.deps import get_auth_provider, get_console_state, get_current_admin
from core.state import AdminConsoleState, ConsoleSnapshot, StateCleared

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session", tags=["Session"])


@router.get("/state", response_model=ConsoleSnapshot)
async def get_state(
    state: AdminConsoleState = Depends(get_console_state),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    """Current console state: profile, menu, orders and dashboard slices."""
    return state.snapshot()


@router.post("/load", response_model=ConsoleSnapshot)
async def load_session(
    state: AdminConsoleState = Depends(get_console_state),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    """
    Fetch every slice for the signed-in admin. Slices that fail keep
    their error message; the others still load.
    """
    return await state.load_all(admin.uid)


@router.post("/sign-out")
async def sign_out(
    provider: AuthProvider = Depends(get_auth_provider),
    state: AdminConsoleState = Depends(get_console_state),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    await provider.revoke_sessions(admin.uid)
    state.dispatch(StateCleared())
    logger.info(f"Admin signed out: {admin.uid}")
    return {"signed_out": True}
