# backend/modules/auth/routes/profile_routes.py

"""
Admin profile endpoints.

Sign-up is the only unauthenticated route: it creates the auth account and
the admin profile that the authentication gate checks for.
"""

import logging

from fastapi import APIRouter, Depends, Request, status

from core.auth import AuthenticatedAdmin, AuthProvider
from core.deps import get_auth_provider, get_console_state, get_current_admin
from core.exceptions import NotFoundError
from core.state import AdminConsoleState, ProfileLoaded, ProfileUpdated

from ..schemas.profile_schemas import AdminProfile, AdminProfileUpdate, AdminSignup
from ..services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["Profile"])


def get_profile_service(request: Request) -> ProfileService:
    return request.app.state.profile_service


@router.get("", response_model=AdminProfile)
async def get_profile(
    service: ProfileService = Depends(get_profile_service),
    state: AdminConsoleState = Depends(get_console_state),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    profile = await state.track("profile", service.get_profile(admin.uid))
    state.dispatch(ProfileLoaded(profile))
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


@router.patch("", response_model=AdminProfile)
async def update_profile(
    changes: AdminProfileUpdate,
    service: ProfileService = Depends(get_profile_service),
    state: AdminConsoleState = Depends(get_console_state),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    """Edit name and restaurant details. The e-mail address cannot change."""
    profile = await state.track(
        "profile", service.update_profile(admin.uid, changes, account_email=admin.email)
    )
    state.dispatch(ProfileUpdated(profile))
    return profile


@router.post("/signup", response_model=AdminProfile, status_code=status.HTTP_201_CREATED)
async def sign_up(
    signup: AdminSignup,
    service: ProfileService = Depends(get_profile_service),
    provider: AuthProvider = Depends(get_auth_provider),
):
    profile = await service.sign_up(provider, signup)
    logger.info(f"Admin signed up: {profile.uid}")
    return profile
