# backend/modules/auth/services/profile_service.py

"""
Admin profile storage.

One profile document per authenticated admin, keyed by the identity
provider's uid. The e-mail address is copied from the account at sign-up
and never changes afterwards.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from core.auth import AuthProvider
from core.config import Settings, settings as default_settings
from core.exceptions import ValidationError
from core.stores import DocumentStore

from ..schemas.profile_schemas import AdminProfile, AdminProfileUpdate, AdminSignup

logger = logging.getLogger(__name__)

IMMUTABLE_PROFILE_FIELDS = ("uid", "createdAt", "role")


class ProfileService:
    def __init__(self, document_store: DocumentStore, config: Settings = default_settings):
        self.document_store = document_store
        self.collection = config.admins_collection

    async def get_profile(self, uid: str) -> Optional[AdminProfile]:
        document = await self.document_store.get(self.collection, uid)
        if document is None:
            return None
        return AdminProfile.model_validate(document)

    async def create_profile(
        self, uid: str, email: str, name: str, restaurant_name: str = "", restaurant_phone: str = ""
    ) -> AdminProfile:
        profile = AdminProfile(
            uid=uid,
            email=email,
            name=name,
            restaurant_name=restaurant_name,
            restaurant_phone=restaurant_phone,
            role="admin",
            created_at=datetime.now(timezone.utc),
        )
        data = profile.model_dump(by_alias=True)
        await self.document_store.set(self.collection, uid, data)
        logger.info(f"Admin profile created for {uid}")
        return profile

    async def sign_up(self, provider: AuthProvider, signup: AdminSignup) -> AdminProfile:
        """Create the auth account, then its admin profile."""
        uid = await provider.create_user(signup.email, signup.password, signup.name)
        return await self.create_profile(
            uid,
            email=signup.email,
            name=signup.name,
            restaurant_name=signup.restaurant_name,
            restaurant_phone=signup.restaurant_phone,
        )

    async def update_profile(
        self, uid: str, changes: AdminProfileUpdate, account_email: Optional[str] = None
    ) -> AdminProfile:
        """
        Apply a partial edit. A missing profile document is created from
        the edit (with the account e-mail), as happens for admins whose
        profile was never written at sign-up.
        """
        patch = changes.model_dump(by_alias=True, exclude_unset=True)
        for key in IMMUTABLE_PROFILE_FIELDS:
            patch.pop(key, None)

        existing = await self.get_profile(uid)
        requested_email = patch.pop("email", None)
        current_email = existing.email if existing else account_email
        if requested_email is not None and current_email and requested_email != current_email:
            raise ValidationError("Email cannot be changed")

        if existing is None:
            profile = AdminProfile.model_validate(
                {**patch, "uid": uid, "email": current_email or requested_email or ""}
            )
            await self.document_store.set(
                self.collection, uid, profile.model_dump(by_alias=True, exclude_none=True)
            )
            logger.info(f"Admin profile created on first edit for {uid}")
            return profile

        if patch:
            patch["uid"] = uid
            await self.document_store.update(self.collection, uid, patch)
            logger.info(f"Admin profile updated for {uid}")

        updates = changes.model_dump(exclude_unset=True, exclude={"email"})
        return existing.model_copy(update=updates)
