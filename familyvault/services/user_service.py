"""
familyvault/services/user_service.py

Purpose: Users resource gateway

- Sync the signed-in identity to the backend (idempotent upsert)
- Read / update the basic profile
"""

from typing import Dict, Any

from familyvault.schemas.user import UserSync, UserProfile
from familyvault.services.http_client import HttpClient, ensure_success


class UserService:
    def __init__(self, http: HttpClient):
        self.http = http

    async def sync(self, profile: UserSync) -> Dict[str, Any]:
        """
        Upserts the user record keyed by firebaseUID.
        Repeating the call with the same body changes nothing server-side.
        """
        payload = await self.http.request("POST", "/users/sync", profile.to_payload())
        return ensure_success(payload, "User sync failed")

    async def get_profile(self) -> UserProfile:
        payload = await self.http.request("GET", "/users/profile")
        return UserProfile.from_response(payload)

    async def update_profile(self, patch: Dict[str, Any]) -> Dict[str, Any]:
        payload = await self.http.request("PUT", "/users/profile", patch)
        return ensure_success(payload, "Profile update failed")
