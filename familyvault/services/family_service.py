"""
familyvault/services/family_service.py

Purpose: Family resource gateway

- Groups owned by / including the current user
- Invitations: send, resend, cancel, accept / reject by token
- Member removal
"""

from typing import Optional, List
from urllib.parse import quote

from familyvault.core.exceptions import ValidationError, StaleReferenceError
from familyvault.schemas.family import FamilyGroup, FamilyGroupList, Invitation, InvitationList
from familyvault.services.http_client import HttpClient, ensure_success
from familyvault.utils.constants import (
    FAMILY_ROLES,
    INVALID_EMAIL,
    INVALID_ROLE,
    INVALID_INVITATION_TOKEN,
    GROUP_CREATE_FAILED,
)
from familyvault.utils.validation_utils import validate_email


def _seg(value: str) -> str:
    return quote(str(value), safe="")


class FamilyService:
    def __init__(self, http: HttpClient):
        self.http = http

    async def list_my_groups(self) -> List[FamilyGroup]:
        payload = await self.http.request("GET", "/family/my-groups")
        return FamilyGroupList.model_validate(payload).family_groups

    async def create_group(self, name: str, description: str = "") -> FamilyGroup:
        payload = await self.http.request(
            "POST",
            "/family/create",
            {"name": name, "description": description},
        )
        ensure_success(payload, GROUP_CREATE_FAILED)
        return FamilyGroup.model_validate(payload.get("familyGroup") or {})

    async def get_or_create_group(self, default_name: str) -> FamilyGroup:
        """
        Resolves the client's single family group: the first listed one,
        or a new group created on demand.
        """
        groups = await self.list_my_groups()
        if groups:
            return groups[0]
        return await self.create_group(default_name, f"{default_name} group")

    async def invite(self, group_id: str, email: str, role: str = "member"):
        email = (email or "").strip()
        if not validate_email(email):
            raise ValidationError(INVALID_EMAIL)
        if role not in FAMILY_ROLES:
            raise ValidationError(INVALID_ROLE)
        payload = await self.http.request(
            "POST",
            f"/family/{_seg(group_id)}/invite",
            {"email": email, "role": role},
        )
        ensure_success(payload, "Invitation failed")

    async def list_pending_invitations(self) -> List[Invitation]:
        payload = await self.http.request("GET", "/family/invitations/pending")
        return InvitationList.model_validate(payload).invitations

    async def accept_invitation(self, token: Optional[str]):
        """
        Accepts an invitation. The token, never the invitation id,
        authenticates the call.

        Raises:
            StaleReferenceError: No token available; nothing is sent
        """
        if not token:
            raise StaleReferenceError(INVALID_INVITATION_TOKEN)
        payload = await self.http.request("POST", f"/family/accept-invitation/{_seg(token)}")
        ensure_success(payload, "Accept failed")

    async def reject_invitation(self, token: Optional[str]):
        if not token:
            raise StaleReferenceError(INVALID_INVITATION_TOKEN)
        payload = await self.http.request("POST", f"/family/reject-invitation/{_seg(token)}")
        ensure_success(payload, "Reject failed")

    async def remove_member(self, group_id: str, member_id: str):
        payload = await self.http.request("DELETE", f"/family/{_seg(group_id)}/members/{_seg(member_id)}")
        ensure_success(payload, "Remove failed")

    async def resend_invitation(self, invitation_id: str):
        payload = await self.http.request("POST", f"/family/invitations/{_seg(invitation_id)}/resend")
        ensure_success(payload, "Resend failed")

    async def cancel_invitation(self, invitation_id: str):
        payload = await self.http.request("DELETE", f"/family/invitations/{_seg(invitation_id)}")
        ensure_success(payload, "Cancel failed")
