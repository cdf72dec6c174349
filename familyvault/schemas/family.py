"""
familyvault/schemas/family.py

Purpose: Family group payload schemas

- Family groups with their members and sent invitations
- Invitations addressed to the current user
- The invitation token (not the id) authenticates accept/reject
"""

from datetime import datetime
from typing import Annotated, Optional, List

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, AliasChoices, field_validator

from familyvault.utils.format_utils import member_display_name


def _optional_str(v):
    if v is None or v == "" or v == "undefined":
        return None
    return str(v)


# Mongo ids arrive as strings or objects; blanks and "undefined" mean absent
OptionalId = Annotated[Optional[str], BeforeValidator(_optional_str)]


class Member(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: OptionalId = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    user_id: OptionalId = Field(default=None, validation_alias=AliasChoices("userId", "user_id"))
    email: Optional[str] = Field(default=None, validation_alias=AliasChoices("email", "memberEmail"))
    display_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("displayName", "memberName", "display_name"),
    )
    name: Optional[str] = None
    role: str = "member"
    joined_at: Optional[datetime] = Field(default=None, validation_alias=AliasChoices("joinedAt", "addedAt", "joined_at"))
    status: str = "active"

    @property
    def member_key(self) -> Optional[str]:
        """Identifier used in the member-removal path."""
        return self.user_id or self.id

    @property
    def label(self) -> str:
        return member_display_name(self.display_name, self.name, self.email)


class Invitation(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: OptionalId = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    invitation_token: OptionalId = Field(
        default=None,
        validation_alias=AliasChoices("invitationToken", "token", "inviteToken", "invitation_token"),
    )
    inviter_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("invitedBy", "inviterName", "invitedByName", "inviterEmail", "inviter_name"),
    )
    invitee_email: Optional[str] = Field(default=None, validation_alias=AliasChoices("email", "invitee_email"))
    role: str = "member"
    created_at: Optional[datetime] = Field(default=None, validation_alias=AliasChoices("createdAt", "invitedAt", "created_at"))
    expires_at: Optional[datetime] = Field(default=None, validation_alias=AliasChoices("expiresAt", "expires_at"))
    status: str = "pending"
    family_group_id: OptionalId = Field(default=None, validation_alias=AliasChoices("familyGroupId", "family_group_id"))
    family_group_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("familyGroupName", "family_group_name"),
    )


class FamilyGroup(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., validation_alias=AliasChoices("_id", "id"))
    name: str = ""
    description: Optional[str] = None
    owner_uid: Optional[str] = Field(default=None, validation_alias=AliasChoices("createdBy", "ownerUid", "owner_uid"))
    members: List[Member] = Field(default_factory=list)
    invitations: List[Invitation] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v)

    @property
    def pending_invitations(self) -> List[Invitation]:
        return [inv for inv in self.invitations if inv.status == "pending"]


class FamilyGroupList(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    family_groups: List[FamilyGroup] = Field(
        default_factory=list,
        validation_alias=AliasChoices("familyGroups", "family_groups"),
    )


class InvitationList(BaseModel):
    model_config = ConfigDict(extra="ignore")

    invitations: List[Invitation] = Field(default_factory=list)
