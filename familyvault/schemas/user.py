"""
familyvault/schemas/user.py

Purpose: User payload schemas

- Sync-up body built from the identity provider's user handle
- Basic profile returned by /users/profile
"""

from datetime import datetime, timezone
from typing import Optional, Any

from pydantic import BaseModel, ConfigDict, Field


class UserSync(BaseModel):
    """
    Body of POST /users/sync. Built lazily on sign-in; never destroyed by the client.
    """
    model_config = ConfigDict(populate_by_name=True)

    firebase_uid: str = Field(..., alias="firebaseUID")
    email: Optional[str] = None
    name: str
    email_verified: bool = Field(default=False, alias="emailVerified")
    last_login: datetime = Field(..., alias="lastLogin")
    profile_picture: Optional[str] = Field(default=None, alias="profilePicture")
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")

    @classmethod
    def from_identity(cls, user: Any, last_login: Optional[datetime] = None) -> "UserSync":
        """
        Builds the sync body from an identity-provider user handle.

        The display name falls back to the e-mail local part, then "User".
        """
        name = user.display_name or (user.email.split("@")[0] if user.email else "") or "User"
        return cls(
            firebase_uid=user.uid,
            email=user.email,
            name=name,
            email_verified=bool(user.email_verified),
            last_login=last_login or datetime.now(timezone.utc),
            profile_picture=user.photo_url,
            phone_number=user.phone_number,
        )

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class UserProfile(BaseModel):
    """Basic profile fields edited from the Profile section."""
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    @classmethod
    def from_response(cls, payload: dict) -> "UserProfile":
        body = payload.get("profile") if isinstance(payload.get("profile"), dict) else payload
        return cls.model_validate({k: v for k, v in body.items() if k != "success"})
