"""
familyvault/schemas/profile.py

Purpose: Extended profile payload schemas

- Government-ID linking (Aadhaar two-step verify, PAN)
- Addresses keyed by type
- Security settings and questions
- Completion and activity summaries
"""

from datetime import datetime
from typing import Any, Dict, Optional, List

from pydantic import BaseModel, ConfigDict, Field, AliasChoices


class AadhaarLinkResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    verification_id: str = Field(..., validation_alias=AliasChoices("verificationId", "verification_id"))
    masked_aadhaar: Optional[str] = Field(default=None, validation_alias=AliasChoices("maskedAadhaar", "masked_aadhaar"))


class Address(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str = "permanent"
    address_line1: str = Field(..., alias="addressLine1")
    address_line2: Optional[str] = Field(default=None, alias="addressLine2")
    city: str
    state: str
    pincode: str
    country: str = "India"

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class SecuritySettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    two_factor_enabled: bool = Field(default=False, alias="twoFactorEnabled")
    login_notifications: bool = Field(default=True, alias="loginNotifications")
    document_access_notifications: bool = Field(default=True, alias="documentAccessNotifications")
    session_timeout: int = Field(default=30, alias="sessionTimeout")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class SecurityQuestion(BaseModel):
    question: str
    answer: str


class ProfileCompletion(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    percentage: int = 0
    level: Optional[str] = None
    badges: List[Dict[str, Any]] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list, validation_alias=AliasChoices("suggestions", "missing"))

    @classmethod
    def from_response(cls, payload: dict) -> "ProfileCompletion":
        body = payload.get("completion") if isinstance(payload.get("completion"), dict) else payload
        return cls.model_validate(body)


class ActivityEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: str = ""
    description: Optional[str] = None
    timestamp: Optional[datetime] = None
