"""
familyvault/services/profile_service.py

Purpose: Extended profile gateway (best effort)

- Profile read / update, completion and recent activity
- Profile picture upload (multipart field "profilePicture")
- Aadhaar link + OTP verify, PAN
- Addresses by type, security settings and questions

Callers treat every failure here as non-fatal for the dashboard.
"""

from typing import Dict, Any, List
from urllib.parse import quote

from familyvault.core.exceptions import ValidationError
from familyvault.schemas.documents import SelectedFile
from familyvault.schemas.profile import (
    AadhaarLinkResult,
    Address,
    SecuritySettings,
    SecurityQuestion,
    ProfileCompletion,
    ActivityEntry,
)
from familyvault.services.http_client import HttpClient, MultipartBody, ensure_success
from familyvault.utils.constants import (
    INVALID_AADHAAR,
    INVALID_OTP,
    INVALID_PAN,
    AADHAAR_LINK_FIRST,
    PROFILE_PICTURE_TYPES,
    FILE_TYPE_NOT_ALLOWED,
    SECURITY_QUESTIONS_INCOMPLETE,
    SECURITY_QUESTIONS_DUPLICATE,
    ADDRESS_TYPES,
    INVALID_ADDRESS_TYPE,
)
from familyvault.utils.validation_utils import validate_aadhaar, validate_pan, validate_otp_format, validate_file_type


class ProfileService:
    def __init__(self, http: HttpClient):
        self.http = http

    async def get(self) -> Dict[str, Any]:
        payload = await self.http.request("GET", "/profile")
        profile = payload.get("profile") if isinstance(payload, dict) else None
        return profile if isinstance(profile, dict) else {}

    async def update(self, data: Dict[str, Any]) -> Dict[str, Any]:
        payload = await self.http.request("POST", "/profile", data)
        return ensure_success(payload, "Profile update failed")

    async def completion(self) -> ProfileCompletion:
        payload = await self.http.request("GET", "/profile/completion")
        return ProfileCompletion.from_response(payload)

    async def activity(self, limit: int = 10) -> List[ActivityEntry]:
        payload = await self.http.request("GET", "/profile/activity", params={"limit": limit})
        entries = payload.get("activities") or payload.get("activity") or []
        return [ActivityEntry.model_validate(e) for e in entries]

    async def upload_picture(self, file: SelectedFile) -> Dict[str, Any]:
        if not validate_file_type(file.mime_type, PROFILE_PICTURE_TYPES):
            raise ValidationError(FILE_TYPE_NOT_ALLOWED)
        body = MultipartBody(files={"profilePicture": (file.name, file.content, file.mime_type)})
        payload = await self.http.request("POST", "/profile/picture", body)
        return ensure_success(payload, "Picture upload failed")

    async def link_aadhaar(self, aadhaar_number: str) -> AadhaarLinkResult:
        """
        Step one of Aadhaar linking. The returned verification id is needed
        for the OTP step.
        """
        number = (aadhaar_number or "").strip()
        if not validate_aadhaar(number):
            raise ValidationError(INVALID_AADHAAR)
        payload = await self.http.request("POST", "/profile/aadhaar/link", {"aadhaarNumber": number})
        ensure_success(payload, "Aadhaar link failed")
        return AadhaarLinkResult.model_validate(payload)

    async def verify_aadhaar(self, verification_id: str, otp: str) -> Dict[str, Any]:
        if not verification_id:
            raise ValidationError(AADHAAR_LINK_FIRST)
        if not validate_otp_format(otp):
            raise ValidationError(INVALID_OTP)
        payload = await self.http.request(
            "POST",
            "/profile/aadhaar/verify",
            {"verificationId": verification_id, "otp": otp.strip()},
        )
        return ensure_success(payload, "Aadhaar verification failed")

    async def add_pan(self, pan_number: str) -> Dict[str, Any]:
        number = (pan_number or "").strip().upper()
        if not validate_pan(number):
            raise ValidationError(INVALID_PAN)
        payload = await self.http.request("POST", "/profile/pan", {"number": number})
        return ensure_success(payload, "PAN update failed")

    async def save_address(self, address: Address) -> Dict[str, Any]:
        if address.type not in ADDRESS_TYPES:
            raise ValidationError(INVALID_ADDRESS_TYPE)
        payload = await self.http.request("POST", "/profile/address", address.to_payload())
        return ensure_success(payload, "Address save failed")

    async def delete_address(self, address_type: str) -> Dict[str, Any]:
        if address_type not in ADDRESS_TYPES:
            raise ValidationError(INVALID_ADDRESS_TYPE)
        payload = await self.http.request("DELETE", f"/profile/address/{quote(address_type, safe='')}")
        return ensure_success(payload, "Address delete failed")

    async def update_security_settings(self, settings: SecuritySettings) -> Dict[str, Any]:
        payload = await self.http.request("POST", "/profile/security/settings", settings.to_payload())
        return ensure_success(payload, "Security settings update failed")

    async def save_security_questions(self, questions: List[SecurityQuestion]) -> Dict[str, Any]:
        """
        Saves exactly two distinct, answered security questions.
        """
        if len(questions) != 2 or any(not q.question.strip() or not q.answer.strip() for q in questions):
            raise ValidationError(SECURITY_QUESTIONS_INCOMPLETE)
        if questions[0].question == questions[1].question:
            raise ValidationError(SECURITY_QUESTIONS_DUPLICATE)
        payload = await self.http.request(
            "POST",
            "/profile/security/questions",
            {"questions": [q.model_dump() for q in questions]},
        )
        return ensure_success(payload, "Security questions update failed")
