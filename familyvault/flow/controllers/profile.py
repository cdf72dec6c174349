"""
familyvault/flow/controllers/profile.py

Purpose: Profile section (best effort)

- Basic profile form via /users/profile
- Extended profile: completion, recent activity, picture,
  Aadhaar link + OTP verify, PAN, addresses, security settings/questions
- Any profile endpoint may fail without affecting the rest of the dashboard
"""

import asyncio
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as SchemaValidationError

from familyvault.core.errors import is_unauthenticated
from familyvault.flow.controllers.base import ControllerContext, SectionController
from familyvault.flow.states import Section
from familyvault.flow.view import Element, el, placeholder
from familyvault.schemas.documents import SelectedFile
from familyvault.schemas.profile import Address, SecuritySettings, SecurityQuestion, ProfileCompletion, ActivityEntry
from familyvault.schemas.user import UserProfile
from familyvault.services.profile_service import ProfileService
from familyvault.services.user_service import UserService
from familyvault.utils.constants import (
    PROFILE_LOAD_ERROR,
    PROFILE_UPDATED,
    PROFILE_UPDATE_FAILED,
    PROFILE_PICTURE_UPDATED,
    PROFILE_PICTURE_FAILED,
    AADHAAR_LINKED,
    AADHAAR_VERIFIED,
    PAN_ADDED,
    ADDRESS_SAVED,
    ADDRESS_DELETE_CONFIRM,
    ADDRESS_DELETED,
    FILL_ALL_FIELDS,
    SECURITY_SETTINGS_UPDATED,
    SECURITY_QUESTIONS_SAVED,
    GENERIC_ERROR,
)
from familyvault.utils.format_utils import format_date
from familyvault.utils.validation_utils import sanitize_input

COMPLETION_REGION = "profile-completion"
ACTIVITY_REGION = "profile-activity"


class ProfileController(SectionController):
    section = Section.PROFILE

    def __init__(self, ctx: ControllerContext, users: UserService, profile: ProfileService):
        super().__init__(ctx)
        self.users = users
        self.profile = profile
        self.basic: Optional[UserProfile] = None
        self.extended: Dict[str, Any] = {}
        self.verification_id: Optional[str] = None

    def bind(self):
        self.listen("profile:update", self.update_basic)
        self.listen("profile:picture", self.upload_picture)
        self.listen("profile:link-aadhaar", self.link_aadhaar)
        self.listen("profile:verify-aadhaar", self.verify_aadhaar)
        self.listen("profile:add-pan", self.add_pan)
        self.listen("profile:save-address", self.save_address)
        self.listen("profile:delete-address", self.delete_address)
        self.listen("profile:security-settings", self.update_security_settings)
        self.listen("profile:security-questions", self.save_security_questions)

    def reset(self):
        super().reset()
        self.basic = None
        self.extended = {}
        self.verification_id = None

    async def load(self):
        ticket = self.begin_load()
        basic, extended, completion, activity = await asyncio.gather(
            self.users.get_profile(),
            self.profile.get(),
            self.profile.completion(),
            self.profile.activity(),
            return_exceptions=True,
        )

        for result in (basic, extended, completion, activity):
            if isinstance(result, Exception) and is_unauthenticated(result):
                await self.background_failure(ticket, result, PROFILE_LOAD_ERROR)
                return

        if not self.is_current(ticket):
            return

        if isinstance(basic, Exception):
            await self.background_failure(ticket, basic, PROFILE_LOAD_ERROR)
        else:
            self.basic = basic
            self.extended = extended if isinstance(extended, dict) else {}
            self.surface.render(self.region, self.render_form(basic, self.extended))

        if isinstance(completion, Exception):
            await self.background_failure(ticket, completion, PROFILE_LOAD_ERROR, region=COMPLETION_REGION)
        else:
            self.surface.render(COMPLETION_REGION, self.render_completion(completion))

        if isinstance(activity, Exception):
            await self.background_failure(ticket, activity, PROFILE_LOAD_ERROR, region=ACTIVITY_REGION)
        else:
            self.surface.render(ACTIVITY_REGION, self.render_activity(activity))

    @staticmethod
    def render_form(basic: UserProfile, extended: Dict[str, Any]) -> Element:
        fields = [("name", "Full Name", basic.name), ("email", "Email", basic.email),
                  ("phone", "Phone", basic.phone), ("address", "Address", basic.address)]
        ids = extended.get("governmentIds") or {}
        aadhaar = ids.get("aadhaar") or {}
        pan = ids.get("pan") or {}
        linked = aadhaar.get("status") in ("pending", "verified")
        aadhaar_text = (aadhaar.get("maskedAadhaar") or "XXXX-XXXX-XXXX") if linked else "Not linked"
        return el(
            "form",
            [
                el("div", el("label", label, for_=f"profile-{name}"),
                   el("input", id=f"profile-{name}", name=name, value=value or "",
                      readonly="readonly" if name == "email" else None),
                   class_="form-group")
                for name, label, value in fields
            ],
            el("p", "Aadhaar: ", el("span", aadhaar_text, class_="aadhaar-number"),
               el("span", aadhaar["status"].capitalize(), class_="status-badge") if linked else None,
               class_="id-status aadhaar"),
            el("p", f"PAN: {pan.get('number') or 'Not added'}", class_="id-status pan"),
            el("button", "Save", type="submit", class_="btn btn-primary", data_event="profile:update"),
            class_="profile-form",
        )

    @staticmethod
    def render_completion(completion: ProfileCompletion) -> Element:
        return el(
            "div",
            el("span", f"{completion.percentage}%", class_="completion-value"),
            el("span", completion.level.capitalize(), class_="completion-level") if completion.level else None,
            el("ul", [el("li", item) for item in completion.suggestions]) if completion.suggestions else None,
            class_="profile-completion",
        )

    @staticmethod
    def render_activity(entries: List[ActivityEntry]) -> Element:
        if not entries:
            return placeholder("No recent activity")
        return el(
            "ul",
            [el("li", el("strong", e.action), " ", e.description or "", " ",
                el("small", format_date(e.timestamp))) for e in entries],
            class_="activity-list",
        )

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def _submit(self, control: str, action, success: str, fallback: str, reload: bool = True) -> bool:
        with self.busy(control):
            try:
                await action()
            except Exception as e:
                await self.report_failure(e, fallback)
                return False
        self.surface.alert(success, "success")
        if reload:
            await self.load()
        return True

    async def update_basic(self, name: str = "", phone: str = "", address: str = "", **_):
        patch = {
            "name": sanitize_input(name, 100),
            "phone": sanitize_input(phone, 20),
            "address": sanitize_input(address, 500),
        }
        await self._submit("profile-submit", lambda: self.users.update_profile(patch),
                           PROFILE_UPDATED, PROFILE_UPDATE_FAILED)

    async def upload_picture(self, file: Optional[SelectedFile] = None, **_):
        if file is None:
            self.surface.alert(FILL_ALL_FIELDS, "error")
            return
        await self._submit("picture-submit", lambda: self.profile.upload_picture(file),
                           PROFILE_PICTURE_UPDATED, PROFILE_PICTURE_FAILED)

    async def link_aadhaar(self, aadhaar_number: str = "", **_):
        with self.busy("aadhaar-link-submit"):
            try:
                result = await self.profile.link_aadhaar(aadhaar_number)
            except Exception as e:
                await self.report_failure(e, GENERIC_ERROR)
                return
        self.verification_id = result.verification_id
        self.surface.alert(AADHAAR_LINKED, "success")

    async def verify_aadhaar(self, otp: str = "", **_):
        if await self._submit("aadhaar-verify-submit",
                              lambda: self.profile.verify_aadhaar(self.verification_id, otp),
                              AADHAAR_VERIFIED, GENERIC_ERROR):
            self.verification_id = None

    async def add_pan(self, pan_number: str = "", **_):
        await self._submit("pan-submit", lambda: self.profile.add_pan(pan_number), PAN_ADDED, GENERIC_ERROR)

    async def save_address(self, **fields):
        try:
            address = Address.model_validate(fields)
        except SchemaValidationError:
            self.surface.alert(FILL_ALL_FIELDS, "error")
            return
        await self._submit("address-submit", lambda: self.profile.save_address(address), ADDRESS_SAVED, GENERIC_ERROR)

    async def delete_address(self, address_type: str = "", **_):
        if not await self.surface.confirm(ADDRESS_DELETE_CONFIRM):
            return
        await self._submit(f"address-delete:{address_type}", lambda: self.profile.delete_address(address_type),
                           ADDRESS_DELETED, GENERIC_ERROR)

    async def update_security_settings(self, **fields):
        try:
            settings = SecuritySettings.model_validate(fields)
        except SchemaValidationError:
            self.surface.alert(FILL_ALL_FIELDS, "error")
            return
        await self._submit("security-settings-submit", lambda: self.profile.update_security_settings(settings),
                           SECURITY_SETTINGS_UPDATED, GENERIC_ERROR, reload=False)

    async def save_security_questions(self, questions: Optional[List[Dict[str, str]]] = None, **_):
        try:
            parsed = [SecurityQuestion.model_validate(q) for q in questions or []]
        except SchemaValidationError:
            self.surface.alert(FILL_ALL_FIELDS, "error")
            return
        await self._submit("security-questions-submit", lambda: self.profile.save_security_questions(parsed),
                           SECURITY_QUESTIONS_SAVED, GENERIC_ERROR, reload=False)
