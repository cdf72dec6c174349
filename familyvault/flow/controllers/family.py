"""
familyvault/flow/controllers/family.py

Purpose: Family section

- Loads my-groups and received invitations in parallel
- Members, sent invitations (resend / cancel), received invitations (accept / decline)
- Invite, create group, remove member
- Accept / decline always go by invitation token
"""

import asyncio
from typing import List, Optional

from familyvault.core.errors import is_unauthenticated
from familyvault.core.exceptions import StaleReferenceError
from familyvault.flow.controllers.base import ControllerContext, SectionController
from familyvault.flow.states import Section, Trigger
from familyvault.flow.view import Element, el, placeholder
from familyvault.schemas.family import FamilyGroup, Invitation, Member
from familyvault.services.family_service import FamilyService
from familyvault.utils.constants import (
    FAMILY_EMPTY,
    FAMILY_EMPTY_HINT,
    FAMILY_LOAD_ERROR,
    INVITATIONS_EMPTY,
    INVITATIONS_LOAD_ERROR,
    NO_FAMILY_GROUP,
    FILL_ALL_FIELDS,
    INVITE_SUCCESS,
    INVITE_FAILED,
    GROUP_CREATED,
    GROUP_CREATE_FAILED,
    INVALID_INVITATION_TOKEN,
    ACCEPT_SUCCESS,
    ACCEPT_FAILED,
    DECLINE_CONFIRM,
    DECLINE_SUCCESS,
    DECLINE_FAILED,
    CANCEL_INVITE_CONFIRM,
    CANCEL_INVITE_SUCCESS,
    CANCEL_INVITE_FAILED,
    RESEND_SUCCESS,
    RESEND_FAILED,
    REMOVE_MEMBER_CONFIRM,
    REMOVE_MEMBER_SUCCESS,
    REMOVE_MEMBER_FAILED,
)
from familyvault.utils.format_utils import format_date

MEMBERS_REGION = "family-members"
SENT_REGION = "family-sent-invitations"
RECEIVED_REGION = "family-invitations"


class FamilyController(SectionController):
    section = Section.FAMILY

    def __init__(self, ctx: ControllerContext, family: FamilyService, default_group_name: str = "My Family"):
        super().__init__(ctx)
        self.family = family
        self.default_group_name = default_group_name
        self.group: Optional[FamilyGroup] = None
        self.received: List[Invitation] = []

    def bind(self):
        self.listen("family:accept", self.accept_invitation)
        self.listen("family:decline", self.decline_invitation)
        self.listen("family:invite", self.invite)
        self.listen("family:create-group", self.create_group)
        self.listen("family:remove-member", self.remove_member)
        self.listen("family:resend", self.resend_invitation)
        self.listen("family:cancel", self.cancel_invitation)

    def reset(self):
        super().reset()
        self.group = None
        self.received = []

    # ------------------------------------------------------------------
    # Load / render
    # ------------------------------------------------------------------

    async def load(self):
        ticket = self.begin_load()
        groups, received = await asyncio.gather(
            self.family.list_my_groups(),
            self.family.list_pending_invitations(),
            return_exceptions=True,
        )

        for result in (groups, received):
            if isinstance(result, Exception) and is_unauthenticated(result):
                await self.background_failure(ticket, result, FAMILY_LOAD_ERROR)
                return

        if not self.is_current(ticket):
            self.logger.debug("Dropping stale family load")
            return

        if isinstance(groups, Exception):
            self.group = None
            await self.background_failure(ticket, groups, FAMILY_LOAD_ERROR, region=MEMBERS_REGION)
            await self.background_failure(ticket, groups, FAMILY_LOAD_ERROR, region=SENT_REGION)
        else:
            self.group = groups[0] if groups else None
            self.surface.render(MEMBERS_REGION, self.render_members(self.group))
            self.surface.render(SENT_REGION, self.render_sent(self.group))

        if isinstance(received, Exception):
            self.received = []
            await self.background_failure(ticket, received, INVITATIONS_LOAD_ERROR, region=RECEIVED_REGION)
        else:
            self.received = [inv for inv in received if inv.status == "pending"]
            self.surface.render(RECEIVED_REGION, self.render_received(self.received))

    @staticmethod
    def _member_card(member: Member) -> Element:
        return el(
            "div",
            el("div", member.label[:1].upper(), class_="member-avatar"),
            el("h4", member.label, class_="member-name"),
            el("p", member.email or "", class_="member-email"),
            el("span", member.role.title(), class_=f"role-badge role-{member.role}"),
            el("p", f"Joined {format_date(member.joined_at)}", class_="member-joined"),
            el("button", "Remove", class_="btn btn-danger", data_event="family:remove-member", data_id=member.member_key)
            if member.role != "owner" and member.member_key else None,
            class_="member-card",
            data_id=member.member_key,
        )

    def render_members(self, group: Optional[FamilyGroup]) -> Element:
        if group is None:
            return placeholder(NO_FAMILY_GROUP, hint=FAMILY_EMPTY_HINT)
        if not group.members:
            return placeholder(FAMILY_EMPTY, hint=FAMILY_EMPTY_HINT)
        return el(
            "div",
            el("h3", group.name, class_="group-name"),
            el("div", [self._member_card(m) for m in group.members], class_="members-grid"),
            class_="family-group",
            data_id=group.id,
        )

    @staticmethod
    def render_sent(group: Optional[FamilyGroup]) -> Element:
        pending = group.pending_invitations if group else []
        if not pending:
            return placeholder(INVITATIONS_EMPTY)
        return el(
            "div",
            [
                el(
                    "div",
                    el("p", inv.invitee_email or "", class_="invitee-email"),
                    el("span", inv.role.title(), class_="role-badge"),
                    el("p", f"Sent {format_date(inv.created_at)}", class_="invitation-date"),
                    el("button", "Resend", class_="btn btn-secondary", data_event="family:resend", data_id=inv.id),
                    el("button", "Cancel", class_="btn btn-danger", data_event="family:cancel", data_id=inv.id),
                    class_="invitation-item sent",
                    data_id=inv.id,
                )
                for inv in pending
            ],
            class_="invitations-list",
        )

    @staticmethod
    def render_received(invitations: List[Invitation]) -> Element:
        if not invitations:
            return placeholder(INVITATIONS_EMPTY)
        return el(
            "div",
            [
                el(
                    "div",
                    el("h4", inv.family_group_name or "Family Group"),
                    el("p", f"Invited by {inv.inviter_name or 'a family member'}", class_="inviter"),
                    el("span", inv.role.title(), class_="role-badge"),
                    el("p", f"Received {format_date(inv.created_at)}", class_="invitation-date"),
                    el("button", "Accept", class_="btn btn-success", data_event="family:accept",
                       data_token=inv.invitation_token, data_id=inv.id),
                    el("button", "Decline", class_="btn btn-danger", data_event="family:decline",
                       data_token=inv.invitation_token, data_id=inv.id),
                    class_="invitation-card",
                    data_id=inv.id,
                )
                for inv in invitations
            ],
            class_="invitations-list received",
        )

    # ------------------------------------------------------------------
    # Received invitations
    # ------------------------------------------------------------------

    def _token_for(self, token: Optional[str], invitation_id: Optional[str]) -> Optional[str]:
        """
        The token from the gesture wins; otherwise look the invitation up.
        An id alone never stands in for a token.
        """
        if token and token != "undefined":
            return token
        for inv in self.received:
            if invitation_id and inv.id == invitation_id:
                return inv.invitation_token
        return None

    async def accept_invitation(self, token: Optional[str] = None, invitation_id: Optional[str] = None, **_):
        token = self._token_for(token, invitation_id)
        with self.busy(f"accept:{token or invitation_id}"):
            try:
                await self.family.accept_invitation(token)
            except Exception as e:
                await self.report_failure(e, ACCEPT_FAILED)
                return
        self.logger.info("Invitation accepted")
        self.surface.alert(ACCEPT_SUCCESS, "success")
        await self.trigger(Trigger.INVITATION_ACCEPTED, token=token)

    async def decline_invitation(self, token: Optional[str] = None, invitation_id: Optional[str] = None, **_):
        token = self._token_for(token, invitation_id)
        if not token:
            await self.report_failure(StaleReferenceError(INVALID_INVITATION_TOKEN), DECLINE_FAILED)
            return
        if not await self.surface.confirm(DECLINE_CONFIRM):
            return
        with self.busy(f"decline:{token}"):
            try:
                await self.family.reject_invitation(token)
            except Exception as e:
                await self.report_failure(e, DECLINE_FAILED)
                return
        self.surface.alert(DECLINE_SUCCESS, "info")
        await self.load()

    # ------------------------------------------------------------------
    # Group management
    # ------------------------------------------------------------------

    async def invite(self, email: str = "", role: str = "member", **_):
        if not (email or "").strip():
            self.surface.alert(FILL_ALL_FIELDS, "error")
            return
        with self.busy("invite-submit"):
            try:
                group = self.group or await self.family.get_or_create_group(self.default_group_name)
                self.group = group
                await self.family.invite(group.id, email, role or "member")
            except Exception as e:
                await self.report_failure(e, INVITE_FAILED)
                return
        self.surface.alert(INVITE_SUCCESS, "success")
        self.surface.reset_form("invite-form")
        await self.load()

    async def create_group(self, name: str = "", description: str = "", **_):
        if not (name or "").strip():
            self.surface.alert(FILL_ALL_FIELDS, "error")
            return
        with self.busy("create-group-submit"):
            try:
                await self.family.create_group(name.strip(), (description or "").strip())
            except Exception as e:
                await self.report_failure(e, GROUP_CREATE_FAILED)
                return
        self.surface.alert(GROUP_CREATED, "success")
        self.surface.reset_form("create-group-form")
        await self.load()

    async def remove_member(self, member_id: Optional[str] = None, **_):
        if self.group is None or not member_id:
            await self.report_failure(StaleReferenceError(REMOVE_MEMBER_FAILED), REMOVE_MEMBER_FAILED)
            return
        if not await self.surface.confirm(REMOVE_MEMBER_CONFIRM):
            return
        with self.busy(f"remove-member:{member_id}"):
            try:
                await self.family.remove_member(self.group.id, member_id)
            except Exception as e:
                await self.report_failure(e, REMOVE_MEMBER_FAILED)
                return
        self.surface.alert(REMOVE_MEMBER_SUCCESS, "success")
        await self.trigger(Trigger.MEMBER_REMOVED, member_id=member_id)

    async def resend_invitation(self, invitation_id: Optional[str] = None, **_):
        with self.busy(f"resend:{invitation_id}"):
            try:
                await self.family.resend_invitation(invitation_id)
            except Exception as e:
                await self.report_failure(e, RESEND_FAILED)
                return
        self.surface.alert(RESEND_SUCCESS, "success")

    async def cancel_invitation(self, invitation_id: Optional[str] = None, **_):
        if not await self.surface.confirm(CANCEL_INVITE_CONFIRM):
            return
        with self.busy(f"cancel:{invitation_id}"):
            try:
                await self.family.cancel_invitation(invitation_id)
            except Exception as e:
                await self.report_failure(e, CANCEL_INVITE_FAILED)
                return
        self.surface.alert(CANCEL_INVITE_SUCCESS, "success")
        await self.load()
