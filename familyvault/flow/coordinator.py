"""
familyvault/flow/coordinator.py

Purpose: Session coordinator

- Screen machine: LOGIN <-> REGISTER -> DASHBOARD -> LOGIN
- Reacts to auth transitions from the token holder
- Login / register / logout flows
- Section switching and cross-section refresh triggers
- Hard return to LOGIN on unauthenticated failures
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from familyvault.core.exceptions import VaultError
from familyvault.flow.blob_viewer import BlobViewer
from familyvault.flow.controllers.base import ControllerContext, SectionController
from familyvault.flow.controllers.documents import DocumentsController
from familyvault.flow.controllers.family import FamilyController
from familyvault.flow.controllers.overview import OverviewController
from familyvault.flow.controllers.profile import ProfileController
from familyvault.flow.controllers.upload import UploadController
from familyvault.flow.session import Session
from familyvault.flow.states import Screen, Section, Trigger, TRIGGER_RELOADS, is_valid_transition
from familyvault.flow.view import Surface
from familyvault.core.errors import describe_error
from familyvault.schemas.user import UserSync
from familyvault.services.auth_service import AuthTokenHolder
from familyvault.services.document_service import DocumentService
from familyvault.services.family_service import FamilyService
from familyvault.services.identity import IdentityProvider, IdentityUser
from familyvault.services.profile_service import ProfileService
from familyvault.services.user_service import UserService
from familyvault.utils.constants import (
    LOGIN_SUCCESS,
    LOGIN_FAILED,
    LOGOUT_SUCCESS,
    LOGOUT_FAILED,
    REGISTER_SUCCESS,
    REGISTER_FAILED,
    PASSWORDS_DONT_MATCH,
    WEAK_PASSWORD,
    FILL_ALL_FIELDS,
    SESSION_EXPIRED,
    MIN_PASSWORD_LENGTH,
)


class SessionCoordinator:
    """
    Owns the Session and routes between screens and dashboard sections.
    """

    def __init__(
        self,
        auth: AuthTokenHolder,
        identity: IdentityProvider,
        users: UserService,
        documents: DocumentService,
        family: FamilyService,
        profile: ProfileService,
        surface: Surface,
        logger: logging.Logger,
        document_list_limit: Optional[int] = None,
        default_family_name: str = "My Family",
    ):
        self.auth = auth
        self.identity = identity
        self.users = users
        self.surface = surface
        self.logger = logger
        self.session = Session()

        ctx = ControllerContext(
            surface=surface,
            session=self.session,
            logger=logger,
            on_unauthenticated=self.handle_unauthenticated,
            on_trigger=self.handle_trigger,
        )
        self.viewer = BlobViewer(ctx, documents)
        self.controllers: Dict[Section, SectionController] = {
            Section.OVERVIEW: OverviewController(ctx, documents),
            Section.DOCUMENTS: DocumentsController(ctx, documents, self.viewer, limit=document_list_limit),
            Section.FAMILY: FamilyController(ctx, family, default_group_name=default_family_name),
            Section.PROFILE: ProfileController(ctx, users, profile),
            Section.UPLOAD: UploadController(ctx, documents),
        }
        self._global_unsubscribers: List[Callable[[], None]] = []
        self._dashboard_unsubscribers: List[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def start(self):
        """
        Subscribes to auth transitions and the login/register gestures,
        then shows the login screen.
        """
        self._global_unsubscribers = [
            self.auth.subscribe(self._on_auth_state),
            self.surface.listen("auth:login", self.login),
            self.surface.listen("auth:register", self.register),
            self.surface.listen("auth:logout", self.logout),
            self.surface.listen("nav:screen", self._on_screen_gesture),
        ]
        self.auth.start()
        self.show_screen(Screen.LOGIN)

    def stop(self):
        for unsubscribe in self._global_unsubscribers + self._dashboard_unsubscribers:
            unsubscribe()
        self._global_unsubscribers = []
        self._dashboard_unsubscribers = []
        self.auth.stop()

    def show_screen(self, screen: Screen) -> bool:
        if screen != self.session.screen and not is_valid_transition(self.session.screen, screen):
            self.logger.warning(f"Ignoring screen transition {self.session.screen.value} -> {screen.value}")
            return False
        self.session.screen = screen
        self.surface.show_screen(screen.value)
        return True

    async def _on_screen_gesture(self, screen: str = "", **_):
        target = Screen(screen)
        if target == Screen.DASHBOARD:
            # Only an auth transition opens the dashboard
            return
        self.show_screen(target)

    # ------------------------------------------------------------------
    # Auth transitions
    # ------------------------------------------------------------------

    async def _on_auth_state(self, user: Optional[IdentityUser]):
        if user is not None:
            if self.session.screen != Screen.DASHBOARD:
                await self.enter_dashboard(user)
        elif self.session.screen == Screen.DASHBOARD:
            await self.leave_dashboard()

    async def enter_dashboard(self, user: IdentityUser):
        """
        Shows the dashboard on Overview. The user sync is best effort and
        never blocks entry.
        """
        self.session.user = user
        self.show_screen(Screen.DASHBOARD)
        self.logger.info("🏠 Entering dashboard", extra={"uid": user.uid})

        for controller in self.controllers.values():
            controller.mount()
        self._dashboard_unsubscribers = [self.surface.listen("nav:section", self._on_section_gesture)]

        await self.show_section(Section.OVERVIEW)
        await self._sync_user(user)

    async def _sync_user(self, user: IdentityUser):
        try:
            await self.users.sync(UserSync.from_identity(user))
            self.logger.info("✅ User synced", extra={"uid": user.uid})
        except Exception as e:
            self.logger.warning(f"⚠️ User sync failed: {e}", extra={"uid": user.uid})

    async def leave_dashboard(self):
        """
        Tears the dashboard down: viewer closed, controllers unmounted,
        Session reset (global generation bumped), persisted token cleared.
        """
        self.viewer.close()
        for unsubscribe in self._dashboard_unsubscribers:
            unsubscribe()
        self._dashboard_unsubscribers = []
        for controller in self.controllers.values():
            controller.unmount()
        self.session.reset()
        self.auth.clear()
        self.show_screen(Screen.LOGIN)
        self.logger.info("👋 Left dashboard")

    # ------------------------------------------------------------------
    # Explicit user actions
    # ------------------------------------------------------------------

    async def login(self, email: str = "", password: str = "", **_):
        if not email or not password:
            self.surface.alert(FILL_ALL_FIELDS, "error")
            return
        self.surface.set_busy("login-submit", True)
        try:
            await self.identity.sign_in(email.strip(), password)
        except Exception as e:
            self.logger.warning(f"Login failed: {e}")
            self.surface.alert(describe_error(e, LOGIN_FAILED), "error")
            return
        finally:
            self.surface.set_busy("login-submit", False)
        self.surface.alert(LOGIN_SUCCESS, "success")

    async def register(self, name: str = "", email: str = "", password: str = "", confirm_password: str = "", **_):
        """
        Creates an account, sends the verification e-mail and returns to Login.
        """
        if not email or not password:
            self.surface.alert(FILL_ALL_FIELDS, "error")
            return
        if password != confirm_password:
            self.surface.alert(PASSWORDS_DONT_MATCH, "error")
            return
        if len(password) < MIN_PASSWORD_LENGTH:
            self.surface.alert(WEAK_PASSWORD, "error")
            return

        self.surface.set_busy("register-submit", True)
        try:
            user = await self.identity.sign_up(email.strip(), password, (name or "").strip() or None)
            await self.identity.send_email_verification(user)
        except Exception as e:
            self.logger.warning(f"Registration failed: {e}")
            self.surface.alert(describe_error(e, REGISTER_FAILED), "error")
            return
        finally:
            self.surface.set_busy("register-submit", False)

        self.surface.alert(REGISTER_SUCCESS, "success")
        self.surface.reset_form("register-form")
        self.show_screen(Screen.LOGIN)

    async def logout(self, **_):
        try:
            await self.identity.sign_out()
        except Exception as e:
            self.logger.error(f"Logout failed: {e}")
            self.surface.alert(LOGOUT_FAILED, "error")
            return
        # The auth callback normally gets here first
        if self.session.screen == Screen.DASHBOARD:
            await self.leave_dashboard()
        self.surface.alert(LOGOUT_SUCCESS, "success")

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    async def _on_section_gesture(self, section: str = "", **_):
        await self.show_section(Section(section))

    async def show_section(self, section: Section):
        """
        Shows a section and (re)loads it. Selecting the visible section
        again simply reloads it.
        """
        if self.session.screen != Screen.DASHBOARD:
            self.logger.debug(f"Ignoring section {section.value} outside the dashboard")
            return
        self.session.section = section
        self.surface.show_section(section.value)
        await self.controllers[section].load()

    async def handle_trigger(self, trigger: Trigger, **details: Any):
        """
        Cross-section refresh after a mutation.
        """
        self.logger.info(f"🔄 {trigger.value}", extra={"section": self.session.section.value})
        if trigger == Trigger.DOCUMENT_DELETED:
            self.viewer.close_if_showing(details.get("document_id"))
        await asyncio.gather(*(self.controllers[section].load() for section in TRIGGER_RELOADS[trigger]))

    # ------------------------------------------------------------------
    # Unauthenticated failures
    # ------------------------------------------------------------------

    async def handle_unauthenticated(self, exc: BaseException):
        """
        A call found no usable credentials (or the backend answered 401):
        alert, sign out and return to Login. Outside the dashboard there is
        nothing to tear down.
        """
        if self.session.screen != Screen.DASHBOARD:
            self.logger.info(f"Unauthenticated call outside the dashboard: {exc}")
            return

        self.logger.warning(f"🔒 Session no longer authenticated: {exc}", extra={"uid": self.session.uid})
        self.surface.alert(SESSION_EXPIRED, "error")
        await self.leave_dashboard()
        try:
            await self.identity.sign_out()
        except VaultError as e:
            self.logger.warning(f"Identity sign-out failed: {e}")
