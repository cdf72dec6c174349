"""
familyvault/flow/controllers/base.py

Purpose: Shared view-controller lifecycle

- mount / unmount of gesture listeners
- Generation guard for loads (per controller + global session generation)
- Background failure -> inline placeholder, action failure -> alert
- Busy flag on submit controls, released in a finally path
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from familyvault.core.errors import describe_error, is_unauthenticated
from familyvault.flow.session import Session
from familyvault.flow.states import Section, Trigger, get_section_metadata
from familyvault.flow.view import Surface, EventHandler, placeholder

Ticket = Tuple[int, int]


@dataclass
class ControllerContext:
    """
    Collaborators every controller (and the blob viewer) receives from the
    session coordinator.
    """
    surface: Surface
    session: Session
    logger: logging.Logger
    on_unauthenticated: Callable[[BaseException], Awaitable[None]]
    on_trigger: Callable[..., Awaitable[None]]

    async def report_failure(self, exc: BaseException, fallback: str):
        """
        Surfaces a failed user action as an error alert.
        Unauthenticated failures go to the coordinator instead.
        """
        if is_unauthenticated(exc):
            await self.on_unauthenticated(exc)
            return
        self.logger.warning(f"Action failed: {exc}", extra={"uid": self.session.uid})
        self.surface.alert(describe_error(exc, fallback), "error")


class SectionController:
    """
    Base class for the dashboard section controllers.

    Subclasses implement load() and bind(); bind() registers gesture
    handlers through listen() so unmount() can detach them.
    """
    section: Section

    def __init__(self, ctx: ControllerContext):
        self.ctx = ctx
        self.surface = ctx.surface
        self.session = ctx.session
        self.logger = ctx.logger
        self.generation = 0
        self.mounted = False
        self._unsubscribers: List[Callable[[], None]] = []

    @property
    def region(self) -> str:
        return get_section_metadata(self.section).region

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def mount(self):
        if self.mounted:
            return
        self.bind()
        self.mounted = True

    def unmount(self):
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.mounted = False
        self.reset()

    def bind(self):
        pass

    def reset(self):
        """Drops transient state and invalidates in-flight loads."""
        self.generation += 1

    def listen(self, event: str, handler: EventHandler):
        self._unsubscribers.append(self.surface.listen(event, handler))

    async def load(self):
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Generation guard
    # ------------------------------------------------------------------

    def begin_load(self) -> Ticket:
        self.generation += 1
        return (self.generation, self.session.generation)

    def is_current(self, ticket: Ticket) -> bool:
        return ticket == (self.generation, self.session.generation)

    # ------------------------------------------------------------------
    # Failures
    # ------------------------------------------------------------------

    async def background_failure(self, ticket: Ticket, exc: BaseException, message: str, region: Optional[str] = None):
        """
        A background load failed: render an inline error placeholder, unless
        the result is stale or the session is gone.
        """
        if not self.is_current(ticket):
            self.logger.debug(f"Dropping stale {self.section.value} failure: {exc}")
            return
        if is_unauthenticated(exc):
            await self.ctx.on_unauthenticated(exc)
            return
        self.logger.warning(f"Failed to load {self.section.value}: {exc}", extra={"section": self.section.value})
        self.surface.render(region or self.region, placeholder(message, "error"))

    async def report_failure(self, exc: BaseException, fallback: str):
        await self.ctx.report_failure(exc, fallback)

    async def trigger(self, trigger: Trigger, **details: Any):
        await self.ctx.on_trigger(trigger, **details)

    @contextmanager
    def busy(self, control: str):
        self.surface.set_busy(control, True)
        try:
            yield
        finally:
            self.surface.set_busy(control, False)
