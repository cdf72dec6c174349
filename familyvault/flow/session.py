"""
familyvault/flow/session.py

Purpose: Ephemeral client session

- Current user handle, visible screen and section
- Document being viewed and file pending upload
- Global generation, bumped on sign-out to invalidate in-flight work
"""

from dataclasses import dataclass
from typing import Optional, Any

from familyvault.flow.states import Screen, Section
from familyvault.schemas.documents import SelectedFile


@dataclass
class Session:
    """
    Owned by the session coordinator. Controllers hold a reference and may
    update the viewing / selected-file fields; reset() is called in place on
    sign-out so those references stay valid.
    """
    user: Optional[Any] = None
    screen: Screen = Screen.LOGIN
    section: Section = Section.OVERVIEW
    viewing_document_id: Optional[str] = None
    selected_file: Optional[SelectedFile] = None
    generation: int = 0

    @property
    def uid(self) -> Optional[str]:
        return getattr(self.user, "uid", None)

    def reset(self):
        self.user = None
        self.section = Section.OVERVIEW
        self.viewing_document_id = None
        self.selected_file = None
        self.generation += 1
