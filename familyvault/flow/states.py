"""
familyvault/flow/states.py

Purpose: Defines screens, dashboard sections and viewer states

- Enums for the top-level screen machine (LOGIN, REGISTER, DASHBOARD)
- Enums for dashboard sections (OVERVIEW, DOCUMENTS, FAMILY, PROFILE, UPLOAD)
- Blob viewer states (CLOSED, LOADING, OPEN)
- State transition validation
- Metadata for each section (title, region, background load)
"""

from enum import Enum
from typing import Dict, List
from dataclasses import dataclass


class Screen(str, Enum):
    """
    Top-level screens. Only DASHBOARD requires an authenticated user.
    """
    LOGIN = "login"
    REGISTER = "register"
    DASHBOARD = "dashboard"


class Section(str, Enum):
    """
    Dashboard sections. Each one is owned by a view controller.
    """
    OVERVIEW = "overview"
    DOCUMENTS = "documents"
    FAMILY = "family"
    PROFILE = "profile"
    UPLOAD = "upload"


class ViewerState(str, Enum):
    CLOSED = "closed"
    LOADING = "loading"
    OPEN = "open"


@dataclass
class SectionMetadata:
    """
    Metadata associated with each dashboard section.
    """
    name: Section
    title: str
    region: str  # Surface region the section renders into
    description: str = ""


SECTION_METADATA: Dict[Section, SectionMetadata] = {
    Section.OVERVIEW: SectionMetadata(
        name=Section.OVERVIEW,
        title="Overview",
        region="overview",
        description="Dashboard counters from document statistics"
    ),
    Section.DOCUMENTS: SectionMetadata(
        name=Section.DOCUMENTS,
        title="My Documents",
        region="documents",
        description="Own documents grid plus documents shared with the user"
    ),
    Section.FAMILY: SectionMetadata(
        name=Section.FAMILY,
        title="Family",
        region="family",
        description="Group members, sent invitations and received invitations"
    ),
    Section.PROFILE: SectionMetadata(
        name=Section.PROFILE,
        title="Profile",
        region="profile",
        description="Basic and extended profile (best effort)"
    ),
    Section.UPLOAD: SectionMetadata(
        name=Section.UPLOAD,
        title="Upload Document",
        region="upload",
        description="Upload form with the selected file; nothing to fetch"
    ),
}


# Valid screen transitions
SCREEN_TRANSITIONS: Dict[Screen, List[Screen]] = {
    Screen.LOGIN: [
        Screen.REGISTER,
        Screen.DASHBOARD,
        Screen.LOGIN,
    ],
    Screen.REGISTER: [
        Screen.LOGIN,
        Screen.DASHBOARD,
        Screen.REGISTER,
    ],
    Screen.DASHBOARD: [
        Screen.LOGIN,  # Sign-out or expired session
        Screen.DASHBOARD,
    ],
}


VIEWER_TRANSITIONS: Dict[ViewerState, List[ViewerState]] = {
    ViewerState.CLOSED: [ViewerState.LOADING],
    ViewerState.LOADING: [ViewerState.OPEN, ViewerState.CLOSED],
    ViewerState.OPEN: [ViewerState.CLOSED],
}


def is_valid_transition(from_screen: Screen, to_screen: Screen) -> bool:
    """
    Checks if a screen transition is valid.

    Args:
        from_screen: Current screen
        to_screen: Target screen

    Returns:
        True if transition is allowed, False otherwise
    """
    return to_screen in SCREEN_TRANSITIONS.get(from_screen, [])


def is_valid_viewer_transition(from_state: ViewerState, to_state: ViewerState) -> bool:
    return to_state in VIEWER_TRANSITIONS.get(from_state, [])


def get_section_metadata(section: Section) -> SectionMetadata:
    return SECTION_METADATA[section]


class Trigger(str, Enum):
    """
    Cross-section refresh triggers raised by controllers after a mutation.
    """
    DOCUMENT_UPLOADED = "document_uploaded"
    DOCUMENT_DELETED = "document_deleted"
    INVITATION_ACCEPTED = "invitation_accepted"
    MEMBER_REMOVED = "member_removed"


# Sections reloaded by each trigger
TRIGGER_RELOADS: Dict[Trigger, List[Section]] = {
    Trigger.DOCUMENT_UPLOADED: [Section.DOCUMENTS, Section.OVERVIEW],
    Trigger.DOCUMENT_DELETED: [Section.DOCUMENTS, Section.OVERVIEW],
    Trigger.INVITATION_ACCEPTED: [Section.FAMILY, Section.OVERVIEW],
    Trigger.MEMBER_REMOVED: [Section.FAMILY, Section.OVERVIEW],
}
