"""
familyvault/flow/controllers/overview.py

Purpose: Overview section

- Loads document statistics (family count comes from stats.familyMembers)
- Renders the dashboard counters
"""

from typing import Optional

from familyvault.flow.controllers.base import ControllerContext, SectionController
from familyvault.flow.states import Section
from familyvault.flow.view import Element, el
from familyvault.schemas.documents import DocumentStats
from familyvault.services.document_service import DocumentService
from familyvault.utils.constants import OVERVIEW_LOAD_ERROR
from familyvault.utils.format_utils import format_file_size


class OverviewController(SectionController):
    section = Section.OVERVIEW

    def __init__(self, ctx: ControllerContext, documents: DocumentService):
        super().__init__(ctx)
        self.documents = documents
        self.stats: Optional[DocumentStats] = None

    def reset(self):
        super().reset()
        self.stats = None

    async def load(self):
        ticket = self.begin_load()
        try:
            stats = await self.documents.stats()
        except Exception as e:
            await self.background_failure(ticket, e, OVERVIEW_LOAD_ERROR)
            return

        if not self.is_current(ticket):
            return

        self.stats = stats
        self.surface.render(self.region, self.render(stats))

    @staticmethod
    def render(stats: DocumentStats) -> Element:
        cards = [
            ("total-documents", "Total Documents", stats.total_documents),
            ("shared-documents", "Shared Documents", stats.shared_documents),
            ("recent-uploads", "Recent Uploads", stats.recent_uploads),
            ("family-members", "Family Members", stats.family_members),
            ("storage-used", "Storage Used", format_file_size(stats.storage_used)),
        ]
        return el(
            "div",
            [
                el("div", el("h3", value, class_="stat-value"), el("p", label), class_="stat-card", data_stat=key)
                for key, label, value in cards
            ],
            class_="stats-grid",
        )
