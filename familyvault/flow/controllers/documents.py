"""
familyvault/flow/controllers/documents.py

Purpose: Documents section

- Loads own documents and documents shared with the user in parallel
- Renders the documents grid and the shared sub-region
- View (blob viewer), download, share and delete
- A deleted document id is never referenced again
"""

import asyncio
from typing import Dict, Optional, Set, List

from familyvault.core.errors import is_unauthenticated
from familyvault.core.exceptions import StaleReferenceError
from familyvault.flow.blob_viewer import BlobViewer
from familyvault.flow.controllers.base import ControllerContext, SectionController
from familyvault.flow.states import Section, Trigger
from familyvault.flow.view import Element, el, placeholder
from familyvault.schemas.documents import Document
from familyvault.services.document_service import DocumentService
from familyvault.utils.constants import (
    DOCUMENTS_EMPTY,
    DOCUMENTS_LOAD_ERROR,
    SHARED_DOCUMENTS_EMPTY,
    SHARED_DOCUMENTS_LOAD_ERROR,
    DOCUMENT_NOT_FOUND,
    DOWNLOAD_SUCCESS,
    DOWNLOAD_FAILED,
    DELETE_CONFIRM,
    DELETE_SUCCESS,
    DELETE_FAILED,
    SHARE_SUCCESS,
    SHARE_FAILED,
)
from familyvault.utils.format_utils import category_icon, category_label, format_date, format_file_size

SHARED_REGION = "shared-documents"


class DocumentsController(SectionController):
    section = Section.DOCUMENTS

    def __init__(self, ctx: ControllerContext, documents: DocumentService, viewer: BlobViewer, limit: Optional[int] = None):
        super().__init__(ctx)
        self.documents = documents
        self.viewer = viewer
        self.limit = limit
        self.own: Dict[str, Document] = {}
        self.shared: Dict[str, Document] = {}
        self.deleted_ids: Set[str] = set()

    def bind(self):
        self.listen("documents:view", self.view)
        self.listen("documents:download", self.download)
        self.listen("documents:delete", self.delete)
        self.listen("documents:share", self.share)

    def reset(self):
        super().reset()
        self.own = {}
        self.shared = {}
        self.deleted_ids = set()

    # ------------------------------------------------------------------
    # Load / render
    # ------------------------------------------------------------------

    async def load(self):
        ticket = self.begin_load()
        own, shared = await asyncio.gather(
            self.documents.list(limit=self.limit),
            self.documents.list_shared(),
            return_exceptions=True,
        )

        for result in (own, shared):
            if isinstance(result, Exception) and is_unauthenticated(result):
                await self.background_failure(ticket, result, DOCUMENTS_LOAD_ERROR)
                return

        if not self.is_current(ticket):
            self.logger.debug("Dropping stale documents load")
            return

        if isinstance(own, Exception):
            self.own = {}
            await self.background_failure(ticket, own, DOCUMENTS_LOAD_ERROR)
        else:
            self.own = {d.id: d for d in own if d.id not in self.deleted_ids}
            self.surface.render(self.region, self.render_grid(list(self.own.values())))

        if isinstance(shared, Exception):
            self.shared = {}
            await self.background_failure(ticket, shared, SHARED_DOCUMENTS_LOAD_ERROR, region=SHARED_REGION)
        else:
            self.shared = {d.id: d for d in shared if d.id not in self.deleted_ids}
            self.surface.render(SHARED_REGION, self.render_shared(list(self.shared.values())))

    @staticmethod
    def _card(doc: Document, actions: List[Element]) -> Element:
        return el(
            "div",
            el("div", el("i", class_=f"fas {category_icon(doc.category)}"), class_="document-icon"),
            el("h3", doc.title or "Untitled Document", class_="document-title"),
            el("p", category_label(doc.category), class_="document-category"),
            el("p", f"{format_file_size(doc.file_size)} • {format_date(doc.upload_date)}", class_="document-meta"),
            el("div", actions, class_="document-actions"),
            class_="document-card",
            data_id=doc.id,
        )

    def render_grid(self, docs: List[Document]) -> Element:
        if not docs:
            return placeholder(DOCUMENTS_EMPTY, hint="Upload your first document to get started.")
        cards = [
            self._card(doc, [
                el("button", "View", class_="btn btn-view", data_event="documents:view", data_id=doc.id),
                el("button", "Download", class_="btn btn-download", data_event="documents:download", data_id=doc.id),
                el("button", "Share", class_="btn btn-share", data_event="documents:share", data_id=doc.id),
                el("button", "Delete", class_="btn btn-delete", data_event="documents:delete", data_id=doc.id),
            ])
            for doc in docs
        ]
        return el("div", cards, class_="documents-grid")

    def render_shared(self, docs: List[Document]) -> Element:
        if not docs:
            return placeholder(SHARED_DOCUMENTS_EMPTY)
        cards = [
            self._card(doc, [
                el("button", "View", class_="btn btn-view", data_event="documents:view", data_id=doc.id),
                el("button", "Download", class_="btn btn-download", data_event="documents:download", data_id=doc.id),
            ])
            for doc in docs
        ]
        return el("div", cards, class_="documents-grid shared")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _lookup(self, document_id: Optional[str], own_only: bool = False) -> Document:
        """
        Resolves a document id against the current listing.

        Raises:
            StaleReferenceError: Unknown or already deleted id
        """
        if not document_id or document_id in self.deleted_ids:
            raise StaleReferenceError(DOCUMENT_NOT_FOUND)
        doc = self.own.get(document_id)
        if doc is None and not own_only:
            doc = self.shared.get(document_id)
        if doc is None:
            raise StaleReferenceError(DOCUMENT_NOT_FOUND)
        return doc

    async def view(self, document_id: Optional[str] = None, **_):
        try:
            doc = self._lookup(document_id)
        except StaleReferenceError as e:
            await self.report_failure(e, DOCUMENT_NOT_FOUND)
            return
        await self.viewer.open(doc.id, doc.mime_type, doc.title)

    async def download(self, document_id: Optional[str] = None, **_):
        with self.busy(f"download:{document_id}"):
            try:
                doc = self._lookup(document_id)
                blob = await self.documents.download_blob(doc.id)
            except Exception as e:
                await self.report_failure(e, DOWNLOAD_FAILED)
                return
        self.surface.save_download(blob.filename, blob.content)
        self.surface.alert(DOWNLOAD_SUCCESS, "success")

    async def delete(self, document_id: Optional[str] = None, **_):
        """
        Deletes an own document after confirmation, then closes any viewer
        showing it and reloads Documents and Overview.
        """
        try:
            doc = self._lookup(document_id, own_only=True)
        except StaleReferenceError as e:
            await self.report_failure(e, DELETE_FAILED)
            return

        if not await self.surface.confirm(DELETE_CONFIRM):
            return

        with self.busy(f"delete:{doc.id}"):
            try:
                await self.documents.delete(doc.id)
            except Exception as e:
                await self.report_failure(e, DELETE_FAILED)
                return

        self.deleted_ids.add(doc.id)
        self.own.pop(doc.id, None)
        self.shared.pop(doc.id, None)
        self.logger.info("Document deleted", extra={"document_id": doc.id})
        self.surface.alert(DELETE_SUCCESS, "success")
        await self.trigger(Trigger.DOCUMENT_DELETED, document_id=doc.id)

    async def share(self, document_id: Optional[str] = None, email: str = "", permission: str = "read", **_):
        with self.busy("share-submit"):
            try:
                doc = self._lookup(document_id, own_only=True)
                await self.documents.share(doc.id, email, permission)
            except Exception as e:
                await self.report_failure(e, SHARE_FAILED)
                return
        self.surface.alert(SHARE_SUCCESS, "success")
