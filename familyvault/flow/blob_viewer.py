"""
familyvault/flow/blob_viewer.py

Purpose: Inline document preview

- Downloads the blob (with auth) and mints an object URL
- Mounts an image or embedded-PDF modal with Download / Delete / Close
- Escape, backdrop click and Close all close the modal
- Every minted URL is revoked before its modal is removed
"""

from typing import Callable, List, Optional

from familyvault.flow.controllers.base import ControllerContext
from familyvault.flow.states import ViewerState, is_valid_viewer_transition
from familyvault.flow.view import Element, el
from familyvault.services.document_service import DocumentService
from familyvault.utils.constants import DOCUMENT_LOAD_FAILED

# Gestures that close an open viewer
CLOSE_EVENTS = ("viewer:close", "viewer:backdrop", "key:escape")


def is_previewable(mime_type: Optional[str]) -> bool:
    mime = (mime_type or "").lower()
    return mime.startswith("image/") or mime == "application/pdf"


class BlobViewer:
    """
    Closed -> Loading -> Open -> Closed.

    Opening while not Closed closes first, revoking any previous URL.
    """

    def __init__(self, ctx: ControllerContext, documents: DocumentService):
        self.ctx = ctx
        self.surface = ctx.surface
        self.session = ctx.session
        self.logger = ctx.logger
        self.documents = documents
        self.state = ViewerState.CLOSED
        self.document_id: Optional[str] = None
        self.url: Optional[str] = None
        self._request = 0
        self._unsubscribers: List[Callable[[], None]] = []

    def _set_state(self, state: ViewerState):
        if not is_valid_viewer_transition(self.state, state):
            raise RuntimeError(f"Invalid viewer transition {self.state.value} -> {state.value}")
        self.state = state

    async def open(self, document_id: str, mime_type: Optional[str], title: str):
        """
        Previews a document, or downloads it directly when the type cannot
        be shown inline.
        """
        if self.state != ViewerState.CLOSED:
            self.close()

        if not is_previewable(mime_type):
            self.logger.info(f"No inline preview for {mime_type}, downloading", extra={"document_id": document_id})
            await self.surface.dispatch("documents:download", document_id=document_id)
            return

        self._set_state(ViewerState.LOADING)
        self.document_id = document_id
        self.session.viewing_document_id = document_id
        self._request += 1
        request = self._request
        session_generation = self.session.generation

        try:
            blob = await self.documents.download_blob(document_id)
        except Exception as e:
            if request == self._request and self.state == ViewerState.LOADING:
                self._forget()
                self._set_state(ViewerState.CLOSED)
            await self.ctx.report_failure(e, DOCUMENT_LOAD_FAILED)
            return

        if (
            request != self._request
            or session_generation != self.session.generation
            or self.state != ViewerState.LOADING
        ):
            # Closed or reopened while the download was in flight
            self.logger.debug(f"Discarding preview of {document_id}")
            return

        self.url = self.surface.create_object_url(blob.content, blob.content_type or mime_type)
        self.surface.show_modal(self._render(document_id, mime_type, title, self.url))
        for event in CLOSE_EVENTS:
            self._unsubscribers.append(self.surface.listen(event, self._on_close))
        self._set_state(ViewerState.OPEN)
        self.logger.info("Viewer opened", extra={"document_id": document_id})

    async def _on_close(self, **_):
        self.close()

    def close(self):
        """Revokes the object URL, then removes the modal."""
        if self.state == ViewerState.CLOSED:
            return

        if self.url is not None:
            self.surface.revoke_object_url(self.url)
            self.url = None
        if self.state == ViewerState.OPEN:
            self.surface.close_modal()

        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._forget()
        self._set_state(ViewerState.CLOSED)

    def close_if_showing(self, document_id: str):
        if self.document_id == document_id:
            self.close()

    def _forget(self):
        self.document_id = None
        self.session.viewing_document_id = None

    @staticmethod
    def _render(document_id: str, mime_type: Optional[str], title: str, url: str) -> Element:
        if (mime_type or "").startswith("image/"):
            preview = el("img", src=url, alt=title, class_="document-preview")
        else:
            preview = el("iframe", src=url, title=title, class_="pdf-viewer")

        return el(
            "div",
            el(
                "div",
                el(
                    "div",
                    el("h3", title),
                    el("button", "×", class_="modal-close", data_event="viewer:close"),
                    class_="modal-header",
                ),
                el("div", preview, class_="modal-body"),
                el(
                    "div",
                    el("button", "Download", class_="btn btn-primary", data_event="documents:download", data_id=document_id),
                    el("button", "Delete", class_="btn btn-danger", data_event="documents:delete", data_id=document_id),
                    el("button", "Close", class_="btn btn-secondary", data_event="viewer:close"),
                    class_="modal-footer",
                ),
                class_="modal-content",
            ),
            class_="modal document-viewer",
            data_event="viewer:backdrop",
            data_document_id=document_id,
        )
