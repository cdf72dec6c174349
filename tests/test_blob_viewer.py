import asyncio

import pytest

from familyvault.core.exceptions import TransportError
from familyvault.flow.blob_viewer import BlobViewer, is_previewable
from familyvault.flow.controllers.base import ControllerContext
from familyvault.flow.session import Session
from familyvault.flow.states import Section, ViewerState
from familyvault.schemas.documents import DownloadedBlob
from familyvault.utils.constants import DOCUMENT_LOAD_FAILED


class SlowDocuments:
    """download_blob() waits until released."""

    def __init__(self):
        self.release = asyncio.Event()
        self.fail = False

    async def download_blob(self, document_id):
        await self.release.wait()
        if self.fail:
            raise TransportError()
        return DownloadedBlob(b"%PDF", "application/pdf", 'attachment; filename="a.pdf"')


@pytest.fixture
def viewer(surface, logger):
    async def on_unauthenticated(exc):
        raise AssertionError(f"unexpected: {exc}")

    async def on_trigger(trigger, **details):
        pass

    ctx = ControllerContext(surface, Session(), logger, on_unauthenticated, on_trigger)
    return BlobViewer(ctx, SlowDocuments())


@pytest.mark.parametrize("mime, expected", [
    ("application/pdf", True),
    ("image/png", True),
    ("IMAGE/JPEG", True),
    ("application/msword", False),
    (None, False),
])
def test_is_previewable(mime, expected):
    assert is_previewable(mime) is expected


@pytest.mark.asyncio
async def test_close_while_loading_discards_the_download(viewer, surface):
    task = asyncio.ensure_future(viewer.open("D1", "application/pdf", "A"))
    await asyncio.sleep(0)
    assert viewer.state == ViewerState.LOADING

    viewer.close()
    viewer.documents.release.set()
    await task

    assert viewer.state == ViewerState.CLOSED
    assert surface.minted_urls == []
    assert surface.modal is None


@pytest.mark.asyncio
async def test_sign_out_while_loading_discards_the_download(viewer, surface):
    task = asyncio.ensure_future(viewer.open("D1", "application/pdf", "A"))
    await asyncio.sleep(0)

    viewer.session.reset()
    viewer.documents.release.set()
    await task

    assert surface.minted_urls == []
    assert surface.modal is None


@pytest.mark.asyncio
async def test_failed_download_alerts_and_returns_to_closed(viewer, surface):
    viewer.documents.fail = True
    viewer.documents.release.set()

    await viewer.open("D1", "application/pdf", "A")

    assert viewer.state == ViewerState.CLOSED
    assert viewer.session.viewing_document_id is None
    assert surface.last_alert().message == DOCUMENT_LOAD_FAILED
    assert surface.listener_count("key:escape") == 0


@pytest.mark.asyncio
async def test_close_when_closed_is_a_no_op(viewer, surface):
    viewer.close()
    assert surface.history == []


@pytest.mark.asyncio
async def test_opening_a_second_document_revokes_the_first(signed_in, vault):
    surface = signed_in.surface
    first = vault.add_document("First", mime_type="image/jpeg", content=b"\xff\xd8")
    second = vault.add_document("Second")
    await signed_in.coordinator.show_section(Section.DOCUMENTS)

    await surface.dispatch("documents:view", document_id=first)
    first_url = surface.minted_urls[-1]
    await surface.dispatch("documents:view", document_id=second)

    assert surface.revoked_urls == [first_url]
    assert surface.modal.get("data-document-id") == second
    assert surface.listener_count("key:escape") == 1


@pytest.mark.asyncio
async def test_backdrop_and_close_button_both_close(signed_in, vault):
    surface = signed_in.surface
    doc_id = vault.add_document("Passport")
    await signed_in.coordinator.show_section(Section.DOCUMENTS)

    await surface.dispatch("documents:view", document_id=doc_id)
    await surface.dispatch("viewer:backdrop")
    assert surface.modal is None

    await surface.dispatch("documents:view", document_id=doc_id)
    close = surface.modal.find("button", class_name="modal-close")
    await surface.dispatch(close.get("data-event"))
    assert surface.modal is None

    assert surface.revoked_urls == surface.minted_urls
    assert surface.listener_count("viewer:close") == 0
