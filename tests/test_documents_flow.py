import asyncio

import httpx
import pytest

from familyvault.flow.states import Section, ViewerState
from familyvault.schemas.documents import SelectedFile
from familyvault.utils.constants import (
    DELETE_CONFIRM,
    DELETE_FAILED,
    DOCUMENT_NOT_FOUND,
    DOCUMENTS_LOAD_ERROR,
    FILE_TOO_LARGE,
    NO_FILE_SELECTED,
    UPLOAD_SUCCESS,
)

from tests.fake_backend import create_app

MIB = 1024 * 1024


class UnreachableRoutes(httpx.AsyncBaseTransport):
    """Drops the connection for chosen (method, path) pairs, serves the rest."""

    def __init__(self, inner: httpx.AsyncBaseTransport):
        self.inner = inner
        self.down = set()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if (request.method, request.url.path) in self.down:
            raise httpx.ConnectError("Connection refused", request=request)
        return await self.inner.handle_async_request(request)

    async def aclose(self):
        await self.inner.aclose()


@pytest.fixture
def transport(vault):
    return UnreachableRoutes(httpx.ASGITransport(app=create_app(vault)))


def pdf(name="passport.pdf", size=2 * MIB):
    return SelectedFile(name=name, content=b"%" * size, mime_type="application/pdf")


@pytest.mark.asyncio
async def test_upload_happy_path(signed_in, vault):
    surface = signed_in.surface
    await signed_in.coordinator.show_section(Section.UPLOAD)
    await surface.dispatch("upload:select", file=pdf())
    vault.requests.clear()

    await surface.dispatch("upload:submit", title="Passport", category="passport")

    assert vault.paths()[0] == "/api/documents/upload"
    assert "/api/documents" in vault.paths("GET")
    assert "/api/documents/stats" in vault.paths("GET")
    assert surface.last_alert().message == UPLOAD_SUCCESS
    assert "upload-form" in surface.form_resets
    assert signed_in.coordinator.session.selected_file is None

    cards = surface.region("documents").find_all(class_name="document-card")
    assert [card.find("h3").text() for card in cards] == ["Passport"]
    assert surface.region("overview").find(data_stat="total-documents").find("h3").text() == "1"
    assert surface.busy["upload-submit"] is False


@pytest.mark.asyncio
async def test_oversize_file_is_rejected_without_network(signed_in, vault):
    surface = signed_in.surface
    vault.requests.clear()

    await surface.dispatch("upload:select", file=pdf(size=10 * MIB + 1))
    await surface.dispatch("upload:submit", title="Too big", category="other")

    assert vault.requests == []
    messages = [a.message for a in surface.alert_log]
    assert FILE_TOO_LARGE in messages
    assert messages[-1] == NO_FILE_SELECTED


@pytest.mark.asyncio
async def test_oversize_file_forced_into_session_is_still_rejected(signed_in, vault):
    surface = signed_in.surface
    signed_in.coordinator.session.selected_file = pdf(size=10 * MIB + 1)
    vault.requests.clear()

    await surface.dispatch("upload:submit", title="Too big", category="other")

    assert vault.requests == []
    assert surface.last_alert().message == FILE_TOO_LARGE
    assert surface.busy["upload-submit"] is False


@pytest.mark.asyncio
async def test_view_pdf_then_escape(signed_in, vault):
    surface = signed_in.surface
    doc_id = vault.add_document("Passport", "passport", "application/pdf")
    await signed_in.coordinator.show_section(Section.DOCUMENTS)
    vault.requests.clear()

    await surface.dispatch("documents:view", document_id=doc_id)

    assert vault.paths() == [f"/api/documents/{doc_id}/download"]
    url = surface.minted_urls[-1]
    frame = surface.modal.find("iframe")
    assert frame.get("src") == url

    await surface.dispatch("key:escape")

    assert surface.modal is None
    assert surface.revoked_urls == [url]
    assert surface.history[-2:] == [("url_revoke", url), ("modal_close",)]
    assert signed_in.coordinator.viewer.state == ViewerState.CLOSED


@pytest.mark.asyncio
async def test_delete_from_viewer_closes_it_and_forgets_the_id(signed_in, vault):
    surface = signed_in.surface
    doc_id = vault.add_document("Licence", "license", "image/png", b"\x89PNG")
    await signed_in.coordinator.show_section(Section.DOCUMENTS)
    await surface.dispatch("documents:view", document_id=doc_id)
    assert surface.modal.find("img") is not None

    await surface.dispatch("documents:delete", document_id=doc_id)

    assert surface.prompts == [DELETE_CONFIRM]
    assert surface.modal is None
    assert len(surface.revoked_urls) == 1
    assert surface.region("documents").find(class_name="document-card") is None
    assert surface.region("overview").find(data_stat="total-documents").find("h3").text() == "0"

    vault.requests.clear()
    await surface.dispatch("documents:download", document_id=doc_id)
    await surface.dispatch("documents:view", document_id=doc_id)
    await surface.dispatch("documents:delete", document_id=doc_id)
    assert vault.requests == []
    assert surface.last_alert().message == DOCUMENT_NOT_FOUND


@pytest.mark.asyncio
async def test_declined_confirmation_keeps_the_document(signed_in, vault):
    surface = signed_in.surface
    doc_id = vault.add_document("Passport")
    await signed_in.coordinator.show_section(Section.DOCUMENTS)
    surface.confirm_answers = [False]
    vault.requests.clear()

    await surface.dispatch("documents:delete", document_id=doc_id)

    assert vault.requests == []
    assert doc_id in vault.documents


@pytest.mark.asyncio
async def test_download_saves_with_server_filename(signed_in, vault):
    surface = signed_in.surface
    doc_id = vault.add_document("Marks", "marksheet", content=b"%PDF-marks")
    await signed_in.coordinator.show_section(Section.DOCUMENTS)

    await surface.dispatch("documents:download", document_id=doc_id)

    assert surface.downloads == [("Marks.bin", b"%PDF-marks")]


@pytest.mark.asyncio
async def test_shared_failure_degrades_only_its_region(signed_in, vault):
    surface = signed_in.surface
    vault.add_document("Passport")
    vault.fail("GET", "/api/documents/shared", 500, "boom")

    await signed_in.coordinator.show_section(Section.DOCUMENTS)

    assert len(surface.region("documents").find_all(class_name="document-card")) == 1
    assert surface.region("shared-documents").find(class_name="error-state") is not None


@pytest.mark.asyncio
async def test_own_list_failure_renders_placeholder(signed_in, vault):
    surface = signed_in.surface
    vault.fail("GET", "/api/documents", 500, "boom")

    await signed_in.coordinator.show_section(Section.DOCUMENTS)

    assert surface.region_text("documents") == DOCUMENTS_LOAD_ERROR
    assert surface.screen == "dashboard"


@pytest.mark.asyncio
async def test_last_load_wins(signed_in, vault):
    surface = signed_in.surface
    controller = signed_in.coordinator.controllers[Section.DOCUMENTS]
    vault.add_document("First")

    first = asyncio.ensure_future(controller.load())
    second = asyncio.ensure_future(controller.load())
    await asyncio.gather(first, second)

    assert controller.generation >= 2
    assert len(surface.region("documents").find_all(class_name="document-card")) == 1


@pytest.mark.asyncio
async def test_non_previewable_document_downloads_directly(signed_in, vault):
    surface = signed_in.surface
    doc_id = vault.add_document("Notes", mime_type="application/msword", content=b"DOC")
    await signed_in.coordinator.show_section(Section.DOCUMENTS)

    await surface.dispatch("documents:view", document_id=doc_id)

    assert surface.modal is None
    assert surface.minted_urls == []
    assert surface.downloads == [("Notes.bin", b"DOC")]


@pytest.mark.asyncio
async def test_failed_upload_keeps_file_and_documents(signed_in, vault):
    surface = signed_in.surface
    vault.add_document("Existing")
    await signed_in.coordinator.show_section(Section.DOCUMENTS)
    await signed_in.coordinator.show_section(Section.UPLOAD)
    selected = pdf()
    await surface.dispatch("upload:select", file=selected)
    vault.fail("POST", "/api/documents/upload", 500, "Storage full")
    vault.requests.clear()

    await surface.dispatch("upload:submit", title="Passport", category="passport")

    assert vault.paths() == ["/api/documents/upload"]
    assert surface.last_alert().message == "Storage full"
    assert surface.last_alert().kind == "error"
    assert signed_in.coordinator.session.selected_file is selected
    assert surface.busy["upload-submit"] is False
    assert "upload-form" not in surface.form_resets
    cards = surface.region("documents").find_all(class_name="document-card")
    assert [card.find("h3").text() for card in cards] == ["Existing"]


@pytest.mark.asyncio
async def test_unreachable_delete_keeps_the_document(signed_in, vault, transport):
    surface = signed_in.surface
    doc_id = vault.add_document("Passport")
    await signed_in.coordinator.show_section(Section.DOCUMENTS)
    transport.down.add(("DELETE", f"/api/documents/{doc_id}"))

    await surface.dispatch("documents:delete", document_id=doc_id)

    assert surface.last_alert().message == DELETE_FAILED
    assert surface.last_alert().kind == "error"
    assert surface.busy[f"delete:{doc_id}"] is False
    assert doc_id in vault.documents
    cards = surface.region("documents").find_all(class_name="document-card")
    assert [card.get("data-id") for card in cards] == [doc_id]

    transport.down.clear()
    await surface.dispatch("documents:delete", document_id=doc_id)
    assert doc_id not in vault.documents


@pytest.mark.asyncio
async def test_selected_file_shows_its_type_icon(signed_in):
    surface = signed_in.surface
    await signed_in.coordinator.show_section(Section.UPLOAD)

    await surface.dispatch("upload:select", file=pdf())

    assert surface.region("upload").find("i").get("class") == "fas fa-file-pdf"
