"""
familyvault/flow/controllers/upload.py

Purpose: Upload section

- File selection with size / type checks (nothing is sent for a rejected file)
- Form submission (file + non-empty title + category)
- On success: reset form, then reload Documents and Overview
"""

from typing import Optional

from familyvault.core.exceptions import ValidationError
from familyvault.flow.controllers.base import ControllerContext, SectionController
from familyvault.flow.states import Section, Trigger
from familyvault.flow.view import Element, el
from familyvault.schemas.documents import SelectedFile
from familyvault.services.document_service import DocumentService
from familyvault.utils.constants import (
    ACCEPTED_FILE_EXTENSIONS,
    UPLOAD_PROMPT_TITLE,
    UPLOAD_PROMPT_HINT,
    UPLOAD_SUCCESS,
    UPLOAD_FAILED,
)
from familyvault.utils.format_utils import format_file_size, mime_icon

FORM = "upload-form"
SUBMIT = "upload-submit"


class UploadController(SectionController):
    section = Section.UPLOAD

    def __init__(self, ctx: ControllerContext, documents: DocumentService):
        super().__init__(ctx)
        self.documents = documents

    def bind(self):
        self.listen("upload:select", self.select_file)
        self.listen("upload:clear", self.clear_file)
        self.listen("upload:submit", self.submit)

    def reset(self):
        super().reset()
        self.session.selected_file = None

    async def load(self):
        self.surface.render(self.region, self.render(self.session.selected_file))

    @staticmethod
    def render(file: Optional[SelectedFile]) -> Element:
        if file is None:
            return el(
                "div",
                el("i", class_="fas fa-cloud-upload-alt"),
                el("p", UPLOAD_PROMPT_TITLE),
                el("p", UPLOAD_PROMPT_HINT, class_="hint"),
                el("input", type="file", accept=ACCEPTED_FILE_EXTENSIONS, data_event="upload:select"),
                class_="upload-area",
            )
        return el(
            "div",
            el("i", class_=mime_icon(file.mime_type)),
            el("p", file.name, class_="file-name"),
            el("p", format_file_size(file.size), class_="file-size"),
            el("button", "Remove", class_="btn btn-secondary", data_event="upload:clear"),
            class_="upload-area has-file",
        )

    async def select_file(self, file: Optional[SelectedFile] = None, **_):
        try:
            self.documents.validate_file(file)
        except ValidationError as e:
            self.session.selected_file = None
            self.surface.alert(e.message, "error")
            await self.load()
            return
        self.session.selected_file = file
        await self.load()

    async def clear_file(self, **_):
        self.session.selected_file = None
        await self.load()

    async def submit(
        self,
        title: str = "",
        category: str = "other",
        description: Optional[str] = None,
        classification: Optional[str] = None,
        department: Optional[str] = None,
        **_,
    ):
        """
        Uploads the selected file. Validation failures alert without any
        request; the submit control is released whatever happens.
        """
        with self.busy(SUBMIT):
            try:
                result = await self.documents.upload(
                    self.session.selected_file,
                    title,
                    category or "other",
                    description=description,
                    classification=classification,
                    department=department,
                )
            except Exception as e:
                await self.report_failure(e, UPLOAD_FAILED)
                return

        self.logger.info("Document uploaded", extra={"document_id": result.document_id})
        self.surface.alert(UPLOAD_SUCCESS, "success")
        self.session.selected_file = None
        self.surface.reset_form(FORM)
        await self.load()
        await self.trigger(Trigger.DOCUMENT_UPLOADED, document_id=result.document_id)
