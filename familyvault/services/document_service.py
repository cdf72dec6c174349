"""
familyvault/services/document_service.py

Purpose: Documents resource gateway

- List own and shared documents, overview statistics
- Upload (multipart field "document") with client-side file checks
- Download as blob, delete, share by e-mail
"""

from typing import Optional, Iterable, List
from urllib.parse import quote

from familyvault.core.exceptions import ValidationError
from familyvault.schemas.documents import (
    Document,
    DocumentList,
    DocumentStats,
    UploadResult,
    SelectedFile,
    DownloadedBlob,
)
from familyvault.services.http_client import HttpClient, MultipartBody, ensure_success
from familyvault.utils.constants import (
    DOCUMENT_CATEGORIES,
    SHARE_PERMISSIONS,
    FILE_TOO_LARGE,
    FILE_TYPE_NOT_ALLOWED,
    NO_FILE_SELECTED,
    TITLE_REQUIRED,
    CATEGORY_INVALID,
    INVALID_EMAIL,
    UPLOAD_FAILED,
)
from familyvault.utils.validation_utils import validate_file_size, validate_file_type, validate_email


def _doc_path(document_id: str) -> str:
    return f"/documents/{quote(str(document_id), safe='')}"


class DocumentService:
    def __init__(self, http: HttpClient, max_upload_bytes: int, allowed_types: Iterable[str]):
        self.http = http
        self.max_upload_bytes = max_upload_bytes
        self.allowed_types = list(allowed_types)

    def validate_file(self, file: Optional[SelectedFile]):
        """
        Client-side acceptance policy for a picked file.

        Raises:
            ValidationError: No file, too large, or type not allowed
        """
        if file is None:
            raise ValidationError(NO_FILE_SELECTED)
        if not validate_file_size(file.size, self.max_upload_bytes):
            raise ValidationError(FILE_TOO_LARGE, details={"size": file.size})
        if not validate_file_type(file.mime_type, self.allowed_types):
            raise ValidationError(FILE_TYPE_NOT_ALLOWED, details={"mime_type": file.mime_type})

    async def list(self, limit: Optional[int] = None) -> List[Document]:
        params = {"limit": limit} if limit else None
        payload = await self.http.request("GET", "/documents", params=params)
        return DocumentList.model_validate(payload).documents

    async def list_shared(self) -> List[Document]:
        payload = await self.http.request("GET", "/documents/shared")
        return DocumentList.model_validate(payload).documents

    async def stats(self) -> DocumentStats:
        payload = await self.http.request("GET", "/documents/stats")
        return DocumentStats.from_response(payload)

    async def upload(
        self,
        file: Optional[SelectedFile],
        title: str,
        category: str = "other",
        description: Optional[str] = None,
        classification: Optional[str] = None,
        department: Optional[str] = None,
    ) -> UploadResult:
        """
        Uploads a document.

        The file is re-checked here so no request is issued for a file the
        user should never have been able to submit.

        Raises:
            ValidationError: File or form fields rejected client-side
            RemoteError: Backend rejected the upload
        """
        self.validate_file(file)
        title = (title or "").strip()
        if not title:
            raise ValidationError(TITLE_REQUIRED)
        if category not in DOCUMENT_CATEGORIES:
            raise ValidationError(CATEGORY_INVALID)

        body = MultipartBody(
            files={"document": (file.name, file.content, file.mime_type)},
            data={
                "title": title,
                "category": category,
                "type": category,
                "description": description or None,
                "classification": classification or None,
                "department": department or None,
            },
        )
        payload = await self.http.request("POST", "/documents/upload", body)
        return UploadResult.model_validate(ensure_success(payload, UPLOAD_FAILED))

    async def download_blob(self, document_id: str) -> DownloadedBlob:
        return await self.http.download(f"{_doc_path(document_id)}/download")

    async def delete(self, document_id: str):
        payload = await self.http.request("DELETE", _doc_path(document_id))
        ensure_success(payload, "Delete failed")

    async def share(self, document_id: str, email: str, permission: str = "read"):
        """
        Shares a document with another user by e-mail.
        """
        email = (email or "").strip()
        if not validate_email(email):
            raise ValidationError(INVALID_EMAIL)
        if permission not in SHARE_PERMISSIONS:
            permission = "read"
        payload = await self.http.request(
            "POST",
            f"{_doc_path(document_id)}/share",
            {"email": email, "permission": permission},
        )
        ensure_success(payload, "Share failed")
