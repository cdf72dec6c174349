"""
familyvault/schemas/documents.py

Purpose: Document payload schemas

- Normalizes the backend's document records (Mongo `_id`, camelCase keys)
- Statistics shown on the Overview section
- Upload / download value objects
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Literal

from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator

from familyvault.utils.constants import DOCUMENT_CATEGORIES
from familyvault.utils.format_utils import parse_download_filename

DocumentCategory = Literal["aadhaar", "pan", "passport", "license", "marksheet", "certificate", "other"]


class Document(BaseModel):
    """
    A stored personal document as listed by the backend.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., validation_alias=AliasChoices("_id", "id"))
    title: str = ""
    category: DocumentCategory = Field(
        default="other",
        validation_alias=AliasChoices("category", "type", "classification"),
    )
    mime_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("mimeType", "mime_type"))
    file_size: int = Field(default=0, validation_alias=AliasChoices("fileSize", "file_size"))
    upload_date: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("uploadDate", "upload_date", "createdAt"),
    )
    verification_status: str = Field(
        default="pending",
        validation_alias=AliasChoices("verificationStatus", "verification_status"),
    )
    owner_uid: Optional[str] = Field(default=None, validation_alias=AliasChoices("uploadedBy", "ownerUid", "owner_uid"))
    description: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v):
        """Unknown or legacy categories ("personal", "identity") fold into "other"."""
        value = str(v or "").strip().lower()
        return value if value in DOCUMENT_CATEGORIES else "other"

    @field_validator("file_size", mode="before")
    @classmethod
    def coerce_size(cls, v):
        return v or 0


class DocumentList(BaseModel):
    model_config = ConfigDict(extra="ignore")

    documents: List[Document] = Field(default_factory=list)


class DocumentStats(BaseModel):
    """
    Overview counters. Accepts both the `stats` envelope and the older flat
    `{total, shared}` shape.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    total_documents: int = Field(default=0, validation_alias=AliasChoices("totalDocuments", "total"))
    shared_documents: int = Field(default=0, validation_alias=AliasChoices("sharedDocuments", "shared"))
    recent_uploads: int = Field(default=0, validation_alias=AliasChoices("recentUploads", "recent"))
    storage_used: int = Field(default=0, validation_alias=AliasChoices("storageUsed", "storage"))
    family_members: int = Field(default=0, validation_alias=AliasChoices("familyMembers", "family"))

    @classmethod
    def from_response(cls, payload: dict) -> "DocumentStats":
        body = payload.get("stats") if isinstance(payload.get("stats"), dict) else payload
        return cls.model_validate(body)


class UploadResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool = False
    document_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("documentId", "document_id"))
    message: Optional[str] = None

    @field_validator("document_id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return None if v is None else str(v)


@dataclass
class SelectedFile:
    """A file picked by the user and held until upload."""
    name: str
    content: bytes
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class DownloadedBlob:
    """Raw bytes of a downloaded document plus the headers needed to save it."""
    content: bytes
    content_type: Optional[str] = None
    content_disposition: Optional[str] = None

    @property
    def filename(self) -> str:
        return parse_download_filename(self.content_disposition)
