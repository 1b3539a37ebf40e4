"""Pydantic schemas for the storage API."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class UploadUrlRequest(BaseModel):
    """Payload for negotiating an upload. designNo/colorName are accepted for older clients."""

    fileName: str = Field(..., description="Original file name; its extension is kept")
    contentType: str = Field(..., description="MIME type of the file")
    entityId: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("entityId", "designNo"),
        description="Design identifier",
    )
    variantId: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("variantId", "colorName"),
        description="Color/variant identifier",
    )


class UploadUrlResponse(BaseModel):
    """Upload target handed to the client."""

    uploadUrl: str
    publicUrl: str
    key: str
    token: Optional[str] = None  # Supabase only
    backend: str


class LocalUploadResponse(BaseModel):
    publicUrl: str
    key: str
    message: str


class DeleteRequest(BaseModel):
    """Either one canonical URL or a batch of them."""

    canonicalUrl: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("canonicalUrl", "imageUrl"),
    )
    canonicalUrls: Optional[list[str]] = None


class DeleteResponse(BaseModel):
    message: str
    deleted: Optional[list[str]] = None
    failed: Optional[list[str]] = None
    skipped: Optional[list[str]] = None


class SignedUrlRequest(BaseModel):
    url: str


class SignedUrlResponse(BaseModel):
    originalUrl: str
    signedUrl: str


class SignedUrlsRequest(BaseModel):
    urls: list[str] = Field(default_factory=list)


class SignedUrlItem(BaseModel):
    """Per-URL result of a batch resolution; error is set when signing failed."""

    originalUrl: str
    signedUrl: str
    error: Optional[str] = None
