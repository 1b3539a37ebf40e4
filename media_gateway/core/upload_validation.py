"""Content type checks and size limits for design media uploads."""

from typing import Literal

from media_gateway.config import MAX_FILE_SIZE_IMAGE, MAX_FILE_SIZE_VIDEO

MediaType = Literal["image", "video"]

# Allowed MIME types -> media type
MIME_TO_MEDIATYPE: dict[str, MediaType] = {
    "image/jpeg": "image",
    "image/png": "image",
    "image/gif": "image",
    "image/webp": "image",
    "image/heic": "image",
    "image/avif": "image",
    "video/mp4": "video",
    "video/webm": "video",
    "video/quicktime": "video",
}

EXT_TO_MEDIATYPE: dict[str, MediaType] = {
    ".jpg": "image",
    ".jpeg": "image",
    ".png": "image",
    ".gif": "image",
    ".webp": "image",
    ".heic": "image",
    ".avif": "image",
    ".mp4": "video",
    ".webm": "video",
    ".mov": "video",
}

MAX_SIZE_BY_TYPE: dict[MediaType, int] = {
    "image": MAX_FILE_SIZE_IMAGE,
    "video": MAX_FILE_SIZE_VIDEO,
}

UNSUPPORTED_MESSAGE = (
    "Unsupported file type. Allowed: images (JPEG/PNG/GIF/WebP/HEIC/AVIF), videos (MP4/WebM/MOV)."
)


def detect_media_type(filename: str | None, content_type: str | None) -> MediaType | None:
    """Determine image/video from content_type, falling back to the filename extension."""
    if content_type:
        base_type = content_type.split(";")[0].strip().lower()
        if base_type in MIME_TO_MEDIATYPE:
            return MIME_TO_MEDIATYPE[base_type]
    if filename and "." in filename:
        ext = "." + filename.rsplit(".", 1)[-1].lower()
        return EXT_TO_MEDIATYPE.get(ext)
    return None


def validate_content_type(filename: str, content_type: str) -> str | None:
    """Error message for an upload negotiation request, or None when acceptable."""
    if detect_media_type(filename, content_type) is None:
        return UNSUPPORTED_MESSAGE
    return None


def validate_upload(
    filename: str | None,
    content_type: str | None,
    size: int,
) -> tuple[MediaType | None, str | None]:
    """
    Validate bytes received by the local ingestion endpoint.
    Returns (media_type, error_message); error_message is None when valid.
    """
    media_type = detect_media_type(filename, content_type)
    if not media_type:
        return None, UNSUPPORTED_MESSAGE
    max_size = MAX_SIZE_BY_TYPE[media_type]
    if size > max_size:
        return media_type, f"File too large. Max size for {media_type}: {max_size // (1024*1024)} MB"
    return media_type, None
