"""Upload endpoint for post media. Files are stored per user and claimed later by a post."""
import logging

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from unknown_items.api.deps import get_current_user, get_db
from unknown_items.core.exceptions import ValidationError
from unknown_items.models.enums import MediaType
from unknown_items.models.post import Media
from unknown_items.models.user import User
from unknown_items.schemas.post import MediaResponse
from unknown_items.services.storage_service import get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["uploads"])

MAX_FILES = 4
IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
VIDEO_TYPES = {"video/mp4", "video/quicktime", "video/webm"}
MAX_SIZE_MB = {MediaType.IMAGE: 5, MediaType.VIDEO: 100}

EXT_MAP = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
    "video/webm": ".webm",
}


def _classify(file: UploadFile) -> MediaType:
    content_type = file.content_type or ""
    if content_type in IMAGE_TYPES:
        return MediaType.IMAGE
    if content_type in VIDEO_TYPES:
        return MediaType.VIDEO
    raise ValidationError(
        f"Invalid file type: {content_type or 'unknown'}",
        details=[{"loc": ["body", "files"], "msg": f"Allowed: {sorted(IMAGE_TYPES | VIDEO_TYPES)}"}],
    )


async def _read_and_validate_size(file: UploadFile, max_size_mb: int) -> bytes:
    data = await file.read()
    if len(data) > max_size_mb * 1024 * 1024:
        raise ValidationError(f"File too large. Max {max_size_mb}MB")
    return data


@router.post("/media", response_model=list[MediaResponse], status_code=status.HTTP_201_CREATED)
async def upload_media(
    files: list[UploadFile] = File(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Store up to four images or videos as unattached media owned by the caller."""
    if len(files) > MAX_FILES:
        raise ValidationError(f"Maximum {MAX_FILES} files per upload")

    # Validate everything before writing anything to disk
    payloads: list[tuple[MediaType, bytes, str]] = []
    for f in files:
        media_type = _classify(f)
        data = await _read_and_validate_size(f, MAX_SIZE_MB[media_type])
        payloads.append((media_type, data, EXT_MAP[f.content_type]))

    storage = get_storage()
    media: list[Media] = []
    for media_type, data, ext in payloads:
        url = storage.save(str(current_user.id), "posts", data, ext)
        item = Media(uploader_id=current_user.id, url=url, type=media_type)
        db.add(item)
        media.append(item)
    await db.flush()
    await db.commit()
    logger.info("Uploaded %d media file(s) for %s", len(media), current_user.id)
    return [MediaResponse.model_validate(m) for m in media]
