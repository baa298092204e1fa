# backend/skoropad/services/storage_service.py
import logging
import os
import uuid

from fastapi import HTTPException, UploadFile, status

from skoropad.core import config

logger = logging.getLogger(__name__)

ADVERTISEMENT_FOLDER = "advertisements"
_CHUNK_SIZE = 64 * 1024

async def save_image(file: UploadFile, folder: str = ADVERTISEMENT_FOLDER) -> dict:
    """
    Stores an uploaded image under UPLOAD_DIR/<folder>/ and returns its public URL.
    Only JPEG, PNG, GIF and WebP are accepted, up to MAX_IMAGE_BYTES.
    """
    content_type = (file.content_type or "").lower()
    ext = config.ALLOWED_IMAGE_TYPES.get(content_type)
    if ext is None:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"File type not allowed: {content_type or 'unknown'}",
        )

    # stop as soon as the ceiling is crossed
    data = bytearray()
    while True:
        chunk = await file.read(_CHUNK_SIZE)
        if not chunk:
            break
        data.extend(chunk)
        if len(data) > config.MAX_IMAGE_BYTES:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Image exceeds {config.MAX_IMAGE_BYTES // (1024 * 1024)} MB limit",
            )

    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty file")

    target_dir = os.path.join(config.UPLOAD_DIR, folder)
    os.makedirs(target_dir, exist_ok=True)

    filename = f"{uuid.uuid4().hex}.{ext}"
    with open(os.path.join(target_dir, filename), "wb") as buffer:
        buffer.write(data)

    logger.info("Stored image %s/%s (%d bytes)", folder, filename, len(data))
    return {
        "url": f"{config.UPLOAD_URL_PREFIX}/{folder}/{filename}",
        "content_type": content_type,
        "size": len(data),
    }
