"""
Image upload for report attachments. Files land in the upload directory under a
random name and are served back from /uploads.
"""

import os, uuid, logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status

from civic_backend import config
from civic_backend.authentication.security import get_current_user
from civic_backend.errors import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Uploads"])


def save_image(file: UploadFile, upload_dir: Optional[str] = None) -> str:
    """Write an uploaded image to disk and return its public URL."""
    if file.content_type not in config.ALLOWED_IMAGE_TYPES:
        raise ValidationError("Invalid file type. Only JPEG, PNG, and WebP images are allowed.")

    upload_dir = upload_dir or config.UPLOAD_DIR
    os.makedirs(upload_dir, exist_ok=True)

    extension = config.ALLOWED_IMAGE_TYPES[file.content_type]
    filename = f"{uuid.uuid4()}{extension}"
    with open(os.path.join(upload_dir, filename), "wb") as f:
        f.write(file.file.read())

    logger.info("Stored upload %s (%s)", filename, file.content_type)
    return f"{config.UPLOAD_URL_PREFIX}/{filename}"


@router.post("/upload", status_code=status.HTTP_201_CREATED)
def upload_image(file: UploadFile = File(...), current_user=Depends(get_current_user)):
    return {"url": save_image(file)}
