"""
Image upload endpoint.
"""
from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from medlearn.core.dependencies import get_current_active_user
from medlearn.models.user import User
from medlearn.utils.file_upload import save_upload_file

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
async def upload_image(
    file: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Store an image and return the URL it is served from.

    Accepts JPEG, PNG, GIF and WebP up to 5MB.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")

    try:
        _, filename, size = await save_upload_file(file)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"User {current_user.id} uploaded {filename} ({size} bytes)")
    return {"url": f"/uploads/{filename}", "message": "File uploaded successfully"}
