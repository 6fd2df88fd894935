from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.rate_limiter import UPLOAD_RATE, limiter
from models.config import settings
from models.exceptions import ValidationException
from services import UploadService

router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("", response_model=schemas.UploadResult)
@limiter.limit(UPLOAD_RATE)
async def upload_image(
    request: Request,
    file: UploadFile = File(...),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """
    Upload a complaint image (JPEG, PNG or GIF, up to 5MB).

    Returns the hosted URL to include in the complaint's images.
    """
    # Read one byte past the limit so oversized files are rejected without
    # buffering them whole
    content = await file.read(settings.UPLOAD_MAX_BYTES + 1)
    if not content:
        raise ValidationException("No file uploaded")
    return await run_in_threadpool(
        UploadService.upload_image, file.filename or "upload", content, file.content_type
    )
