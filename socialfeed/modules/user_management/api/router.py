from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from socialfeed.core.config import Settings
from socialfeed.core.errors import AppError
from socialfeed.core.messages import ErrorMessages, SuccessMessages
from socialfeed.core.storage import ObjectStorage
from socialfeed.db.session import get_db
from socialfeed.deps import get_current_user, get_settings, get_storage
from socialfeed.modules.auth.schemas.auth import SessionUser
from socialfeed.modules.media.service import MediaService, PROFILE_IMAGES_PREFIX, read_uploads
from socialfeed.modules.user_management.schemas.user import Profile, ProfileUpdateResponse
from socialfeed.modules.user_management.services.user import get_user, update_profile

router = APIRouter()
logger = logging.getLogger("socialfeed")


def _form_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


@router.get("", response_model=Profile)
def read_profile(
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_current_user),
) -> Any:
    """Get the profile of the signed-in user"""
    try:
        user = get_user(db, user_id=current_user.id)
    except Exception as e:
        logger.error(f"Profile fetch error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ErrorMessages.PROFILE_LOAD_FAILED,
        )
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ErrorMessages.USER_NOT_FOUND)
    return user


@router.put("", response_model=ProfileUpdateResponse)
async def update_profile_me(
    request: Request,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_current_user),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> Any:
    """
    Update name, bio and/or profile image (multipart form).

    The form is read directly so that an empty ``bio`` field clears the bio
    instead of being treated as absent.
    """
    form = await request.form()
    name = _form_text(form.get("name"))
    bio = _form_text(form.get("bio"))
    profile_image = form.get("profileImage")

    media = MediaService(storage, settings.MAX_UPLOAD_SIZE)
    profile_image_url = None
    if isinstance(profile_image, UploadFile):
        images = await read_uploads([profile_image])
        if images:
            try:
                profile_image_url = await media.upload_image(images[0], PROFILE_IMAGES_PREFIX)
            except AppError as e:
                raise e.to_http()
            except Exception as e:
                logger.error(f"Profile image upload error: {e}")
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=ErrorMessages.UPLOAD_FAILED,
                )

    try:
        user = await run_in_threadpool(
            update_profile, db, current_user.id, name=name, bio=bio, profile_image=profile_image_url,
        )
    except AppError as e:
        if profile_image_url:
            await media.discard([profile_image_url])
        raise e.to_http()
    except Exception as e:
        logger.error(f"Profile update error: {e}")
        if profile_image_url:
            await media.discard([profile_image_url])
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ErrorMessages.PROFILE_UPDATE_FAILED,
        )

    return ProfileUpdateResponse(
        message=SuccessMessages.PROFILE_UPDATE_SUCCESS,
        user=Profile.model_validate(user),
    )
