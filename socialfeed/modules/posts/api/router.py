from typing import Any, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from socialfeed.core.config import Settings
from socialfeed.core.errors import AppError
from socialfeed.core.messages import ErrorMessages, SuccessMessages
from socialfeed.core.storage import ObjectStorage
from socialfeed.db.session import get_db
from socialfeed.deps import get_current_user, get_optional_user, get_settings, get_storage
from socialfeed.modules.auth.schemas.auth import SessionUser
from socialfeed.modules.media.service import MediaService, POST_IMAGES_PREFIX, read_uploads
from socialfeed.modules.posts.schemas.post import Post as PostSchema, PostCreateResponse
from socialfeed.modules.posts.services.post import MAX_IMAGES, create_post, get_posts, validate_content

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[PostSchema])
def read_posts(
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_current_user),
) -> Any:
    """
    All posts, newest first.
    """
    return get_posts(db)


@router.post("", response_model=PostCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_new_post(
    *,
    db: Session = Depends(get_db),
    content: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    current_user: Optional[SessionUser] = Depends(get_optional_user),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> Any:
    """
    Create new post with up to four image files.
    """
    # Blank content is rejected before the session is looked at
    try:
        content = validate_content(content)
    except AppError as e:
        raise e.to_http()

    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ErrorMessages.UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )

    image_files = await read_uploads(images or [])
    if len(image_files) > MAX_IMAGES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=ErrorMessages.TOO_MANY_IMAGES)

    media = MediaService(storage, settings.MAX_UPLOAD_SIZE)
    try:
        image_urls = await media.upload_images(image_files, POST_IMAGES_PREFIX)
    except AppError as e:
        raise e.to_http()
    except Exception as e:
        logger.error(f"Error uploading post images: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ErrorMessages.UPLOAD_FAILED,
        )

    try:
        post = await run_in_threadpool(create_post, db, current_user.id, content, image_urls)
    except Exception as e:
        logger.error(f"Post creation error: {e}")
        await media.discard(image_urls)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ErrorMessages.POST_CREATE_FAILED,
        )

    return PostCreateResponse(
        message=SuccessMessages.POST_CREATE_SUCCESS,
        post_id=post.id,
        image_urls=image_urls,
    )
