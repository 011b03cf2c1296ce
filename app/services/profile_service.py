"""Profile updates, including the profile image swap in external storage."""
from dataclasses import dataclass
from typing import Optional
import logging
from sqlalchemy.orm import Session
from app.core.constants import ALLOWED_IMAGE_TYPES, IMAGE_TOO_LARGE, MAX_IMAGE_SIZE
from app.models.user import User
from app.schemas.user import UserResponse
from app.services.storage_service import ImageStorage, StorageError
from app.utils.errors import BadRequestError, UnauthorizedError, ValidationError

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("first_name", "last_name")


@dataclass(frozen=True)
class ImageUpload:
    content: bytes
    filename: Optional[str]
    content_type: Optional[str]

    @property
    def size(self) -> int:
        return len(self.content)


def validate_image(image: ImageUpload) -> None:
    if not image.content:
        raise ValidationError("Uploaded file is empty")
    if (image.content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
        raise ValidationError("Unsupported file type. Allowed: JPG, PNG, WEBP, GIF")
    if image.size > MAX_IMAGE_SIZE:
        raise ValidationError(IMAGE_TOO_LARGE)


class ProfileService:
    def __init__(self, db: Session, storage: ImageStorage):
        self.db = db
        self.storage = storage

    async def update_profile(
        self,
        user_id: str,
        changes: dict,
        image: Optional[ImageUpload] = None,
    ) -> UserResponse:
        """
        Apply the supplied profile fields and, optionally, a new profile image.
        - Only keys present in ``changes`` are touched; "" becomes None
        - The new image is uploaded before the old one is removed, so a failed
          upload never leaves the user without a working image
        - Removing the old image is best effort
        """
        user = self.db.get(User, user_id)
        if user is None:
            raise UnauthorizedError("User no longer exists")

        if image is not None:
            validate_image(image)

        updates = {
            field: (changes[field] or None)
            for field in PROFILE_FIELDS
            if field in changes
        }

        if image is not None:
            try:
                image_url = await self.storage.upload_image(
                    image.content,
                    filename=image.filename,
                    content_type=image.content_type,
                )
            except StorageError as exc:
                raise BadRequestError(str(exc))

            if user.profile_image:
                try:
                    await self.storage.delete_image(user.profile_image)
                except Exception:
                    logger.warning("Failed to delete previous profile image", exc_info=True)

            updates["profile_image"] = image_url

        if not updates:
            return UserResponse.model_validate(user)

        try:
            for field, value in updates.items():
                setattr(user, field, value)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(user)
        return UserResponse.model_validate(user)
