"""Profile API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile

from quill.api.deps import get_current_user_id, get_profile_service, read_image
from quill.schemas.profile import ProfileResponse, ProfileUpdate
from quill.services.profile_service import ProfileService

router = APIRouter()


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user_id: UUID = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Get the current user's profile."""
    return ProfileResponse.model_validate(await service.get_profile(user_id))


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_in: ProfileUpdate,
    user_id: UUID = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Update name, bio or avatar URL."""
    return ProfileResponse.model_validate(await service.update_profile(user_id, profile_in))


@router.post("/me/avatar", response_model=ProfileResponse)
async def upload_avatar(
    file: UploadFile = File(...),
    user_id: UUID = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Upload a new avatar image."""
    image = await read_image(file)
    return ProfileResponse.model_validate(await service.upload_avatar(user_id, image))


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(
    profile_id: UUID,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Get a profile by ID."""
    return ProfileResponse.model_validate(await service.get_profile(profile_id))
