"""Settings API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from quill.api.deps import get_current_user_id, get_profile_service
from quill.schemas.profile import PreferencesResponse, PreferencesUpdate
from quill.services.profile_service import ProfileService

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingsResponse(BaseModel):
    """Response model for settings update."""

    status: str
    settings: PreferencesResponse


@router.get("", response_model=PreferencesResponse)
async def get_settings(
    user_id: UUID = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> PreferencesResponse:
    """
    Get current user preferences.

    A row with default values is created on first access.
    """
    preferences = await service.get_preferences(user_id)
    return PreferencesResponse.model_validate(preferences)


@router.post("", response_model=SettingsResponse)
async def update_settings(
    settings: PreferencesUpdate,
    user_id: UUID = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> SettingsResponse:
    """
    Update user preferences.

    Accepts partial updates - only the provided keys will be updated.
    """
    preferences = await service.update_preferences(user_id, settings)
    return SettingsResponse(
        status="success",
        settings=PreferencesResponse.model_validate(preferences),
    )
