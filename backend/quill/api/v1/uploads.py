"""Image upload API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile, status
from pydantic import BaseModel

from quill.api.deps import get_current_user_id, get_upload_service, read_image
from quill.services.upload_service import UploadPurpose, UploadService

router = APIRouter()


class UploadResponse(BaseModel):
    """Public URL of a stored image."""

    url: str
    key: str


@router.post("/{purpose}", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(
    purpose: UploadPurpose,
    file: UploadFile = File(...),
    user_id: UUID = Depends(get_current_user_id),
    service: UploadService = Depends(get_upload_service),
) -> UploadResponse:
    """Upload an image (e.g. inline post images) and get its public URL."""
    image = await read_image(file)
    result = await service.upload(image, user_id, purpose)
    return UploadResponse(url=result.url, key=result.key)
