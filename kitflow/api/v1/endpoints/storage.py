from typing import Annotated

from fastapi import APIRouter, Depends

from kitflow.api.deps import CurrentUser, get_storage
from kitflow.schemas.laser_file import UploadUrlResponse, FileUrlResponse

router = APIRouter()


@router.post("/upload-url", response_model=UploadUrlResponse)
async def generate_upload_url(
    current_user: CurrentUser,
    storage: Annotated[object, Depends(get_storage)],
):
    """
    Get a signed URL to upload a file to.
    Store the returned ``storage_id`` on the kit or laser file afterwards.
    """
    upload_url, storage_id = storage.generate_upload_url()
    return UploadUrlResponse(upload_url=upload_url, storage_id=storage_id)


@router.get("/url", response_model=FileUrlResponse)
async def get_file_url(
    storage_id: str,
    current_user: CurrentUser,
    storage: Annotated[object, Depends(get_storage)],
):
    """Download URL for a stored file, or null when it does not exist."""
    return FileUrlResponse(storage_id=storage_id, url=storage.get_url(storage_id))
