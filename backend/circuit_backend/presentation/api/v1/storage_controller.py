"""Storage API controller — uploads, listings and downloads in the caller's file area."""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse

from circuit_backend.application.schemas import ApiResponse, FileUrlResponse, StoredFileResponse
from circuit_backend.application.services import StorageService
from circuit_backend.infrastructure.dependencies import get_storage_service
from circuit_backend.presentation.api.caller import get_current_caller

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/storage", tags=["Storage"])


@router.post(
    "/files",
    response_model=ApiResponse[StoredFileResponse],
    status_code=status.HTTP_201_CREATED,
)
async def upload_file(
    file: UploadFile = File(...),
    folder: str | None = Form(None),
    circuit_id: str | None = Form(None),
    caller_id: str = Depends(get_current_caller),
    service: StorageService = Depends(get_storage_service),
) -> ApiResponse[StoredFileResponse]:
    content = await file.read()
    stored = await service.upload_file(
        caller_id,
        file.filename or "",
        content,
        folder=folder,
        circuit_id=circuit_id,
    )
    return ApiResponse.ok(
        "File uploaded successfully", StoredFileResponse.model_validate(stored, from_attributes=True)
    )


@router.get("/files", response_model=ApiResponse[list[StoredFileResponse]])
async def list_files(
    folder: str | None = Query(None, description="Folder inside the caller's area (default: uploads)"),
    caller_id: str = Depends(get_current_caller),
    service: StorageService = Depends(get_storage_service),
) -> ApiResponse[list[StoredFileResponse]]:
    files = await service.list_files(caller_id, folder)
    return ApiResponse.ok(
        "Files retrieved successfully",
        [StoredFileResponse.model_validate(f, from_attributes=True) for f in files],
    )


@router.get("/url", response_model=ApiResponse[FileUrlResponse])
async def get_file_url(
    path: str = Query(..., min_length=1),
    caller_id: str = Depends(get_current_caller),
    service: StorageService = Depends(get_storage_service),
) -> ApiResponse[FileUrlResponse]:
    url = await service.get_file_url(caller_id, path)
    return ApiResponse.ok("File URL retrieved successfully", FileUrlResponse(path=path, url=url))


@router.delete("/files", response_model=ApiResponse[None])
async def delete_file(
    path: str = Query(..., min_length=1),
    caller_id: str = Depends(get_current_caller),
    service: StorageService = Depends(get_storage_service),
) -> ApiResponse[None]:
    await service.delete_file(caller_id, path)
    return ApiResponse.ok("File deleted successfully")


@router.post(
    "/circuit-images",
    response_model=ApiResponse[StoredFileResponse],
    status_code=status.HTTP_201_CREATED,
)
async def upload_circuit_image(
    image: UploadFile = File(...),
    circuit_id: str = Form(..., min_length=1),
    caller_id: str = Depends(get_current_caller),
    service: StorageService = Depends(get_storage_service),
) -> ApiResponse[StoredFileResponse]:
    content = await image.read()
    stored = await service.upload_circuit_image(
        caller_id, circuit_id, image.filename or "", content
    )
    return ApiResponse.ok(
        "Circuit image uploaded successfully",
        StoredFileResponse.model_validate(stored, from_attributes=True),
    )


@router.get("/download/{storage_path:path}")
async def download_file(
    storage_path: str,
    caller_id: str = Depends(get_current_caller),
    service: StorageService = Depends(get_storage_service),
) -> FileResponse:
    """Stream a stored file from the caller's own area."""
    target = service.resolve_download(caller_id, storage_path)
    logger.debug("Serving %s to %s", target, caller_id)
    return FileResponse(path=str(target), filename=target.name)
