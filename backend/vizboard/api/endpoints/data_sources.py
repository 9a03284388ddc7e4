"""
Data source endpoints: file uploads, URL and cloud-drive sources, AI analysis.
"""
from typing import List
from urllib.parse import urlparse

from fastapi import APIRouter, Depends, UploadFile, File, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from vizboard.api.deps import get_current_active_user
from vizboard.core.config import settings
from vizboard.core.logger import logger
from vizboard.db.database import get_db
from vizboard.models.user import User
from vizboard.schemas.data_source import (
    AiAnalysisResponse,
    CloudSourceCreate,
    DataSourceResponse,
    UploadResponse,
    UrlSourceCreate,
)
from vizboard.services.ai_service import AIService, get_ai_service
from vizboard.services.data_resolver import extract_rows
from vizboard.services.data_source_service import DataSourceService
from vizboard.services.file_service import FileService


router = APIRouter(tags=["Data Sources"])


async def _get_source_or_404(db: AsyncSession, source_id: int, user: User):
    source = await DataSourceService.get_source(db, source_id, user.id)
    if not source:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Data source not found")
    return source


@router.get("/api/data-sources", response_model=List[DataSourceResponse])
async def list_data_sources(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    return await DataSourceService.get_user_sources(db, current_user.id)


@router.get("/api/data-sources/{source_id}", response_model=DataSourceResponse)
async def get_data_source(
    source_id: int,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    return await _get_source_or_404(db, source_id, current_user)


@router.post("/api/data-sources/upload", response_model=UploadResponse)
async def upload_files(
    files: List[UploadFile] = File(...),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Upload CSV, JSON or Excel files, one data source per file.

    Every file is checked before any source is created, so a bad file in
    the batch leaves nothing behind.
    """
    if not files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No files uploaded")
    if len(files) > settings.MAX_UPLOAD_FILES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"At most {settings.MAX_UPLOAD_FILES} files can be uploaded at once"
        )

    file_service = FileService()
    payloads = []
    for file in files:
        try:
            file_service.file_type_for(file.filename)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(e))

        contents = await file.read()
        if len(contents) > settings.MAX_UPLOAD_SIZE:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"{file.filename} exceeds maximum allowed size of {settings.MAX_UPLOAD_SIZE} bytes"
            )
        payloads.append((file.filename, contents))

    try:
        sources = []
        for filename, contents in payloads:
            parsed = await file_service.parse_upload(filename, contents)
            source = await DataSourceService.create_source(
                db,
                user_id=current_user.id,
                name=filename,
                type="file",
                file_type=parsed.file_type,
                raw_data=parsed.raw_data,
                metadata=parsed.metadata,
                status=parsed.status,
                error_message=parsed.error,
            )
            sources.append(source)
    except Exception as e:
        logger.exception(f"[UPLOAD] Failed to store uploads: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload files"
        )

    logger.info(f"[UPLOAD] User {current_user.id} uploaded {len(sources)} file(s)")
    return UploadResponse(sources=[DataSourceResponse.model_validate(s) for s in sources], count=len(sources))


@router.post("/api/data-sources/url", response_model=DataSourceResponse)
async def create_url_source(
    source_in: UrlSourceCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    host = urlparse(source_in.url).hostname
    if not host:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid URL")
    return await DataSourceService.create_source(
        db,
        user_id=current_user.id,
        name=source_in.name or host,
        type="url",
        source_url=source_in.url,
    )


@router.post("/api/data-sources/cloud", response_model=DataSourceResponse)
async def create_cloud_source(
    source_in: CloudSourceCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    # Import from the provider happens out of band; the source waits as pending
    return await DataSourceService.create_source(
        db,
        user_id=current_user.id,
        name=source_in.file_name or f"Cloud file {source_in.file_id}",
        type=source_in.provider,
        source_url=source_in.file_id,
    )


@router.delete("/api/data-sources/{source_id}")
async def delete_data_source(
    source_id: int,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    source = await _get_source_or_404(db, source_id, current_user)
    if source.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    await DataSourceService.delete_source(db, source)
    return {"success": True}


@router.post("/api/data-sources/{source_id}/analyze", response_model=AiAnalysisResponse)
async def analyze_data_source(
    source_id: int,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    source = await _get_source_or_404(db, source_id, current_user)
    if not source.is_ready:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Data source has no data yet")

    rows = extract_rows(source.raw_data).rows
    try:
        analysis = await ai_service.analyze_data_source(source.name, rows)
    except Exception as e:
        logger.exception(f"[AI] Analysis of source {source.id} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to analyze data source"
        )
    return await DataSourceService.add_analysis(db, source, "summary", analysis.model_dump(mode="json"))


@router.get("/api/ai-analyses", response_model=List[AiAnalysisResponse])
async def list_ai_analyses(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    return await DataSourceService.get_user_analyses(db, current_user.id)
