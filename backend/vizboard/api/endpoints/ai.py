from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from vizboard.api.deps import get_current_active_user
from vizboard.core.logger import logger
from vizboard.db.database import get_db
from vizboard.models.user import User
from vizboard.schemas.ai import NLQRequest, NLQResponse
from vizboard.services.ai_service import AIService, get_ai_service
from vizboard.services.data_resolver import extract_rows
from vizboard.services.data_source_service import DataSourceService

router = APIRouter(prefix="/api", tags=["ai"])


@router.post("/nlq", response_model=NLQResponse)
async def natural_language_query(
    request: NLQRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    ai_service: AIService = Depends(get_ai_service)
):
    """
    Answer a question about a data source with a ready-to-save widget.

    The source's rows are frozen into ``config.data`` the same way widget
    creation does it, so the answer renders without another lookup.
    """
    source = await DataSourceService.get_source(db, request.data_source_id, current_user.id)
    if not source:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Data source not found")
    if not source.is_ready:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Data source has no data yet")

    rows = extract_rows(source.raw_data).rows
    try:
        answer = await ai_service.answer_question(request.question, rows)
    except Exception as e:
        logger.exception(f"[AI] NLQ on source {source.id} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to answer question"
        )

    config = answer.to_widget_config()
    config["data"] = rows
    return NLQResponse(
        type=answer.type,
        title=answer.title,
        config=config,
        explanation=answer.explanation,
        data_source_id=source.id,
    )
