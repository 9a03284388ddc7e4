from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from vizboard.db.database import get_db
from vizboard.core.logger import logger
from vizboard.models.user import User
from vizboard.api.deps import get_current_active_user
from vizboard.schemas.ai import InsightsResponse
from vizboard.schemas.dashboard import DashboardCreate, DashboardResponse, DashboardSummary, DashboardUpdate
from vizboard.schemas.widget import WidgetResponse
from vizboard.services.ai_service import AIService, get_ai_service
from vizboard.services.dashboard_service import DashboardService
from vizboard.services.data_resolver import resolve_rows
from vizboard.services.data_source_service import DataSourceService
from vizboard.services.widget_service import WidgetService

router = APIRouter(prefix="/api/dashboards", tags=["dashboards"])


@router.get("", response_model=List[DashboardSummary])
async def get_dashboards(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    skip: int = 0,
    limit: int = 100
):
    """
    Retrieve dashboards for the current user, including those of their organizations.
    """
    return await DashboardService.get_user_dashboards(db, current_user.id, skip, limit)


@router.post("", response_model=DashboardResponse)
async def create_dashboard(
    dashboard_in: DashboardCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    try:
        return await DashboardService.create_dashboard(db, current_user.id, dashboard_in)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.get("/{dashboard_id}", response_model=DashboardResponse)
async def get_dashboard(
    dashboard_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    dashboard = await DashboardService.get_dashboard(db, dashboard_id, current_user.id)
    if not dashboard:
        raise HTTPException(status_code=404, detail="Dashboard not found")
    return dashboard


@router.patch("/{dashboard_id}", response_model=DashboardResponse)
async def update_dashboard(
    dashboard_id: int,
    dashboard_in: DashboardUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    dashboard = await DashboardService.get_owned_dashboard(db, dashboard_id, current_user.id)
    if not dashboard:
        raise HTTPException(status_code=404, detail="Dashboard not found")
    return await DashboardService.update_dashboard(db, dashboard, dashboard_in)


@router.delete("/{dashboard_id}")
async def delete_dashboard(
    dashboard_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    dashboard = await DashboardService.get_owned_dashboard(db, dashboard_id, current_user.id)
    if not dashboard:
        raise HTTPException(status_code=404, detail="Dashboard not found")
    await DashboardService.delete_dashboard(db, dashboard)
    return {"success": True}


@router.get("/{dashboard_id}/widgets", response_model=List[WidgetResponse])
async def get_dashboard_widgets(
    dashboard_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    dashboard = await DashboardService.get_dashboard(db, dashboard_id, current_user.id)
    if not dashboard:
        raise HTTPException(status_code=404, detail="Dashboard not found")
    return await WidgetService.get_dashboard_widgets(db, dashboard.id)


@router.post("/{dashboard_id}/insights", response_model=InsightsResponse)
async def generate_insights(
    dashboard_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    ai_service: AIService = Depends(get_ai_service)
):
    """
    Write a one-line AI insight onto every widget of the dashboard that has data.
    """
    dashboard = await DashboardService.get_owned_dashboard(db, dashboard_id, current_user.id)
    if not dashboard:
        raise HTTPException(status_code=404, detail="Dashboard not found")

    widgets = list(dashboard.widgets)
    sources = await DataSourceService.get_sources_by_ids(db, [w.data_source_id for w in widgets], current_user.id)

    insights = {}
    try:
        for widget in widgets:
            rows = resolve_rows(widget.config, widget.data_source_id, sources)
            if not rows:
                continue
            insight = await ai_service.generate_widget_insight(widget.title, widget.type, rows)
            await WidgetService.set_insight(db, widget, insight)
            insights[widget.id] = insight
    except Exception as e:
        logger.exception(f"[AI] Insight generation for dashboard {dashboard.id} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate insights"
        )

    logger.info(f"[AI] Generated {len(insights)} insight(s) for dashboard {dashboard.id}")
    return InsightsResponse(updated=len(insights), insights=insights)
