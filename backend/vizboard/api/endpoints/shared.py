"""
Public, unauthenticated access to shared dashboards.
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from vizboard.db.database import get_db
from vizboard.schemas.chart import WidgetRender
from vizboard.schemas.dashboard import DashboardResponse
from vizboard.services.chart_dispatcher import RenderOptions
from vizboard.services.dashboard_service import DashboardService
from vizboard.services.data_source_service import DataSourceService
from vizboard.services.layer_compositor import render_widget

router = APIRouter(prefix="/api/shared", tags=["shared"])


async def _public_dashboard_or_404(db: AsyncSession, share_token: str):
    dashboard = await DashboardService.get_public_dashboard(db, share_token)
    if not dashboard:
        raise HTTPException(status_code=404, detail="Dashboard not found")
    return dashboard


@router.get("/{share_token}", response_model=DashboardResponse)
async def get_shared_dashboard(share_token: str, db: AsyncSession = Depends(get_db)):
    return await _public_dashboard_or_404(db, share_token)


@router.get("/{share_token}/widgets/{widget_id}/render", response_model=WidgetRender)
async def render_shared_widget(
    share_token: str,
    widget_id: int,
    layer: int = 0,
    preset: str = "default",
    ai_tooltips: bool = Query(False, alias="aiTooltips"),
    theme: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """Render a widget of a public dashboard with its owner's data sources."""
    dashboard = await _public_dashboard_or_404(db, share_token)
    widget = next((w for w in dashboard.widgets if w.id == widget_id), None)
    if widget is None:
        raise HTTPException(status_code=404, detail="Widget not found")

    sources = await DataSourceService.get_sources_by_ids(db, [widget.data_source_id], dashboard.user_id)
    options = RenderOptions.for_preset(preset, theme=theme or dashboard.theme or "default", ai_tooltips=ai_tooltips)
    return render_widget(widget, sources, active_layer=layer, options=options)
