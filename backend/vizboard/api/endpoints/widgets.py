"""
Widget endpoints: create, update, delete, render and CSV export.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from vizboard.api.deps import get_current_active_user
from vizboard.core.logger import logger
from vizboard.db.database import get_db
from vizboard.models.dashboard import Widget
from vizboard.models.user import User
from vizboard.schemas.chart import WidgetRender
from vizboard.schemas.widget import WidgetCreate, WidgetResponse, WidgetUpdate
from vizboard.services.chart_dispatcher import RenderOptions
from vizboard.services.dashboard_service import DashboardService
from vizboard.services.data_source_service import DataSourceService
from vizboard.services.export_service import csv_filename, rows_to_csv
from vizboard.services.layer_compositor import WidgetComposition, render_widget
from vizboard.services.widget_service import WidgetService


router = APIRouter(prefix="/api/widgets", tags=["widgets"])


async def _get_widget_or_404(db: AsyncSession, widget_id: int) -> Widget:
    widget = await WidgetService.get_widget(db, widget_id)
    if not widget:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Widget not found")
    return widget


async def _owned_widget(db: AsyncSession, widget_id: int, user: User) -> Widget:
    """Widget whose dashboard belongs to the user; 404 if missing, 403 if foreign."""
    widget = await _get_widget_or_404(db, widget_id)
    dashboard = await DashboardService.get_owned_dashboard(db, widget.dashboard_id, user.id)
    if not dashboard:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return widget


@router.post("", response_model=WidgetResponse)
async def create_widget(
    widget_in: WidgetCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    Create a widget, freezing up to 100 rows of its data source into ``config.data``.
    """
    dashboard = await DashboardService.get_owned_dashboard(db, widget_in.dashboard_id, current_user.id)
    if not dashboard:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dashboard not found")

    source = None
    if widget_in.data_source_id is not None:
        source = await DataSourceService.get_source(db, widget_in.data_source_id, current_user.id)
        if not source:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Data source not found")

    return await WidgetService.create_widget(db, widget_in, source)


@router.patch("/{widget_id}", response_model=WidgetResponse)
async def update_widget(
    widget_id: int,
    widget_in: WidgetUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    widget = await _owned_widget(db, widget_id, current_user)
    if widget_in.data_source_id is not None:
        source = await DataSourceService.get_source(db, widget_in.data_source_id, current_user.id)
        if not source:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Data source not found")
    try:
        return await WidgetService.update_widget(db, widget, widget_in)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False))


@router.delete("/{widget_id}")
async def delete_widget(
    widget_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    widget = await _owned_widget(db, widget_id, current_user)
    await WidgetService.delete_widget(db, widget)
    return {"success": True}


async def _readable_widget(db: AsyncSession, widget_id: int, user: User):
    widget = await _get_widget_or_404(db, widget_id)
    dashboard = await DashboardService.get_dashboard(db, widget.dashboard_id, user.id)
    if not dashboard:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    sources = await DataSourceService.get_sources_by_ids(db, [widget.data_source_id], dashboard.user_id)
    return widget, dashboard, sources


@router.get("/{widget_id}/render", response_model=WidgetRender)
async def render(
    widget_id: int,
    layer: int = 0,
    theme: Optional[str] = None,
    preset: str = "default",
    ai_tooltips: bool = Query(False, alias="aiTooltips"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    Render description of one layer of a widget.

    ``theme`` defaults to the dashboard's theme; ``preset`` picks the color
    palette used when the widget config has no explicit colors.
    """
    widget, dashboard, sources = await _readable_widget(db, widget_id, current_user)
    options = RenderOptions.for_preset(preset, theme=theme or dashboard.theme or "default", ai_tooltips=ai_tooltips)
    return render_widget(widget, sources, active_layer=layer, options=options)


@router.get("/{widget_id}/export.csv")
async def export_csv(
    widget_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    widget, _, sources = await _readable_widget(db, widget_id, current_user)
    composition = WidgetComposition(
        widget_type=widget.type,
        config=widget.config,
        data_source_id=widget.data_source_id,
        available_sources=sources,
        stored_layers=widget.layers,
    )
    logger.info(f"[WIDGETS] Exporting {len(composition.rows)} rows of widget {widget.id}")
    return Response(
        content=rows_to_csv(composition.rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{csv_filename(widget.title)}"'},
    )
