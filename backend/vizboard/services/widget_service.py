from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Any, Dict, List, Optional
from vizboard.core.logger import logger
from vizboard.models.dashboard import Widget
from vizboard.models.data_source import DataSource
from vizboard.schemas.widget import WidgetCreate, WidgetUpdate, check_layer_configs, parse_widget_config
from vizboard.services.data_resolver import resolve_widget_rows

DEFAULT_POSITION = {"x": 0, "y": 0, "w": 1, "h": 1}

# Fields holding lists of models, persisted in their camelCase JSON form
_JSON_LIST_FIELDS = ("layers", "reference_lines", "annotations")


def _dump_list(items) -> Optional[List[Dict[str, Any]]]:
    if items is None:
        return None
    return [item.model_dump(by_alias=True, mode="json") for item in items]


class WidgetService:
    @staticmethod
    async def get_dashboard_widgets(db: AsyncSession, dashboard_id: int) -> List[Widget]:
        result = await db.execute(
            select(Widget).where(Widget.dashboard_id == dashboard_id).order_by(Widget.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_widget(db: AsyncSession, widget_id: int) -> Optional[Widget]:
        result = await db.execute(select(Widget).where(Widget.id == widget_id))
        return result.scalar_one_or_none()

    @staticmethod
    def snapshot_config(config: Dict[str, Any], source: Optional[DataSource]) -> Dict[str, Any]:
        """
        Freeze up to the row limit of the source into ``config["data"]``.

        The snapshot replaces inline data only when the source yields rows.
        """
        config = dict(config or {})
        if source is None:
            return config
        source_config = {key: value for key, value in config.items() if key != "data"}
        resolved = resolve_widget_rows(source_config, source.id, [source])
        if resolved.rows:
            config["data"] = resolved.rows
        return config

    @staticmethod
    async def create_widget(db: AsyncSession, widget_in: WidgetCreate, source: Optional[DataSource] = None) -> Widget:
        widget = Widget(
            dashboard_id=widget_in.dashboard_id,
            data_source_id=widget_in.data_source_id,
            type=widget_in.type,
            title=widget_in.title,
            config=WidgetService.snapshot_config(widget_in.config, source),
            position=widget_in.position.model_dump() if widget_in.position else dict(DEFAULT_POSITION),
            layers=_dump_list(widget_in.layers),
            reference_lines=_dump_list(widget_in.reference_lines),
            annotations=_dump_list(widget_in.annotations),
        )
        db.add(widget)
        await db.commit()
        await db.refresh(widget)
        logger.info(
            f"[WIDGETS] Created {widget.type} widget {widget.id} on dashboard {widget.dashboard_id} "
            f"with {len(widget.config.get('data') or [])} rows"
        )
        return widget

    @staticmethod
    async def update_widget(db: AsyncSession, widget: Widget, widget_in: WidgetUpdate) -> Widget:
        """
        Apply a partial update.

        Raises:
            pydantic.ValidationError: If the resulting config, or a layer merged
                over it, does not fit its chart type
        """
        changes = widget_in.model_dump(exclude_unset=True)
        for key in ("type", "title"):
            if key in changes and changes[key] is None:
                del changes[key]
        if "config" in changes and changes["config"] is None:
            changes["config"] = {}
        if "type" in changes or "config" in changes or "layers" in changes:
            config = changes.get("config", widget.config)
            parse_widget_config(changes.get("type", widget.type), config)
            check_layer_configs(config, widget_in.layers if "layers" in changes else widget.layers)

        for key in _JSON_LIST_FIELDS:
            if key in changes:
                changes[key] = _dump_list(getattr(widget_in, key))
        if "position" in changes and changes["position"] is None:
            changes["position"] = dict(DEFAULT_POSITION)

        for key, value in changes.items():
            setattr(widget, key, value)

        await db.commit()
        await db.refresh(widget)
        return widget

    @staticmethod
    async def set_insight(db: AsyncSession, widget: Widget, insight: str):
        widget.ai_insights = insight
        await db.commit()

    @staticmethod
    async def delete_widget(db: AsyncSession, widget: Widget):
        await db.delete(widget)
        await db.commit()
        logger.info(f"[WIDGETS] Deleted widget {widget.id}")
