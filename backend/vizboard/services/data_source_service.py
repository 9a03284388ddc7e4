from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, or_
from typing import Any, Dict, Iterable, List, Optional
from vizboard.core.logger import logger
from vizboard.models.ai_analysis import AiAnalysis
from vizboard.models.dashboard import Widget
from vizboard.models.data_source import DataSource
from vizboard.services.dashboard_service import member_organization_ids


class DataSourceService:
    @staticmethod
    async def _visible_to(db: AsyncSession, user_id: int):
        org_ids = await member_organization_ids(db, user_id)
        if org_ids:
            return or_(DataSource.user_id == user_id, DataSource.organization_id.in_(org_ids))
        return DataSource.user_id == user_id

    @staticmethod
    async def get_user_sources(db: AsyncSession, user_id: int) -> List[DataSource]:
        visible = await DataSourceService._visible_to(db, user_id)
        result = await db.execute(
            select(DataSource).where(visible).order_by(DataSource.created_at.desc(), DataSource.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_source(db: AsyncSession, source_id: int, user_id: int) -> Optional[DataSource]:
        visible = await DataSourceService._visible_to(db, user_id)
        result = await db.execute(select(DataSource).where(DataSource.id == source_id, visible))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_sources_by_ids(db: AsyncSession, source_ids: Iterable[Optional[int]], user_id: int) -> List[DataSource]:
        """Sources a set of widgets points at, limited to what the user can see."""
        ids = {source_id for source_id in source_ids if source_id is not None}
        if not ids:
            return []
        visible = await DataSourceService._visible_to(db, user_id)
        result = await db.execute(select(DataSource).where(DataSource.id.in_(ids), visible))
        return list(result.scalars().all())

    @staticmethod
    async def create_source(
        db: AsyncSession,
        user_id: int,
        name: str,
        type: str,
        file_type: Optional[str] = None,
        source_url: Optional[str] = None,
        raw_data: Any = None,
        metadata: Optional[Dict[str, Any]] = None,
        status: str = "pending",
        error_message: Optional[str] = None,
        organization_id: Optional[int] = None,
    ) -> DataSource:
        source = DataSource(
            user_id=user_id,
            organization_id=organization_id,
            name=name,
            type=type,
            file_type=file_type,
            source_url=source_url,
            raw_data=raw_data,
            metadata_json=metadata,
            status=status,
            error_message=error_message,
        )
        db.add(source)
        await db.commit()
        await db.refresh(source)
        logger.info(f"[DATA SOURCES] Created {type} source {source.id} '{name}' ({status})")
        return source

    @staticmethod
    async def delete_source(db: AsyncSession, source: DataSource):
        """
        Delete a source owned by the caller.

        Widgets built on it keep their frozen ``config.data`` and simply lose
        the reference; cached analyses go with the source.
        """
        await db.execute(
            update(Widget).where(Widget.data_source_id == source.id).values(data_source_id=None)
        )
        await db.execute(delete(AiAnalysis).where(AiAnalysis.data_source_id == source.id))
        await db.execute(delete(DataSource).where(DataSource.id == source.id))
        await db.commit()
        logger.info(f"[DATA SOURCES] Deleted source {source.id}")

    @staticmethod
    async def add_analysis(db: AsyncSession, source: DataSource, analysis_type: str, result: Dict[str, Any]) -> AiAnalysis:
        analysis = AiAnalysis(data_source_id=source.id, analysis_type=analysis_type, result=result)
        db.add(analysis)
        await db.commit()
        await db.refresh(analysis)
        return analysis

    @staticmethod
    async def get_user_analyses(db: AsyncSession, user_id: int) -> List[AiAnalysis]:
        result = await db.execute(
            select(AiAnalysis)
            .join(DataSource, AiAnalysis.data_source_id == DataSource.id)
            .where(DataSource.user_id == user_id)
            .order_by(AiAnalysis.created_at.desc(), AiAnalysis.id.desc())
        )
        return list(result.scalars().all())
