import secrets
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from sqlalchemy.orm import selectinload
from typing import List, Optional
from vizboard.core.logger import logger
from vizboard.models.dashboard import Dashboard
from vizboard.models.organization import OrganizationMember
from vizboard.schemas.dashboard import DashboardCreate, DashboardUpdate


def new_share_token() -> str:
    """Opaque, unguessable token for public dashboard links."""
    return secrets.token_hex(16)


async def member_organization_ids(db: AsyncSession, user_id: int) -> List[int]:
    result = await db.execute(
        select(OrganizationMember.organization_id).where(OrganizationMember.user_id == user_id)
    )
    return list(result.scalars().all())


class DashboardService:
    @staticmethod
    async def _visible_to(db: AsyncSession, user_id: int):
        org_ids = await member_organization_ids(db, user_id)
        if org_ids:
            return or_(Dashboard.user_id == user_id, Dashboard.organization_id.in_(org_ids))
        return Dashboard.user_id == user_id

    @staticmethod
    async def get_user_dashboards(db: AsyncSession, user_id: int, skip: int = 0, limit: int = 100) -> List[Dashboard]:
        visible = await DashboardService._visible_to(db, user_id)
        result = await db.execute(
            select(Dashboard)
            .where(visible)
            .order_by(Dashboard.updated_at.desc(), Dashboard.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_dashboard(db: AsyncSession, dashboard_id: int, user_id: int) -> Optional[Dashboard]:
        """Dashboard readable by the user: owned, or shared through an organization."""
        visible = await DashboardService._visible_to(db, user_id)
        result = await db.execute(
            select(Dashboard)
            .options(selectinload(Dashboard.widgets))
            .where(Dashboard.id == dashboard_id, visible)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_owned_dashboard(db: AsyncSession, dashboard_id: int, user_id: int) -> Optional[Dashboard]:
        """Dashboard the user may modify."""
        result = await db.execute(
            select(Dashboard)
            .options(selectinload(Dashboard.widgets))
            .where(Dashboard.id == dashboard_id, Dashboard.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_public_dashboard(db: AsyncSession, share_token: str) -> Optional[Dashboard]:
        result = await db.execute(
            select(Dashboard)
            .options(selectinload(Dashboard.widgets))
            .where(Dashboard.share_token == share_token, Dashboard.is_public.is_(True))
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def create_dashboard(db: AsyncSession, user_id: int, dashboard_in: DashboardCreate) -> Dashboard:
        if dashboard_in.organization_id is not None:
            org_ids = await member_organization_ids(db, user_id)
            if dashboard_in.organization_id not in org_ids:
                raise PermissionError("Not a member of this organization")

        dashboard = Dashboard(
            user_id=user_id,
            organization_id=dashboard_in.organization_id,
            title=dashboard_in.title,
            description=dashboard_in.description,
            is_public=dashboard_in.is_public,
            share_token=new_share_token() if dashboard_in.is_public else None,
            layout=dashboard_in.layout,
            theme=dashboard_in.theme,
        )
        db.add(dashboard)
        await db.commit()
        logger.info(f"[DASHBOARDS] Created dashboard {dashboard.id} for user {user_id}")
        return await DashboardService.get_owned_dashboard(db, dashboard.id, user_id)

    @staticmethod
    async def update_dashboard(db: AsyncSession, dashboard: Dashboard, dashboard_in: DashboardUpdate) -> Dashboard:
        """
        Apply a partial update.

        Publishing a dashboard that has never had a token issues one. An
        existing token is kept across unpublish/republish so shared links
        stay stable; it only resolves while the dashboard is public.
        """
        changes = dashboard_in.model_dump(exclude_unset=True)
        # Columns that cannot be cleared; an explicit null leaves them unchanged
        for key in ("title", "is_public", "theme"):
            if key in changes and changes[key] is None:
                del changes[key]
        for key, value in changes.items():
            setattr(dashboard, key, value)
        if dashboard.is_public and not dashboard.share_token:
            dashboard.share_token = new_share_token()

        await db.commit()
        return await DashboardService.get_owned_dashboard(db, dashboard.id, dashboard.user_id)

    @staticmethod
    async def delete_dashboard(db: AsyncSession, dashboard: Dashboard):
        await db.delete(dashboard)
        await db.commit()
        logger.info(f"[DASHBOARDS] Deleted dashboard {dashboard.id} and its widgets")
