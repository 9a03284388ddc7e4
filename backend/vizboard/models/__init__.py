"""
Models package - exports all database models.
"""
from vizboard.models.user import User
from vizboard.models.organization import Organization, OrganizationMember
from vizboard.models.data_source import DataSource
from vizboard.models.dashboard import Dashboard, Widget
from vizboard.models.ai_analysis import AiAnalysis

__all__ = [
    "User",
    "Organization",
    "OrganizationMember",
    "DataSource",
    "Dashboard",
    "Widget",
    "AiAnalysis",
]
