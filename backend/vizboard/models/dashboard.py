from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, DateTime, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from vizboard.db.database import Base

class Dashboard(Base):
    __tablename__ = "dashboards"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=True, index=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    is_public = Column(Boolean, default=False, nullable=False)
    share_token = Column(String, unique=True, nullable=True)
    layout = Column(JSON, nullable=True) # Grid layout preferences
    theme = Column(String, default="default")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="dashboards")
    widgets = relationship(
        "Widget",
        back_populates="dashboard",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Widget.id",
    )

class Widget(Base):
    __tablename__ = "widgets"

    id = Column(Integer, primary_key=True, index=True)
    dashboard_id = Column(Integer, ForeignKey("dashboards.id", ondelete="CASCADE"), nullable=False, index=True)
    # Widgets outlive their source: the snapshot in config["data"] keeps rendering
    data_source_id = Column(Integer, ForeignKey("data_sources.id", ondelete="SET NULL"), nullable=True)
    type = Column(String, nullable=False) # bar, line, pie, donut, gauge, ...
    title = Column(String, nullable=False)
    config = Column(JSON, nullable=False, default=dict)
    position = Column(JSON, nullable=False) # x, y, w, h
    layers = Column(JSON, nullable=True) # [{id, type, label, config}]
    reference_lines = Column(JSON, nullable=True)
    annotations = Column(JSON, nullable=True)
    ai_insights = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    dashboard = relationship("Dashboard", back_populates="widgets")
    data_source = relationship("DataSource")
