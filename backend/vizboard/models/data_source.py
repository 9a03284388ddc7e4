"""
Data source model: a named, parsed payload imported by a user.
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, JSON
from sqlalchemy.orm import relationship
from vizboard.db.database import Base


DATA_SOURCE_TYPES = ("file", "url", "google-drive", "onedrive", "notion")
DATA_SOURCE_STATUSES = ("pending", "processing", "ready", "error")


class DataSource(Base):
    """
    Tabular or semi-structured data imported from a file, URL or cloud drive.

    Fields:
        type: file, url, google-drive, onedrive, notion
        file_type: csv, json, xlsx, ...
        raw_data: list of row objects, or an object whose values may hold such a list
        metadata_json: size, rows, columns, columnNames
        status: pending, processing, ready, error
    """
    __tablename__ = "data_sources"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=True, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    file_type = Column(String, nullable=True)
    source_url = Column(Text, nullable=True)
    raw_data = Column(JSON, nullable=True)
    metadata_json = Column("metadata", JSON, nullable=True)
    status = Column(String, default="pending", nullable=False)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="data_sources")
    analyses = relationship("AiAnalysis", back_populates="data_source", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def is_ready(self) -> bool:
        """True when the resolver may read rows from this source."""
        return self.status == "ready" and bool(self.raw_data)

    def __repr__(self):
        return f"<DataSource(id={self.id}, name='{self.name}', status='{self.status}')>"
