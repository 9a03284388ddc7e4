"""
Cached AI analysis of a data source. Rows are append-only.
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, JSON
from sqlalchemy.orm import relationship
from vizboard.db.database import Base


class AiAnalysis(Base):
    __tablename__ = "ai_analyses"

    id = Column(Integer, primary_key=True, index=True)
    data_source_id = Column(Integer, ForeignKey("data_sources.id", ondelete="CASCADE"), nullable=False, index=True)
    analysis_type = Column(String, nullable=False)  # summary, trends, anomalies, recommendations
    result = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    data_source = relationship("DataSource", back_populates="analyses")
