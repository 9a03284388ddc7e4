"""
User model for the accounts issued by the identity provider.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from vizboard.db.database import Base


class User(Base):
    """
    User table, mirrored from the identity provider on first sight.

    Fields:
        id: Primary key, matches the ``sub`` claim of bearer tokens
        username: Unique username
        email: User's email address
        is_active: Whether user account is active
        created_at: Timestamp when user was created
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    data_sources = relationship("DataSource", back_populates="user", cascade="all, delete-orphan")
    dashboards = relationship("Dashboard", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}')>"
