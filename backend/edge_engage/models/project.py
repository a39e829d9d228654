from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from edge_engage.core.base import Base

PROJECT_STATUSES = ("planning", "active", "paused", "completed", "archived")


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # One of PROJECT_STATUSES
    status = Column(String(20), nullable=False, default="planning", server_default="planning")
    # Methodology phase 1..3
    current_phase = Column(Integer, nullable=False, default=1, server_default="1")

    created_by = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    creator = relationship("User", back_populates="projects")
