# edge_engage/models/user.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String, func, true
from sqlalchemy.orm import relationship

from edge_engage.core.base import Base

USER_ROLES = ("admin", "owner", "member", "viewer")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(100), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    # Only exposed to OAuth clients granted the "phone" scope
    phone_number = Column(String(32), nullable=True)
    role = Column(String(20), nullable=False, default="member", server_default="member")

    is_active = Column(Boolean, nullable=False, default=True, server_default=true())

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    projects = relationship(
        "Project",
        back_populates="creator",
        cascade="all, delete-orphan",
    )

    oauth_authorizations = relationship(
        "OAuthAuthorization",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    oauth_tokens = relationship(
        "OAuthToken",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    magic_link_tokens = relationship(
        "MagicLinkToken",
        back_populates="user",
        cascade="all, delete-orphan",
    )
