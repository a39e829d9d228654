# edge_engage/models/oauth_authorization.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, false
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from edge_engage.core.base import Base


class OAuthAuthorization(Base):
    """Single-use authorization code issued on consent approval."""

    __tablename__ = "oauth_authorizations"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Store ONLY a digest of the code (never the raw code)
    code_hash = Column(String(64), unique=True, index=True, nullable=False)

    client_id = Column(String(255), nullable=False, index=True)
    redirect_uri = Column(Text, nullable=False)
    # Space-separated scope tokens, copied verbatim onto the issued token
    scope = Column(Text, nullable=False, default="")

    expires_at = Column(DateTime(timezone=True), nullable=False)

    used = Column(Boolean, nullable=False, default=False, server_default=false())
    used_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="oauth_authorizations")
