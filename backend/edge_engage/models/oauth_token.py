# edge_engage/models/oauth_token.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from edge_engage.core.base import Base


class OAuthToken(Base):
    __tablename__ = "oauth_tokens"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    client_id = Column(String(255), nullable=False, index=True)

    # Digests only; raw tokens are returned to the client once
    access_token_hash = Column(String(64), unique=True, index=True, nullable=False)
    refresh_token_hash = Column(String(64), unique=True, index=True, nullable=False)

    scope = Column(Text, nullable=False, default="")

    # Applies to the access token
    expires_at = Column(DateTime(timezone=True), nullable=False)

    # If set, neither token is valid
    revoked_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="oauth_tokens")

    @property
    def scopes(self) -> list[str]:
        return (self.scope or "").split()
