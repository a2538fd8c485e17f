# ===== app/models/auth_credential.py =====
from sqlalchemy import Column, String, DateTime, LargeBinary, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from app.models.base import Base
import uuid


class AuthCredential(Base):
    """
    Calendar onboarding record written by the auth service.
    Read-only for booking; a row without a refresh token means the
    business onboarded once but has no usable calendar connection.
    """
    __tablename__ = "auth"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(UUID(as_uuid=True), ForeignKey("businesses.id"), nullable=False, unique=True)
    google_id = Column(String, nullable=True, unique=True)

    # Fernet-encrypted OAuth refresh token
    refresh_token_encrypted = Column(LargeBinary, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def has_refresh_token(self) -> bool:
        return bool(self.refresh_token_encrypted)
