"""
Modèle SQLAlchemy pour les codes d'accès à usage unique.

Cycle de vie : émis (used=False) → utilisé (used=True, terminal).
Un code dont expires_at est passé est considéré expiré à la lecture,
il n'existe pas de balayage qui le modifie.
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class AccessToken(Base):
    __tablename__ = "tokens"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    token = Column(String(20), unique=True, nullable=False)  # Ex: "K7Q2M9ZD"
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(30), nullable=False, default="prestation")
    used = Column(Boolean, nullable=False, default=False)
    used_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
