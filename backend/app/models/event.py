"""
Modèle SQLAlchemy pour les événements (données de référence du formulaire).
"""

import uuid
from sqlalchemy import JSON, Boolean, Column, DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    courts = Column(JSON, nullable=False, default=list)       # Liste ordonnée de libellés
    categories = Column(JSON, nullable=False, default=list)   # Liste ordonnée de libellés
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
