"""
Service métier pour les événements (données de référence du formulaire client).
"""

import uuid
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.event import Event
from app.schemas.event import EventCreate, EventUpdate

logger = logging.getLogger(__name__)


def list_events(db: Session, active_only: bool = False) -> List[Event]:
    """Tous les événements triés par nom ; seulement les actifs pour le formulaire client."""
    query = select(Event).order_by(Event.name)
    if active_only:
        query = query.where(Event.active.is_(True))
    return db.execute(query).scalars().all()


def create_event(db: Session, data: EventCreate) -> Event:
    event = Event(
        name=data.name,
        description=data.description,
        courts=data.courts,
        categories=data.categories,
        active=data.active,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Événement créé : %s (%s)", event.name, event.id)
    return event


def update_event(db: Session, event_id: uuid.UUID, data: EventUpdate) -> Optional[Event]:
    """Met à jour les champs fournis. Retourne None si l'événement n'existe pas."""
    event = db.get(Event, event_id)
    if event is None:
        return None

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(event, field, value)
    event.updated_at = datetime.now()

    db.commit()
    db.refresh(event)
    return event


def toggle_event(db: Session, event_id: uuid.UUID) -> Optional[Event]:
    """Active ou désactive un événement."""
    event = db.get(Event, event_id)
    if event is None:
        return None

    event.active = not event.active
    event.updated_at = datetime.now()
    db.commit()
    db.refresh(event)
    return event


def delete_event(db: Session, event_id: uuid.UUID) -> bool:
    event = db.get(Event, event_id)
    if event is None:
        return False

    db.delete(event)
    db.commit()
    return True
