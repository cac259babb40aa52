"""
Router admin pour les événements (courts et catégories proposés aux clients).
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.event import EventCreate, EventResponse, EventUpdate
from app.security import require_admin
from app.services import event_service

router = APIRouter(
    prefix="/api/v1/admin/events",
    tags=["Admin - Événements"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=List[EventResponse], summary="Lister les événements")
def list_events(db: Session = Depends(get_db)):
    """Tous les événements, actifs ou non, triés par nom."""
    return event_service.list_events(db)


@router.post("", response_model=EventResponse, status_code=201, summary="Créer un événement")
def create_event(data: EventCreate, db: Session = Depends(get_db)):
    return event_service.create_event(db, data)


@router.put("/{event_id}", response_model=EventResponse, summary="Modifier un événement")
def update_event(event_id: uuid.UUID, data: EventUpdate, db: Session = Depends(get_db)):
    """Seuls les champs fournis sont modifiés."""
    event = event_service.update_event(db, event_id, data)
    if event is None:
        raise HTTPException(status_code=404, detail="Événement introuvable.")
    return event


@router.patch("/{event_id}/toggle", response_model=EventResponse, summary="Activer / désactiver")
def toggle_event(event_id: uuid.UUID, db: Session = Depends(get_db)):
    event = event_service.toggle_event(db, event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Événement introuvable.")
    return event


@router.delete("/{event_id}", status_code=204, summary="Supprimer un événement")
def delete_event(event_id: uuid.UUID, db: Session = Depends(get_db)):
    if not event_service.delete_event(db, event_id):
        raise HTTPException(status_code=404, detail="Événement introuvable.")
