"""
Router public du formulaire client.
Validation du code d'accès, lecture et sauvegarde du brouillon (auto-save),
liste des événements actifs, contrôle des champs d'une étape.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.exceptions import InvalidOrExpiredCodeError
from app.models.attestation import Attestation
from app.schemas.access import RedeemResponse
from app.schemas.attestation import AttestationForm, DraftResponse, StepValidationResult
from app.schemas.client import ClientResponse
from app.schemas.event import EventResponse
from app.schemas.token import RedeemRequest, TokenResponse
from app.services import draft_service, event_service, token_service
from app.services.form_validation import FORM_STEPS, validate_step

router = APIRouter(prefix="/api/v1", tags=["Formulaire client"])


def _draft_response(draft: Attestation) -> DraftResponse:
    return DraftResponse(
        id=draft.id,
        token_id=draft.token_id,
        status=draft.status,
        updated_at=draft.updated_at,
        form=draft_service.form_from_attestation(draft),
    )


@router.post("/access/redeem", response_model=RedeemResponse, summary="Valider un code d'accès")
def redeem_code(data: RedeemRequest, db: Session = Depends(get_db)):
    """
    Vérifie le code saisi par le client (inconnu, utilisé ou expiré → 400).
    Le code n'est pas consommé : il ne l'est qu'à la finalisation.
    Retourne le brouillon existant pour reprendre la saisie.
    """
    try:
        token, client = token_service.redeem(db, data.code)
    except InvalidOrExpiredCodeError as e:
        raise HTTPException(status_code=400, detail=e.message)

    draft = draft_service.find_draft(db, token.id)
    return RedeemResponse(
        token=TokenResponse.model_validate(token),
        client=ClientResponse.model_validate(client),
        draft=_draft_response(draft) if draft is not None else None,
        events=[EventResponse.model_validate(e) for e in event_service.list_events(db, active_only=True)],
        autosave_interval_seconds=settings.AUTOSAVE_INTERVAL_SECONDS,
    )


@router.get("/tokens/{token_id}/draft", response_model=DraftResponse, summary="Brouillon courant")
def get_draft(token_id: uuid.UUID, db: Session = Depends(get_db)):
    try:
        token = token_service.get_usable_token(db, token_id)
    except InvalidOrExpiredCodeError as e:
        raise HTTPException(status_code=400, detail=e.message)

    draft = draft_service.find_draft(db, token.id)
    if draft is None:
        raise HTTPException(status_code=404, detail="Aucun brouillon pour ce code.")
    return _draft_response(draft)


@router.put("/tokens/{token_id}/draft", response_model=DraftResponse, summary="Sauvegarder le brouillon")
def save_draft(token_id: uuid.UUID, form: AttestationForm, db: Session = Depends(get_db)):
    """
    Crée ou met à jour l'unique brouillon du code (auto-save et sauvegarde d'étape).
    La dernière écriture l'emporte.
    """
    try:
        token = token_service.get_usable_token(db, token_id)
    except InvalidOrExpiredCodeError as e:
        raise HTTPException(status_code=400, detail=e.message)

    try:
        draft = draft_service.upsert_draft(db, token.id, token.client_id, form)
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Erreur de sauvegarde du brouillon : {e}")
    return _draft_response(draft)


@router.get("/events", response_model=List[EventResponse], summary="Événements proposés")
def list_active_events(db: Session = Depends(get_db)):
    """Événements actifs, triés par nom, avec leurs courts et catégories."""
    return event_service.list_events(db, active_only=True)


@router.post(
    "/form/steps/{step}/validate",
    response_model=StepValidationResult,
    summary="Contrôler les champs obligatoires d'une étape",
)
def validate_form_step(step: int, form: AttestationForm):
    if step not in FORM_STEPS:
        raise HTTPException(status_code=404, detail="Étape inconnue.")
    errors = validate_step(form, step)
    return StepValidationResult(step=step, valid=not errors, errors=errors)
