"""
Router admin pour les clients et leurs codes d'accès.
Toutes les routes exigent une session administrateur.
"""

import uuid
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import ConflictError, NotFoundError
from app.models.client import Client
from app.schemas.client import ClientCreate, ClientResponse, ClientWithStats, TokenIssueResponse
from app.schemas.token import TokenResponse, WhatsAppLinkResponse
from app.security import require_admin
from app.services import client_service, email_service, token_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/admin/clients",
    tags=["Admin - Clients"],
    dependencies=[Depends(require_admin)],
)


def _get_client_or_404(db: Session, client_id: uuid.UUID) -> Client:
    client = db.get(Client, client_id)
    if client is None:
        raise HTTPException(status_code=404, detail="Client introuvable.")
    return client


@router.get("", response_model=List[ClientWithStats], summary="Lister les clients")
def list_clients(db: Session = Depends(get_db)):
    """Clients du plus récent au plus ancien, avec codes actifs et compteurs d'attestations."""
    return client_service.list_clients_with_stats(db)


@router.post("", response_model=ClientResponse, status_code=201, summary="Créer un client")
def create_client(data: ClientCreate, db: Session = Depends(get_db)):
    return client_service.create_client(db, data)


@router.put("/{client_id}", response_model=ClientResponse, summary="Modifier un client")
def update_client(client_id: uuid.UUID, data: ClientCreate, db: Session = Depends(get_db)):
    client = client_service.update_client(db, client_id, data)
    if client is None:
        raise HTTPException(status_code=404, detail="Client introuvable.")
    return client


@router.delete("/{client_id}", status_code=204, summary="Supprimer un client")
def delete_client(client_id: uuid.UUID, db: Session = Depends(get_db)):
    """Supprime le client ainsi que ses codes et attestations."""
    if not client_service.delete_client(db, client_id):
        raise HTTPException(status_code=404, detail="Client introuvable.")


@router.post(
    "/{client_id}/tokens",
    response_model=TokenIssueResponse,
    status_code=201,
    summary="Générer un code d'accès",
)
def issue_token(client_id: uuid.UUID, db: Session = Depends(get_db)):
    """
    Génère un code de 8 caractères valable 7 jours et crée le brouillon initial.
    409 si le client a déjà un code actif.
    Le lien WhatsApp est fourni quand le client a un numéro de téléphone.
    """
    try:
        token = token_service.issue_token(db, client_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=e.message)

    client = db.get(Client, client_id)
    whatsapp_url = None
    if client is not None and client.phone:
        try:
            whatsapp_url = token_service.build_whatsapp_link(client, token)
        except ConflictError:
            whatsapp_url = None
    return TokenIssueResponse(token=TokenResponse.model_validate(token), whatsapp_url=whatsapp_url)


@router.get("/{client_id}/tokens", response_model=List[TokenResponse], summary="Historique des codes")
def token_history(client_id: uuid.UUID, db: Session = Depends(get_db)):
    """Les 20 derniers codes du client, du plus récent au plus ancien."""
    _get_client_or_404(db, client_id)
    return token_service.get_token_history(db, client_id)


@router.get(
    "/{client_id}/whatsapp-link",
    response_model=WhatsAppLinkResponse,
    summary="Lien WhatsApp du code actif",
)
def whatsapp_link(client_id: uuid.UUID, db: Session = Depends(get_db)):
    client = _get_client_or_404(db, client_id)
    token = token_service.get_active_token(db, client_id)
    if token is None:
        raise HTTPException(status_code=404, detail="Aucun code actif pour ce client.")
    try:
        url = token_service.build_whatsapp_link(client, token)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=e.message)
    return WhatsAppLinkResponse(client_id=client.id, code=token.token, url=url)


@router.post("/{client_id}/send-code-email", summary="Envoyer le code actif par email")
def send_code_email(client_id: uuid.UUID, db: Session = Depends(get_db)):
    """Envoie le code actif à l'adresse email du client (409 sans email, 404 sans code actif)."""
    client = _get_client_or_404(db, client_id)
    if not client.email:
        raise HTTPException(status_code=409, detail="Pas d'adresse email pour envoyer le code.")

    token = token_service.get_active_token(db, client_id)
    if token is None:
        raise HTTPException(status_code=404, detail="Aucun code actif pour ce client.")

    try:
        email_service.send_access_code_email(client.email, client.name, token.token, token.expires_at)
    except Exception as e:
        logger.error("Envoi du code au client %s impossible : %s", client_id, e, exc_info=True)
        raise HTTPException(status_code=502, detail=f"Envoi de l'email impossible : {e}")

    return {"success": True, "client_id": str(client.id), "email": client.email}
