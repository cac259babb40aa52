"""
Service métier pour les clients (gestion admin).
La suppression d'un client supprime en cascade ses codes et attestations (FK ON DELETE CASCADE).
"""

import uuid
import logging
from collections import defaultdict
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.attestation import Attestation
from app.models.client import Client
from app.models.token import AccessToken
from app.schemas.client import ClientCreate, ClientResponse, ClientWithStats
from app.schemas.token import TokenResponse

logger = logging.getLogger(__name__)


def create_client(db: Session, data: ClientCreate) -> Client:
    client = Client(name=data.name, phone=data.phone, discord=data.discord, email=data.email)
    db.add(client)
    db.commit()
    db.refresh(client)
    logger.info("Client créé : %s (%s)", client.name, client.id)
    return client


def update_client(db: Session, client_id: uuid.UUID, data: ClientCreate) -> Optional[Client]:
    """Remplace nom et coordonnées d'un client. Retourne None s'il n'existe pas."""
    client = db.get(Client, client_id)
    if client is None:
        return None

    client.name = data.name
    client.phone = data.phone
    client.discord = data.discord
    client.email = data.email
    client.updated_at = datetime.now()
    db.commit()
    db.refresh(client)
    return client


def delete_client(db: Session, client_id: uuid.UUID) -> bool:
    """Supprime un client. Retourne True si supprimé, False si non trouvé."""
    client = db.get(Client, client_id)
    if client is None:
        return False

    db.delete(client)
    db.commit()
    logger.info("Client supprimé : %s", client_id)
    return True


def list_clients_with_stats(db: Session, now: Optional[datetime] = None) -> List[ClientWithStats]:
    """
    Retourne tous les clients (plus récents d'abord) avec :
    - active_tokens_count / active_token : codes non utilisés et non expirés
    - completed_attestations_count : attestations avec PDF généré
    - pending_attestations_count : attestations non completed ou sans PDF
    """
    now = now or datetime.now()

    clients = db.execute(select(Client).order_by(Client.created_at.desc())).scalars().all()

    tokens_by_client = defaultdict(list)
    for token in db.execute(select(AccessToken).order_by(AccessToken.created_at.desc())).scalars().all():
        tokens_by_client[token.client_id].append(token)

    attestations_by_client = defaultdict(list)
    rows = db.execute(
        select(Attestation.client_id, Attestation.status, Attestation.pdf_generated)
    ).all()
    for client_id, status, pdf_generated in rows:
        attestations_by_client[client_id].append((status, pdf_generated))

    result = []
    for client in clients:
        active_tokens = [
            t for t in tokens_by_client[client.id]
            if not t.used and t.expires_at is not None and t.expires_at > now
        ]
        attestations = attestations_by_client[client.id]
        completed = [a for a in attestations if a[1]]
        pending = [a for a in attestations if a[0] != "completed" or not a[1]]

        result.append(ClientWithStats(
            **ClientResponse.model_validate(client).model_dump(),
            active_tokens_count=len(active_tokens),
            total_attestations_count=len(attestations),
            completed_attestations_count=len(completed),
            pending_attestations_count=len(pending),
            active_token=TokenResponse.model_validate(active_tokens[0]) if active_tokens else None,
        ))

    return result
