"""
Service du tableau de bord admin : liste et filtrage des attestations,
bascule « facture traitée », suppression, statistiques.
"""

import uuid
import logging
from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.config import settings
from app.models.attestation import Attestation
from app.models.client import Client
from app.schemas.attestation import (
    AttestationFilters,
    AttestationResponse,
    ClientSummary,
    DashboardStats,
)
from app.services.description_codec import classify_event_type

logger = logging.getLogger(__name__)


def to_response(attestation: Attestation, client: Optional[Client]) -> AttestationResponse:
    response = AttestationResponse.model_validate(attestation)
    response.client = ClientSummary.model_validate(client) if client is not None else None
    response.event_type = classify_event_type(
        attestation.prestation_description, settings.FEATURED_EVENT_NAME
    )
    return response


def list_attestations(db: Session) -> List[AttestationResponse]:
    """Toutes les attestations (brouillons et finalisées), plus récentes d'abord, avec leur client."""
    rows = db.execute(
        select(Attestation, Client)
        .outerjoin(Client, Attestation.client_id == Client.id)
        .order_by(Attestation.created_at.desc())
    ).all()
    return [to_response(attestation, client) for attestation, client in rows]


def filter_attestations(
    items: Iterable[AttestationResponse], filters: AttestationFilters
) -> List[AttestationResponse]:
    """
    Filtre une liste déjà chargée :
    - onglet : completed = PDF généré, pending = PDF non généré
    - recherche : « nom prénom » du prestataire, insensible à la casse
    - dates : bornes inclusives sur prestation_date_debut (sans date = exclue si une borne est fixée)
    - montants : bornes inclusives
    - type d'événement : sous-chaîne de la description, insensible à la casse
    """
    search = filters.search.lower() if filters.search else None
    event_type = filters.event_type.lower() if filters.event_type else None

    result = []
    for item in items:
        if filters.tab == "completed" and not item.pdf_generated:
            continue
        if filters.tab == "pending" and item.pdf_generated:
            continue

        if search and search not in f"{item.prestataire_nom} {item.prestataire_prenom}".lower():
            continue

        start = item.prestation_date_debut
        if filters.date_start and (start is None or start < filters.date_start):
            continue
        if filters.date_end and (start is None or start > filters.date_end):
            continue

        if filters.min_amount is not None and item.prestation_montant < filters.min_amount:
            continue
        if filters.max_amount is not None and item.prestation_montant > filters.max_amount:
            continue

        if event_type and event_type not in (item.prestation_description or "").lower():
            continue

        result.append(item)
    return result


def set_invoice_processed(
    db: Session, attestation_id: uuid.UUID, value: bool
) -> Optional[AttestationResponse]:
    """Positionne invoice_processed, indépendamment du statut. None si l'attestation n'existe pas."""
    attestation = db.get(Attestation, attestation_id)
    if attestation is None:
        return None

    attestation.invoice_processed = value
    db.commit()
    db.refresh(attestation)
    logger.info("Attestation %s : facture traitée = %s", attestation_id, value)
    return to_response(attestation, db.get(Client, attestation.client_id))


def delete_attestation(db: Session, attestation_id: uuid.UUID) -> bool:
    attestation = db.get(Attestation, attestation_id)
    if attestation is None:
        return False

    db.delete(attestation)
    db.commit()
    logger.info("Attestation supprimée : %s", attestation_id)
    return True


def get_dashboard_stats(db: Session) -> DashboardStats:
    total_clients = db.execute(select(func.count(Client.id))).scalar() or 0
    completed = db.execute(
        select(func.count(Attestation.id)).where(Attestation.pdf_generated.is_(True))
    ).scalar() or 0
    pending = db.execute(
        select(func.count(Attestation.id)).where(Attestation.pdf_generated.is_(False))
    ).scalar() or 0

    return DashboardStats(
        total_clients=total_clients,
        completed=completed,
        pending=pending,
        attestations=completed + pending,
    )
