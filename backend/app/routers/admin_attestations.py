"""
Router du tableau de bord admin : statistiques, attestations filtrées,
facture traitée, suppression, purge des brouillons orphelins.
"""

import uuid
import datetime as dt
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.attestation import (
    AttestationFilters,
    AttestationResponse,
    DashboardResponse,
    InvoiceProcessedUpdate,
)
from app.security import require_admin
from app.services import admin_service, client_service, reconciliation_service

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["Admin - Attestations"],
    dependencies=[Depends(require_admin)],
)


@router.get("/dashboard", response_model=DashboardResponse, summary="Charger le tableau de bord")
def load_dashboard(db: Session = Depends(get_db)):
    """
    Purge d'abord les brouillons dont le code est utilisé ou expiré,
    puis retourne les statistiques et la liste des clients.
    """
    purged = reconciliation_service.purge_orphan_drafts(db)
    return DashboardResponse(
        stats=admin_service.get_dashboard_stats(db),
        clients=client_service.list_clients_with_stats(db),
        purged_drafts=purged,
    )


@router.get("/attestations", response_model=List[AttestationResponse], summary="Lister les attestations")
def list_attestations(
    tab: str = "all",
    search: Optional[str] = None,
    date_start: Optional[dt.date] = None,
    date_end: Optional[dt.date] = None,
    min_amount: Optional[Decimal] = None,
    max_amount: Optional[Decimal] = None,
    event_type: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    Attestations (plus récentes d'abord) filtrées par onglet (all / completed / pending),
    nom du prestataire, période de début de prestation, montant et type d'événement.
    """
    try:
        filters = AttestationFilters(
            tab=tab,
            search=search,
            date_start=date_start,
            date_end=date_end,
            min_amount=min_amount,
            max_amount=max_amount,
            event_type=event_type,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    return admin_service.filter_attestations(admin_service.list_attestations(db), filters)


@router.patch(
    "/attestations/{attestation_id}/invoice",
    response_model=AttestationResponse,
    summary="Marquer la facture comme traitée ou non",
)
def set_invoice_processed(
    attestation_id: uuid.UUID, data: InvoiceProcessedUpdate, db: Session = Depends(get_db)
):
    attestation = admin_service.set_invoice_processed(db, attestation_id, data.invoice_processed)
    if attestation is None:
        raise HTTPException(status_code=404, detail="Attestation introuvable.")
    return attestation


@router.delete("/attestations/{attestation_id}", status_code=204, summary="Supprimer une attestation")
def delete_attestation(attestation_id: uuid.UUID, db: Session = Depends(get_db)):
    if not admin_service.delete_attestation(db, attestation_id):
        raise HTTPException(status_code=404, detail="Attestation introuvable.")


@router.post("/drafts/cleanup", summary="Purger les brouillons orphelins")
def cleanup_drafts(db: Session = Depends(get_db)):
    """Supprime les brouillons dont le code est utilisé ou expiré. Retourne le nombre supprimé."""
    return {"deleted_count": reconciliation_service.purge_orphan_drafts(db)}
