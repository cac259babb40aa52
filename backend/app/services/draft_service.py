"""
Gestion du brouillon d'attestation associé à un code d'accès.

Invariant : pour un token_id donné, au plus une ligne status='draft'.
L'index unique partiel uq_attestations_one_draft_per_token le garantit en base ;
upsert_draft rejoue en mise à jour une insertion perdue face à une sauvegarde
concurrente (auto-save et sauvegarde d'étape simultanées).
"""

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.attestation import Attestation
from app.models.token import AccessToken
from app.schemas.attestation import AttestationForm, PrestationDetails
from app.services.description_codec import pack_description, parse_description

logger = logging.getLogger(__name__)

INITIAL_DESCRIPTION = "À compléter par le client"


def find_draft(db: Session, token_id: uuid.UUID) -> Optional[Attestation]:
    """Retourne le brouillon d'un code d'accès, ou None."""
    return db.execute(
        select(Attestation)
        .where(Attestation.token_id == token_id, Attestation.status == "draft")
        .order_by(Attestation.created_at)
        .limit(1)
    ).scalar()


def apply_form(attestation: Attestation, form: AttestationForm) -> None:
    """Recopie les champs du formulaire dans les colonnes de l'attestation."""
    details = form.details()

    attestation.prestataire_nom = form.nom
    attestation.prestataire_prenom = form.prenom
    attestation.prestataire_adresse = form.adresse
    attestation.prestataire_email = form.email or ""
    attestation.prestataire_telephone = form.telephone
    attestation.prestataire_siret = form.siret
    attestation.client_nom = settings.ISSUER_NAME
    attestation.client_adresse = settings.ISSUER_ADDRESS
    attestation.prestation_type = form.type_prestation or None
    attestation.prestation_details = details.model_dump(mode="json")
    attestation.prestation_description = pack_description(details)
    attestation.prestation_date_debut = form.date
    attestation.prestation_date_fin = form.date
    attestation.prestation_montant = form.prix if form.prix is not None else Decimal("0")
    attestation.prestation_lieu = form.ville
    attestation.mode_paiement = form.mode_paiement or None
    attestation.rib = form.rib


def form_from_attestation(attestation: Attestation) -> AttestationForm:
    """
    Reconstruit le formulaire depuis une attestation (chemin de rechargement).
    Les détails structurés priment ; à défaut, prestation_description est décodée.
    """
    if attestation.prestation_details is not None:
        details = PrestationDetails.model_validate(attestation.prestation_details)
    else:
        details = parse_description(attestation.prestation_description)

    return AttestationForm.model_construct(
        nom=attestation.prestataire_nom or "",
        prenom=attestation.prestataire_prenom or "",
        adresse=attestation.prestataire_adresse or "",
        email=attestation.prestataire_email or None,
        telephone=attestation.prestataire_telephone,
        siret=attestation.prestataire_siret,
        type_prestation=attestation.prestation_type or ("evenement_sportif" if details.lots else ""),
        evenement=details.evenement,
        lots=details.lots,
        autres_precisions=details.autres_precisions,
        prix=attestation.prestation_montant,
        mode_paiement=attestation.mode_paiement or "",
        rib=attestation.rib,
        signature=None,
        ville=attestation.prestation_lieu or "",
        date=attestation.prestation_date_debut,
    )


def upsert_draft(
    db: Session,
    token_id: uuid.UUID,
    client_id: uuid.UUID,
    form: AttestationForm,
) -> Attestation:
    """
    Crée ou met à jour le brouillon d'un code d'accès.

    1. Chercher la ligne (token_id, status='draft')
    2. Trouvée → mise à jour en place, updated_at rafraîchi
    3. Absente → insertion status='draft', pdf_generated=False
       Si une sauvegarde concurrente a inséré entre-temps (IntegrityError sur l'index
       partiel), on annule et on met à jour la ligne gagnante.
    """
    draft = find_draft(db, token_id)

    if draft is not None:
        apply_form(draft, form)
        draft.updated_at = datetime.now()
        db.commit()
        db.refresh(draft)
        return draft

    draft = Attestation(
        token_id=token_id,
        client_id=client_id,
        status="draft",
        pdf_generated=False,
        invoice_processed=False,
    )
    apply_form(draft, form)
    db.add(draft)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = find_draft(db, token_id)
        if existing is None:
            raise
        logger.info("Brouillon concurrent détecté pour le token %s, mise à jour en place", token_id)
        apply_form(existing, form)
        existing.updated_at = datetime.now()
        db.commit()
        db.refresh(existing)
        return existing

    db.refresh(draft)
    logger.info("Brouillon %s créé pour le token %s", draft.id, token_id)
    return draft


def create_initial_draft(db: Session, token: AccessToken) -> Attestation:
    """
    Crée le brouillon vierge d'un code fraîchement émis, sauf s'il existe déjà.
    Montant à 0, dates du jour, description « À compléter par le client ».
    """
    existing = find_draft(db, token.id)
    if existing is not None:
        return existing

    today = date.today()
    draft = Attestation(
        token_id=token.id,
        client_id=token.client_id,
        prestataire_nom="",
        prestataire_prenom="",
        prestataire_email="",
        client_nom=settings.ISSUER_NAME,
        client_adresse=settings.ISSUER_ADDRESS,
        prestation_description=INITIAL_DESCRIPTION,
        prestation_details=PrestationDetails().model_dump(mode="json"),
        prestation_date_debut=today,
        prestation_date_fin=today,
        prestation_montant=Decimal("0"),
        status="draft",
        pdf_generated=False,
        invoice_processed=False,
    )
    db.add(draft)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = find_draft(db, token.id)
        if existing is None:
            raise
        return existing

    db.refresh(draft)
    return draft
