"""
Finalisation d'une attestation : brouillon → attestation signée, PDF stocké, code retiré.

Étapes (séquentielles, chacune dépend de la précédente) :
  1. Sauvegarder l'état final du formulaire dans le brouillon
  2. Envoyer le PDF dans le stockage objet (attestation_<token>_<timestamp>.pdf)
  3. Obtenir son URL publique
  4. Passer le brouillon en completed (ou insérer une ligne completed s'il n'existe pas)
  6. Marquer le code comme utilisé, dans la même transaction que l'étape 4
  5. Supprimer les autres brouillons du même code (meilleur effort)
  7. Notifier l'administrateur par email avec le PDF (meilleur effort)

Un échec en 1–4/6 remonte à l'appelant : le code reste utilisable et le brouillon intact,
le client peut relancer la finalisation. Les étapes 5 et 7 sont seulement journalisées.
"""

import base64
import binascii
import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import StoreError, UploadError
from app.models.attestation import Attestation
from app.schemas.attestation import AttestationForm
from app.services import draft_service, email_service, token_service
from app.services.storage_service import StorageService

logger = logging.getLogger(__name__)


def decode_pdf_payload(pdf_base64: str) -> bytes:
    """Décode un PDF reçu en data URL (data:application/pdf;base64,...) ou en base64 brut."""
    payload = pdf_base64.split(",", 1)[1] if "," in pdf_base64 else pdf_base64
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise UploadError("Document PDF invalide : base64 attendu.") from exc
    if not data:
        raise UploadError("Document PDF vide.")
    return data


def build_pdf_file_name(token_id: uuid.UUID, now: Optional[datetime] = None) -> str:
    """Nom de l'objet stocké : le suffixe horodaté (ms) évite les collisions entre essais."""
    now = now or datetime.now()
    return f"attestation_{token_id}_{int(now.timestamp() * 1000)}.pdf"


def _find_completed(db: Session, token_id: uuid.UUID) -> Optional[Attestation]:
    return db.execute(
        select(Attestation)
        .where(Attestation.token_id == token_id, Attestation.status == "completed")
        .order_by(Attestation.created_at)
        .limit(1)
    ).scalar()


def _purge_other_drafts(db: Session, token_id: uuid.UUID, keep_id: uuid.UUID) -> None:
    """Étape 5 : supprime les brouillons restants du code (ne fait jamais échouer la finalisation)."""
    try:
        result = db.execute(
            delete(Attestation)
            .where(
                Attestation.token_id == token_id,
                Attestation.status == "draft",
                Attestation.id != keep_id,
            )
            .execution_options(synchronize_session=False)
        )
        db.commit()
        if result.rowcount:
            logger.info("%d brouillon(s) orphelin(s) supprimé(s) pour le token %s", result.rowcount, token_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Nettoyage des brouillons du token %s impossible : %s", token_id, exc, exc_info=True)


def _notify_admin(attestation: Attestation, pdf_bytes: bytes, file_name: str) -> None:
    """Étape 7 : email à l'administrateur (ne fait jamais échouer la finalisation)."""
    if not settings.ADMIN_NOTIFICATION_EMAIL:
        logger.info("ADMIN_NOTIFICATION_EMAIL non configuré, pas de notification pour %s", file_name)
        return
    try:
        email_service.send_attestation_email(
            to_email=settings.ADMIN_NOTIFICATION_EMAIL,
            prestataire_name=f"{attestation.prestataire_prenom} {attestation.prestataire_nom}".strip(),
            amount=attestation.prestation_montant,
            prestation_date=attestation.prestation_date_debut,
            pdf_bytes=pdf_bytes,
            file_name=file_name,
            pdf_url=attestation.pdf_url,
        )
    except Exception as exc:
        logger.error("Notification de l'attestation %s impossible : %s", attestation.id, exc, exc_info=True)


def finalize_attestation(
    db: Session,
    token_id: uuid.UUID,
    form: AttestationForm,
    pdf_bytes: bytes,
    storage: StorageService,
) -> Attestation:
    """
    Transforme le brouillon d'un code en attestation finalisée et retourne la ligne completed.

    Lève InvalidOrExpiredCodeError si le code n'est plus utilisable, UploadError si le
    stockage refuse le PDF, StoreError pour toute erreur base de données des étapes 1–4/6.

    Reprise après échec partiel : si une ligne completed existe déjà pour ce code
    (code encore non utilisé), elle est réutilisée au lieu de recréer un brouillon.
    """
    token = token_service.get_usable_token(db, token_id)
    completed = _find_completed(db, token.id)

    try:
        # 1. État final du formulaire
        if completed is None:
            draft_service.upsert_draft(db, token.id, token.client_id, form)

        # 2–3. Stockage du PDF et URL publique
        file_name = build_pdf_file_name(token.id)
        storage.upload_pdf(file_name, pdf_bytes)
        pdf_url = storage.get_public_url(file_name)

        # 4 + 6. Attestation completed et code utilisé, dans une seule transaction
        now = datetime.now()
        attestation = completed or draft_service.find_draft(db, token.id)
        if attestation is None:
            logger.warning("Aucun brouillon pour le token %s à la finalisation, insertion directe", token.id)
            attestation = Attestation(token_id=token.id, client_id=token.client_id, invoice_processed=False)
            db.add(attestation)

        draft_service.apply_form(attestation, form)
        attestation.status = "completed"
        attestation.pdf_generated = True
        attestation.pdf_url = pdf_url
        attestation.sent_at = now
        attestation.updated_at = now

        token_service.mark_used(db, token.id, commit=False)
        db.commit()
        db.refresh(attestation)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Finalisation du token %s interrompue : %s", token_id, exc, exc_info=True)
        raise StoreError(str(exc)) from exc

    logger.info("Attestation %s finalisée pour le token %s, PDF : %s", attestation.id, token.id, pdf_url)

    # 5. Brouillons en double (course auto-save / sauvegarde d'étape)
    _purge_other_drafts(db, token.id, attestation.id)

    # 7. Notification administrateur
    _notify_admin(attestation, pdf_bytes, file_name)

    return attestation
