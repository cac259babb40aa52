"""
Réconciliation des brouillons et des codes d'accès.

- purge_orphan_drafts : supprime les brouillons dont le code ne peut plus aboutir
  (déjà utilisé ou expiré). Lancé à chaque chargement du tableau de bord admin.
- retire_tokens_with_completed_attestation : repasse used=True sur un code qui possède
  déjà une attestation completed (finalisation interrompue entre deux écritures).
  Lancé toutes les heures par le scheduler.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from app.models.attestation import Attestation
from app.models.token import AccessToken

logger = logging.getLogger(__name__)


def valid_token_ids_query(now: datetime):
    """Sous-requête des codes encore valides : used=False ET expires_at > maintenant."""
    return select(AccessToken.id).where(
        AccessToken.used.is_(False),
        AccessToken.expires_at > now,
    )


def purge_orphan_drafts(db: Session, now: Optional[datetime] = None) -> int:
    """
    Supprime toutes les attestations draft dont token_id n'est pas dans l'ensemble des
    codes valides. Si aucun code n'est valide, tous les brouillons sont supprimés
    (NOT IN sur un ensemble vide est vrai pour chaque ligne).

    Une seule instruction DELETE avec sous-requête : pas de fenêtre entre la lecture
    de l'ensemble valide et la suppression.
    Retourne le nombre de brouillons supprimés.
    """
    now = now or datetime.now()
    result = db.execute(
        delete(Attestation)
        .where(
            Attestation.status == "draft",
            Attestation.token_id.not_in(valid_token_ids_query(now)),
        )
        .execution_options(synchronize_session=False)
    )
    db.commit()

    purged = result.rowcount or 0
    if purged:
        logger.info("Réconciliation : %d brouillon(s) obsolète(s) supprimé(s)", purged)
    return purged


def retire_tokens_with_completed_attestation(db: Session, now: Optional[datetime] = None) -> int:
    """
    Marque comme utilisés les codes encore ouverts qui ont déjà une attestation completed.
    Retourne le nombre de codes corrigés.
    """
    now = now or datetime.now()
    completed_token_ids = select(Attestation.token_id).where(Attestation.status == "completed")
    result = db.execute(
        update(AccessToken)
        .where(
            AccessToken.used.is_(False),
            AccessToken.id.in_(completed_token_ids),
        )
        .values(used=True, used_at=now)
        .execution_options(synchronize_session=False)
    )
    db.commit()

    retired = result.rowcount or 0
    if retired:
        logger.warning("Réconciliation : %d code(s) finalisé(s) mais non retiré(s), corrigé(s)", retired)
    return retired
