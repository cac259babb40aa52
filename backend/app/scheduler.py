"""
Planificateur APScheduler pour la remise en cohérence des codes d'accès.

Le job s'exécute toutes les heures et marque comme utilisés les codes qui possèdent
déjà une attestation completed (finalisation interrompue avant le retrait du code).
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.database import SessionLocal

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def _retire_finalized_tokens_scheduled() -> None:
    """
    Tâche planifiée : retire les codes déjà finalisés.
    Import local pour éviter les imports circulaires.
    """
    from app.services.reconciliation_service import retire_tokens_with_completed_attestation

    db = SessionLocal()
    try:
        retired = retire_tokens_with_completed_attestation(db)
        logger.info("Vérification des codes finalisés : %d code(s) retiré(s)", retired)
    except Exception as exc:
        logger.error("Erreur lors du retrait automatique des codes : %s", exc)
    finally:
        db.close()


def start_scheduler() -> None:
    """Démarre le planificateur en arrière-plan (appelé au démarrage de l'API)."""
    scheduler.add_job(
        _retire_finalized_tokens_scheduled,
        trigger="interval",
        hours=1,
        id="retire_finalized_tokens",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Scheduler démarré, vérification des codes finalisés toutes les heures.")


def stop_scheduler() -> None:
    """Arrête le planificateur proprement (appelé à l'arrêt de l'API)."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler arrêté.")
