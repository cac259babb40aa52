"""
Création du schéma de la base (tables clients, tokens, attestations, events).
Usage : python init_db.py  (depuis le dossier backend/)
"""

import logging

import app.models  # noqa: F401 (enregistre tous les modèles dans Base.metadata)
from app.database import Base, engine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("Schéma créé : %s", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    init_db()
