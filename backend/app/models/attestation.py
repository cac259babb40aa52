"""
Modèle SQLAlchemy pour les attestations de prestation.

Une attestation est un brouillon (draft) tant que le client remplit le formulaire,
puis devient completed à la finalisation (même ligne, PDF associé).
L'index unique partiel garantit au plus un brouillon par code d'accès.
"""

import uuid
from sqlalchemy import (
    JSON, Boolean, Column, Date, DateTime, ForeignKey, Index, Numeric, String, Text, func, text,
)
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base

ATTESTATION_STATUSES = ("draft", "completed", "sent")


class Attestation(Base):
    __tablename__ = "attestations"
    __table_args__ = (
        Index(
            "uq_attestations_one_draft_per_token",
            "token_id",
            unique=True,
            postgresql_where=text("status = 'draft'"),
            sqlite_where=text("status = 'draft'"),
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    token_id = Column(UUID(as_uuid=True), ForeignKey("tokens.id", ondelete="CASCADE"), nullable=False)
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False)

    # Prestataire (personne qui a rendu le service)
    prestataire_nom = Column(String(100), nullable=False, default="")
    prestataire_prenom = Column(String(100), nullable=False, default="")
    prestataire_email = Column(String(255), nullable=False, default="")
    prestataire_telephone = Column(String(50), nullable=True)
    prestataire_adresse = Column(String(500), nullable=True)
    prestataire_siret = Column(String(20), nullable=True)

    # Destinataire de l'attestation
    client_nom = Column(String(255), nullable=False)
    client_adresse = Column(String(500), nullable=False)

    # Prestation
    prestation_type = Column(String(30), nullable=True)        # evenement_sportif, autre
    prestation_description = Column(Text, nullable=False, default="")
    prestation_details = Column(JSON, nullable=True)           # Événement + lots structurés
    prestation_date_debut = Column(Date, nullable=True)
    prestation_date_fin = Column(Date, nullable=True)
    prestation_montant = Column(Numeric(10, 2), nullable=False, default=0)
    prestation_lieu = Column(String(255), nullable=True)
    mode_paiement = Column(String(20), nullable=True)          # virement
    rib = Column(String(50), nullable=True)

    status = Column(String(20), nullable=False, default="draft")  # draft, completed, sent
    pdf_generated = Column(Boolean, nullable=False, default=False)
    pdf_url = Column(String(1000), nullable=True)
    invoice_processed = Column(Boolean, nullable=False, default=False)  # Bascule manuelle admin
    sent_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
