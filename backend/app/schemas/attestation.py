"""
Schémas Pydantic pour les attestations : formulaire client, lots, finalisation,
et vues du tableau de bord admin.

Note : on importe datetime en tant que module (dt) pour éviter le conflit de nommage
entre le champ `date` et le type `datetime.date` dans Pydantic v2.
"""

import uuid
import datetime as dt
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from app.schemas.client import ClientWithStats

PRESTATION_TYPES = {"evenement_sportif", "autre"}
PAYMENT_MODES = {"virement"}
ATTESTATION_TABS = {"all", "completed", "pending"}

# Séparateurs réservés par l'encodage de prestation_description
LOT_PREFIX = "DateEvt:"


def check_label(value: str, field_name: str) -> str:
    """
    Vérifie qu'un libellé (événement, court, catégorie) peut être encodé sans ambiguïté
    dans prestation_description : pas de « - » encadré d'espaces, pas de « | »,
    pas de tiret en début ou en fin.
    """
    value = value.strip()
    if " - " in value or "|" in value or value.startswith("-") or value.endswith("-"):
        raise ValueError(
            f"Le champ {field_name} ne peut pas contenir « - » entre espaces, "
            f"« | », ni commencer ou finir par un tiret."
        )
    return value


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class LotForm(BaseModel):
    """Un lot de billets : date de l'événement, court, catégorie, nombre de places."""
    model_config = ConfigDict(populate_by_name=True)

    event_date: dt.date = Field(default_factory=dt.date.today, alias="eventDate")
    court: str = ""
    categorie: str = ""
    tickets: Optional[int] = Field(default=None, ge=1)

    @field_validator("court", "categorie")
    @classmethod
    def encodable_label(cls, v: str, info: ValidationInfo) -> str:
        return check_label(v, info.field_name)

    @field_validator("tickets", mode="before")
    @classmethod
    def empty_tickets(cls, v):
        return _blank_to_none(v)


class PrestationDetails(BaseModel):
    """
    Sous-enregistrement structuré d'une prestation (événement, lots, précisions).
    Les règles d'encodage des libellés sont vérifiées à la saisie (AttestationForm, LotForm).
    """
    evenement: Optional[str] = None
    lots: List[LotForm] = []
    autres_precisions: Optional[str] = None

    @field_validator("evenement", mode="before")
    @classmethod
    def empty_event(cls, v):
        return _blank_to_none(v)

    @field_validator("autres_precisions", mode="before")
    @classmethod
    def empty_precisions(cls, v):
        v = _blank_to_none(v)
        return v.strip() if isinstance(v, str) else v


class AttestationForm(BaseModel):
    """
    État du formulaire multi-étapes tel qu'envoyé par le client.
    Tous les champs sont optionnels : un brouillon peut être partiel.
    """
    model_config = ConfigDict(populate_by_name=True)

    # Étape 1 : identité
    nom: str = ""
    prenom: str = ""
    adresse: str = ""
    email: Optional[str] = None
    telephone: Optional[str] = None
    siret: Optional[str] = None

    # Étape 2 : prestation
    type_prestation: str = ""
    evenement: Optional[str] = None
    lots: List[LotForm] = []
    autres_precisions: Optional[str] = None

    # Étape 3 : paiement
    prix: Optional[Decimal] = Field(default=None, ge=0)
    mode_paiement: str = ""
    rib: Optional[str] = None

    # Étape 4 : signature (image data URL, intégrée au PDF, non stockée)
    signature: Optional[str] = None

    # Étape 5 : lieu et date
    ville: str = ""
    date: Optional[dt.date] = None

    @field_validator("nom", "prenom", "adresse", "ville")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @field_validator("type_prestation")
    @classmethod
    def valid_type(cls, v: str) -> str:
        if v and v not in PRESTATION_TYPES:
            raise ValueError(f"Type de prestation invalide. Valeurs acceptées : {PRESTATION_TYPES}")
        return v

    @field_validator("evenement")
    @classmethod
    def encodable_event(cls, v: Optional[str]) -> Optional[str]:
        return check_label(v, "evenement") if v is not None else v

    @field_validator("autres_precisions", mode="before")
    @classmethod
    def clean_precisions(cls, v):
        v = _blank_to_none(v)
        return v.strip() if isinstance(v, str) else v

    @field_validator("autres_precisions")
    @classmethod
    def precisions_not_lot_like(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v.startswith(LOT_PREFIX):
            raise ValueError(f"Les précisions ne peuvent pas commencer par « {LOT_PREFIX} ».")
        return v

    @field_validator("mode_paiement")
    @classmethod
    def valid_payment_mode(cls, v: str) -> str:
        if v and v not in PAYMENT_MODES:
            raise ValueError(f"Mode de paiement invalide. Valeurs acceptées : {PAYMENT_MODES}")
        return v

    @field_validator("prix", "date", "email", "telephone", "siret", "rib", "evenement", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return _blank_to_none(v)

    def details(self) -> PrestationDetails:
        """Extrait le sous-enregistrement structuré de la prestation."""
        return PrestationDetails(
            evenement=self.evenement,
            lots=self.lots,
            autres_precisions=self.autres_precisions,
        )


class DraftResponse(BaseModel):
    """Brouillon courant d'un code d'accès, prêt à être rechargé dans le formulaire."""
    id: uuid.UUID
    token_id: uuid.UUID
    status: str
    updated_at: Optional[datetime] = None
    form: AttestationForm


class StepValidationResult(BaseModel):
    step: int
    valid: bool
    errors: List[str]


class FinalizeRequest(BaseModel):
    """Corps de POST /api/finalize-attestation (noms de champs du front)."""
    model_config = ConfigDict(populate_by_name=True)

    token_id: uuid.UUID = Field(alias="tokenId")
    attestation_data: AttestationForm = Field(alias="attestationData")
    pdf_base64: str = Field(alias="pdfBase64")


class ClientSummary(BaseModel):
    id: uuid.UUID
    name: str

    model_config = {"from_attributes": True}


class AttestationResponse(BaseModel):
    """Ligne d'attestation telle qu'affichée dans le tableau de bord admin."""
    id: uuid.UUID
    token_id: uuid.UUID
    client_id: uuid.UUID
    prestataire_nom: str
    prestataire_prenom: str
    prestataire_email: Optional[str] = None
    prestataire_telephone: Optional[str] = None
    prestataire_adresse: Optional[str] = None
    prestataire_siret: Optional[str] = None
    client_nom: str
    client_adresse: str
    prestation_type: Optional[str] = None
    prestation_description: str
    prestation_date_debut: Optional[dt.date] = None
    prestation_date_fin: Optional[dt.date] = None
    prestation_montant: Decimal
    prestation_lieu: Optional[str] = None
    status: str
    pdf_generated: bool
    pdf_url: Optional[str] = None
    invoice_processed: bool
    sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    client: Optional[ClientSummary] = None
    event_type: str = "Autre"

    model_config = {"from_attributes": True}


class AttestationFilters(BaseModel):
    """Filtres du tableau de bord (onglet, nom, dates inclusives, montants inclusifs, événement)."""
    tab: str = "all"
    search: Optional[str] = None
    date_start: Optional[dt.date] = None
    date_end: Optional[dt.date] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    event_type: Optional[str] = None

    @field_validator("tab")
    @classmethod
    def valid_tab(cls, v: str) -> str:
        if v not in ATTESTATION_TABS:
            raise ValueError(f"Onglet invalide. Valeurs acceptées : {ATTESTATION_TABS}")
        return v

    @field_validator("search", "event_type", "date_start", "date_end", "min_amount", "max_amount", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return _blank_to_none(v)


class InvoiceProcessedUpdate(BaseModel):
    invoice_processed: bool


class DashboardStats(BaseModel):
    total_clients: int
    completed: int
    pending: int
    attestations: int


class DashboardResponse(BaseModel):
    """Chargement du tableau de bord : statistiques, clients, brouillons purgés au passage."""
    stats: DashboardStats
    clients: List[ClientWithStats]
    purged_drafts: int = 0
