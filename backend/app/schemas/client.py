"""
Schémas Pydantic pour les clients et leurs statistiques (tableau de bord admin).
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

from app.schemas.token import TokenResponse


class ClientCreate(BaseModel):
    """Création ou remplacement d'un client. Les champs de contact vides sont stockés à NULL."""
    name: str
    phone: Optional[str] = None
    discord: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom du client ne peut pas être vide.")
        return v.strip()

    @field_validator("phone", "discord", "email", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


class ClientResponse(BaseModel):
    id: uuid.UUID
    name: str
    phone: Optional[str] = None
    discord: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ClientWithStats(ClientResponse):
    """Client enrichi des compteurs affichés dans la gestion des clients."""
    active_tokens_count: int = 0
    total_attestations_count: int = 0
    completed_attestations_count: int = 0
    pending_attestations_count: int = 0
    active_token: Optional[TokenResponse] = None


class TokenIssueResponse(BaseModel):
    """Code fraîchement émis, avec le lien WhatsApp quand le client a un numéro."""
    token: TokenResponse
    whatsapp_url: Optional[str] = None
