"""
Schémas Pydantic pour les codes d'accès (émission admin et utilisation client).
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class RedeemRequest(BaseModel):
    """Code saisi par le client sur la page d'accueil."""
    code: str

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le code d'accès ne peut pas être vide.")
        return v.strip().upper()


class TokenResponse(BaseModel):
    id: uuid.UUID
    token: str
    client_id: uuid.UUID
    type: str
    used: bool
    used_at: Optional[datetime] = None
    expires_at: datetime
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class WhatsAppLinkResponse(BaseModel):
    client_id: uuid.UUID
    code: str
    url: str
