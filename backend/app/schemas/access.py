"""
Schéma de la réponse d'accès client : tout ce dont le formulaire a besoin après
validation du code (code, client, brouillon à reprendre, événements actifs).
"""

from typing import List, Optional

from pydantic import BaseModel

from app.schemas.attestation import DraftResponse
from app.schemas.client import ClientResponse
from app.schemas.event import EventResponse
from app.schemas.token import TokenResponse


class RedeemResponse(BaseModel):
    token: TokenResponse
    client: ClientResponse
    draft: Optional[DraftResponse] = None
    events: List[EventResponse]
    autosave_interval_seconds: int
