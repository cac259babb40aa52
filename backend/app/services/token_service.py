"""
Service métier pour les codes d'accès à usage unique.

Cycle de vie d'un code :
  émis (used=False, non expiré) → utilisé (used=True, terminal)
  émis → expiré (détecté à la lecture, terminal)

Règle : un client a au plus un code actif (non utilisé, non expiré) à la fois.
Cette règle est vérifiée par l'application, pas par une contrainte en base.
"""

import logging
import secrets
import string
import uuid
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from urllib.parse import quote

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ConflictError, InvalidOrExpiredCodeError, NotFoundError
from app.models.client import Client
from app.models.token import AccessToken
from app.services import draft_service

logger = logging.getLogger(__name__)

ACCESS_CODE_ALPHABET = string.ascii_uppercase + string.digits
TOKEN_TYPE = "prestation"
TOKEN_HISTORY_LIMIT = 20


def generate_access_code(length: Optional[int] = None) -> str:
    """Génère un code d'accès aléatoire en majuscules et chiffres (8 caractères par défaut)."""
    length = length or settings.ACCESS_CODE_LENGTH
    return "".join(secrets.choice(ACCESS_CODE_ALPHABET) for _ in range(length))


def generate_expiration_date(days: Optional[int] = None, now: Optional[datetime] = None) -> datetime:
    """Date d'expiration d'un nouveau code : maintenant + N jours (7 par défaut)."""
    now = now or datetime.now()
    return now + timedelta(days=days if days is not None else settings.TOKEN_VALIDITY_DAYS)


def get_active_token(db: Session, client_id: uuid.UUID) -> Optional[AccessToken]:
    """Retourne le code actif (non utilisé, non expiré) le plus récent d'un client."""
    return db.execute(
        select(AccessToken)
        .where(
            AccessToken.client_id == client_id,
            AccessToken.used.is_(False),
            AccessToken.expires_at > datetime.now(),
        )
        .order_by(AccessToken.created_at.desc())
        .limit(1)
    ).scalar()


def _generate_unique_code(db: Session, attempts: int = 5) -> str:
    for _ in range(attempts):
        code = generate_access_code()
        taken = db.execute(select(AccessToken.id).where(AccessToken.token == code)).scalar()
        if not taken:
            return code
    raise ConflictError("Impossible de générer un code d'accès unique, réessayez.")


def issue_token(db: Session, client_id: uuid.UUID) -> AccessToken:
    """
    Émet un nouveau code d'accès pour un client.

    Étapes :
    1. Vérifier que le client existe
    2. Refuser si le client a déjà un code actif (ConflictError)
    3. Créer le code (8 caractères, expiration J+7, used=False)
    4. Créer le brouillon d'attestation associé s'il n'existe pas encore
    """
    client = db.get(Client, client_id)
    if client is None:
        raise NotFoundError("Client introuvable.")

    if get_active_token(db, client_id) is not None:
        raise ConflictError(
            "Ce client a déjà un code d'accès actif. Attendez qu'il soit utilisé ou expiré."
        )

    token = AccessToken(
        token=_generate_unique_code(db),
        client_id=client_id,
        type=TOKEN_TYPE,
        used=False,
        expires_at=generate_expiration_date(),
    )
    db.add(token)
    db.commit()
    db.refresh(token)

    logger.info("Code d'accès %s émis pour le client %s (expire le %s)", token.token, client_id, token.expires_at)

    draft_service.create_initial_draft(db, token)
    return token


def redeem(db: Session, code: str) -> Tuple[AccessToken, Client]:
    """
    Vérifie un code saisi par un client.
    Lève InvalidOrExpiredCodeError si le code est inconnu, déjà utilisé ou expiré.
    Le code n'est pas consommé ici : il ne l'est qu'à la finalisation.
    """
    token = db.execute(
        select(AccessToken).where(AccessToken.token == code, AccessToken.used.is_(False))
    ).scalar()

    if token is None:
        logger.warning("Tentative d'accès avec un code invalide ou utilisé : %s", code)
        raise InvalidOrExpiredCodeError("invalid")

    if token.expires_at is not None and token.expires_at < datetime.now():
        logger.warning("Tentative d'accès avec un code expiré : %s", code)
        raise InvalidOrExpiredCodeError("expired")

    client = db.get(Client, token.client_id)
    return token, client


def get_usable_token(db: Session, token_id: uuid.UUID) -> AccessToken:
    """Retourne un code encore utilisable (existant, non utilisé, non expiré) par son ID."""
    token = db.get(AccessToken, token_id)
    if token is None:
        raise InvalidOrExpiredCodeError("invalid")
    if token.used:
        raise InvalidOrExpiredCodeError("used")
    if token.expires_at is not None and token.expires_at < datetime.now():
        raise InvalidOrExpiredCodeError("expired")
    return token


def mark_used(db: Session, token_id: uuid.UUID, commit: bool = True) -> AccessToken:
    """
    Marque un code comme utilisé (used=True, used_at=maintenant).
    Sans effet supplémentaire si le code l'est déjà : used_at n'est pas réécrit.
    Avec commit=False, la modification rejoint la transaction en cours de l'appelant.
    """
    token = db.get(AccessToken, token_id)
    if token is None:
        raise NotFoundError("Code d'accès introuvable.")

    if not token.used:
        token.used = True
        token.used_at = datetime.now()

    if commit:
        db.commit()
    return token


def get_token_history(db: Session, client_id: uuid.UUID, limit: int = TOKEN_HISTORY_LIMIT) -> List[AccessToken]:
    """Retourne les derniers codes émis pour un client, du plus récent au plus ancien."""
    return db.execute(
        select(AccessToken)
        .where(AccessToken.client_id == client_id)
        .order_by(AccessToken.created_at.desc())
        .limit(limit)
    ).scalars().all()


def build_whatsapp_link(client: Client, token: AccessToken) -> str:
    """
    Construit le lien wa.me qui pré-remplit le message d'envoi du code actif.
    Lève ConflictError si le client n'a pas de numéro.
    """
    phone_digits = "".join(ch for ch in (client.phone or "") if ch.isdigit())
    if not phone_digits:
        raise ConflictError("Pas de numéro WhatsApp pour envoyer le code.")

    message = (
        f"Bonjour {client.name},\n\n"
        f"Ton code d'accès (toujours valide) : *{token.token}*.\n\n"
        f"Génère ton attestation ici :\n{settings.PUBLIC_FORM_URL}\n\n"
        f"À bientôt !"
    )
    return f"https://wa.me/{phone_digits}?text={quote(message)}"
