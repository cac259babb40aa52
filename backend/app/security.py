"""
Authentification admin : mot de passe partagé unique, session portée par un cookie
contenant un JWT signé (HS256, valable un jour).
"""

import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException, Request, status
from jose import JWTError, jwt

from app.config import settings

logger = logging.getLogger(__name__)

ADMIN_SUBJECT = "admin"


def check_admin_password(password: str) -> bool:
    """Compare le mot de passe reçu au secret serveur. Sans secret configuré, tout est refusé."""
    if not settings.ADMIN_PASSWORD:
        logger.warning("ADMIN_PASSWORD non configuré, connexion admin refusée")
        return False
    return hmac.compare_digest(password.encode("utf-8"), settings.ADMIN_PASSWORD.encode("utf-8"))


def create_admin_session_token(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = {
        "sub": ADMIN_SUBJECT,
        "iat": now,
        "exp": now + timedelta(seconds=settings.ADMIN_SESSION_MAX_AGE_SECONDS),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def is_valid_admin_session(token: Optional[str]) -> bool:
    """Vrai si le cookie contient un JWT admin signé et non expiré."""
    if not token:
        return False
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return False
    return payload.get("sub") == ADMIN_SUBJECT


def require_admin(request: Request) -> None:
    """Dépendance FastAPI des routes /api/v1/admin/* : 401 sans session admin valide."""
    if not is_valid_admin_session(request.cookies.get(settings.ADMIN_COOKIE_NAME)):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session administrateur requise.",
        )
