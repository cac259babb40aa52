"""
Router de connexion administrateur (mot de passe partagé, cookie de session).
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.config import settings
from app.schemas.auth import LoginRequest
from app.security import check_admin_password, create_admin_session_token

router = APIRouter(prefix="/api", tags=["Authentification"])


@router.post("/login", summary="Connexion administrateur")
def login(data: LoginRequest):
    """
    Compare le mot de passe au secret serveur.
    Succès : pose le cookie de session (httpOnly, 1 jour) et retourne {success: true}.
    Échec : HTTP 401 {success: false}.
    """
    if not check_admin_password(data.password):
        return JSONResponse(status_code=401, content={"success": False})

    response = JSONResponse(content={"success": True})
    response.set_cookie(
        key=settings.ADMIN_COOKIE_NAME,
        value=create_admin_session_token(),
        max_age=settings.ADMIN_SESSION_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.ENV == "production",
        path="/",
    )
    return response


@router.post("/logout", summary="Déconnexion administrateur")
def logout():
    """Supprime le cookie de session."""
    response = JSONResponse(content={"success": True})
    response.delete_cookie(key=settings.ADMIN_COOKIE_NAME, path="/")
    return response
