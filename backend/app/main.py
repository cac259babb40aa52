"""
Point d'entrée principal de l'API d'attestations de prestation.
Démarrage : uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

import app.models  # noqa: F401 (enregistre tous les modèles dans Base.metadata avant les routers)
from app.config import settings
from app.routers import access, admin_attestations, admin_clients, admin_events, auth, finalize
from app.scheduler import start_scheduler, stop_scheduler
from app.security import is_valid_admin_session

logger = logging.getLogger(__name__)

ADMIN_PATH_PREFIX = "/admin"
ADMIN_LOGIN_PATH = "/admin/login"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie de l'application : démarre et arrête le scheduler APScheduler."""
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="Attestations API",
    description="Codes d'accès à usage unique, brouillons d'attestation et tableau de bord admin",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS : tous les ports localhost en développement, cookies admin autorisés.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


@app.middleware("http")
async def admin_guard(request: Request, call_next):
    """
    Pages /admin* sans cookie de session valide : redirection vers /admin/login.
    La page de connexion elle-même reste accessible.
    """
    path = request.url.path
    is_admin_page = path == ADMIN_PATH_PREFIX or path.startswith(ADMIN_PATH_PREFIX + "/")
    is_login_page = path == ADMIN_LOGIN_PATH or path.startswith(ADMIN_LOGIN_PATH + "/")
    if is_admin_page and not is_login_page:
        if not is_valid_admin_session(request.cookies.get(settings.ADMIN_COOKIE_NAME)):
            return RedirectResponse(url=ADMIN_LOGIN_PATH, status_code=307)
    return await call_next(request)


app.include_router(auth.router)
app.include_router(access.router)
app.include_router(finalize.router)
app.include_router(admin_clients.router)
app.include_router(admin_events.router)
app.include_router(admin_attestations.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Une erreur interne est survenue."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "Attestations API", "version": "0.1.0"}
