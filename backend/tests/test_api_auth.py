"""
Tests d'intégration API pour la session administrateur.
POST /api/login, POST /api/logout, redirection des pages /admin.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from app.config import settings
from app.security import create_admin_session_token, is_valid_admin_session


# ============================================================
# POST /api/login
# ============================================================

def test_login_succes_pose_le_cookie(client):
    with patch.object(settings, "ADMIN_PASSWORD", "s3cret"):
        response = client.post("/api/login", json={"password": "s3cret"})

    assert response.status_code == 200
    assert response.json() == {"success": True}
    cookie = response.cookies.get(settings.ADMIN_COOKIE_NAME)
    assert is_valid_admin_session(cookie)
    set_cookie = response.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "max-age=86400" in set_cookie


def test_login_mauvais_mot_de_passe(client):
    with patch.object(settings, "ADMIN_PASSWORD", "s3cret"):
        response = client.post("/api/login", json={"password": "nope"})

    assert response.status_code == 401
    assert response.json() == {"success": False}
    assert settings.ADMIN_COOKIE_NAME not in response.cookies


def test_login_sans_secret_configure(client):
    """ADMIN_PASSWORD vide → toute tentative est refusée."""
    with patch.object(settings, "ADMIN_PASSWORD", ""):
        response = client.post("/api/login", json={"password": ""})

    assert response.status_code == 401


def test_logout(admin_client):
    response = admin_client.post("/api/logout")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert f'{settings.ADMIN_COOKIE_NAME}=""' in response.headers["set-cookie"]


# ============================================================
# Jeton de session
# ============================================================

def test_session_expiree_invalide():
    issued = datetime.now(timezone.utc) - timedelta(days=2)
    assert not is_valid_admin_session(create_admin_session_token(now=issued))


def test_session_falsifiee_invalide():
    assert not is_valid_admin_session("abc.def.ghi")
    assert not is_valid_admin_session(None)


# ============================================================
# Protection des routes admin
# ============================================================

def test_page_admin_sans_session_redirige(client):
    response = client.get("/admin", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/admin/login"


def test_sous_page_admin_sans_session_redirige(client):
    response = client.get("/admin/clients", follow_redirects=False)
    assert response.status_code == 307


def test_page_login_admin_non_redirigee(client):
    response = client.get("/admin/login", follow_redirects=False)
    assert response.status_code != 307


def test_page_admin_avec_session_non_redirigee(admin_client):
    response = admin_client.get("/admin", follow_redirects=False)
    assert response.status_code != 307


def test_api_admin_sans_session_401(client):
    response = client.get("/api/v1/admin/clients")
    assert response.status_code == 401


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
