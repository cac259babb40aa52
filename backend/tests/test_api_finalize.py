"""
Tests d'intégration API pour la finalisation.
Endpoint : POST /api/finalize-attestation
"""

import base64
import uuid
from unittest.mock import MagicMock, patch

import pytest

from app.exceptions import InvalidOrExpiredCodeError, StoreError, UploadError
from app.main import app
from app.models.attestation import Attestation
from app.services.storage_service import get_storage

PDF_BYTES = b"%PDF-1.4 attestation"
PDF_DATA_URL = "data:application/pdf;base64," + base64.b64encode(PDF_BYTES).decode()


@pytest.fixture
def storage(client):
    mock_storage = MagicMock()
    app.dependency_overrides[get_storage] = lambda: mock_storage
    return mock_storage


def make_payload(**kwargs) -> dict:
    return {
        "tokenId": str(kwargs.get("token_id", uuid.uuid4())),
        "attestationData": kwargs.get("attestation_data", {
            "nom": "Dupont",
            "prenom": "Jean",
            "adresse": "12 rue des Lilas, 75012 Paris",
            "type_prestation": "autre",
            "prix": "200.00",
            "mode_paiement": "virement",
            "rib": "FR7630006000011234567890189",
            "signature": "data:image/png;base64,iVBORw0KGgo=",
            "ville": "Paris",
            "date": "2025-06-10",
        }),
        "pdfBase64": kwargs.get("pdf_base64", PDF_DATA_URL),
    }


# ============================================================
# POST /api/finalize-attestation
# ============================================================

def test_finalize_succes(client, storage):
    """Finalisation réussie → {success: true, pdfUrl}."""
    token_id = uuid.uuid4()
    attestation = Attestation(pdf_url="http://localhost:9000/attestations/attestation_x.pdf")

    with patch("app.routers.finalize.finalize_service.finalize_attestation", return_value=attestation) as mock:
        response = client.post("/api/finalize-attestation", json=make_payload(token_id=token_id))

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["pdfUrl"] == "http://localhost:9000/attestations/attestation_x.pdf"
    args = mock.call_args.args
    assert args[1] == token_id
    assert args[2].nom == "Dupont"
    assert args[3] == PDF_BYTES
    assert args[4] is storage


@pytest.mark.parametrize("error", [
    UploadError("Erreur upload: AccessDenied"),
    InvalidOrExpiredCodeError("used"),
    StoreError("database is locked"),
])
def test_finalize_echec_500(client, storage, error):
    """Toute erreur du workflow → HTTP 500 {success: false, error}."""
    with patch("app.routers.finalize.finalize_service.finalize_attestation") as mock:
        mock.side_effect = error
        response = client.post("/api/finalize-attestation", json=make_payload())

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": error.message}


def test_finalize_erreur_inattendue_500(client, storage):
    with patch("app.routers.finalize.finalize_service.finalize_attestation") as mock:
        mock.side_effect = RuntimeError("boom")
        response = client.post("/api/finalize-attestation", json=make_payload())

    assert response.status_code == 500
    assert response.json()["success"] is False


def test_finalize_pdf_invalide(client, storage):
    """Base64 illisible → 500 sans appeler le workflow."""
    with patch("app.routers.finalize.finalize_service.finalize_attestation") as mock:
        response = client.post("/api/finalize-attestation", json=make_payload(pdf_base64="data:application/pdf;base64,%%%"))

    assert response.status_code == 500
    assert response.json()["success"] is False
    mock.assert_not_called()


def test_finalize_token_id_invalide(client, storage):
    payload = make_payload()
    payload["tokenId"] = "pas-un-uuid"
    response = client.post("/api/finalize-attestation", json=payload)
    assert response.status_code == 422
